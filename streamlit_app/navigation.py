"""
Navigation module for page routing using st.navigation
"""
import streamlit as st

# Page definitions with metadata
PAGE_CONFIGS = {
    "dashboard": {
        "file": "app_pages/dashboard.py",
        "label": "Dashboard",
        "icon": "🏠",
    },
    "reports": {
        "file": "app_pages/reports.py",
        "label": "Reports",
        "icon": "📊",
    },
    "activity": {
        "file": "app_pages/activity.py",
        "label": "Activity Feed",
        "icon": "📜",
    },
}


def setup_navigation():
    pages = [
        st.Page(page_config["file"], title=page_config["label"], icon=page_config["icon"])
        for page_config in PAGE_CONFIGS.values()
    ]
    return st.navigation(pages)
