import streamlit as st
import requests

from api import APIError, api_request

ACTION_ICONS = {
    "created": "➕",
    "updated": "✏️",
    "deleted": "🗑️",
    "status_changed": "➡️",
    "assigned": "👤",
    "commented": "💬",
}

st.title("📜 Activity Feed")


@st.cache_data(ttl=60, show_spinner="Loading activity...")
def fetch_feed(project_name=None):
    params = {"project_name": project_name} if project_name else None
    return api_request("GET", "/activities/grouped", params=params)


try:
    feed = fetch_feed()
except (APIError, requests.RequestException) as e:
    st.error(f"Connection Error: {e}")
    st.stop()

# Project filter built from the feed itself
project_names = sorted({
    item["activity"]["project_name"]
    for group in feed["groups"]
    for item in group["items"]
    if item["activity"].get("project_name")
})
selected = st.selectbox("Project", ["All Projects"] + project_names)

if selected != "All Projects":
    try:
        feed = fetch_feed(selected)
    except (APIError, requests.RequestException) as e:
        st.error(f"Connection Error: {e}")
        st.stop()

if feed["state"] == "failed":
    st.error("The activity feed could not be loaded. Try again later.")
elif not feed["groups"]:
    st.info("No activity yet.")

for group in feed["groups"]:
    st.subheader(group["label"])
    for item in group["items"]:
        activity = item["activity"]
        icon = ACTION_ICONS.get(activity["action"], "•")
        project = f" · `{activity['project_name']}`" if activity.get("project_name") else ""
        st.markdown(
            f"{icon} **{activity.get('user_name') or 'Someone'}** {item['text']}{project}  \n"
            f"<small>{item['time_ago']}</small>",
            unsafe_allow_html=True,
        )
