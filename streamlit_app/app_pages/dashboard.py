import streamlit as st
import pandas as pd
import requests

from api import APIError, api_request

st.title("🏠 Dashboard")

# --- 1. FETCH ---
try:
    data = api_request("GET", "/dashboard/stats")
except (APIError, requests.RequestException) as e:
    st.error(f"Connection Error: {e}")
    st.stop()

stats = data["stats"]
failed = [name for name, state in data.get("resources", {}).items() if state == "failed"]
if failed:
    st.warning(f"⚠️ Could not load: {', '.join(failed)}. Some numbers may read zero.")

# --- 2. BIG NUMBERS ---
c1, c2, c3, c4 = st.columns(4)
c1.metric("📁 Total Projects", stats["total_projects"], help=f"{stats['active_projects']} active")
c2.metric(
    "✅ Total Tasks",
    stats["total_tasks"],
    help=f"{stats['completed_tasks']} completed, {stats['in_progress_tasks']} in progress",
)
c3.metric("👥 Teams", stats["total_teams"])
c4.metric("⚠️ Overdue Tasks", stats["overdue_tasks"])

st.markdown("---")

# --- 3. TASK STATUS OVERVIEW ---
st.subheader("Task Status Overview")
s1, s2, s3, s4, s5 = st.columns(5)
s1.metric("To Do", stats["todo_tasks"])
s2.metric("In Progress", stats["in_progress_tasks"])
s3.metric("Review", stats["review_tasks"])
s4.metric("Done", stats["completed_tasks"])
s5.metric("Blocked", stats["blocked_tasks"])

st.markdown("---")

# --- 4. LISTS ---
left, right = st.columns(2)

with left:
    st.subheader("Recent Projects")
    if stats["recent_projects"]:
        df_projects = pd.DataFrame(stats["recent_projects"])
        st.dataframe(
            df_projects[["name", "status", "priority"]],
            use_container_width=True,
            hide_index=True,
        )
    else:
        st.info("No projects yet.")

with right:
    st.subheader("Urgent Tasks")
    if stats["urgent_tasks"]:
        df_tasks = pd.DataFrame(stats["urgent_tasks"])
        df_tasks["due_date"] = pd.to_datetime(df_tasks["due_date"], errors="coerce").dt.strftime("%d %b")
        st.dataframe(
            df_tasks[["title", "status", "priority", "due_date"]].fillna("-"),
            use_container_width=True,
            hide_index=True,
        )
    else:
        st.success("No urgent tasks 🎉")
