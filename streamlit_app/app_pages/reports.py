import streamlit as st
import pandas as pd
import plotly.express as px
import requests
from datetime import date

from api import APIError, api_request
from pm_reports.services.snapshot_loader import DateRange
from pm_reports.services.view_state import ReportViewState

REPORT_TYPES = {
    "project": "📈 Project Summary",
    "task": "🗂️ Task Report",
    "time": "⏱️ Time Report",
    "workload": "👥 Team Workload",
}

STATUS_COLORS = {
    "Todo": "#9CA3AF",
    "In Progress": "#3B82F6",
    "Review": "#8B5CF6",
    "Done": "#10B981",
    "Blocked": "#EF4444",
}
PRIORITY_COLORS = {
    "Low": "#3B82F6",
    "Medium": "#10B981",
    "High": "#F59E0B",
    "Critical": "#EF4444",
}

RESOURCE_LABELS = {
    "projects": "projects",
    "tasks": "tasks",
    "teams": "teams",
    "time_logs": "time logs",
}

st.title("📊 Reports")

# --- 1. VIEW STATE (restored from the URL when possible) ---
if "report_view" not in st.session_state:
    try:
        st.session_state.report_view = ReportViewState.from_dict(dict(st.query_params))
    except (KeyError, ValueError):
        st.session_state.report_view = ReportViewState.default(date.today())

view = st.session_state.report_view

# --- 2. REPORT TYPE PICKER ---
type_cols = st.columns(len(REPORT_TYPES))
for col, (key, label) in zip(type_cols, REPORT_TYPES.items()):
    with col:
        selected = view.report_type.value == key
        if st.button(label, key=f"rt_{key}", use_container_width=True, type="primary" if selected else "secondary"):
            view.select_report(key)
            st.rerun()

# --- 3. DATE RANGE ---
c1, c2, c3, c4, c5 = st.columns([2, 2, 1, 1, 1])
with c1:
    start_d = st.date_input("From", view.date_range.start)
with c2:
    end_d = st.date_input("To", view.date_range.end)

today = date.today()
preset = None
with c3:
    if st.button("Last 7 days", use_container_width=True):
        preset = DateRange.last_7_days(today)
with c4:
    if st.button("Last 30 days", use_container_width=True):
        preset = DateRange.last_30_days(today)
with c5:
    if st.button("This month", use_container_width=True):
        preset = DateRange.this_month(today)

if preset:
    view.set_date_range(preset.start, preset.end)
    st.rerun()
elif (start_d, end_d) != (view.date_range.start, view.date_range.end):
    if start_d > end_d:
        st.error("Start date must be on or before the end date.")
        st.stop()
    view.set_date_range(start_d, end_d)

st.query_params.update({k: str(v) for k, v in view.to_dict().items()})

params = {
    "start_date": view.date_range.start.isoformat(),
    "end_date": view.date_range.end.isoformat(),
}

# --- 4. LOAD (stale responses are dropped by the view state) ---
if view.needs_reload():
    token = view.begin_load()
    with st.spinner("Loading report..."):
        try:
            payload = api_request("GET", f"/reports/{view.report_type.value}", params=params)
        except (APIError, requests.RequestException) as e:
            st.error(f"Failed to load report: {e}")
            st.stop()
    view.apply(token, payload)

report = view.result
resources = report.get("resources", {})
failed = [RESOURCE_LABELS.get(name, name) for name, state in resources.items() if state == "failed"]

if failed:
    st.warning(f"⚠️ Partial data: could not load {', '.join(failed)}. Figures below may be incomplete.")


def empty_message(*needed):
    """Tell 'load failed' apart from 'nothing recorded'."""
    if any(resources.get(name) == "failed" for name in needed):
        st.error("This section could not be loaded. Try again later.")
    else:
        st.info("No data for the selected period.")


# --- 5. EXPORT ---
with st.expander("📥 Export CSV"):
    if st.button("Prepare CSV", type="primary"):
        try:
            res = api_request("GET", f"/reports/{view.report_type.value}/export", params=params, raw=True)
        except (APIError, requests.RequestException) as e:
            st.error(f"Export failed: {e}")
        else:
            if res.status_code == 204:
                st.info("Nothing to export for this report.")
            else:
                disposition = res.headers.get("Content-Disposition", "")
                file_name = disposition.split("filename=")[-1] or f"{view.report_type.value}_report_{today}.csv"
                st.download_button(
                    label="📥 Download CSV",
                    data=res.content,
                    file_name=file_name,
                    mime="text/csv",
                )

st.markdown("---")

# --- 6. SUMMARY CARDS ---
overview = report["overview"]
m1, m2, m3, m4 = st.columns(4)
if view.report_type.value == "project":
    m1.metric("Total Projects", overview["total_projects"])
    m2.metric("Active Projects", overview["active_projects"])
    m3.metric("Completed Projects", overview["completed_projects"])
    m4.metric("Total Hours", f"{overview['total_hours']:.1f}h")
elif view.report_type.value == "task":
    m1.metric("Total Tasks", overview["total_tasks"])
    m2.metric("Completed", overview["completed_tasks"])
    m3.metric("Completion Rate", f"{overview['completion_rate']}%")
    m4.metric("Teams", overview["total_teams"])
elif view.report_type.value == "workload":
    summary = report.get("workload_summary") or {}
    m1.metric("Team Members", summary.get("team_members", 0))
    m2.metric("Total Tasks Assigned", summary.get("total_tasks_assigned", 0))
    m3.metric("Avg Tasks/Person", f"{summary.get('avg_tasks_per_person', 0):.1f}")
    m4.metric("Total Hours", f"{overview['total_hours']:.1f}h")
else:
    m1.metric("Total Hours", f"{overview['total_hours']:.1f}h")
    m2.metric("Entries", overview["time_log_entries"])
    m3.metric("Avg Hours / Entry", f"{overview['average_hours_per_entry']:.1f}h")
    m4.metric("Projects", overview["total_projects"])

# ==========================================
# PROJECT SUMMARY
# ==========================================
if view.report_type.value == "project":
    st.subheader("Project Progress")
    rows = report.get("rows", [])
    if not rows:
        empty_message("projects")
    else:
        df = pd.DataFrame(rows)
        st.dataframe(
            df[["name", "status", "total_tasks", "completed_tasks", "progress", "total_hours"]],
            use_container_width=True,
            hide_index=True,
            column_config={
                "name": st.column_config.TextColumn("Project"),
                "status": st.column_config.TextColumn("Status"),
                "total_tasks": st.column_config.NumberColumn("Tasks"),
                "completed_tasks": st.column_config.NumberColumn("Done"),
                "progress": st.column_config.ProgressColumn("Progress", format="%d%%", min_value=0, max_value=100),
                "total_hours": st.column_config.NumberColumn("Hours", format="%.1f"),
            },
        )

# ==========================================
# TASK DISTRIBUTION
# ==========================================
elif view.report_type.value == "task":
    distribution = report["distribution"]
    c1, c2 = st.columns(2)
    with c1:
        df_status = pd.DataFrame(distribution["by_status"])
        fig_status = px.pie(df_status, names="name", values="value", title="Tasks by Status",
                            color="name", color_discrete_map=STATUS_COLORS)
        st.plotly_chart(fig_status, use_container_width=True)
    with c2:
        df_priority = pd.DataFrame(distribution["by_priority"])
        fig_priority = px.bar(df_priority, x="name", y="value", title="Tasks by Priority",
                              color="name", color_discrete_map=PRIORITY_COLORS)
        fig_priority.update_layout(showlegend=False, xaxis_title="", yaxis_title="Tasks")
        st.plotly_chart(fig_priority, use_container_width=True)

    if overview["total_tasks"] == 0:
        empty_message("tasks")

# ==========================================
# TIME BY PROJECT
# ==========================================
elif view.report_type.value == "time":
    st.subheader("Hours by Project")
    rows = report.get("rows", [])
    if not rows:
        empty_message("projects", "tasks", "time_logs")
    else:
        df = pd.DataFrame(rows)
        df["label"] = df["name"].apply(lambda n: n[:15] + "..." if len(n) > 15 else n)
        fig_hours = px.bar(df, x="label", y="hours", hover_data=["name"])
        fig_hours.update_traces(marker_color="#3B82F6")
        fig_hours.update_layout(xaxis_title="", yaxis_title="Hours")
        st.plotly_chart(fig_hours, use_container_width=True)

    st.subheader("Recent Time Entries")
    entries = report.get("recent_entries", [])
    if not entries:
        empty_message("time_logs")
    else:
        df_entries = pd.DataFrame(entries)
        df_entries["date"] = pd.to_datetime(df_entries["date"]).dt.strftime("%b %d, %Y")
        st.dataframe(
            df_entries[["date", "task", "user", "hours"]],
            use_container_width=True,
            hide_index=True,
            column_config={
                "date": st.column_config.TextColumn("Date"),
                "task": st.column_config.TextColumn("Task"),
                "user": st.column_config.TextColumn("User"),
                "hours": st.column_config.NumberColumn("Hours", format="%.1fh"),
            },
        )

# ==========================================
# TEAM WORKLOAD
# ==========================================
else:
    st.subheader("Team Workload")
    rows = report.get("rows", [])
    if not rows:
        empty_message("tasks")
    else:
        df = pd.DataFrame(rows)
        fig_load = px.bar(
            df,
            x="name",
            y=["completed", "in_progress", "todo"],
            title="Tasks per Assignee",
            color_discrete_map={"completed": "#10B981", "in_progress": "#3B82F6", "todo": "#9CA3AF"},
        )
        fig_load.update_layout(barmode="stack", xaxis_title="", yaxis_title="Tasks", legend_title="")
        st.plotly_chart(fig_load, use_container_width=True)

        st.dataframe(
            df[["name", "todo", "in_progress", "completed", "total", "hours"]],
            use_container_width=True,
            hide_index=True,
            column_config={
                "name": st.column_config.TextColumn("Member"),
                "todo": st.column_config.NumberColumn("To Do"),
                "in_progress": st.column_config.NumberColumn("In Progress"),
                "completed": st.column_config.NumberColumn("Completed"),
                "total": st.column_config.NumberColumn("Total"),
                "hours": st.column_config.NumberColumn("Hours", format="%.1f"),
            },
        )
