from datetime import date

import pytest
import pytz

from conftest import log, make_snapshot
from pm_reports.schemas.entities import ProjectStatus
from pm_reports.services.report_aggregator import (
    ReportType,
    aggregate,
    dashboard_stats,
    export_rows,
    percent,
    project_summary,
    recent_time_entries,
    report_overview,
    task_distribution,
    time_by_project,
    workload_by_assignee,
    workload_summary,
)


# --- Project summary -------------------------------------------------------

def test_project_summary_half_done_project():
    snapshot = make_snapshot(
        projects=[{"id": "p1", "name": "Site"}],
        tasks=[
            {"id": "t1", "project_id": "p1", "status": "Done"},
            {"id": "t2", "project_id": "p1", "status": "Todo"},
        ],
    )
    (row,) = project_summary(snapshot)
    assert row.project_id == "p1"
    assert row.total_tasks == 2
    assert row.completed_tasks == 1
    assert row.progress == 50
    assert row.total_hours == 0


def test_project_without_tasks_has_zero_progress():
    snapshot = make_snapshot(projects=[{"id": "p1", "name": "Empty"}])
    (row,) = project_summary(snapshot)
    assert row.total_tasks == 0
    assert row.progress == 0


def test_project_summary_keeps_input_order_and_all_projects(sample_snapshot):
    rows = project_summary(sample_snapshot)
    assert [r.project_id for r in rows] == ["p1", "p2", "p3"]
    assert rows[0].total_hours == pytest.approx(7.0)
    assert rows[0].status is ProjectStatus.ACTIVE
    assert rows[2].total_tasks == 0


def test_dangling_tasks_are_excluded_from_projects(sample_snapshot):
    rows = project_summary(sample_snapshot)
    assert sum(r.total_tasks for r in rows) == 4
    # t5's 4 hours belong to a project that does not exist
    assert sum(r.total_hours for r in rows) == pytest.approx(7.0)


@pytest.mark.parametrize(
    "part,whole,expected",
    [
        (0, 0, 0),
        (1, 2, 50),
        (1, 3, 33),
        (2, 3, 67),
        (1, 8, 13),
        (3, 8, 38),
        (5, 5, 100),
    ],
)
def test_percent_rounds_half_away_from_zero(part, whole, expected):
    assert percent(part, whole) == expected


# --- Task distribution -----------------------------------------------------

def test_distribution_of_no_tasks_has_every_bucket():
    distribution = task_distribution(make_snapshot())
    assert [b.name for b in distribution.by_status] == ["Todo", "In Progress", "Review", "Done", "Blocked"]
    assert [b.name for b in distribution.by_priority] == ["Low", "Medium", "High", "Critical"]
    assert all(b.value == 0 for b in distribution.by_status)
    assert all(b.value == 0 for b in distribution.by_priority)


def test_distribution_counts(sample_snapshot):
    distribution = task_distribution(sample_snapshot)
    by_status = {b.key: b.value for b in distribution.by_status}
    assert by_status == {"Todo": 1, "inprogress": 1, "Review": 1, "Done": 1, "Blocked": 1}
    by_priority = {b.name: b.value for b in distribution.by_priority}
    assert by_priority == {"Low": 1, "Medium": 2, "High": 1, "Critical": 1}


@pytest.mark.parametrize(
    "statuses",
    [
        [],
        ["Done"],
        ["Todo", "Todo", "Blocked"],
        ["inprogress", "Review", "Done", "Done", "Todo", "Blocked"],
    ],
)
def test_status_buckets_sum_to_task_count(statuses):
    snapshot = make_snapshot(
        tasks=[{"id": f"t{i}", "project_id": "p1", "status": s} for i, s in enumerate(statuses)]
    )
    distribution = task_distribution(snapshot)
    assert sum(b.value for b in distribution.by_status) == len(statuses)
    assert sum(b.value for b in distribution.by_priority) == len(statuses)


# --- Time by project -------------------------------------------------------

def test_time_by_project_sums_logs_and_skips_idle_projects():
    snapshot = make_snapshot(
        projects=[{"id": "p1", "name": "Site"}, {"id": "p2", "name": "Idle"}],
        tasks=[{"id": "t1", "project_id": "p1"}, {"id": "t2", "project_id": "p2"}],
        time_logs=[log("l1", "t1", 2.5), log("l2", "t1", 1.5)],
    )
    rows = time_by_project(snapshot)
    assert len(rows) == 1
    assert rows[0].project_id == "p1"
    assert rows[0].hours == 4.0


def test_time_logs_for_unknown_tasks_are_ignored():
    snapshot = make_snapshot(
        projects=[{"id": "p1", "name": "Site"}],
        tasks=[{"id": "t1", "project_id": "p1"}],
        time_logs=[log("l1", "nope", 3.0)],
    )
    assert time_by_project(snapshot) == []


# --- Workload --------------------------------------------------------------

def test_workload_groups_by_assignee(sample_snapshot):
    rows = workload_by_assignee(sample_snapshot)
    assert [r.assignee_id for r in rows] == ["u1", "u2", "u3"]

    ani = rows[0]
    assert ani.name == "Ani"
    assert (ani.todo, ani.in_progress, ani.completed, ani.total) == (1, 0, 1, 2)
    assert ani.hours == pytest.approx(4.0)


def test_workload_name_falls_back_to_unknown(sample_snapshot):
    rows = {r.assignee_id: r for r in workload_by_assignee(sample_snapshot)}
    # u2 logged time, but the first entry carries no user_name
    assert rows["u2"].name == "Unknown"
    assert rows["u2"].hours == pytest.approx(3.0)


def test_workload_assignee_without_logs_is_unknown_with_zero_hours():
    snapshot = make_snapshot(tasks=[{"id": "t1", "project_id": "p1", "assignee_id": "u9"}])
    (row,) = workload_by_assignee(snapshot)
    assert row.name == "Unknown"
    assert row.hours == 0


def test_unassigned_tasks_are_invisible_to_workload():
    snapshot = make_snapshot(tasks=[{"id": "t1", "project_id": "p1"}, {"id": "t2", "project_id": "p1", "assignee_id": ""}])
    assert workload_by_assignee(snapshot) == []


# --- Dispatch & purity -----------------------------------------------------

@pytest.mark.parametrize("report_type", list(ReportType))
def test_aggregate_is_idempotent(sample_snapshot, report_type):
    assert aggregate(report_type, sample_snapshot) == aggregate(report_type, sample_snapshot)


def test_aggregate_accepts_plain_strings(sample_snapshot):
    assert aggregate("time", sample_snapshot) == time_by_project(sample_snapshot)


def test_aggregate_rejects_unknown_report_type(sample_snapshot):
    with pytest.raises(ValueError):
        aggregate("budget", sample_snapshot)


# --- Overview & dashboard --------------------------------------------------

def test_report_overview(sample_snapshot):
    overview = report_overview(sample_snapshot)
    assert overview.total_projects == 3
    assert overview.active_projects == 1
    assert overview.completed_projects == 1
    assert overview.total_tasks == 5
    assert overview.completion_rate == 20
    assert overview.total_hours == pytest.approx(11.0)
    assert overview.time_log_entries == 4
    assert overview.average_hours_per_entry == pytest.approx(2.75)
    assert overview.total_teams == 1


def test_report_overview_on_empty_snapshot():
    overview = report_overview(make_snapshot())
    assert overview.completion_rate == 0
    assert overview.average_hours_per_entry == 0


def test_dashboard_stats():
    snapshot = make_snapshot(
        projects=[{"id": f"p{i}", "name": f"P{i}", "status": "Active" if i % 2 else "OnHold"} for i in range(7)],
        tasks=[
            {"id": "t1", "project_id": "p1", "status": "Todo", "priority": "High", "due_date": "2026-10-01T00:00:00Z"},
            {"id": "t2", "project_id": "p1", "status": "Done", "priority": "Critical", "due_date": "2026-10-01T00:00:00Z"},
            {"id": "t3", "project_id": "p1", "status": "inprogress", "priority": "Low", "due_date": "2026-12-01T00:00:00Z"},
            {"id": "t4", "project_id": "p1", "status": "Blocked", "priority": "Critical"},
        ],
    )
    stats = dashboard_stats(snapshot, today=date(2026, 10, 19))
    assert stats.total_projects == 7
    assert stats.active_projects == 3
    assert stats.completed_tasks == 1
    assert stats.in_progress_tasks == 1
    assert stats.overdue_tasks == 1
    assert [p.id for p in stats.recent_projects] == ["p0", "p1", "p2", "p3", "p4"]
    assert [t.id for t in stats.urgent_tasks] == ["t1", "t4"]


def test_dashboard_status_overview(sample_snapshot):
    stats = dashboard_stats(sample_snapshot, today=date(2026, 10, 19))
    counts = (stats.todo_tasks, stats.in_progress_tasks, stats.review_tasks, stats.completed_tasks, stats.blocked_tasks)
    assert counts == (1, 1, 1, 1, 1)
    assert sum(counts) == stats.total_tasks


@pytest.mark.parametrize(
    "tz,expected",
    [
        # 01:00 UTC on the 19th
        (pytz.utc, 0),
        # still the evening of the 18th in Chicago
        (pytz.timezone("America/Chicago"), 1),
    ],
)
def test_overdue_uses_the_reporting_timezone(tz, expected):
    snapshot = make_snapshot(
        tasks=[{"id": "t1", "project_id": "p1", "status": "Todo", "due_date": "2026-10-18T20:00:00-05:00"}]
    )
    assert dashboard_stats(snapshot, today=date(2026, 10, 19), tz=tz).overdue_tasks == expected


def test_overdue_defaults_to_configured_timezone(monkeypatch):
    from pm_reports.core import config

    monkeypatch.setattr(config, "REPORTS_TIMEZONE", pytz.utc)
    snapshot = make_snapshot(
        tasks=[{"id": "t1", "project_id": "p1", "status": "Todo", "due_date": "2026-10-18T20:00:00-05:00"}]
    )
    assert dashboard_stats(snapshot, today=date(2026, 10, 19)).overdue_tasks == 0


# --- Export rows -----------------------------------------------------------

def test_task_export_rows_fill_blanks():
    snapshot = make_snapshot(tasks=[{"id": "t1", "project_id": "p1", "title": "Login", "status": "inprogress", "estimated_hours": 3}])
    assert export_rows("task", snapshot) == [
        {
            "title": "Login",
            "status": "inprogress",
            "priority": "Medium",
            "due_date": "",
            "estimated_hours": 3,
            "actual_hours": 0,
        }
    ]


def test_time_export_rows_list_entries():
    snapshot = make_snapshot(time_logs=[log("l1", "t1", 1.5, user_name="Ani", task_name="Homepage", project_name="Site")])
    assert export_rows(ReportType.TIME, snapshot) == [
        {"date": "2026-10-05", "task": "Homepage", "project": "Site", "user": "Ani", "hours": 1.5, "description": ""}
    ]


def test_project_export_rows_are_plain_values(sample_snapshot):
    rows = export_rows("project", sample_snapshot)
    assert rows[0]["status"] == "Active"
    assert list(rows[0].keys()) == ["project_id", "name", "status", "total_tasks", "completed_tasks", "progress", "total_hours"]


def test_task_export_due_date_is_a_local_calendar_day(monkeypatch):
    from pm_reports.core import config

    monkeypatch.setattr(config, "REPORTS_TIMEZONE", pytz.utc)
    snapshot = make_snapshot(
        tasks=[{"id": "t1", "project_id": "p1", "title": "Login", "due_date": "2026-10-18T20:00:00-05:00"}]
    )
    assert export_rows("task", snapshot)[0]["due_date"] == "2026-10-19"


# --- Time entries & workload summary ---------------------------------------

def test_recent_time_entries_are_the_first_ten():
    snapshot = make_snapshot(
        time_logs=[log(f"l{i}", "t1", 1.0, user_name="Ani", task_name=f"Task {i}") for i in range(12)]
    )
    entries = recent_time_entries(snapshot)
    assert [e.id for e in entries] == [f"l{i}" for i in range(10)]
    assert entries[0].task == "Task 0"
    assert entries[0].user == "Ani"
    assert entries[0].date == date(2026, 10, 5)


def test_recent_time_entries_fill_missing_names(sample_snapshot):
    entries = recent_time_entries(sample_snapshot)
    assert len(entries) == 4
    assert (entries[2].task, entries[2].user, entries[2].hours) == ("", "", 3.0)


def test_workload_summary(sample_snapshot):
    summary = workload_summary(workload_by_assignee(sample_snapshot))
    assert summary.team_members == 3
    assert summary.total_tasks_assigned == 4
    assert summary.avg_tasks_per_person == pytest.approx(4 / 3)


def test_workload_summary_without_members():
    summary = workload_summary([])
    assert (summary.team_members, summary.total_tasks_assigned, summary.avg_tasks_per_person) == (0, 0, 0)
