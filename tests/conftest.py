"""
Pytest configuration and fixtures
"""
from datetime import date

import pytest

from pm_reports.schemas.entities import Project, Task, Team, TimeLog
from pm_reports.services.snapshot_loader import DateRange, ResourceState, Snapshot

RANGE = DateRange(date(2026, 10, 1), date(2026, 10, 31))


def make_snapshot(projects=(), tasks=(), teams=(), time_logs=(), states=None, date_range=RANGE):
    """Build a Snapshot from plain dicts shaped like the upstream API payloads."""
    projects = tuple(Project.model_validate(p) for p in projects)
    tasks = tuple(Task.model_validate(t) for t in tasks)
    teams = tuple(Team.model_validate(t) for t in teams)
    time_logs = tuple(TimeLog.model_validate(tl) for tl in time_logs)

    if states is None:
        states = {
            name: ResourceState.LOADED if items else ResourceState.EMPTY
            for name, items in (
                ("projects", projects),
                ("tasks", tasks),
                ("teams", teams),
                ("time_logs", time_logs),
            )
        }

    return Snapshot(
        date_range=date_range,
        projects=projects,
        tasks=tasks,
        teams=teams,
        time_logs=time_logs,
        states=states,
    )


def log(id, task_id, hours, user_id="u1", user_name=None, day="2026-10-05", **extra):
    return {"id": id, "task_id": task_id, "user_id": user_id, "user_name": user_name, "date": day, "hours": hours, **extra}


@pytest.fixture()
def sample_snapshot():
    return make_snapshot(
        projects=[
            {"id": "p1", "name": "Website Redesign", "status": "Active", "priority": "High"},
            {"id": "p2", "name": "Mobile App", "status": "Planning"},
            {"id": "p3", "name": "Archive", "status": "Completed"},
        ],
        tasks=[
            {"id": "t1", "project_id": "p1", "title": "Homepage", "status": "Done", "priority": "High", "assignee_id": "u1"},
            {"id": "t2", "project_id": "p1", "title": "Navigation", "status": "inprogress", "priority": "Critical", "assignee_id": "u2"},
            {"id": "t3", "project_id": "p1", "title": "Footer", "status": "Todo", "priority": "Low", "assignee_id": "u1"},
            {"id": "t4", "project_id": "p2", "title": "Login", "status": "Review", "priority": "Medium"},
            {"id": "t5", "project_id": "gone", "title": "Orphan", "status": "Blocked", "priority": "Medium", "assignee_id": "u3"},
        ],
        teams=[{"id": "team1", "name": "Frontend"}],
        time_logs=[
            log("l1", "t1", 2.5, user_id="u1", user_name="Ani"),
            log("l2", "t1", 1.5, user_id="u1", user_name="Ani"),
            log("l3", "t2", 3.0, user_id="u2"),
            log("l4", "t5", 4.0, user_id="u3", user_name="Budi"),
        ],
    )
