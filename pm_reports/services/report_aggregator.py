"""
Report aggregation over a loaded Snapshot.

Every function here is a pure function of its inputs: no caching, no
module state, same snapshot in -> same rows out.
"""
import enum
from collections import Counter
from datetime import date
from fractions import Fraction
from typing import Any, Dict, Iterable, List, Union

from pm_reports.core import config
from pm_reports.schemas.entities import Priority, ProjectStatus, Task, TaskStatus, TimeLog
from pm_reports.schemas.reports import (
    DashboardStats,
    DistributionBucket,
    ProjectSummaryRow,
    ReportOverview,
    TaskDistribution,
    TimeByProjectRow,
    TimeEntryRow,
    WorkloadRow,
    WorkloadSummary,
)
from pm_reports.services.activity_grouping import local_date
from pm_reports.services.snapshot_loader import Snapshot

UNKNOWN_USER = "Unknown"
DASHBOARD_LIST_SIZE = 5
RECENT_ENTRIES_SIZE = 10


class ReportType(str, enum.Enum):
    PROJECT = "project"
    TASK = "task"
    TIME = "time"
    WORKLOAD = "workload"


def percent(part: int, whole: int) -> int:
    """part/whole as a whole percentage, rounded half away from zero. 0 when whole is 0."""
    if whole == 0:
        return 0
    ratio = Fraction(part * 100, whole)
    half = Fraction(1, 2)
    return int(ratio + half) if ratio >= 0 else -int(-ratio + half)


def _hours_for_tasks(time_logs: Iterable[TimeLog], task_ids: set) -> float:
    return sum((log.hours for log in time_logs if log.task_id in task_ids), 0.0)


def _project_tasks(tasks: Iterable[Task], project_id: str) -> List[Task]:
    return [task for task in tasks if task.project_id == project_id]


# ------------------------------------------------------------------
# 1. PROJECT SUMMARY
# ------------------------------------------------------------------
def project_summary(snapshot: Snapshot) -> List[ProjectSummaryRow]:
    rows = []
    for project in snapshot.projects:
        project_tasks = _project_tasks(snapshot.tasks, project.id)
        total_tasks = len(project_tasks)
        completed_tasks = sum(1 for t in project_tasks if t.status is TaskStatus.DONE)
        task_ids = {t.id for t in project_tasks}

        rows.append(ProjectSummaryRow(
            project_id=project.id,
            name=project.name,
            status=project.status,
            total_tasks=total_tasks,
            completed_tasks=completed_tasks,
            progress=percent(completed_tasks, total_tasks),
            total_hours=_hours_for_tasks(snapshot.time_logs, task_ids),
        ))
    return rows


# ------------------------------------------------------------------
# 2. TASK DISTRIBUTION
# ------------------------------------------------------------------
def task_distribution(snapshot: Snapshot) -> TaskDistribution:
    status_counts = Counter(task.status for task in snapshot.tasks)
    priority_counts = Counter(task.priority for task in snapshot.tasks)

    return TaskDistribution(
        by_status=[
            DistributionBucket(key=status.value, name=status.label, value=status_counts.get(status, 0))
            for status in TaskStatus
        ],
        by_priority=[
            DistributionBucket(key=priority.value, name=priority.value, value=priority_counts.get(priority, 0))
            for priority in Priority
        ],
    )


# ------------------------------------------------------------------
# 3. TIME BY PROJECT
# ------------------------------------------------------------------
def time_by_project(snapshot: Snapshot) -> List[TimeByProjectRow]:
    rows = []
    for project in snapshot.projects:
        task_ids = {t.id for t in _project_tasks(snapshot.tasks, project.id)}
        hours = _hours_for_tasks(snapshot.time_logs, task_ids)
        if hours > 0:
            rows.append(TimeByProjectRow(project_id=project.id, name=project.name, hours=hours))
    return rows


def recent_time_entries(snapshot: Snapshot, limit: int = RECENT_ENTRIES_SIZE) -> List[TimeEntryRow]:
    """The first `limit` time-log entries of the range, in upstream order."""
    return [
        TimeEntryRow(
            id=log.id,
            date=log.date,
            task=log.task_name or "",
            user=log.user_name or "",
            hours=log.hours,
        )
        for log in snapshot.time_logs[:limit]
    ]


# ------------------------------------------------------------------
# 4. WORKLOAD BY ASSIGNEE
# ------------------------------------------------------------------
def workload_by_assignee(snapshot: Snapshot) -> List[WorkloadRow]:
    assignee_ids = []
    for task in snapshot.tasks:
        if task.assignee_id and task.assignee_id not in assignee_ids:
            assignee_ids.append(task.assignee_id)

    rows = []
    for user_id in assignee_ids:
        user_tasks = [t for t in snapshot.tasks if t.assignee_id == user_id]
        user_logs = [log for log in snapshot.time_logs if log.user_id == user_id]

        # Display name comes from the first log entry, not from a user directory
        name = user_logs[0].user_name if user_logs and user_logs[0].user_name else UNKNOWN_USER

        rows.append(WorkloadRow(
            assignee_id=user_id,
            name=name,
            todo=sum(1 for t in user_tasks if t.status is TaskStatus.TODO),
            in_progress=sum(1 for t in user_tasks if t.status is TaskStatus.IN_PROGRESS),
            completed=sum(1 for t in user_tasks if t.status is TaskStatus.DONE),
            hours=sum((log.hours for log in user_logs), 0.0),
            total=len(user_tasks),
        ))
    return rows


def workload_summary(rows: List[WorkloadRow]) -> WorkloadSummary:
    members = len(rows)
    assigned = sum(row.total for row in rows)
    return WorkloadSummary(
        team_members=members,
        total_tasks_assigned=assigned,
        avg_tasks_per_person=assigned / members if members else 0.0,
    )


def aggregate(
    report_type: Union[ReportType, str],
    snapshot: Snapshot,
) -> Union[List[ProjectSummaryRow], TaskDistribution, List[TimeByProjectRow], List[WorkloadRow]]:
    """Dispatch to the aggregation for one report type. Raises ValueError on unknown types."""
    report_type = ReportType(report_type)

    if report_type is ReportType.PROJECT:
        return project_summary(snapshot)
    if report_type is ReportType.TASK:
        return task_distribution(snapshot)
    if report_type is ReportType.TIME:
        return time_by_project(snapshot)
    return workload_by_assignee(snapshot)


# ------------------------------------------------------------------
# SUMMARY CARDS & DASHBOARD
# ------------------------------------------------------------------
def report_overview(snapshot: Snapshot) -> ReportOverview:
    total_tasks = len(snapshot.tasks)
    completed_tasks = sum(1 for t in snapshot.tasks if t.status is TaskStatus.DONE)
    total_hours = sum((log.hours for log in snapshot.time_logs), 0.0)
    entries = len(snapshot.time_logs)

    return ReportOverview(
        total_projects=len(snapshot.projects),
        active_projects=sum(1 for p in snapshot.projects if p.status is ProjectStatus.ACTIVE),
        completed_projects=sum(1 for p in snapshot.projects if p.status is ProjectStatus.COMPLETED),
        total_tasks=total_tasks,
        completed_tasks=completed_tasks,
        completion_rate=percent(completed_tasks, total_tasks),
        total_hours=total_hours,
        time_log_entries=entries,
        average_hours_per_entry=total_hours / entries if entries else 0.0,
        total_teams=len(snapshot.teams),
    )


def dashboard_stats(snapshot: Snapshot, today: date, tz=None) -> DashboardStats:
    """
    Numbers for the dashboard. A task is overdue when its due date, read
    as a calendar day in `tz` (REPORTS_TIMEZONE by default), is before
    `today` and it is not Done.
    """
    tz = tz or config.REPORTS_TIMEZONE
    tasks = snapshot.tasks
    status_counts = Counter(t.status for t in tasks)
    overdue = [
        t for t in tasks
        if t.due_date and local_date(t.due_date, tz) < today and t.status is not TaskStatus.DONE
    ]
    urgent = [
        t for t in tasks
        if t.status is not TaskStatus.DONE and t.priority in (Priority.HIGH, Priority.CRITICAL)
    ]

    return DashboardStats(
        total_projects=len(snapshot.projects),
        active_projects=sum(1 for p in snapshot.projects if p.status is ProjectStatus.ACTIVE),
        total_tasks=len(tasks),
        completed_tasks=status_counts[TaskStatus.DONE],
        in_progress_tasks=status_counts[TaskStatus.IN_PROGRESS],
        todo_tasks=status_counts[TaskStatus.TODO],
        review_tasks=status_counts[TaskStatus.REVIEW],
        blocked_tasks=status_counts[TaskStatus.BLOCKED],
        overdue_tasks=len(overdue),
        total_teams=len(snapshot.teams),
        recent_projects=list(snapshot.projects[:DASHBOARD_LIST_SIZE]),
        urgent_tasks=urgent[:DASHBOARD_LIST_SIZE],
    )


# ------------------------------------------------------------------
# CSV EXPORT ROWS
# ------------------------------------------------------------------
def export_rows(report_type: Union[ReportType, str], snapshot: Snapshot) -> List[Dict[str, Any]]:
    """
    Flat rows written by the CSV export for one report type.
    Project and workload exports reuse the derived rows; task and time
    exports list the underlying tasks / time-log entries.
    """
    report_type = ReportType(report_type)

    if report_type is ReportType.PROJECT:
        return [row.model_dump(mode="json") for row in project_summary(snapshot)]

    if report_type is ReportType.TASK:
        return [
            {
                "title": t.title,
                "status": t.status.value,
                "priority": t.priority.value,
                "due_date": local_date(t.due_date, config.REPORTS_TIMEZONE).isoformat() if t.due_date else "",
                "estimated_hours": t.estimated_hours or 0,
                "actual_hours": t.actual_hours or 0,
            }
            for t in snapshot.tasks
        ]

    if report_type is ReportType.TIME:
        return [
            {
                "date": log.date.isoformat(),
                "task": log.task_name or "",
                "project": log.project_name or "",
                "user": log.user_name or "",
                "hours": log.hours,
                "description": log.description or "",
            }
            for log in snapshot.time_logs
        ]

    return [row.model_dump(mode="json") for row in workload_by_assignee(snapshot)]
