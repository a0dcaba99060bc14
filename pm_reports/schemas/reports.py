# pm_reports/schemas/reports.py
from pydantic import BaseModel
from datetime import date
from typing import Dict, List, Optional, Union

from pm_reports.schemas.entities import ActivityLog, Project, ProjectStatus, Task


# 1. Project Summary (one row per project)
class ProjectSummaryRow(BaseModel):
    project_id: str
    name: str
    status: ProjectStatus
    total_tasks: int
    completed_tasks: int
    progress: int
    total_hours: float


# 2. Task Distribution (fixed, fully populated buckets)
class DistributionBucket(BaseModel):
    key: str
    name: str
    value: int


class TaskDistribution(BaseModel):
    by_status: List[DistributionBucket]
    by_priority: List[DistributionBucket]


# 3. Time by Project (only projects with logged hours)
class TimeByProjectRow(BaseModel):
    project_id: str
    name: str
    hours: float


# Recent entries table under the time report
class TimeEntryRow(BaseModel):
    id: str
    date: date
    task: str
    user: str
    hours: float


# 4. Team Workload (one row per assignee)
class WorkloadRow(BaseModel):
    assignee_id: str
    name: str
    todo: int
    in_progress: int
    completed: int
    hours: float
    total: int


class WorkloadSummary(BaseModel):
    team_members: int
    total_tasks_assigned: int
    avg_tasks_per_person: float


DerivedRow = Union[ProjectSummaryRow, TimeByProjectRow, WorkloadRow]


# Summary cards shown above every report
class ReportOverview(BaseModel):
    total_projects: int
    active_projects: int
    completed_projects: int
    total_tasks: int
    completed_tasks: int
    completion_rate: int
    total_hours: float
    time_log_entries: int
    average_hours_per_entry: float
    total_teams: int


class ReportResponse(BaseModel):
    report_type: str
    start_date: date
    end_date: date
    resources: Dict[str, str]
    partial: bool
    overview: ReportOverview
    rows: List[DerivedRow] = []
    distribution: Optional[TaskDistribution] = None
    recent_entries: List[TimeEntryRow] = []
    workload_summary: Optional[WorkloadSummary] = None


class DashboardStats(BaseModel):
    total_projects: int
    active_projects: int
    total_tasks: int
    completed_tasks: int
    in_progress_tasks: int
    todo_tasks: int
    review_tasks: int
    blocked_tasks: int
    overdue_tasks: int
    total_teams: int
    recent_projects: List[Project]
    urgent_tasks: List[Task]


class DashboardResponse(BaseModel):
    resources: Dict[str, str]
    partial: bool
    stats: DashboardStats


class ActivityItem(BaseModel):
    activity: ActivityLog
    text: str
    time_ago: str


class ActivityGroup(BaseModel):
    label: str
    items: List[ActivityItem]


class ActivityFeedResponse(BaseModel):
    state: str
    groups: List[ActivityGroup]
