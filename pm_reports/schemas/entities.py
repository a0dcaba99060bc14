# pm_reports/schemas/entities.py
import enum
from datetime import date, datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator


def _normalize(value: str) -> str:
    return value.replace("_", "").replace("-", "").replace(" ", "").lower()


class WireEnum(str, enum.Enum):
    """
    Enum matching the upstream API spellings.
    Lookup ignores case, underscores, dashes and spaces, so
    "inprogress", "InProgress" and "in_progress" are the same member.
    """

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            wanted = _normalize(value)
            for member in cls:
                if wanted in (_normalize(member.value), _normalize(member.name)):
                    return member
        return None


class ProjectStatus(WireEnum):
    PLANNING = "Planning"
    ACTIVE = "Active"
    ON_HOLD = "onhold"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class TaskStatus(WireEnum):
    # Declaration order is the bucket order of the status distribution
    TODO = "Todo"
    IN_PROGRESS = "inprogress"
    REVIEW = "Review"
    DONE = "Done"
    BLOCKED = "Blocked"

    @property
    def label(self) -> str:
        return "In Progress" if self is TaskStatus.IN_PROGRESS else self.value


class Priority(WireEnum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class ActivityAction(WireEnum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    STATUS_CHANGED = "status_changed"
    ASSIGNED = "assigned"
    COMMENTED = "commented"


class EntityType(WireEnum):
    PROJECT = "project"
    TASK = "task"
    TEAM = "team"
    MILESTONE = "milestone"
    COMMENT = "comment"


def _calendar_date(value):
    # Upstream sometimes sends full timestamps for date-only fields
    if isinstance(value, str) and len(value) > 10:
        return value[:10]
    if isinstance(value, datetime):
        return value.date()
    return value


class Project(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    status: ProjectStatus = ProjectStatus.PLANNING
    priority: Priority = Priority.MEDIUM
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, v):
        return ProjectStatus(v) if isinstance(v, str) else v

    @field_validator("priority", mode="before")
    @classmethod
    def _parse_priority(cls, v):
        return Priority(v) if isinstance(v, str) else v


class Task(BaseModel):
    id: str
    project_id: str
    title: str = ""
    status: TaskStatus = TaskStatus.TODO
    priority: Priority = Priority.MEDIUM
    assignee_id: Optional[str] = None
    due_date: Optional[datetime] = None
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, v):
        return TaskStatus(v) if isinstance(v, str) else v

    @field_validator("priority", mode="before")
    @classmethod
    def _parse_priority(cls, v):
        return Priority(v) if isinstance(v, str) else v


class Team(BaseModel):
    id: str
    name: str
    description: Optional[str] = None


class TimeLog(BaseModel):
    id: str
    task_id: str
    user_id: str
    date: date
    hours: float = Field(ge=0)
    description: Optional[str] = None

    # --- Denormalized names sent by the API ---
    task_name: Optional[str] = None
    project_name: Optional[str] = None
    user_name: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, v):
        return _calendar_date(v)


class ActivityLog(BaseModel):
    id: str
    user_name: Optional[str] = None
    project_name: Optional[str] = None
    action: ActivityAction
    entity_type: EntityType
    entity_id: str
    entity_name: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    created_at: datetime

    @field_validator("action", mode="before")
    @classmethod
    def _parse_action(cls, v):
        return ActivityAction(v) if isinstance(v, str) else v

    @field_validator("entity_type", mode="before")
    @classmethod
    def _parse_entity_type(cls, v):
        return EntityType(v) if isinstance(v, str) else v
