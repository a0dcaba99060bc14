from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

import pytz

from pm_reports.core import config
from pm_reports.schemas.entities import ActivityAction, ActivityLog


def local_date(moment: datetime, tz) -> date:
    # Naive timestamps from the API are UTC
    if moment.tzinfo is None:
        moment = pytz.utc.localize(moment)
    return moment.astimezone(tz).date()


def bucket_label(created_at: datetime, now: datetime, tz=None) -> str:
    tz = tz or config.REPORTS_TIMEZONE
    day = local_date(created_at, tz)
    today = local_date(now, tz)

    if day == today:
        return "Today"
    if day == today - timedelta(days=1):
        return "Yesterday"
    return f"{day:%A}, {day.day} {day:%B}"


def group_activities(
    entries: Iterable[ActivityLog],
    now: datetime,
    tz=None,
    project_name: Optional[str] = None,
) -> List[Tuple[str, List[ActivityLog]]]:
    """
    Partition activity entries into "Today", "Yesterday" and dated buckets.
    Buckets come out in the order their first entry was seen; entries keep
    their input order inside each bucket.
    """
    groups: Dict[str, List[ActivityLog]] = {}
    for entry in entries:
        if project_name and entry.project_name != project_name:
            continue
        label = bucket_label(entry.created_at, now, tz)
        groups.setdefault(label, []).append(entry)
    return list(groups.items())


def describe_activity(entry: ActivityLog) -> str:
    details = entry.details or {}
    entity = entry.entity_type.value
    name = entry.entity_name or ""

    if entry.action is ActivityAction.CREATED:
        return f'created {entity} "{name}"'
    if entry.action is ActivityAction.UPDATED:
        return f'updated {entity} "{name}"'
    if entry.action is ActivityAction.DELETED:
        return f'deleted {entity} "{name}"'
    if entry.action is ActivityAction.STATUS_CHANGED:
        return f'changed status of "{name}" from {details.get("from")} to {details.get("to")}'
    if entry.action is ActivityAction.ASSIGNED:
        return f'assigned "{name}" to {details.get("assignee")}'
    if entry.action is ActivityAction.COMMENTED:
        return f'commented on "{name}"'
    return f'performed action on "{name}"'


def time_ago(created_at: datetime, now: datetime) -> str:
    if created_at.tzinfo is None:
        created_at = pytz.utc.localize(created_at)
    if now.tzinfo is None:
        now = pytz.utc.localize(now)

    seconds = (now - created_at).total_seconds()
    minutes = int(seconds // 60)
    hours = int(seconds // 3600)
    days = int(seconds // 86400)

    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes}m ago"
    if hours < 24:
        return f"{hours}h ago"
    if days < 7:
        return f"{days}d ago"

    label = f"{created_at.day} {created_at:%b}"
    if days > 365:
        label += f" {created_at.year}"
    return label
