import logging
from datetime import datetime
from typing import Optional

import pytz
from fastapi import APIRouter, Depends, Query

from pm_reports.api.dependencies import get_snapshot_loader
from pm_reports.schemas.reports import ActivityFeedResponse, ActivityGroup, ActivityItem
from pm_reports.services.activity_grouping import describe_activity, group_activities, time_ago
from pm_reports.services.snapshot_loader import SnapshotLoader

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/activities", tags=["Activity Feed"])


@router.get("/grouped", response_model=ActivityFeedResponse)
async def get_grouped_activities(
    project_name: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1, le=500),
    loader: SnapshotLoader = Depends(get_snapshot_loader),
):
    entries, state = await loader.load_activities(limit=limit)
    now = datetime.now(pytz.utc)

    groups = [
        ActivityGroup(
            label=label,
            items=[
                ActivityItem(activity=entry, text=describe_activity(entry), time_ago=time_ago(entry.created_at, now))
                for entry in items
            ],
        )
        for label, items in group_activities(entries, now, project_name=project_name)
    ]

    logger.info(f"[ACTIVITY] {len(entries)} entries in {len(groups)} groups (state={state.value})")
    return ActivityFeedResponse(state=state.value, groups=groups)
