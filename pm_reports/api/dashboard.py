# pm_reports/api/dashboard.py
from fastapi import APIRouter, Depends

from pm_reports.api.dependencies import get_date_range, get_snapshot_loader, local_today
from pm_reports.schemas.reports import DashboardResponse
from pm_reports.services.report_aggregator import dashboard_stats
from pm_reports.services.snapshot_loader import DateRange, SnapshotLoader

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/stats", response_model=DashboardResponse)
async def get_dashboard_stats(
    date_range: DateRange = Depends(get_date_range),
    loader: SnapshotLoader = Depends(get_snapshot_loader),
):
    """
    Returns the high-level numbers for the top of the dashboard,
    the five most recent projects and the open High/Critical tasks.
    """
    snapshot = await loader.load(date_range)
    return DashboardResponse(
        resources=snapshot.state_names(),
        partial=snapshot.is_partial,
        stats=dashboard_stats(snapshot, local_today()),
    )
