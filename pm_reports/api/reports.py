import logging

from fastapi import APIRouter, Depends, Response
from fastapi.responses import StreamingResponse

from pm_reports.api.dependencies import get_date_range, get_snapshot_loader, local_today, parse_report_type
from pm_reports.schemas.reports import ReportResponse
from pm_reports.services.csv_exporter import export_csv, report_filename
from pm_reports.services.report_aggregator import (
    ReportType,
    aggregate,
    export_rows,
    recent_time_entries,
    report_overview,
    workload_summary,
)
from pm_reports.services.snapshot_loader import DateRange, SnapshotLoader

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["Reports & Exports"])


# ------------------------------------------------------------------
# 1. REPORT VIEW (Used by the Reports page)
# ------------------------------------------------------------------
@router.get("/{report_type}", response_model=ReportResponse)
async def get_report(
    report_type: ReportType = Depends(parse_report_type),
    date_range: DateRange = Depends(get_date_range),
    loader: SnapshotLoader = Depends(get_snapshot_loader),
):
    """
    Derived rows for one report type plus the summary cards.
    `resources` tells the caller which collections failed to load, so an
    empty table can be shown as "load failed" rather than "no data".
    """
    snapshot = await loader.load(date_range)
    result = aggregate(report_type, snapshot)

    logger.info(f"[REPORTS] Built {report_type.value} report for {date_range.start}..{date_range.end} (partial={snapshot.is_partial})")

    response = ReportResponse(
        report_type=report_type.value,
        start_date=date_range.start,
        end_date=date_range.end,
        resources=snapshot.state_names(),
        partial=snapshot.is_partial,
        overview=report_overview(snapshot),
    )
    if report_type is ReportType.TASK:
        response.distribution = result
    else:
        response.rows = result

    if report_type is ReportType.TIME:
        response.recent_entries = recent_time_entries(snapshot)
    elif report_type is ReportType.WORKLOAD:
        response.workload_summary = workload_summary(result)
    return response


# ------------------------------------------------------------------
# 2. CSV EXPORT
# ------------------------------------------------------------------
@router.get("/{report_type}/export")
async def export_report(
    report_type: ReportType = Depends(parse_report_type),
    date_range: DateRange = Depends(get_date_range),
    loader: SnapshotLoader = Depends(get_snapshot_loader),
):
    snapshot = await loader.load(date_range)
    content = export_csv(export_rows(report_type, snapshot))

    if content is None:
        # Nothing to download
        return Response(status_code=204)

    filename = report_filename(report_type, local_today())
    response = StreamingResponse(iter([content]), media_type="text/csv")
    response.headers["Content-Disposition"] = f"attachment; filename={filename}"
    if snapshot.is_partial:
        response.headers["X-Partial-Snapshot"] = "true"
    return response
