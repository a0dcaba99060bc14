from datetime import date, datetime
from typing import Optional

from fastapi import HTTPException

from pm_reports.core import config
from pm_reports.services.report_aggregator import ReportType
from pm_reports.services.snapshot_loader import DateRange, SnapshotLoader


def get_snapshot_loader() -> SnapshotLoader:
    return SnapshotLoader()


def local_today() -> date:
    return datetime.now(config.REPORTS_TIMEZONE).date()


def _parse_date(value: Optional[str], field: str) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise HTTPException(400, f"Invalid {field} format. Use YYYY-MM-DD")


def get_date_range(start_date: Optional[str] = None, end_date: Optional[str] = None) -> DateRange:
    """Query-string date range; missing bounds fall back to the current month."""
    default = DateRange.this_month(local_today())
    start = _parse_date(start_date, "start_date") or default.start
    end = _parse_date(end_date, "end_date") or default.end

    try:
        return DateRange(start, end)
    except ValueError as exc:
        raise HTTPException(400, str(exc))


def parse_report_type(report_type: str) -> ReportType:
    try:
        return ReportType(report_type)
    except ValueError:
        choices = ", ".join(t.value for t in ReportType)
        raise HTTPException(400, f"Unknown report type '{report_type}'. Use one of: {choices}")
