"""
View state for the reports page.

Owned by the presentation layer (kept in st.session_state as a plain
dict), never by the aggregator. Each load is tagged with a generation
token; a response carrying an outdated token is dropped instead of
overwriting data from a newer request.
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Optional, Tuple

from pm_reports.services.report_aggregator import ReportType
from pm_reports.services.snapshot_loader import DateRange

logger = logging.getLogger(__name__)


@dataclass
class ReportViewState:
    date_range: DateRange
    report_type: ReportType = ReportType.PROJECT
    generation: int = 0
    result: Optional[Any] = None
    loaded_key: Optional[Tuple[str, date, date]] = None
    pending: Dict[int, Tuple[str, date, date]] = field(default_factory=dict)

    @classmethod
    def default(cls, today: date) -> "ReportViewState":
        return cls(date_range=DateRange.this_month(today))

    def _key(self) -> Tuple[str, date, date]:
        return (self.report_type.value, self.date_range.start, self.date_range.end)

    def select_report(self, report_type) -> None:
        self.report_type = ReportType(report_type)

    def set_date_range(self, start: date, end: date) -> None:
        self.date_range = DateRange(start, end)

    def needs_reload(self) -> bool:
        return self.result is None or self.loaded_key != self._key()

    def begin_load(self) -> int:
        """Start a load for the current selection and return its token."""
        self.generation += 1
        # Only the newest request can ever be applied
        self.pending = {self.generation: self._key()}
        return self.generation

    def apply(self, token: int, result: Any) -> bool:
        """Store `result` if `token` belongs to the latest load. Returns False for stale responses."""
        if token != self.generation or token not in self.pending:
            logger.info(f"[REPORTS] Discarding stale response (token {token}, current {self.generation})")
            return False

        self.result = result
        self.loaded_key = self.pending.pop(token)
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "report_type": self.report_type.value,
            "start_date": self.date_range.start.isoformat(),
            "end_date": self.date_range.end.isoformat(),
            "generation": self.generation,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReportViewState":
        return cls(
            date_range=DateRange(
                date.fromisoformat(data["start_date"]),
                date.fromisoformat(data["end_date"]),
            ),
            report_type=ReportType(data.get("report_type", ReportType.PROJECT.value)),
            generation=int(data.get("generation", 0)),
        )
