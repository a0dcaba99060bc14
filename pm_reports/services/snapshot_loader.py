"""
Loads the Domain Snapshot (projects, tasks, teams, time logs) from the
upstream project-management API.

The four collections are requested concurrently and applied together once
all of them have resolved. A failing request never aborts the snapshot:
the resource comes back empty and is marked FAILED so callers can tell a
load failure apart from a genuinely empty collection.
"""
import asyncio
import calendar
import enum
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Tuple, Type

import httpx
from pydantic import BaseModel, ValidationError

from pm_reports.core import config
from pm_reports.schemas.entities import ActivityLog, Project, Task, Team, TimeLog

logger = logging.getLogger(__name__)


class ResourceState(str, enum.Enum):
    LOADED = "loaded"
    EMPTY = "empty"
    FAILED = "failed"


class UpstreamError(Exception):
    """An upstream response that could not be used (HTTP error, bad envelope)."""


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar-day range."""

    start: date
    end: date

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError("start_date must be on or before end_date")

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    @classmethod
    def last_7_days(cls, today: date) -> "DateRange":
        return cls(today - timedelta(days=7), today)

    @classmethod
    def last_30_days(cls, today: date) -> "DateRange":
        return cls(today - timedelta(days=30), today)

    @classmethod
    def this_month(cls, today: date) -> "DateRange":
        last_day = calendar.monthrange(today.year, today.month)[1]
        return cls(today.replace(day=1), today.replace(day=last_day))


@dataclass(frozen=True)
class Snapshot:
    date_range: DateRange
    projects: Tuple[Project, ...] = ()
    tasks: Tuple[Task, ...] = ()
    teams: Tuple[Team, ...] = ()
    time_logs: Tuple[TimeLog, ...] = ()
    states: Dict[str, ResourceState] = field(default_factory=dict)

    @property
    def is_partial(self) -> bool:
        return ResourceState.FAILED in self.states.values()

    def state_names(self) -> Dict[str, str]:
        return {name: state.value for name, state in self.states.items()}


def _unwrap_envelope(response: httpx.Response) -> List[Any]:
    """Return the `data` list of a {success, data} envelope or raise UpstreamError."""
    if response.status_code >= 400:
        raise UpstreamError(f"HTTP {response.status_code}: {response.text[:200]}")

    try:
        payload = response.json()
    except ValueError as exc:
        raise UpstreamError(f"Invalid JSON body: {exc}") from exc

    if not isinstance(payload, dict) or not payload.get("success"):
        message = payload.get("message") if isinstance(payload, dict) else None
        raise UpstreamError(message or "Envelope reported failure")

    data = payload.get("data")
    if not isinstance(data, list):
        raise UpstreamError("Envelope data is not a list")
    return data


def _parse_records(model: Type[BaseModel], raw_items: List[Any], resource: str) -> List[BaseModel]:
    items = []
    for raw in raw_items:
        try:
            items.append(model.model_validate(raw))
        except ValidationError as exc:
            logger.warning(f"[SNAPSHOT] Skipping invalid {resource} record: {exc.error_count()} error(s), first: {exc.errors()[0]['msg']}")
    return items


class SnapshotLoader:
    """
    Fetches snapshot collections from the upstream REST API.

    Args:
        base_url: Upstream API root. Defaults to UPSTREAM_API_URL.
        token: Optional bearer token. Defaults to UPSTREAM_API_TOKEN.
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport (tests pass httpx.MockTransport).
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or config.UPSTREAM_API_URL).rstrip("/")
        self._token = token if token is not None else config.UPSTREAM_API_TOKEN
        self.timeout = timeout or config.UPSTREAM_TIMEOUT_SECONDS
        self._transport = transport

    def _get_headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._get_headers(),
            timeout=self.timeout,
            transport=self._transport,
        )

    async def _fetch(
        self,
        client: httpx.AsyncClient,
        resource: str,
        path: str,
        model: Type[BaseModel],
        params: Optional[Dict[str, Any]] = None,
    ) -> Tuple[List[BaseModel], ResourceState]:
        try:
            response = await client.get(path, params=params)
            raw_items = _unwrap_envelope(response)
        except (httpx.HTTPError, UpstreamError) as exc:
            logger.warning(f"[SNAPSHOT] Failed to load {resource}: {exc}")
            return [], ResourceState.FAILED

        items = _parse_records(model, raw_items, resource)
        return items, ResourceState.LOADED if items else ResourceState.EMPTY

    async def load(self, date_range: DateRange) -> Snapshot:
        params = {
            "start_date": date_range.start.isoformat(),
            "end_date": date_range.end.isoformat(),
        }

        async with self._client() as client:
            results = await asyncio.gather(
                self._fetch(client, "projects", "/projects", Project),
                self._fetch(client, "tasks", "/tasks", Task),
                self._fetch(client, "teams", "/teams", Team),
                self._fetch(client, "time_logs", "/time-logs", TimeLog, params=params),
            )

        (projects, projects_state), (tasks, tasks_state), (teams, teams_state), (logs, logs_state) = results

        # The API filters by range already; entries outside it are dropped anyway
        in_range = [log for log in logs if date_range.contains(log.date)]
        if logs_state is ResourceState.LOADED and not in_range:
            logs_state = ResourceState.EMPTY

        snapshot = Snapshot(
            date_range=date_range,
            projects=tuple(projects),
            tasks=tuple(tasks),
            teams=tuple(teams),
            time_logs=tuple(in_range),
            states={
                "projects": projects_state,
                "tasks": tasks_state,
                "teams": teams_state,
                "time_logs": logs_state,
            },
        )
        logger.info(
            f"[SNAPSHOT] Loaded {len(projects)} projects, {len(tasks)} tasks, "
            f"{len(teams)} teams, {len(in_range)} time logs for {date_range.start}..{date_range.end}"
        )
        if snapshot.is_partial:
            logger.warning(f"[SNAPSHOT] Partial snapshot: {snapshot.state_names()}")
        return snapshot

    async def load_activities(
        self,
        limit: Optional[int] = None,
        project_id: Optional[str] = None,
    ) -> Tuple[List[ActivityLog], ResourceState]:
        params = {}
        if limit:
            params["limit"] = limit
        if project_id:
            params["project_id"] = project_id

        async with self._client() as client:
            return await self._fetch(client, "activities", "/activities", ActivityLog, params=params)
