"""
Report Data Store

Tracks the latest fetched entries per report type. Each fetch runs under a
ticket; only the newest ticket for a report type may apply its outcome, so a
slow response that was superseded by a newer fetch is discarded. A failed
fetch records its error and keeps the previously stored entries.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Optional

from .errors import DataUnavailable
from .filters import compile_query
from .models import Entry, FilterSpec, QueryPlan, ReportType
from .queries import fetch_entries

logger = logging.getLogger(__name__)

Executor = Callable[[QueryPlan], list[Entry]]


def _utc_now_iso() -> str:
    return datetime.now(UTC).isoformat()


@dataclass(frozen=True)
class FetchTicket:
    report_type: ReportType
    number: int


@dataclass(frozen=True)
class ReportState:
    data: tuple[Entry, ...] = ()
    loading: bool = False
    error: Optional[str] = None
    last_fetched: Optional[str] = None
    # filters of the newest request; data_filters produced the stored data
    filters: FilterSpec = field(default_factory=FilterSpec)
    data_filters: FilterSpec = field(default_factory=FilterSpec)


@dataclass(frozen=True)
class FetchResult:
    entries: tuple[Entry, ...]
    applied: bool


class ReportDataStore:
    """Per-report-type fetch state with stale-response discard."""

    def __init__(self, executor: Executor = fetch_entries):
        self._executor = executor
        self._lock = threading.Lock()
        self._counter = 0
        self._latest: dict[ReportType, int] = {}
        self._states: dict[ReportType, ReportState] = {rt: ReportState() for rt in ReportType}

    def begin(self, report_type: ReportType, filters: Optional[FilterSpec] = None) -> FetchTicket:
        """Start a fetch, superseding any in-flight fetch for the same report type."""
        with self._lock:
            self._counter += 1
            ticket = FetchTicket(report_type, self._counter)
            self._latest[report_type] = ticket.number
            self._states[report_type] = replace(
                self._states[report_type],
                loading=True,
                error=None,
                filters=filters or FilterSpec(),
            )
        return ticket

    def is_current(self, ticket: FetchTicket) -> bool:
        with self._lock:
            return self._latest.get(ticket.report_type) == ticket.number

    def complete(self, ticket: FetchTicket, entries: list[Entry]) -> bool:
        """Store fetched entries. Returns False if the ticket was superseded."""
        with self._lock:
            if self._latest.get(ticket.report_type) != ticket.number:
                logger.info(f"Discarding stale {ticket.report_type.value} response (ticket {ticket.number})")
                return False
            self._states[ticket.report_type] = replace(
                self._states[ticket.report_type],
                data=tuple(entries),
                loading=False,
                error=None,
                last_fetched=_utc_now_iso(),
                data_filters=self._states[ticket.report_type].filters,
            )
        return True

    def fail(self, ticket: FetchTicket, message: str) -> bool:
        """Record a fetch error, keeping previous data. Returns False if superseded."""
        with self._lock:
            if self._latest.get(ticket.report_type) != ticket.number:
                logger.info(f"Discarding stale {ticket.report_type.value} error (ticket {ticket.number})")
                return False
            self._states[ticket.report_type] = replace(
                self._states[ticket.report_type],
                loading=False,
                error=message,
            )
        return True

    def state(self, report_type: ReportType) -> ReportState:
        with self._lock:
            return self._states[report_type]

    def fetch(self, report_type: ReportType, filters: Optional[FilterSpec] = None) -> FetchResult:
        """
        Compile, execute and store a fetch for one report type.

        Raises:
            InvalidFilterRange: before any ticket is issued
            DataUnavailable: after recording the error; stored data is kept
        """
        plan = compile_query(filters, report_type)
        ticket = self.begin(report_type, filters)
        try:
            entries = self._executor(plan)
        except DataUnavailable as exc:
            self.fail(ticket, exc.message)
            raise
        applied = self.complete(ticket, entries)
        return FetchResult(entries=tuple(entries), applied=applied)
