"""Single-flight page requests against a word-data provider."""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Optional, Tuple

from word_finder.core import PAGE_SIZE, FilterCriteria, ProviderError

from ..data.providers import WordProvider
from ...utils.observability import (
    add_span_attributes,
    create_counter,
    create_histogram,
    get_logger,
    record_exception,
    start_span,
)
from ...utils.telemetry import StructuredTelemetry

_METRIC_REQUESTS = create_counter(
    "word_fetch_requests_total",
    "Page requests issued to the word provider.",
)
_METRIC_FAILURES = create_counter(
    "word_fetch_failures_total",
    "Page requests that ended in a provider error.",
)
_METRIC_DISCARDED = create_counter(
    "word_fetch_discarded_total",
    "Page responses dropped because a newer request superseded them.",
)
_METRIC_DURATION = create_histogram(
    "word_fetch_seconds",
    "Latency of word provider page requests.",
)


@dataclass
class FetchTicket:
    """Handle for one page request."""

    serial: int
    generation: int
    criteria: FilterCriteria
    page_index: int
    offset: int
    limit: int
    future: Optional["Future[FetchOutcome]"] = field(default=None, repr=False)
    discarded: bool = False


@dataclass(frozen=True)
class FetchOutcome:
    ticket: FetchTicket
    words: Optional[Tuple[str, ...]] = None
    error: Optional[ProviderError] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


CompletionCallback = Callable[[FetchOutcome], None]


class FetchController:
    """Owns the asynchronous request lifecycle for one search session.

    At most one request is live at a time: issuing a new one marks the
    previous ticket discarded. Cancellation is cooperative, so a discarded
    request still runs to completion on its worker but its outcome is never
    handed to ``on_complete``.
    """

    def __init__(
        self,
        provider: WordProvider,
        *,
        page_size: int = PAGE_SIZE,
        executor: Optional[ThreadPoolExecutor] = None,
        max_workers: int = 2,
        telemetry: Optional[StructuredTelemetry] = None,
    ) -> None:
        self.provider = provider
        self.page_size = int(page_size)
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max(1, int(max_workers)),
            thread_name_prefix="word-fetch",
        )
        self.telemetry = telemetry or StructuredTelemetry()
        self._lock = threading.RLock()
        self._serial = 0
        self._active: Optional[FetchTicket] = None
        self._logger = get_logger(__name__).bind(
            component="fetch_controller",
            provider=type(provider).__name__,
        )

    @property
    def executor(self) -> ThreadPoolExecutor:
        return self._executor

    @property
    def in_flight(self) -> bool:
        with self._lock:
            return self._active is not None

    @property
    def active_ticket(self) -> Optional[FetchTicket]:
        with self._lock:
            return self._active

    def request_page(
        self,
        criteria: FilterCriteria,
        page_index: int,
        *,
        generation: int = 0,
        on_complete: Optional[CompletionCallback] = None,
    ) -> FetchTicket:
        """Start fetching ``page_index`` for ``criteria``, superseding any live request."""

        if page_index < 0:
            raise ValueError("page_index must be non-negative")

        with self._lock:
            self._cancel_locked("superseded")
            self._serial += 1
            ticket = FetchTicket(
                serial=self._serial,
                generation=generation,
                criteria=criteria,
                page_index=page_index,
                offset=page_index * self.page_size,
                limit=self.page_size,
            )
            self._active = ticket
            ticket.future = self._executor.submit(self._run, ticket, on_complete)

        _METRIC_REQUESTS.inc()
        self.telemetry.increment("fetch.requested")
        self._logger.debug(
            "Page request issued",
            context={
                "serial": ticket.serial,
                "generation": generation,
                "page_index": page_index,
                "offset": ticket.offset,
            },
        )
        return ticket

    def cancel(self) -> Optional[FetchTicket]:
        """Mark the live request discardable; returns it, if there was one."""

        with self._lock:
            return self._cancel_locked("cancelled")

    def _cancel_locked(self, reason: str) -> Optional[FetchTicket]:
        ticket = self._active
        if ticket is None:
            return None
        ticket.discarded = True
        self._active = None
        self._logger.debug(
            "Page request marked discardable",
            context={"serial": ticket.serial, "reason": reason},
        )
        return ticket

    def _search(self, ticket: FetchTicket) -> Tuple[str, ...]:
        with start_span(
            "word_finder.provider.search",
            {"page_index": ticket.page_index, "offset": ticket.offset, "limit": ticket.limit},
        ) as span:
            try:
                with _METRIC_DURATION.time(), self.telemetry.timer(
                    "provider.search", {"page_index": ticket.page_index}
                ) as timing:
                    words = tuple(
                        self.provider.search(
                            ticket.criteria, offset=ticket.offset, limit=ticket.limit
                        )
                    )
                    timing["returned"] = len(words)
            except ProviderError as exc:
                record_exception(span, exc)
                raise
            except Exception as exc:
                record_exception(span, exc)
                self._logger.exception(
                    "Provider raised an unexpected error",
                    context={"serial": ticket.serial},
                )
                raise ProviderError(f"provider failed: {exc}") from exc

            add_span_attributes(span, {"returned": len(words)})

        if len(words) > ticket.limit:
            raise ProviderError(
                f"provider returned {len(words)} words for a limit of {ticket.limit}"
            )
        return words

    def _run(
        self,
        ticket: FetchTicket,
        on_complete: Optional[CompletionCallback],
    ) -> FetchOutcome:
        try:
            outcome = FetchOutcome(ticket, words=self._search(ticket))
        except ProviderError as exc:
            outcome = FetchOutcome(ticket, error=exc)

        with self._lock:
            if ticket.discarded or self._active is not ticket:
                stale = True
            else:
                stale = False
                self._active = None

        if stale:
            _METRIC_DISCARDED.inc()
            self.telemetry.increment("fetch.discarded")
            self._logger.info(
                "Dropping result of a superseded page request",
                context={"serial": ticket.serial, "page_index": ticket.page_index},
            )
            return outcome

        if not outcome.succeeded:
            _METRIC_FAILURES.inc()
            self.telemetry.increment("fetch.failed")
            self._logger.warning(
                "Page request failed",
                context={
                    "serial": ticket.serial,
                    "page_index": ticket.page_index,
                    "error": str(outcome.error),
                },
            )

        if on_complete is not None:
            on_complete(outcome)
        return outcome

    def shutdown(self, *, wait: bool = False) -> None:
        self.cancel()
        if self._owns_executor:
            self._executor.shutdown(wait=wait)


__all__ = ["FetchController", "FetchOutcome", "FetchTicket", "CompletionCallback"]
