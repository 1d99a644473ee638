"""Stateful search session binding criteria, pages and fetches together."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, List, Optional

from word_finder.core import (
    PAGE_SIZE,
    FilterCriteria,
    RawCriteria,
    SessionReentryError,
    normalize,
)

from ..data.providers import WordProvider
from ...utils.observability import get_logger
from ...utils.telemetry import StructuredTelemetry
from .fetch_controller import FetchController, FetchOutcome, FetchTicket
from .page_cache import Page, PageCache
from .pagination import PaginationController


class FetchStatus(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of a session, safe to hand to the presentation layer."""

    criteria: FilterCriteria
    page_index: int
    page: Optional[Page]
    page_count: int
    status: FetchStatus
    error: Optional[str]
    has_next: bool
    has_previous: bool
    generation: int

    @property
    def is_empty_page(self) -> bool:
        return not self.page


SessionListener = Callable[[SessionSnapshot], None]


class SearchSession:
    """Owns the criteria, cached pages and fetch state of one user's search.

    All mutations go through :meth:`submit`, :meth:`reset`, :meth:`next`,
    :meth:`previous` and :meth:`retry`, and run under the session lock.
    Every submit and reset bumps ``generation``; a fetch completion is
    applied only when it carries the current generation and is the pending
    request, so a late answer for old criteria can never overwrite newer
    state.

    Operations return the resulting :class:`FetchStatus` and never raise on
    provider failure. With ``wait=False`` they return as soon as the fetch is
    issued and the completion is applied from the fetch worker.
    """

    def __init__(
        self,
        provider: Optional[WordProvider] = None,
        *,
        fetch_controller: Optional[FetchController] = None,
        page_size: int = PAGE_SIZE,
        telemetry: Optional[StructuredTelemetry] = None,
    ) -> None:
        if fetch_controller is None:
            if provider is None:
                raise ValueError("SearchSession needs a provider or a fetch controller")
            fetch_controller = FetchController(
                provider, page_size=page_size, telemetry=telemetry
            )
        self._fetcher = fetch_controller
        self.telemetry = fetch_controller.telemetry

        self._lock = threading.RLock()
        self._mutating = False
        self._listeners: List[SessionListener] = []

        self._criteria = FilterCriteria()
        self._pages = PageCache(fetch_controller.page_size)
        self._pagination = PaginationController(self._pages)
        self._status = FetchStatus.IDLE
        self._last_error: Optional[str] = None
        self._generation = 0
        self._active = False
        self._pending: Optional[FetchTicket] = None
        self._return_index = 0

        self._logger = get_logger(__name__).bind(component="search_session")

    # ------------------------------------------------------------------
    # Read-only surface
    # ------------------------------------------------------------------
    @property
    def criteria(self) -> FilterCriteria:
        with self._lock:
            return self._criteria

    @property
    def current_page_index(self) -> int:
        with self._lock:
            return self._pagination.current_index

    @property
    def fetch_status(self) -> FetchStatus:
        with self._lock:
            return self._status

    @property
    def last_error(self) -> Optional[str]:
        with self._lock:
            return self._last_error

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    @property
    def is_active(self) -> bool:
        """Whether a submitted search is in effect (false after reset)."""

        with self._lock:
            return self._active

    @property
    def has_next(self) -> bool:
        with self._lock:
            return self._status is not FetchStatus.FETCHING and self._pagination.can_next()

    @property
    def has_previous(self) -> bool:
        with self._lock:
            return self._status is not FetchStatus.FETCHING and self._pagination.can_previous()

    @property
    def fetch_controller(self) -> FetchController:
        return self._fetcher

    @property
    def pending_ticket(self) -> Optional[FetchTicket]:
        with self._lock:
            return self._pending

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return self._snapshot_locked()

    def _snapshot_locked(self) -> SessionSnapshot:
        fetching = self._status is FetchStatus.FETCHING
        return SessionSnapshot(
            criteria=self._criteria,
            page_index=self._pagination.current_index,
            page=self._pagination.current_page(),
            page_count=len(self._pages),
            status=self._status,
            error=self._last_error,
            has_next=not fetching and self._pagination.can_next(),
            has_previous=not fetching and self._pagination.can_previous(),
            generation=self._generation,
        )

    def differs_from_applied(self, raw: RawCriteria) -> bool:
        """Return whether ``raw`` normalises to something other than the applied criteria."""

        return normalize(raw) != self.criteria

    def add_listener(self, listener: SessionListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: SessionListener) -> None:
        with self._lock:
            self._listeners = [entry for entry in self._listeners if entry is not listener]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @contextmanager
    def _mutation(self, operation: str) -> Iterator[None]:
        with self._lock:
            if self._mutating:
                raise SessionReentryError(
                    f"{operation}() called while the session is being updated"
                )
            self._mutating = True
            try:
                yield
                # Listeners run while the re-entry guard is still set.
                snapshot = self._snapshot_locked()
                for listener in tuple(self._listeners):
                    self._notify(listener, snapshot, operation)
            finally:
                self._mutating = False

    def _notify(self, listener: SessionListener, snapshot: SessionSnapshot, operation: str) -> None:
        try:
            listener(snapshot)
        except SessionReentryError:
            raise
        except Exception:
            self._logger.exception(
                "Session listener failed",
                context={"operation": operation, "status": snapshot.status.value},
            )

    def _start_fetch_locked(self, page_index: int, return_index: int) -> FetchTicket:
        self._status = FetchStatus.FETCHING
        self._last_error = None
        self._return_index = return_index
        ticket = self._fetcher.request_page(
            self._criteria,
            page_index,
            generation=self._generation,
            on_complete=self._apply_outcome,
        )
        self._pending = ticket
        return ticket

    def _apply_outcome(self, outcome: FetchOutcome) -> None:
        ticket = outcome.ticket
        with self._mutation("fetch completion"):
            if ticket.generation != self._generation or ticket is not self._pending:
                self._logger.debug(
                    "Ignoring completion for a stale request",
                    context={
                        "ticket_generation": ticket.generation,
                        "generation": self._generation,
                        "serial": ticket.serial,
                    },
                )
                return

            self._pending = None
            if outcome.succeeded:
                if ticket.page_index == len(self._pages):
                    self._pages.append(outcome.words or ())
                self._status = FetchStatus.SUCCEEDED
                self._last_error = None
            else:
                self._pagination.rewind_to(min(self._return_index, len(self._pages)))
                self._status = FetchStatus.FAILED
                self._last_error = str(outcome.error)
            status = self._status

        self._logger.info(
            "Page request applied",
            context={
                "page_index": ticket.page_index,
                "status": status.value,
                "returned": len(outcome.words or ()),
            },
        )

    def _await(self, ticket: Optional[FetchTicket], wait: bool) -> FetchStatus:
        # Must be called without holding the session lock: the completion
        # is applied on the worker thread and needs it.
        if wait and ticket is not None and ticket.future is not None:
            ticket.future.result()
        return self.fetch_status

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def submit(self, raw: RawCriteria, *, wait: bool = True) -> FetchStatus:
        """Apply new criteria and fetch their first page.

        Submitting the same criteria again re-fetches rather than reusing
        the cached pages.
        """

        criteria = normalize(raw)
        with self._mutation("submit"):
            self._generation += 1
            self._fetcher.cancel()
            self._criteria = criteria
            self._pages.clear()
            self._pagination.reset_to_first_page()
            self._active = True
            ticket = self._start_fetch_locked(0, return_index=0)
            generation = self._generation

        self._logger.info(
            "Search submitted",
            context={"generation": generation, "criteria": criteria.to_form()},
        )
        return self._await(ticket, wait)

    def reset(self) -> FetchStatus:
        """Drop criteria and pages without issuing a fetch."""

        with self._mutation("reset"):
            self._generation += 1
            self._fetcher.cancel()
            self._pending = None
            self._criteria = FilterCriteria()
            self._pages.clear()
            self._pagination.reset_to_first_page()
            self._status = FetchStatus.IDLE
            self._last_error = None
            self._active = False
            generation = self._generation

        self._logger.info("Search reset", context={"generation": generation})
        return FetchStatus.IDLE

    def next(self, *, wait: bool = True) -> FetchStatus:
        """Move to the following page, fetching it when not cached.

        Not allowed while a fetch is running or when the current page is
        short (results exhausted); the status is returned unchanged.
        """

        ticket: Optional[FetchTicket] = None
        with self._mutation("next"):
            if self._status is FetchStatus.FETCHING or not self._pagination.can_next():
                self._logger.debug(
                    "Next page not available",
                    context={
                        "page_index": self._pagination.current_index,
                        "status": self._status.value,
                    },
                )
                return self._status
            previous_index = self._pagination.current_index
            target = self._pagination.advance()
            if self._pagination.needs_fetch():
                ticket = self._start_fetch_locked(target, return_index=previous_index)

        return self._await(ticket, wait)

    def previous(self) -> FetchStatus:
        """Move back one page; always served from the cache."""

        with self._mutation("previous"):
            if self._status is FetchStatus.FETCHING or not self._pagination.can_previous():
                self._logger.debug(
                    "Previous page not available",
                    context={
                        "page_index": self._pagination.current_index,
                        "status": self._status.value,
                    },
                )
                return self._status
            self._pagination.retreat()
            return self._status

    def retry(self, *, wait: bool = True) -> FetchStatus:
        """Re-issue the fetch that last failed."""

        with self._mutation("retry"):
            if self._status is not FetchStatus.FAILED or not self._active:
                return self._status
            index = self._pagination.current_index
            if self._pagination.needs_fetch():
                target = index
            else:
                # The failed page was the one after the current page.
                target = index + 1
                self._pagination.advance()
            ticket = self._start_fetch_locked(target, return_index=index)

        return self._await(ticket, wait)

    def current_page(self, *, wait: bool = True) -> Page:
        """Return the words on the current page, fetching it if missing.

        An empty tuple means either no results or no active search.
        """

        ticket: Optional[FetchTicket] = None
        with self._lock:
            page = self._pagination.current_page()
            if page is not None:
                return page
            if not self._active:
                return ()
            if self._status is FetchStatus.FETCHING:
                if wait and self._mutating:
                    # Waiting here would hold the lock the completion needs.
                    raise SessionReentryError(
                        "current_page() cannot wait for a fetch while the session is being updated"
                    )
                ticket = self._pending
        if ticket is None:
            with self._mutation("current_page"):
                if self._pagination.needs_fetch() and self._status is not FetchStatus.FETCHING:
                    index = self._pagination.current_index
                    ticket = self._start_fetch_locked(index, return_index=index)
                else:
                    ticket = self._pending

        self._await(ticket, wait)
        with self._lock:
            return self._pagination.current_page() or ()

    def close(self) -> None:
        with self._lock:
            self._pending = None
        self._fetcher.shutdown()


__all__ = ["FetchStatus", "SearchSession", "SessionSnapshot", "SessionListener"]
