"""Tests for the search session lifecycle, pagination and race handling."""

from __future__ import annotations

import threading
from typing import List

import pytest

from word_finder.app.services.search_session import FetchStatus, SessionSnapshot
from word_finder.core import FilterCriteria, SessionReentryError, normalize

from conftest import GatedProvider, RecordingProvider


def test_submit_fetches_first_page(session_factory, recording_provider) -> None:
    session = session_factory(recording_provider)

    status = session.submit({"letters": "w"})

    assert status is FetchStatus.SUCCEEDED
    assert session.current_page_index == 0
    assert session.current_page() == tuple(recording_provider.words[:100])
    assert session.criteria == normalize({"letters": "w"})
    assert recording_provider.calls == [(normalize({"letters": "w"}), 0, 100)]


def test_empty_result_is_a_success(session_factory, demo_provider) -> None:
    session = session_factory(demo_provider)

    status = session.submit({"letters": "z", "absent_letters": "z"})

    assert status is FetchStatus.SUCCEEDED
    assert session.current_page() == ()
    assert session.snapshot().is_empty_page
    assert not session.has_next


def test_previous_on_first_page_is_a_no_op(session_factory, recording_provider) -> None:
    session = session_factory(recording_provider)
    session.submit({})

    assert not session.has_previous
    assert session.previous() is FetchStatus.SUCCEEDED
    assert session.current_page_index == 0


def test_full_page_allows_exactly_one_fetch_for_next(session_factory, recording_provider) -> None:
    session = session_factory(recording_provider)
    session.submit({})
    recording_provider.calls.clear()

    assert session.has_next
    assert session.next() is FetchStatus.SUCCEEDED

    assert recording_provider.calls == [(FilterCriteria(), 100, 100)]
    assert session.current_page_index == 1
    assert session.current_page() == tuple(recording_provider.words[100:200])


def test_short_page_disables_next(session_factory) -> None:
    provider = RecordingProvider(total=37)
    session = session_factory(provider)
    session.submit({})

    assert len(session.current_page()) == 37
    assert not session.has_next
    assert session.next() is FetchStatus.SUCCEEDED
    assert session.current_page_index == 0
    assert len(provider.calls) == 1


def test_previous_is_served_from_cache(session_factory, recording_provider) -> None:
    session = session_factory(recording_provider)
    session.submit({})
    session.next()
    session.next()
    calls = len(recording_provider.calls)

    assert session.current_page_index == 2
    assert len(session.current_page()) == 50
    assert not session.has_next

    session.previous()
    session.previous()
    assert session.current_page_index == 0
    assert session.next() is FetchStatus.SUCCEEDED
    assert session.current_page_index == 1
    assert len(recording_provider.calls) == calls


def test_redundant_submit_refetches(session_factory, recording_provider) -> None:
    session = session_factory(recording_provider)
    session.submit({"size": "8"})
    first_page = session.current_page()
    session.submit({"size": "8"})

    assert session.current_page() == first_page
    assert len(recording_provider.calls) == 2
    assert session.generation == 2


def test_reset_clears_everything_without_fetching(session_factory, recording_provider) -> None:
    session = session_factory(recording_provider)
    session.submit({"letters": "w"})
    session.next()
    calls = len(recording_provider.calls)

    assert session.reset() is FetchStatus.IDLE

    snapshot = session.snapshot()
    assert snapshot.criteria == FilterCriteria()
    assert snapshot.page_count == 0
    assert snapshot.page_index == 0
    assert snapshot.status is FetchStatus.IDLE
    assert session.current_page() == ()
    assert not session.is_active
    assert len(recording_provider.calls) == calls


def test_reset_on_fresh_session(session_factory, recording_provider) -> None:
    session = session_factory(recording_provider)

    session.reset()

    assert session.fetch_status is FetchStatus.IDLE
    assert session.current_page_index == 0
    assert recording_provider.calls == []


def test_failed_first_page_keeps_session_usable(session_factory, recording_provider) -> None:
    recording_provider.fail_offsets.add(0)
    session = session_factory(recording_provider)

    status = session.submit({})

    assert status is FetchStatus.FAILED
    assert "offset 0" in session.last_error
    assert session.snapshot().page_count == 0
    assert session.current_page_index == 0

    recording_provider.fail_offsets.clear()
    assert session.retry() is FetchStatus.SUCCEEDED
    assert len(session.current_page()) == 100
    assert session.last_error is None


def test_failed_next_restores_index_and_keeps_pages(session_factory, recording_provider) -> None:
    session = session_factory(recording_provider)
    session.submit({})
    recording_provider.fail_offsets.add(100)

    assert session.next() is FetchStatus.FAILED

    assert session.current_page_index == 0
    assert session.snapshot().page_count == 1
    assert session.current_page() == tuple(recording_provider.words[:100])

    recording_provider.fail_offsets.clear()
    assert session.next() is FetchStatus.SUCCEEDED
    assert session.current_page_index == 1


def test_retry_after_failed_next(session_factory, recording_provider) -> None:
    session = session_factory(recording_provider)
    session.submit({})
    recording_provider.fail_offsets.add(100)
    session.next()
    recording_provider.fail_offsets.clear()

    assert session.retry() is FetchStatus.SUCCEEDED
    assert session.current_page_index == 1
    assert recording_provider.calls[-1][1] == 100


def test_current_page_refetches_missing_page(session_factory, recording_provider) -> None:
    recording_provider.fail_offsets.add(0)
    session = session_factory(recording_provider)
    session.submit({})
    recording_provider.fail_offsets.clear()

    assert len(session.current_page()) == 100
    assert session.fetch_status is FetchStatus.SUCCEEDED


def test_stale_submit_result_is_discarded(session_factory) -> None:
    provider = GatedProvider()
    slow = normalize({"starts_with": "b"})
    gate = provider.gate(slow)
    session = session_factory(provider)

    session.submit({"starts_with": "b"}, wait=False)
    stale_ticket = session.pending_ticket
    assert session.fetch_status is FetchStatus.FETCHING
    assert provider.started[slow].wait(timeout=5)

    assert session.submit({"starts_with": "c"}) is FetchStatus.SUCCEEDED
    gate.set()
    stale_ticket.future.result(timeout=5)

    assert session.criteria.starts_with == "c"
    assert session.snapshot().page_count == 1
    assert session.current_page()
    assert all(word.startswith("c") for word in session.current_page())
    assert session.telemetry.counter("fetch.discarded") == 1


def test_reset_while_fetching_discards_result(session_factory) -> None:
    provider = GatedProvider()
    slow = normalize({"letters": "e"})
    gate = provider.gate(slow)
    session = session_factory(provider)

    session.submit({"letters": "e"}, wait=False)
    ticket = session.pending_ticket

    assert session.reset() is FetchStatus.IDLE
    gate.set()
    ticket.future.result(timeout=5)

    snapshot = session.snapshot()
    assert snapshot.status is FetchStatus.IDLE
    assert snapshot.page_count == 0
    assert snapshot.criteria == FilterCriteria()


def test_navigation_is_refused_while_fetching(session_factory) -> None:
    provider = GatedProvider()
    slow = FilterCriteria()
    gate = provider.gate(slow)
    session = session_factory(provider)

    session.submit({}, wait=False)
    ticket = session.pending_ticket

    assert session.next() is FetchStatus.FETCHING
    assert session.previous() is FetchStatus.FETCHING
    assert not session.has_next

    gate.set()
    ticket.future.result(timeout=5)
    assert session.fetch_status is FetchStatus.SUCCEEDED
    assert session.current_page_index == 0


def test_differs_from_applied(session_factory, demo_provider) -> None:
    session = session_factory(demo_provider)

    assert not session.differs_from_applied({})
    session.submit({"letters": "ab"})
    assert not session.differs_from_applied({"letters": " BA "})
    assert session.differs_from_applied({"letters": "abc"})


def test_listeners_receive_snapshots(session_factory, demo_provider) -> None:
    session = session_factory(demo_provider)
    seen: List[SessionSnapshot] = []
    listener = seen.append
    session.add_listener(listener)

    session.submit({"pattern": "a??e"})
    session.reset()

    statuses = [snapshot.status for snapshot in seen]
    assert statuses == [FetchStatus.FETCHING, FetchStatus.SUCCEEDED, FetchStatus.IDLE]
    assert seen[1].page == ("able", "ache", "acre", "aide")

    session.remove_listener(listener)
    session.submit({})
    assert len(seen) == 3


def test_reentrant_mutation_from_listener_raises(session_factory, demo_provider) -> None:
    session = session_factory(demo_provider)

    def _reenter(_snapshot: SessionSnapshot) -> None:
        session.reset()

    session.add_listener(_reenter)
    with pytest.raises(SessionReentryError):
        session.reset()


def test_session_requires_a_provider() -> None:
    from word_finder.app.services.search_session import SearchSession

    with pytest.raises(ValueError):
        SearchSession()


def test_waiting_current_page_from_listener_raises(session_factory, demo_provider) -> None:
    session = session_factory(demo_provider)
    errors: List[SessionReentryError] = []

    def _read_page(snapshot: SessionSnapshot) -> None:
        if snapshot.status is FetchStatus.FETCHING:
            session.current_page()

    def _submit() -> None:
        try:
            session.submit({"pattern": "a??e"}, wait=False)
        except SessionReentryError as exc:
            errors.append(exc)

    session.add_listener(_read_page)
    worker = threading.Thread(target=_submit, daemon=True)
    worker.start()
    worker.join(timeout=5)

    assert not worker.is_alive()
    assert len(errors) == 1
    session.remove_listener(_read_page)
    assert session.current_page() == ("able", "ache", "acre", "aide")


def test_non_waiting_current_page_from_listener_is_allowed(session_factory, demo_provider) -> None:
    session = session_factory(demo_provider)
    pages: List[tuple] = []

    def _peek(snapshot: SessionSnapshot) -> None:
        if snapshot.status is FetchStatus.FETCHING:
            pages.append(session.current_page(wait=False))

    session.add_listener(_peek)

    assert session.submit({"pattern": "a??e"}) is FetchStatus.SUCCEEDED
    assert pages == [()]


def test_failing_listener_does_not_fail_the_search(session_factory, demo_provider) -> None:
    session = session_factory(demo_provider)

    def _broken(_snapshot: SessionSnapshot) -> None:
        raise RuntimeError("listener bug")

    session.add_listener(_broken)

    assert session.submit({"pattern": "a??e"}) is FetchStatus.SUCCEEDED
    assert session.current_page() == ("able", "ache", "acre", "aide")
    assert session.next() is FetchStatus.SUCCEEDED
