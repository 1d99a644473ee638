"""Tests for the Gradio event handlers."""

from __future__ import annotations

from typing import List

import pytest

pytest.importorskip("gradio")

from word_finder.app.services.search_session import SearchSession
from word_finder.app.ui.gradio import FIELD_ORDER, SearchHandlers, raw_criteria

from conftest import RecordingProvider


@pytest.fixture
def handlers(demo_provider):
    created: List[SearchSession] = []

    def _factory() -> SearchSession:
        session = SearchSession(demo_provider)
        created.append(session)
        return session

    yield SearchHandlers(_factory)

    for session in created:
        session.close()


def _form(**values: str) -> List[str]:
    return [values.get(field.value, "") for field in FIELD_ORDER]


def test_raw_criteria_pairs_values_with_fields() -> None:
    assert raw_criteria("ab", "", "c") == {"letters": "ab", "absent_letters": "", "starts_with": "c"}


def test_submit_creates_session_and_echoes_normalised_form(handlers) -> None:
    outputs = handlers.submit(None, *_form(letters="EA", pattern="a_?e", size="nope"))

    session, status, words, previous_update, next_update, search_update = outputs[:6]
    form_values = outputs[6:]

    assert isinstance(session, SearchSession)
    assert "able" in words and "ache" in words
    assert status.startswith("Page 1")
    assert previous_update["interactive"] is False
    assert next_update["interactive"] is False
    assert search_update["interactive"] is False
    assert list(form_values) == _form(letters="ae", pattern="a??e")


def test_edited_enables_search_only_for_changes(handlers) -> None:
    session = handlers.submit(None, *_form(starts_with="br"))[0]

    _, unchanged = handlers.edited(session, *_form(starts_with=" BR "))
    _, changed = handlers.edited(session, *_form(starts_with="bra"))

    assert unchanged["interactive"] is False
    assert changed["interactive"] is True


def test_navigation_and_reset() -> None:
    provider = RecordingProvider(total=150)
    session = SearchSession(provider)
    handlers = SearchHandlers(lambda: session)
    try:
        outputs = handlers.submit(None, *_form())
        assert outputs[4]["interactive"] is True

        outputs = handlers.next_page(session)
        assert "Page 2 · 50 words" == outputs[1]
        assert outputs[3]["interactive"] is True
        assert outputs[4]["interactive"] is False

        outputs = handlers.previous_page(session)
        assert outputs[1].startswith("Page 1")

        outputs = handlers.reset(session)
        assert "No words found" in outputs[2]
        assert outputs[3]["visible"] is False
        assert list(outputs[6:]) == [""] * len(FIELD_ORDER)
    finally:
        session.close()


def test_failed_search_can_be_retried_from_the_search_button() -> None:
    provider = RecordingProvider(total=30)
    provider.fail_offsets.add(0)
    session = SearchSession(provider)
    handlers = SearchHandlers(lambda: session)
    try:
        outputs = handlers.submit(None, *_form(letters="w"))
        assert "failed" in outputs[1]
        assert outputs[4]["interactive"] is False
        assert outputs[5]["interactive"] is True

        _, search_update = handlers.edited(session, *_form(letters="w"))
        assert search_update["interactive"] is True

        provider.fail_offsets.clear()
        outputs = handlers.submit(session, *_form(letters="w"))
        assert outputs[1].startswith("Page 1")
        assert outputs[5]["interactive"] is False
        assert len(provider.calls) == 2
    finally:
        session.close()
