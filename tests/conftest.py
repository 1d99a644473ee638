import sys
import threading
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set, Tuple

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from word_finder.app.data.demo_words import DEMO_WORDS
from word_finder.app.data.providers import InMemoryWordProvider
from word_finder.app.services.search_session import SearchSession
from word_finder.core import FilterCriteria, ProviderError


class RecordingProvider:
    """Provider stub serving a fixed, criteria-agnostic word list."""

    def __init__(self, total: int) -> None:
        self.words = [f"word{index:05d}" for index in range(total)]
        self.calls: List[Tuple[FilterCriteria, int, int]] = []
        self.fail_offsets: Set[int] = set()
        self._lock = threading.Lock()

    def search(self, criteria: FilterCriteria, offset: int, limit: int) -> Sequence[str]:
        with self._lock:
            self.calls.append((criteria, offset, limit))
        if offset in self.fail_offsets:
            raise ProviderError(f"backend unavailable at offset {offset}")
        return self.words[offset : offset + limit]


class GatedProvider:
    """In-memory provider whose answers for chosen criteria wait on an event."""

    def __init__(self, words: Sequence[str] = DEMO_WORDS) -> None:
        self._inner = InMemoryWordProvider(words)
        self._gates: Dict[FilterCriteria, threading.Event] = {}
        self.started: Dict[FilterCriteria, threading.Event] = {}

    def gate(self, criteria: FilterCriteria) -> threading.Event:
        event = threading.Event()
        self._gates[criteria] = event
        self.started[criteria] = threading.Event()
        return event

    def search(self, criteria: FilterCriteria, offset: int, limit: int) -> Sequence[str]:
        gate: Optional[threading.Event] = self._gates.get(criteria)
        if gate is not None:
            self.started[criteria].set()
            assert gate.wait(timeout=5), "gate was never released"
        return self._inner.search(criteria, offset, limit)


@pytest.fixture
def demo_provider() -> InMemoryWordProvider:
    return InMemoryWordProvider(DEMO_WORDS)


@pytest.fixture
def recording_provider() -> RecordingProvider:
    return RecordingProvider(total=250)


@pytest.fixture
def session_factory():
    """Build sessions that are shut down after the test."""

    sessions: List[SearchSession] = []

    def _factory(provider) -> SearchSession:
        session = SearchSession(provider)
        sessions.append(session)
        return session

    yield _factory

    for session in sessions:
        session.close()
