"""Application wiring for the Word Finder project."""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

if __package__ in {None, ""}:
    import sys
    from pathlib import Path

    repo_root = Path(__file__).resolve().parents[2]
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))

from word_finder.app.data.database import SQLiteWordRepository
from word_finder.app.data.providers import WordProvider
from word_finder.app.services.fetch_controller import FetchController
from word_finder.app.services.search_session import SearchSession
from word_finder.app.ui.gradio import create_interface
from word_finder.core import PAGE_SIZE
from word_finder.utils.logging_config import configure_logging
from word_finder.utils.observability import get_logger
from word_finder.utils.telemetry import StructuredTelemetry, TelemetryLogger

DB_PATH_ENV = "WORD_FINDER_DB_PATH"
SHARE_ENV = "WORD_FINDER_SHARE"
SERVER_PORT_ENV = "WORD_FINDER_SERVER_PORT"

DEFAULT_DB_PATH = "words.db"
DEFAULT_SERVER_PORT = 7860
DEFAULT_FETCH_WORKERS = 8


class WordFinderApp:
    """High-level application facade bundling the provider and session factory."""

    def __init__(
        self,
        db_path: Optional[str] = None,
        *,
        provider: Optional[WordProvider] = None,
        page_size: int = PAGE_SIZE,
        fetch_workers: int = DEFAULT_FETCH_WORKERS,
    ) -> None:
        self.db_path = db_path or os.environ.get(DB_PATH_ENV) or DEFAULT_DB_PATH
        self.page_size = page_size
        self._logger = get_logger(__name__).bind(component="app_facade")
        self._logger.info("Initialising application facade", context={"db_path": self.db_path})

        if provider is None:
            repository = SQLiteWordRepository(self.db_path)
            try:
                word_count = repository.ensure_database()
            except Exception as exc:
                self._logger.error(
                    "Database initialisation failed",
                    context={"db_path": self.db_path, "error": str(exc)},
                )
                raise
            self._logger.info(
                "Database ready",
                context={"db_path": self.db_path, "word_count": word_count},
            )
            provider = repository
        self.provider = provider
        # One fetch pool for every session the app creates.
        self.executor = ThreadPoolExecutor(
            max_workers=max(1, int(fetch_workers)),
            thread_name_prefix="word-fetch",
        )

    def create_session(self) -> SearchSession:
        """Build a fresh, independently owned search session."""

        telemetry = StructuredTelemetry(listeners=[TelemetryLogger()])
        controller = FetchController(
            self.provider,
            page_size=self.page_size,
            executor=self.executor,
            telemetry=telemetry,
        )
        return SearchSession(fetch_controller=controller)

    def create_gradio_interface(self):
        return create_interface(self.create_session)

    def close(self) -> None:
        self._logger.info("Shutting down fetch workers")
        self.executor.shutdown(wait=False)


def _should_share_interface() -> bool:
    """Return whether the Gradio UI should request a public share link."""

    env_value = os.environ.get(SHARE_ENV, "")
    if not env_value:
        return False
    return str(env_value).strip().lower() in {"1", "true", "yes", "on"}


def _server_port() -> int:
    env_value = os.environ.get(SERVER_PORT_ENV, "")
    try:
        port = int(env_value)
    except ValueError:
        return DEFAULT_SERVER_PORT
    return port if 0 < port < 65536 else DEFAULT_SERVER_PORT


def main() -> None:
    configure_logging()
    app = WordFinderApp()
    interface = app.create_gradio_interface()
    try:
        interface.launch(
            server_name="0.0.0.0",
            server_port=_server_port(),
            share=_should_share_interface(),
        )
    finally:
        app.close()


__all__ = ["WordFinderApp", "main"]
