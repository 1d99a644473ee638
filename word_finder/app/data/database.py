"""SQLite-backed word repository used as the production provider."""

from __future__ import annotations

import os
import queue
import sqlite3
import threading
from contextlib import contextmanager
from typing import Generator, Iterable, List, Sequence, Tuple

from word_finder.core import FilterCriteria, ProviderError
from word_finder.utils.observability import get_logger

from .demo_words import iter_demo_words
from .providers import normalize_word

_LIKE_ESCAPE = "\\"


def _ensure_parent_directory(path: str) -> None:
    directory = os.path.dirname(os.path.abspath(path))
    if directory and not os.path.exists(directory):
        os.makedirs(directory, exist_ok=True)


def _escape_like(text: str) -> str:
    return (
        text.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )


def build_search_query(
    criteria: FilterCriteria,
    offset: int,
    limit: int,
) -> Tuple[str, List[object]]:
    """Translate ``criteria`` into a paged ``SELECT`` and its parameters.

    The clauses mirror :func:`word_finder.core.matches` so both providers
    return the same words for the same criteria.
    """

    clauses: List[str] = []
    params: List[object] = []

    required_length = criteria.required_length
    if required_length is not None:
        clauses.append("length = ?")
        params.append(required_length)

    if criteria.starts_with:
        clauses.append(f"word_normalized LIKE ? ESCAPE '{_LIKE_ESCAPE}'")
        params.append(_escape_like(criteria.starts_with) + "%")
    if criteria.ends_with:
        clauses.append(f"word_normalized LIKE ? ESCAPE '{_LIKE_ESCAPE}'")
        params.append("%" + _escape_like(criteria.ends_with))

    for letter in sorted(criteria.letters):
        clauses.append("instr(word_normalized, ?) > 0")
        params.append(letter)
    for letter in sorted(criteria.absent_letters):
        clauses.append("instr(word_normalized, ?) = 0")
        params.append(letter)

    if criteria.pattern:
        clauses.append(f"word_normalized LIKE ? ESCAPE '{_LIKE_ESCAPE}'")
        params.append(
            "".join("_" if slot is None else _escape_like(slot) for slot in criteria.pattern)
        )

    sql = "SELECT word_normalized FROM words"
    if clauses:
        sql += " WHERE " + " AND ".join(clauses)
    sql += " ORDER BY word_normalized LIMIT ? OFFSET ?"
    params.extend([int(limit), int(offset)])
    return sql, params


class SQLiteWordRepository:
    """Repository encapsulating all SQLite access for word searches."""

    def __init__(
        self,
        db_path: str,
        *,
        pool_size: int = 4,
        pool_timeout: float = 5.0,
    ) -> None:
        self.db_path = db_path
        self._pool_size = max(1, int(pool_size))
        self._pool_timeout = max(0.0, float(pool_timeout))
        self._pool: queue.Queue = queue.Queue(maxsize=self._pool_size)
        self._pool_semaphore = threading.BoundedSemaphore(self._pool_size)
        self._logger = get_logger(__name__).bind(
            component="sqlite_repository",
            db_path=db_path,
        )
        self._logger.info(
            "SQLite repository initialised",
            context={"pool_size": self._pool_size, "pool_timeout": self._pool_timeout},
        )

    def _create_connection(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self.db_path, check_same_thread=False)
        try:
            connection.execute("PRAGMA journal_mode=WAL")
        except sqlite3.Error as exc:
            # WAL mode is best-effort, log but continue if unsupported.
            self._logger.warning(
                "SQLite WAL mode unavailable",
                context={"error": str(exc)},
            )
        return connection

    def _acquire_connection(self) -> sqlite3.Connection:
        if not self._pool_semaphore.acquire(timeout=self._pool_timeout or None):
            self._logger.error(
                "Database connection pool exhausted",
                context={"pool_size": self._pool_size, "timeout": self._pool_timeout},
            )
            raise TimeoutError("Database connection pool exhausted")

        try:
            return self._pool.get_nowait()
        except queue.Empty:
            try:
                return self._create_connection()
            except sqlite3.Error:
                self._pool_semaphore.release()
                raise

    def _release_connection(self, connection: sqlite3.Connection) -> None:
        try:
            self._pool.put_nowait(connection)
        except queue.Full:
            connection.close()
        finally:
            self._pool_semaphore.release()

    @contextmanager
    def _connect(self) -> Generator[sqlite3.Connection, None, None]:
        connection = self._acquire_connection()
        try:
            yield connection
            if connection.in_transaction:
                connection.commit()
        except Exception as exc:
            if connection.in_transaction:
                connection.rollback()
            self._logger.error(
                "SQLite operation failed",
                context={"error": str(exc)},
            )
            raise
        finally:
            self._release_connection(connection)

    def close(self) -> None:
        """Close every pooled connection."""

        while True:
            try:
                connection = self._pool.get_nowait()
            except queue.Empty:
                break
            connection.close()

    def ensure_database(self) -> int:
        """Ensure the schema exists and holds words; returns the word count.

        A missing or unreadable database is (re)created and seeded with the
        built-in demo list.
        """

        self._logger.info("Ensuring database availability")
        if not os.path.exists(self.db_path):
            self._logger.info(
                "Database file missing; creating demo database",
                context={"db_path": self.db_path},
            )
            return self._create_demo_database()

        try:
            with self._connect() as conn:
                self._initialise_schema(conn)
            count = self.count_words()
        except sqlite3.Error as exc:
            self._logger.warning(
                "Database verification failed; recreating demo",
                context={"error": str(exc)},
            )
            return self._create_demo_database(overwrite=True)

        self._logger.info("Database schema verified", context={"word_count": count})
        return count

    def _initialise_schema(self, connection: sqlite3.Connection) -> None:
        cursor = connection.cursor()
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS words (
                id INTEGER PRIMARY KEY,
                word TEXT NOT NULL,
                word_normalized TEXT NOT NULL UNIQUE,
                length INTEGER NOT NULL
            )
            """
        )
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_words_length ON words(length, word_normalized)"
        )

    def _create_demo_database(self, *, overwrite: bool = False) -> int:
        self.close()
        if overwrite and os.path.exists(self.db_path):
            os.remove(self.db_path)
        _ensure_parent_directory(self.db_path)
        with self._connect() as conn:
            self._initialise_schema(conn)
        inserted = self.import_words(iter_demo_words())
        self._logger.info("Demo database created", context={"inserted": inserted})
        return self.count_words()

    def import_words(self, words: Iterable[str], *, batch_size: int = 5000) -> int:
        """Insert alphabetic words, skipping duplicates; returns rows added."""

        inserted = 0
        batch: List[Tuple[str, str, int]] = []

        def _flush(conn: sqlite3.Connection) -> int:
            before = conn.total_changes
            conn.executemany(
                "INSERT OR IGNORE INTO words (word, word_normalized, length) VALUES (?, ?, ?)",
                batch,
            )
            return conn.total_changes - before

        with self._connect() as conn:
            self._initialise_schema(conn)
            for raw in words:
                word = str(raw or "").strip()
                normalized = normalize_word(word)
                if not normalized or not normalized.isalpha():
                    continue
                batch.append((word, normalized, len(normalized)))
                if len(batch) >= batch_size:
                    inserted += _flush(conn)
                    batch.clear()
            if batch:
                inserted += _flush(conn)

        self._logger.info("Words imported", context={"inserted": inserted})
        return inserted

    def count_words(self) -> int:
        with self._connect() as conn:
            (count,) = conn.execute("SELECT COUNT(*) FROM words").fetchone()
        return int(count)

    def search(self, criteria: FilterCriteria, offset: int, limit: int) -> Sequence[str]:
        """Return one page of matching words, ordered alphabetically."""

        if offset < 0:
            raise ValueError("offset must be >= 0")
        if limit <= 0:
            raise ValueError("limit must be > 0")

        sql, params = build_search_query(criteria, offset, limit)
        try:
            with self._connect() as conn:
                rows = conn.execute(sql, params).fetchall()
        except (sqlite3.Error, TimeoutError) as exc:
            raise ProviderError(f"word search failed: {exc}") from exc
        return [row[0] for row in rows]


__all__ = ["SQLiteWordRepository", "build_search_query"]
