"""
Database abstraction layer for the scan history that backs the result cache.

MVP uses SQLite; designed so the backend can be swapped to PostgreSQL via a
different Backend implementation. All access goes through the abstract interface;
SQL and placeholders are backend-specific (? for SQLite, %s for PostgreSQL).
"""

from __future__ import annotations

import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path

from backend_trustscan.database.models import ScanRecord
from backend_trustscan.trustscan_logging import get_logger

logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# Schema (SQLite). For PostgreSQL: use BIGSERIAL, TIMESTAMPTZ, JSONB and %s.
# -----------------------------------------------------------------------------

SCHEMA_SCAN_HISTORY = """
CREATE TABLE IF NOT EXISTS scan_history (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    scanned_url TEXT NOT NULL,
    trust_score INTEGER NOT NULL,
    threat_level TEXT NOT NULL,
    is_threat INTEGER NOT NULL,
    scan_type TEXT NOT NULL,
    scan_details TEXT NOT NULL,
    user_id TEXT NOT NULL,
    created_at REAL NOT NULL
);
CREATE INDEX IF NOT EXISTS ix_scan_history_url_created ON scan_history(scanned_url, created_at);
"""

_COLUMNS = "id, scanned_url, trust_score, threat_level, is_threat, scan_type, scan_details, user_id, created_at"


def _row_to_record(row: sqlite3.Row) -> ScanRecord:
    return ScanRecord(
        id=row["id"],
        scanned_url=row["scanned_url"],
        trust_score=row["trust_score"],
        threat_level=row["threat_level"],
        is_threat=bool(row["is_threat"]),
        scan_type=row["scan_type"],
        scan_details=row["scan_details"],
        user_id=row["user_id"],
        created_at=row["created_at"],
    )


# -----------------------------------------------------------------------------
# Abstract backend: swap implementation for PostgreSQL later.
# -----------------------------------------------------------------------------


class DatabaseBackend(ABC):
    """Abstract interface for persistence; implement for SQLite or PostgreSQL."""

    @abstractmethod
    def ensure_schema(self) -> None:
        """Create tables and indexes if they do not exist."""
        ...

    @abstractmethod
    def insert_scan(self, record: ScanRecord) -> int:
        """Append a scan row (never updates in place). Returns row id."""
        ...

    @abstractmethod
    def query_latest_within_ttl(self, url: str, ttl_sec: float, now: float) -> ScanRecord | None:
        """Freshest row for the exact URL with created_at > now - ttl_sec, or None."""
        ...

    @abstractmethod
    def get_scan_history(self, url: str, *, limit: int = 20) -> list[ScanRecord]:
        """Rows for the exact URL, newest first."""
        ...


# -----------------------------------------------------------------------------
# SQLite backend
# -----------------------------------------------------------------------------


class SQLiteBackend(DatabaseBackend):
    """SQLite implementation; single file, one connection per operation for MVP."""

    def __init__(self, path: str | Path, *, timeout_sec: float = 5.0) -> None:
        self._path = Path(path)
        self._timeout_sec = timeout_sec

    def _connect(self) -> sqlite3.Connection:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self._path), timeout=self._timeout_sec)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode = WAL")
        return conn

    @contextmanager
    def _cursor(self):
        conn = self._connect()
        try:
            cur = conn.cursor()
            yield cur
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def ensure_schema(self) -> None:
        with self._cursor() as cur:
            cur.executescript(SCHEMA_SCAN_HISTORY)

    def insert_scan(self, record: ScanRecord) -> int:
        with self._cursor() as cur:
            cur.execute(
                """
                INSERT INTO scan_history (scanned_url, trust_score, threat_level, is_threat, scan_type, scan_details, user_id, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.scanned_url,
                    record.trust_score,
                    record.threat_level,
                    int(record.is_threat),
                    record.scan_type,
                    record.scan_details,
                    record.user_id,
                    record.created_at,
                ),
            )
            return cur.lastrowid or 0

    def query_latest_within_ttl(self, url: str, ttl_sec: float, now: float) -> ScanRecord | None:
        with self._cursor() as cur:
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM scan_history
                WHERE scanned_url = ? AND created_at > ?
                ORDER BY created_at DESC, id DESC LIMIT 1
                """,
                (url, now - ttl_sec),
            )
            row = cur.fetchone()
        return _row_to_record(row) if row is not None else None

    def get_scan_history(self, url: str, *, limit: int = 20) -> list[ScanRecord]:
        with self._cursor() as cur:
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM scan_history
                WHERE scanned_url = ?
                ORDER BY created_at DESC, id DESC LIMIT ?
                """,
                (url, limit),
            )
            rows = cur.fetchall()
        return [_row_to_record(row) for row in rows]


# -----------------------------------------------------------------------------
# Database facade: single entrypoint; backend is swappable.
# -----------------------------------------------------------------------------


class Database:
    """
    Database abstraction: append-only scan history.

    Uses a Backend (SQLite for MVP); replace with PostgreSQLBackend when upgrading.
    """

    def __init__(self, backend: DatabaseBackend) -> None:
        self._backend = backend

    def ensure_schema(self) -> None:
        """Create tables and indexes if they do not exist."""
        self._backend.ensure_schema()

    def insert_scan(self, record: ScanRecord) -> int:
        return self._backend.insert_scan(record)

    def query_latest_within_ttl(self, url: str, ttl_sec: float, now: float) -> ScanRecord | None:
        return self._backend.query_latest_within_ttl(url, ttl_sec, now)

    def get_scan_history(self, url: str, *, limit: int = 20) -> list[ScanRecord]:
        return self._backend.get_scan_history(url, limit=limit)


def get_database(path: str | Path | None = None) -> Database:
    """
    Return a Database instance for MVP (SQLite).

    path: Path to the SQLite file (e.g. "data/trustscan.db"). Default: "trustscan.db" in cwd.
    For PostgreSQL later: use a different factory that builds PostgreSQLBackend from URL.
    """
    if path is None:
        path = Path("trustscan.db")
    backend = SQLiteBackend(path)
    db = Database(backend)
    db.ensure_schema()
    logger.debug("database_ready", path=str(path))
    return db
