"""
Database abstraction layer: scan history and the verdict result cache.

MVP uses SQLite via Database and get_database(); backend is swappable for PostgreSQL.
"""

from backend_trustscan.database.database import (
    Database,
    DatabaseBackend,
    SQLiteBackend,
    get_database,
)
from backend_trustscan.database.models import ScanRecord
from backend_trustscan.database.result_cache import ResultCache

__all__ = [
    "Database",
    "DatabaseBackend",
    "ResultCache",
    "SQLiteBackend",
    "ScanRecord",
    "get_database",
]
