"""
Database connection management with thread safety.

Provides ConnectionManager for thread-safe SQLite operations with WAL mode.
"""

from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Generator


class ConnectionManager:
    """
    Manages SQLite connections for the photo library.

    Every ``connection()`` context is one transaction:
    - Writers (exclusive=True) serialize on a lock and take the SQLite
      write lock up front with BEGIN IMMEDIATE
    - WAL mode lets readers proceed while a writer is active
    - Any exception rolls the whole transaction back and is re-raised
    """

    def __init__(self, db_path: str):
        """
        Initialize connection manager.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path
        self._write_lock = threading.Lock()
        self._ensure_directory()

    def _ensure_directory(self):
        """Ensure the directory for the database file exists."""
        db_dir = Path(self.db_path).resolve().parent
        db_dir.mkdir(parents=True, exist_ok=True)

    def _open(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=30.0, isolation_level=None)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    @contextmanager
    def connection(self, exclusive: bool = False) -> Generator[sqlite3.Connection, None, None]:
        """
        Context manager for a transactional connection.

        Args:
            exclusive: If True, this transaction writes

        Yields:
            sqlite3.Connection with row factory, WAL and foreign keys enabled

        Example:
            with conn_mgr.connection(exclusive=True) as conn:
                conn.execute("UPDATE images SET rating = ? WHERE id = ?", (3, image_id))
        """
        if exclusive:
            self._write_lock.acquire()

        try:
            conn = self._open()
            conn.execute("BEGIN IMMEDIATE" if exclusive else "BEGIN")
            try:
                yield conn
                conn.execute("COMMIT")
            except Exception:
                conn.execute("ROLLBACK")
                raise
            finally:
                conn.close()
        finally:
            if exclusive:
                self._write_lock.release()


__all__ = ['ConnectionManager']
