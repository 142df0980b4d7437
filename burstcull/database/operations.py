"""
Image record operations for the photo library.

Provides ImageOperations for reading and writing image records. Unlike a
cache, the library is the source of truth, so write failures propagate.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..models import ImageRecord
from .connection import ConnectionManager
from .utils import (
    UPDATABLE_IMAGE_FIELDS,
    chunked,
    faces_to_json,
    now_iso,
    placeholders,
    record_to_params,
    row_to_record,
)


logger = logging.getLogger(__name__)

_INSERT_IMAGE = """
    INSERT INTO images (
        id, file_name, file_path, preview_ref,
        phash, focus_score, exposure_score, faces,
        rating, flag, group_id, is_auto_pick,
        created_at, modified_at
    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
"""


class ImageOperations:
    """
    Handles CRUD operations for image records.

    Records are always returned in import order.
    """

    def __init__(self, connection_manager: ConnectionManager):
        """
        Initialize image operations.

        Args:
            connection_manager: ConnectionManager instance for database access
        """
        self.conn_mgr = connection_manager

    def list_images(self) -> list[ImageRecord]:
        """Return every image record in import order."""
        with self.conn_mgr.connection() as conn:
            rows = conn.execute("SELECT * FROM images ORDER BY rowid").fetchall()
        return [row_to_record(row) for row in rows]

    def get_image(self, image_id: str) -> Optional[ImageRecord]:
        with self.conn_mgr.connection() as conn:
            row = conn.execute("SELECT * FROM images WHERE id = ?", (image_id,)).fetchone()
        return row_to_record(row) if row else None

    def get_images(self, image_ids: list[str]) -> dict[str, ImageRecord]:
        """
        Get several records at once.

        Returns:
            Dict mapping id to ImageRecord; unknown ids are absent
        """
        results: dict[str, ImageRecord] = {}
        with self.conn_mgr.connection() as conn:
            for chunk in chunked(list(image_ids)):
                rows = conn.execute(
                    f"SELECT * FROM images WHERE id IN ({placeholders(len(chunk))})",
                    chunk,
                ).fetchall()
                for row in rows:
                    results[row['id']] = row_to_record(row)
        return results

    def find_by_path(self, file_path: str) -> Optional[ImageRecord]:
        with self.conn_mgr.connection() as conn:
            row = conn.execute(
                "SELECT * FROM images WHERE file_path = ?", (file_path,)
            ).fetchone()
        return row_to_record(row) if row else None

    def find_by_name(self, file_name: str) -> list[ImageRecord]:
        with self.conn_mgr.connection() as conn:
            rows = conn.execute(
                "SELECT * FROM images WHERE file_name = ? ORDER BY rowid", (file_name,)
            ).fetchall()
        return [row_to_record(row) for row in rows]

    def known_paths(self) -> set[str]:
        """Return the file paths already in the library."""
        with self.conn_mgr.connection() as conn:
            rows = conn.execute("SELECT file_path FROM images").fetchall()
        return {row['file_path'] for row in rows}

    def add_image(self, record: ImageRecord) -> ImageRecord:
        """
        Insert a new record.

        Raises:
            sqlite3.IntegrityError: If the id or file path already exists
        """
        with self.conn_mgr.connection(exclusive=True) as conn:
            conn.execute(_INSERT_IMAGE, record_to_params(record))
        return record

    def add_images(self, records: list[ImageRecord]) -> int:
        """
        Insert several records in one transaction.

        Returns:
            Number of records inserted
        """
        if not records:
            return 0
        with self.conn_mgr.connection(exclusive=True) as conn:
            conn.executemany(_INSERT_IMAGE, [record_to_params(r) for r in records])
        return len(records)

    def update_image(self, image_id: str, **fields) -> bool:
        """
        Update user-editable fields of a record.

        Grouping fields are deliberately not accepted here; they only
        change through group creation and disbanding.

        Returns:
            True if a record was updated

        Raises:
            ValueError: If an unknown or protected field is given
        """
        unknown = set(fields) - UPDATABLE_IMAGE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        if not fields:
            return False

        if 'faces' in fields:
            fields['faces'] = faces_to_json(fields['faces'])

        columns = ', '.join(f"{name} = ?" for name in fields)
        values = list(fields.values()) + [now_iso(), image_id]

        with self.conn_mgr.connection(exclusive=True) as conn:
            result = conn.execute(
                f"UPDATE images SET {columns}, modified_at = ? WHERE id = ?",
                values,
            )
            return result.rowcount > 0


__all__ = ['ImageOperations']
