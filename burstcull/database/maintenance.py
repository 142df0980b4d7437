"""
Maintenance operations for the photo library.

Provides project statistics, clearing and vacuum operations.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime

from ..models import ProjectStats
from .connection import ConnectionManager
from .utils import now_iso


logger = logging.getLogger(__name__)


class MaintenanceOperations:
    """
    Handles maintenance operations for the photo library.

    Keeps the aggregate project statistics row current and provides
    clearing and database compaction.
    """

    def __init__(self, connection_manager: ConnectionManager):
        """
        Initialize maintenance operations.

        Args:
            connection_manager: ConnectionManager instance for database access
        """
        self.conn_mgr = connection_manager

    def update_project_stats(self) -> ProjectStats:
        """
        Recompute the aggregate statistics and store them.

        Returns:
            The freshly computed ProjectStats
        """
        timestamp = now_iso()
        with self.conn_mgr.connection(exclusive=True) as conn:
            counts = conn.execute("""
                SELECT
                    COUNT(*) AS total_images,
                    COALESCE(SUM(rating > 0), 0) AS rated_images,
                    COALESCE(SUM(flag = 'pick'), 0) AS picks,
                    COALESCE(SUM(flag = 'reject'), 0) AS rejects
                FROM images
            """).fetchone()
            group_count = conn.execute(
                "SELECT COUNT(*) AS cnt FROM image_groups"
            ).fetchone()['cnt']

            conn.execute("""
                UPDATE project
                SET total_images = ?, rated_images = ?, picks = ?, rejects = ?,
                    group_count = ?, updated_at = ?
                WHERE id = 1
            """, (
                counts['total_images'], counts['rated_images'],
                counts['picks'], counts['rejects'], group_count, timestamp,
            ))

        stats = ProjectStats(
            total_images=counts['total_images'],
            rated_images=counts['rated_images'],
            picks=counts['picks'],
            rejects=counts['rejects'],
            groups=group_count,
            updated_at=datetime.fromisoformat(timestamp),
        )
        logger.debug(f"Project stats updated: {stats.to_dict()}")
        return stats

    def get_project_stats(self) -> ProjectStats:
        """Return the last stored statistics (not recomputed)."""
        with self.conn_mgr.connection() as conn:
            row = conn.execute("SELECT * FROM project WHERE id = 1").fetchone()

        if row is None:
            return ProjectStats()
        return ProjectStats(
            total_images=row['total_images'],
            rated_images=row['rated_images'],
            picks=row['picks'],
            rejects=row['rejects'],
            groups=row['group_count'],
            updated_at=datetime.fromisoformat(row['updated_at']) if row['updated_at'] else None,
        )

    def clear(self):
        """Delete every image and group and reset the statistics."""
        with self.conn_mgr.connection(exclusive=True) as conn:
            conn.execute("DELETE FROM group_members")
            conn.execute("UPDATE images SET group_id = NULL, is_auto_pick = 0")
            conn.execute("DELETE FROM image_groups")
            conn.execute("DELETE FROM images")
            conn.execute("""
                UPDATE project
                SET total_images = 0, rated_images = 0, picks = 0, rejects = 0,
                    group_count = 0, updated_at = NULL
                WHERE id = 1
            """)
        # VACUUM outside transaction
        self.vacuum()

    def vacuum(self):
        """Compact the database file."""
        try:
            # VACUUM must run outside a transaction
            conn = sqlite3.connect(self.conn_mgr.db_path, timeout=30.0)
            conn.execute("VACUUM")
            conn.close()
        except sqlite3.Error as e:
            logger.debug(f"Failed to vacuum database: {e}")


__all__ = ['MaintenanceOperations']
