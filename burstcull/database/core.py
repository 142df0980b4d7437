"""
PhotoStore facade class for coordinating database operations.

Provides a unified interface to all library operations using the facade
pattern. This is the storage collaborator the auto-grouper depends on.
"""

from __future__ import annotations

from typing import Optional

from ..models import Group, ImageRecord, ProjectStats
from .connection import ConnectionManager
from .schema import initialize_schema, SCHEMA_VERSION
from .operations import ImageOperations
from .groups import GroupOperations
from .maintenance import MaintenanceOperations


class PhotoStore:
    """
    SQLite-backed library of image records and groups.

    Thread-safe for concurrent read/write operations.
    Uses facade pattern to delegate to specialized components.

    Usage:
        store = PhotoStore("/path/to/library.db")
        store.add_image(ImageRecord(file_path="/photos/IMG_0001.jpg", phash="..."))

        for group in store.list_groups():
            print(group.member_ids, group.auto_pick_id)
    """

    # Schema version - increment when changing table structure
    SCHEMA_VERSION = SCHEMA_VERSION

    def __init__(self, db_path: Optional[str] = None):
        """
        Initialize the store.

        Args:
            db_path: Path to SQLite database file. Uses the configured
                location if None.
        """
        if db_path is None:
            from ..user_config import get_user_config
            db_path = get_user_config().store_db_file
        self.db_path = db_path

        # Initialize components
        self._conn_mgr = ConnectionManager(self.db_path)
        self._images = ImageOperations(self._conn_mgr)
        self._groups = GroupOperations(self._conn_mgr)
        self._maintenance = MaintenanceOperations(self._conn_mgr)

        # Initialize database schema
        with self._conn_mgr.connection(exclusive=True) as conn:
            initialize_schema(conn)

    # Delegate to ImageOperations
    def list_images(self) -> list[ImageRecord]:
        """Return every image record in import order."""
        return self._images.list_images()

    def get_image(self, image_id: str) -> Optional[ImageRecord]:
        """Get a single record by id."""
        return self._images.get_image(image_id)

    def get_images(self, image_ids: list[str]) -> dict[str, ImageRecord]:
        """Get several records by id."""
        return self._images.get_images(image_ids)

    def find_by_path(self, file_path: str) -> Optional[ImageRecord]:
        """Get the record imported from ``file_path``."""
        return self._images.find_by_path(file_path)

    def find_by_name(self, file_name: str) -> list[ImageRecord]:
        """Get all records with the given base file name."""
        return self._images.find_by_name(file_name)

    def known_paths(self) -> set[str]:
        """File paths already imported."""
        return self._images.known_paths()

    def add_image(self, record: ImageRecord) -> ImageRecord:
        """Insert a new record."""
        return self._images.add_image(record)

    def add_images(self, records: list[ImageRecord]) -> int:
        """Insert several records in one transaction."""
        return self._images.add_images(records)

    def update_image(self, image_id: str, **fields) -> bool:
        """Update user-editable fields (rating, flag, quality signals...)."""
        return self._images.update_image(image_id, **fields)

    # Delegate to GroupOperations
    def list_groups(self) -> list[Group]:
        """Return all groups in creation order."""
        return self._groups.list_groups()

    def get_group(self, group_id: str) -> Optional[Group]:
        """Get a single group by id."""
        return self._groups.get_group(group_id)

    def count_groups(self) -> int:
        """Number of groups."""
        return self._groups.count_groups()

    def create_group(self, member_ids: list[str], auto_pick_id: str) -> Group:
        """Atomically create a group with member back-references."""
        return self._groups.create_group(member_ids, auto_pick_id)

    def disband_group(self, group_id: str) -> bool:
        """Atomically disband a group."""
        return self._groups.disband_group(group_id)

    # Delegate to MaintenanceOperations
    def update_project_stats(self) -> ProjectStats:
        """Recompute and store aggregate statistics."""
        return self._maintenance.update_project_stats()

    def get_project_stats(self) -> ProjectStats:
        """Return the stored aggregate statistics."""
        return self._maintenance.get_project_stats()

    def clear(self):
        """Delete all records and groups."""
        self._maintenance.clear()

    def vacuum(self):
        """Compact the database file."""
        self._maintenance.vacuum()


__all__ = ['PhotoStore']
