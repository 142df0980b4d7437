"""
Group operations for the photo library.

Groups are only ever created or disbanded whole, each in a single
transaction, so a group and its members' back-references never disagree.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..models import Group, new_id
from .connection import ConnectionManager
from .utils import now_iso, placeholders, row_to_group


logger = logging.getLogger(__name__)


class GroupOperations:
    """Handles atomic creation, listing and disbanding of groups."""

    def __init__(self, connection_manager: ConnectionManager):
        """
        Initialize group operations.

        Args:
            connection_manager: ConnectionManager instance for database access
        """
        self.conn_mgr = connection_manager

    @staticmethod
    def _member_ids(conn, group_id: str) -> list[str]:
        rows = conn.execute(
            "SELECT image_id FROM group_members WHERE group_id = ? ORDER BY position",
            (group_id,),
        ).fetchall()
        return [row['image_id'] for row in rows]

    def list_groups(self) -> list[Group]:
        """Return all groups in creation order."""
        with self.conn_mgr.connection() as conn:
            rows = conn.execute("SELECT * FROM image_groups ORDER BY rowid").fetchall()
            return [row_to_group(row, self._member_ids(conn, row['id'])) for row in rows]

    def get_group(self, group_id: str) -> Optional[Group]:
        with self.conn_mgr.connection() as conn:
            row = conn.execute(
                "SELECT * FROM image_groups WHERE id = ?", (group_id,)
            ).fetchone()
            if row is None:
                return None
            return row_to_group(row, self._member_ids(conn, group_id))

    def count_groups(self) -> int:
        with self.conn_mgr.connection() as conn:
            return conn.execute("SELECT COUNT(*) AS cnt FROM image_groups").fetchone()['cnt']

    def create_group(self, member_ids: list[str], auto_pick_id: str) -> Group:
        """
        Create a group and point every member at it.

        In one transaction: insert the group and its ordered membership,
        set ``group_id`` on every member, and set ``is_auto_pick`` on the
        representative only.

        Args:
            member_ids: Ordered ids of two or more ungrouped images
            auto_pick_id: Representative, must be one of ``member_ids``

        Returns:
            The persisted Group

        Raises:
            ValueError: If the membership is invalid or a member is
                missing or already grouped
        """
        member_ids = list(member_ids)
        if len(member_ids) < 2:
            raise ValueError("A group needs at least two members")
        if len(set(member_ids)) != len(member_ids):
            raise ValueError("Group members must be unique")
        if auto_pick_id not in member_ids:
            raise ValueError(f"Auto-pick {auto_pick_id} is not a member of the group")

        timestamp = now_iso()
        group_id = new_id()

        with self.conn_mgr.connection(exclusive=True) as conn:
            rows = conn.execute(
                f"SELECT id, group_id FROM images WHERE id IN ({placeholders(len(member_ids))})",
                member_ids,
            ).fetchall()
            found = {row['id']: row['group_id'] for row in rows}

            missing = [mid for mid in member_ids if mid not in found]
            if missing:
                raise ValueError(f"Unknown images: {', '.join(missing)}")
            already_grouped = [mid for mid, gid in found.items() if gid is not None]
            if already_grouped:
                raise ValueError(f"Images already grouped: {', '.join(already_grouped)}")

            conn.execute(
                "INSERT INTO image_groups (id, auto_pick_id, created_at, modified_at) "
                "VALUES (?, ?, ?, ?)",
                (group_id, auto_pick_id, timestamp, timestamp),
            )
            conn.executemany(
                "INSERT INTO group_members (group_id, image_id, position) VALUES (?, ?, ?)",
                [(group_id, mid, pos) for pos, mid in enumerate(member_ids)],
            )
            conn.execute(
                f"""
                UPDATE images
                SET group_id = ?, is_auto_pick = (id = ?), modified_at = ?
                WHERE id IN ({placeholders(len(member_ids))})
                """,
                [group_id, auto_pick_id, timestamp, *member_ids],
            )

        created = datetime.fromisoformat(timestamp)
        return Group(
            id=group_id,
            member_ids=member_ids,
            auto_pick_id=auto_pick_id,
            created_at=created,
            modified_at=created,
        )

    def disband_group(self, group_id: str) -> bool:
        """
        Disband a group.

        In one transaction: clear ``group_id`` and ``is_auto_pick`` on every
        member and delete the group.

        Returns:
            True if the group existed
        """
        with self.conn_mgr.connection(exclusive=True) as conn:
            conn.execute(
                "UPDATE images SET group_id = NULL, is_auto_pick = 0, modified_at = ? "
                "WHERE group_id = ?",
                (now_iso(), group_id),
            )
            conn.execute("DELETE FROM group_members WHERE group_id = ?", (group_id,))
            result = conn.execute("DELETE FROM image_groups WHERE id = ?", (group_id,))
            return result.rowcount > 0


__all__ = ['GroupOperations']
