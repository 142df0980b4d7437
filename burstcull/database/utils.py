"""
Shared utilities for database operations.

Provides row conversion helpers and constants used by the operation
classes.
"""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime
from typing import Optional

from ..models import FaceDetection, Group, ImageRecord


# SQLite has a limit of 999 variables, we use 500 for safety
CHUNK_SIZE = 500

# Columns callers may change through update_image
UPDATABLE_IMAGE_FIELDS = {
    'file_name', 'preview_ref', 'phash', 'focus_score', 'exposure_score',
    'faces', 'rating', 'flag',
}


def now_iso() -> str:
    """Current local time as an ISO-8601 string."""
    return datetime.now().isoformat()


def chunked(items: list, size: int = CHUNK_SIZE):
    """Yield successive slices of ``items`` no longer than ``size``."""
    for i in range(0, len(items), size):
        yield items[i:i + size]


def placeholders(count: int) -> str:
    return ','.join('?' * count)


def faces_to_json(faces: Optional[list]) -> Optional[str]:
    """Serialize a face list; None (detection not run) stays NULL."""
    if faces is None:
        return None
    return json.dumps([face.to_dict() for face in faces])


def faces_from_json(value: Optional[str]) -> Optional[list]:
    if value is None:
        return None
    return [FaceDetection.from_dict(item) for item in json.loads(value)]


def record_to_params(record: ImageRecord) -> tuple:
    """Column values for inserting ``record`` into the images table."""
    return (
        record.id, record.file_name, record.file_path, record.preview_ref,
        record.phash, record.focus_score, record.exposure_score,
        faces_to_json(record.faces), record.rating, record.flag,
        record.group_id, int(record.is_auto_pick),
        record.created_at.isoformat(), record.modified_at.isoformat(),
    )


def row_to_record(row: sqlite3.Row) -> ImageRecord:
    """
    Convert database row to ImageRecord object.

    Args:
        row: sqlite3.Row from the images table

    Returns:
        ImageRecord object
    """
    return ImageRecord(
        id=row['id'],
        file_name=row['file_name'],
        file_path=row['file_path'],
        preview_ref=row['preview_ref'],
        phash=row['phash'],
        focus_score=row['focus_score'],
        exposure_score=row['exposure_score'],
        faces=faces_from_json(row['faces']),
        rating=row['rating'] or 0,
        flag=row['flag'],
        group_id=row['group_id'],
        is_auto_pick=bool(row['is_auto_pick']),
        created_at=datetime.fromisoformat(row['created_at']),
        modified_at=datetime.fromisoformat(row['modified_at']),
    )


def row_to_group(row: sqlite3.Row, member_ids: list[str]) -> Group:
    """Convert a group row plus its ordered member ids to a Group."""
    return Group(
        id=row['id'],
        member_ids=member_ids,
        auto_pick_id=row['auto_pick_id'],
        created_at=datetime.fromisoformat(row['created_at']),
        modified_at=datetime.fromisoformat(row['modified_at']),
    )


__all__ = [
    'CHUNK_SIZE',
    'UPDATABLE_IMAGE_FIELDS',
    'now_iso',
    'chunked',
    'placeholders',
    'faces_to_json',
    'faces_from_json',
    'record_to_params',
    'row_to_record',
    'row_to_group',
]
