"""
Ingestion of externally computed quality signals.

Focus, exposure and face/eye detection run outside burstcull; their
results arrive as a JSON document and are attached to image records so
the auto-grouper can rank group members.

Expected format:
{
    "images": [
        {
            "file_name": "IMG_0001.jpg",
            "focus_score": 0.82,
            "exposure_score": 0.64,
            "rating": 3,
            "faces": [
                {
                    "bbox": {"x": 10, "y": 20, "width": 25, "height": 30},
                    "confidence": 0.97,
                    "eye_state": {"left": "open", "right": "open", "confidence": 0.9}
                }
            ]
        }
    ]
}

Entries are matched by "id", then "file_path", then "file_name" (which
must be unambiguous).
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .models import FaceDetection, ImageRecord

logger = logging.getLogger(__name__)

SIGNAL_FIELDS = ('focus_score', 'exposure_score', 'faces', 'rating')


@dataclass
class SignalStats:
    """Outcome of applying a signals document."""
    updated: int = 0
    unmatched: list = field(default_factory=list)


def load_signals(path: str | Path) -> list[dict]:
    """
    Read a signals document.

    Raises:
        ValueError: If the document is not valid JSON or lacks an "images" list
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid signals file {path}: {e}") from e

    entries = data.get('images') if isinstance(data, dict) else data
    if not isinstance(entries, list):
        raise ValueError(f"Signals file {path} must contain an 'images' list")
    return entries


def _resolve(store, entry: dict) -> Optional[ImageRecord]:
    if entry.get('id'):
        return store.get_image(entry['id'])
    if entry.get('file_path'):
        return store.find_by_path(entry['file_path'])
    if entry.get('file_name'):
        matches = store.find_by_name(entry['file_name'])
        if len(matches) == 1:
            return matches[0]
        if len(matches) > 1:
            logger.warning(f"Ambiguous file name in signals: {entry['file_name']}")
    return None


def _parse_fields(entry: dict) -> dict:
    fields = {}
    for name in SIGNAL_FIELDS:
        if name not in entry:
            continue
        value = entry[name]
        try:
            if name == 'faces' and value is not None:
                value = [FaceDetection.from_dict(face) for face in value]
            elif name == 'rating':
                value = int(value)
                if not 0 <= value <= 5:
                    raise ValueError(f"Rating must be between 0 and 5, got {value}")
            elif value is not None:
                value = float(value)
        except (TypeError, KeyError, AttributeError) as e:
            raise ValueError(f"Invalid {name} in signals entry {_entry_key(entry)}: {e}") from e
        fields[name] = value
    return fields


def _entry_key(entry: dict):
    return entry.get('id') or entry.get('file_path') or entry.get('file_name')


def apply_signals(store, entries: list[dict]) -> SignalStats:
    """
    Attach quality signals to matching image records.

    Every entry is validated before the first record is written, so an
    invalid document leaves the library untouched.

    Args:
        store: PhotoStore holding the records
        entries: Parsed entries from load_signals

    Returns:
        SignalStats with the update count and the unmatched entries' keys

    Raises:
        ValueError: If an entry is not an object or carries an invalid value
    """
    stats = SignalStats()

    updates = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ValueError(f"Signals entries must be objects, got {entry!r}")
        fields = _parse_fields(entry)
        record = _resolve(store, entry)
        if record is None:
            stats.unmatched.append(_entry_key(entry))
            continue
        updates.append((record, fields))

    for record, fields in updates:
        if fields and store.update_image(record.id, **fields):
            stats.updated += 1

    if stats.unmatched:
        logger.warning(f"{len(stats.unmatched):,} signal entries matched no image")
    logger.info(f"Applied quality signals to {stats.updated:,} images")
    return stats


__all__ = ['SignalStats', 'load_signals', 'apply_signals']
