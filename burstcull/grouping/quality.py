"""
Representative selection for near-duplicate groups.

Combines the externally supplied quality signals into a single score.
Scores are only meaningful relative to other members of the same group.
"""

from __future__ import annotations

from typing import Optional, Sequence

from ..config import QUALITY_WEIGHTS
from ..models import ImageRecord


def eyes_open_ratio(record: ImageRecord) -> Optional[float]:
    """Fraction of detected faces with both eyes open, None without faces."""
    if not record.faces:
        return None
    open_count = sum(
        1 for face in record.faces
        if face.eye_state is not None and face.eye_state.both_open
    )
    return open_count / len(record.faces)


def average_face_area(record: ImageRecord) -> Optional[float]:
    """Mean fraction of the frame covered by each face, None without faces."""
    if not record.faces:
        return None
    return sum(face.bbox.area_fraction for face in record.faces) / len(record.faces)


def calculate_image_score(record: ImageRecord) -> float:
    """
    Calculate the representative-selection score for an image.
    Higher score = better pick.

    Factors considered (each skipped when its data is missing):
    - Focus/sharpness score - weight 0.4
    - Ratio of faces with both eyes open - weight 0.3
    - Average face area as a fraction of the frame - weight 0.2
    - Exposure score - weight 0.1
    - Existing user rating - weight 0.1

    Args:
        record: Image with whatever signals have been computed

    Returns:
        Unnormalized score
    """
    score = 0.0

    if record.focus_score:
        score += record.focus_score * QUALITY_WEIGHTS['focus']

    ratio = eyes_open_ratio(record)
    if ratio is not None:
        score += ratio * QUALITY_WEIGHTS['eyes_open']

    area = average_face_area(record)
    if area is not None:
        score += area * QUALITY_WEIGHTS['face_size']

    if record.exposure_score:
        score += record.exposure_score * QUALITY_WEIGHTS['exposure']

    if record.rating > 0:
        score += record.rating * QUALITY_WEIGHTS['rating']

    return score


def pick_representative(records: Sequence[ImageRecord]) -> ImageRecord:
    """
    Return the highest-scoring record.

    Ties go to the earliest record in ``records`` since the sort is stable.

    Raises:
        ValueError: If ``records`` is empty
    """
    if not records:
        raise ValueError("Cannot pick a representative from an empty group")
    ranked = sorted(records, key=lambda r: -calculate_image_score(r))
    return ranked[0]


__all__ = [
    'eyes_open_ratio',
    'average_face_area',
    'calculate_image_score',
    'pick_representative',
]
