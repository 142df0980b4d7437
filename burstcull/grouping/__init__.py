"""
Grouping package for burstcull.

Public API:
- AutoGrouper: Cancellable, progress-reporting grouping engine
- GroupingState: Lifecycle states of a grouping run
- CancellationToken: Cooperative cancellation flag
- find_similar_images / iter_clusters: Greedy clustering primitives
- calculate_image_score / pick_representative: Representative selection
"""

from __future__ import annotations

from .cancellation import CancellationToken
from .quality import (
    calculate_image_score,
    pick_representative,
    eyes_open_ratio,
    average_face_area,
)
from .clustering import find_similar_images, iter_clusters
from .auto_grouper import AutoGrouper, GroupingState

__all__ = [
    'AutoGrouper',
    'GroupingState',
    'CancellationToken',
    'find_similar_images',
    'iter_clusters',
    'calculate_image_score',
    'pick_representative',
    'eyes_open_ratio',
    'average_face_area',
]
