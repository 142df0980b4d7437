"""
Greedy near-duplicate clustering.

Each unprocessed image in input order becomes a base; later unprocessed
images within the pHash threshold (and, optionally, the SSIM threshold)
join its cluster and are never reconsidered. Similarity is not treated as
transitive: A~B and B~C only puts A and C together when A~C directly, and
the input order decides the outcome.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterator, Optional, Sequence

from ..models import ImageRecord, ProgressCallback
from ..similarity import hamming_distance
from .cancellation import CancellationToken

logger = logging.getLogger(__name__)

# scorer(base, candidate) -> SSIM score; may raise on any failure
SSIMScorer = Callable[[ImageRecord, ImageRecord], float]


def find_similar_images(
    base: ImageRecord,
    candidates: Sequence[ImageRecord],
    processed: set[str],
    threshold: int,
    token: CancellationToken,
    ssim_scorer: Optional[SSIMScorer] = None,
    ssim_threshold: Optional[float] = None,
    max_group_size: Optional[int] = None,
) -> list[ImageRecord]:
    """
    Collect the images that match ``base``.

    Accepted candidates are added to ``processed`` as soon as they are
    accepted. SSIM refinement only runs when a scorer and threshold are
    given and both images have a preview; if scoring fails for any reason
    the candidate is accepted on pHash alone.

    Args:
        base: Image the cluster is built around
        candidates: All images of the run, in input order
        processed: Ids already claimed in this run (mutated)
        threshold: Maximum hex-digit Hamming distance
        token: Cancellation token polled before each candidate
        ssim_scorer: Optional callable returning the SSIM of a pair
        ssim_threshold: Minimum SSIM for confirmation
        max_group_size: Stop once the cluster holds this many images

    Returns:
        The cluster, starting with ``base``

    Raises:
        HashLengthError: If two hashes have different lengths
    """
    similar = [base]

    for candidate in candidates:
        if token.cancelled:
            break
        if candidate.id in processed or candidate.id == base.id:
            continue
        if max_group_size and len(similar) >= max_group_size:
            break
        if not base.phash or not candidate.phash:
            continue

        distance = hamming_distance(base.phash, candidate.phash)
        if distance > threshold:
            continue

        if (
            ssim_scorer is not None
            and ssim_threshold is not None
            and base.preview_ref
            and candidate.preview_ref
        ):
            try:
                score = ssim_scorer(base, candidate)
            except Exception as e:
                logger.debug(
                    f"SSIM failed for {base.file_name} / {candidate.file_name}, "
                    f"accepting on pHash (distance={distance}): {e}"
                )
            else:
                if score < ssim_threshold:
                    logger.debug(
                        f"Rejected {candidate.file_name}: SSIM {score:.3f} < {ssim_threshold}"
                    )
                    continue

        similar.append(candidate)
        processed.add(candidate.id)

    return similar


def iter_clusters(
    images: Sequence[ImageRecord],
    threshold: int,
    token: CancellationToken,
    ssim_scorer: Optional[SSIMScorer] = None,
    ssim_threshold: Optional[float] = None,
    max_group_size: Optional[int] = None,
    progress_callback: Optional[ProgressCallback] = None,
    processed: Optional[set[str]] = None,
) -> Iterator[list[ImageRecord]]:
    """
    Yield every cluster of two or more images, in discovery order.

    Singletons are marked processed without being yielded. Iteration stops
    early, without error, once ``token`` is cancelled. Pass ``processed`` to
    observe which ids were claimed; it holds every id once the scan has run
    to the end.
    """
    if processed is None:
        processed = set()
    total = len(images)

    for index, base in enumerate(images):
        if token.cancelled:
            break
        if base.id in processed:
            continue

        if progress_callback:
            progress_callback(index + 1, total, f"Grouping {base.file_name}...")

        cluster = find_similar_images(
            base,
            images,
            processed,
            threshold,
            token,
            ssim_scorer=ssim_scorer,
            ssim_threshold=ssim_threshold,
            max_group_size=max_group_size,
        )
        processed.add(base.id)

        if len(cluster) > 1:
            yield cluster


__all__ = ['SSIMScorer', 'find_similar_images', 'iter_clusters']
