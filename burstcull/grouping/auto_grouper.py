"""
Auto-grouping of near-duplicate images.

Runs the greedy clustering pass over the library's ungrouped, hashed
images, persists each cluster as a group with its best frame flagged as
the auto-pick, and supports cooperative cancellation and progress
reporting.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Callable, Optional

from ..config import LUMINANCE_CACHE_SIZE
from ..models import Group, GroupingOptions, ImageRecord, RasterImage
from ..similarity import LuminanceCache, PreviewDecoder, calculate_ssim_luminance
from .cancellation import CancellationToken
from .clustering import iter_clusters
from .quality import pick_representative

logger = logging.getLogger(__name__)


class GroupingState(str, Enum):
    """Lifecycle of a grouping run."""
    IDLE = 'idle'
    RUNNING = 'running'
    COMPLETED = 'completed'
    ABORTED = 'aborted'
    FAILED = 'failed'


class AutoGrouper:
    """
    Clusters near-duplicate images and nominates a representative for each.

    Args:
        store: Storage collaborator (see database.PhotoStore)
        decoder: Callable turning a preview reference into a RasterImage;
            defaults to PreviewDecoder

    Usage:
        grouper = AutoGrouper(get_store())
        groups = grouper.group_similar_images(GroupingOptions(similarity_threshold=12))

        # From another thread
        grouper.abort()
    """

    def __init__(
        self,
        store,
        decoder: Optional[Callable[[str], RasterImage]] = None,
        cache_size: int = LUMINANCE_CACHE_SIZE,
    ):
        self.store = store
        self.decoder = decoder or PreviewDecoder()
        self._cache = LuminanceCache(cache_size)
        self._token: Optional[CancellationToken] = None
        self._state = GroupingState.IDLE
        self._lock = threading.Lock()

    @property
    def state(self) -> GroupingState:
        with self._lock:
            return self._state

    def _set_state(self, state: GroupingState) -> None:
        with self._lock:
            self._state = state

    @property
    def abort_requested(self) -> bool:
        token = self._token
        return token is not None and token.cancelled

    def abort(self) -> None:
        """Request cancellation of the current run; work already persisted is kept."""
        token = self._token
        if token is not None:
            token.cancel()
            logger.info("Grouping abort requested")

    def _ssim_between(self, image1: ImageRecord, image2: ImageRecord) -> float:
        luma1 = self._cache.get_or_decode(image1.id, image1.preview_ref, self.decoder)
        luma2 = self._cache.get_or_decode(image2.id, image2.preview_ref, self.decoder)
        return calculate_ssim_luminance(luma1, luma2).ssim

    def _create_group(self, members: list[ImageRecord]) -> Group:
        best = pick_representative(members)
        group = self.store.create_group([m.id for m in members], best.id)
        logger.debug(
            f"Created group {group.id} with {group.size} images, auto-pick {best.file_name}"
        )
        return group

    def _start_run(self, token: Optional[CancellationToken]) -> CancellationToken:
        if token is None:
            token = CancellationToken()
        self._token = token
        self._set_state(GroupingState.RUNNING)
        return token

    def _finish_aborted(self, groups: list[Group]) -> list[Group]:
        self._set_state(GroupingState.ABORTED)
        logger.info(f"Grouping aborted after creating {len(groups):,} groups")
        return groups

    def group_similar_images(
        self,
        options: Optional[GroupingOptions] = None,
        token: Optional[CancellationToken] = None,
    ) -> list[Group]:
        """
        Group all ungrouped, hashed images.

        Args:
            options: Thresholds, refinement switch, size cap and progress
                callback; defaults apply when None
            token: Cancellation token for this run; callers that may abort
                before the run starts pass their own, otherwise a fresh one
                is created

        Returns:
            Groups created by this run (partial if aborted)

        Raises:
            Exception: Storage failures and hash length mismatches propagate
                after the state is set to FAILED
        """
        token = self._start_run(token)
        return self._group(options or GroupingOptions(), token)

    def _group(self, options: GroupingOptions, token: CancellationToken) -> list[Group]:
        self._cache.clear()
        groups: list[Group] = []
        try:
            images = self.store.list_images()
            candidates = [img for img in images if img.group_id is None and img.phash]

            if not candidates:
                logger.info("No ungrouped hashed images to group")
                self.store.update_project_stats()
                self._set_state(GroupingState.COMPLETED)
                return groups

            logger.info(
                f"Grouping {len(candidates):,} images (threshold={options.similarity_threshold}, "
                f"ssim={'%.2f' % options.ssim_threshold if options.use_ssim_refinement else 'off'}, "
                f"max_group_size={options.max_group_size})"
            )
            options.report(0, len(candidates), "Starting grouping process...")

            processed: set[str] = set()
            clusters = iter_clusters(
                candidates,
                options.similarity_threshold,
                token,
                ssim_scorer=self._ssim_between if options.use_ssim_refinement else None,
                ssim_threshold=options.ssim_threshold if options.use_ssim_refinement else None,
                max_group_size=options.max_group_size,
                progress_callback=options.on_progress,
                processed=processed,
            )
            for members in clusters:
                groups.append(self._create_group(members))

            # A cancel that lands after the last base was scanned changes nothing
            if len(processed) < len(candidates):
                return self._finish_aborted(groups)

            self.store.update_project_stats()
            self._set_state(GroupingState.COMPLETED)
            logger.info(
                f"Grouping complete: {len(groups):,} groups "
                f"({self._cache.misses:,} previews decoded)"
            )
            return groups

        except Exception:
            self._set_state(GroupingState.FAILED)
            logger.exception(f"Grouping failed after creating {len(groups):,} groups")
            raise
        finally:
            self._cache.clear()

    def _disband_groups(self, token: Optional[CancellationToken] = None) -> int:
        disbanded = 0
        for group in self.store.list_groups():
            if token is not None and token.cancelled:
                break
            if self.store.disband_group(group.id):
                disbanded += 1
        return disbanded

    def disband_all_groups(self) -> int:
        """
        Disband every group, one transaction per group.

        Returns:
            Number of groups disbanded
        """
        disbanded = self._disband_groups()
        self.store.update_project_stats()
        logger.info(f"Disbanded {disbanded:,} groups")
        return disbanded

    def regroup_all(
        self,
        options: Optional[GroupingOptions] = None,
        token: Optional[CancellationToken] = None,
    ) -> list[Group]:
        """
        Disband every group, then group from scratch.

        An abort during the disband phase stops before the next group is
        disbanded; groups not yet disbanded stay intact and no grouping runs.
        """
        token = self._start_run(token)
        try:
            disbanded = self._disband_groups(token)
        except Exception:
            self._set_state(GroupingState.FAILED)
            logger.exception("Regroup failed while disbanding groups")
            raise
        logger.info(f"Disbanded {disbanded:,} groups")

        if token.cancelled:
            return self._finish_aborted([])
        return self._group(options or GroupingOptions(), token)


__all__ = ['GroupingState', 'AutoGrouper']
