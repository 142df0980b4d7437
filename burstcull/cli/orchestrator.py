"""
CLI workflow orchestration for burstcull.

Provides the CLIOrchestrator class that parses arguments, opens the
library and dispatches to the import, signals, grouping and reporting
workflows.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Optional

from ..database import PhotoStore
from ..grouping import AutoGrouper, CancellationToken, GroupingState
from ..importer import import_directory
from ..models import GroupingOptions
from ..signals import apply_signals, load_signals
from ..similarity.dependencies import HAS_TQDM, Image, _tqdm_class
from ..user_config import get_user_config
from ..utils.formatters import format_number, format_time_estimate
from ..utils.validators import validate_directory, validate_grouping_params
from .arg_parser import parse_arguments
from .reporting import print_group_report, print_stats


def setup_logging(verbose: bool = False) -> logging.Logger:
    """
    Configure logging for the CLI.

    Args:
        verbose: Enable verbose (DEBUG level) logging

    Returns:
        Configured logger instance
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )
    return logging.getLogger(__name__)


class _GroupingProgress:
    """Feeds grouping progress callbacks into a tqdm bar."""

    def __init__(self, enabled: bool):
        self.enabled = enabled and HAS_TQDM and _tqdm_class is not None
        self._pbar: Optional[Any] = None

    def __call__(self, processed: int, total: int, status: str) -> None:
        if not self.enabled:
            return
        if self._pbar is None:
            self._pbar = _tqdm_class(total=total, desc="Grouping", unit="img", ncols=80)
        self._pbar.n = processed
        self._pbar.set_postfix_str(status[:30], refresh=False)
        self._pbar.refresh()

    def close(self) -> None:
        if self._pbar is not None:
            self._pbar.close()
            self._pbar = None


class CLIOrchestrator:
    """
    Orchestrates the CLI workflows.

    Each subcommand maps to one ``_cmd_*`` method returning an exit code.
    """

    def __init__(self, argv=None):
        """
        Initialize the orchestrator.

        Args:
            argv: Argument list (default: sys.argv)
        """
        self.argv = argv
        self.logger = None
        self.args = None
        self.store: Optional[PhotoStore] = None
        self.show_progress = True

    def run(self) -> int:
        """
        Execute the selected command.

        Returns:
            Exit code (0 for success, 1 for error)
        """
        self.args = parse_arguments(self.argv)
        self.logger = setup_logging(self.args.verbose)
        self.show_progress = not self.args.no_progress
        Image.MAX_IMAGE_PIXELS = get_user_config().max_image_pixels

        handler = getattr(self, f"_cmd_{self.args.command}")
        try:
            self.store = PhotoStore(str(self.args.db) if self.args.db else None)
            return handler()
        except ValueError as e:
            self.logger.error(str(e))
            return 1
        except Exception as e:
            self.logger.error(f"{self.args.command} failed: {e}")
            return 1

    def _grouping_options(self) -> Optional[GroupingOptions]:
        """Build options from arguments, falling back to the user config."""
        config = get_user_config()
        threshold = self.args.threshold if self.args.threshold is not None else config.similarity_threshold
        ssim_threshold = (
            self.args.ssim_threshold if self.args.ssim_threshold is not None else config.ssim_threshold
        )
        max_group_size = (
            self.args.max_group_size if self.args.max_group_size is not None else config.max_group_size
        )

        is_valid, error = validate_grouping_params(threshold, ssim_threshold, max_group_size)
        if not is_valid:
            self.logger.error(error)
            return None

        return GroupingOptions(
            similarity_threshold=int(threshold),
            ssim_threshold=float(ssim_threshold),
            use_ssim_refinement=config.use_ssim_refinement and not self.args.no_ssim,
            max_group_size=int(max_group_size or 0),
        )

    def _run_grouping(self, regroup: bool) -> int:
        """
        Run a grouping pass in a worker thread so Ctrl+C can request an abort.

        Returns:
            0 on completion or abort, 1 on failure
        """
        options = self._grouping_options()
        if options is None:
            return 1

        grouper = AutoGrouper(self.store)
        token = CancellationToken()
        progress = _GroupingProgress(self.show_progress)
        options.on_progress = progress
        outcome: dict[str, Any] = {'groups': [], 'error': None}

        def work():
            try:
                if regroup:
                    outcome['groups'] = grouper.regroup_all(options, token=token)
                else:
                    outcome['groups'] = grouper.group_similar_images(options, token=token)
            except Exception as e:
                outcome['error'] = e

        start = time.time()
        worker = threading.Thread(target=work, name="burstcull-grouping", daemon=True)
        worker.start()
        try:
            while worker.is_alive():
                worker.join(timeout=0.2)
        except KeyboardInterrupt:
            self.logger.warning("Interrupted - stopping after the current image...")
            token.cancel()
            worker.join()
        finally:
            progress.close()

        if outcome['error'] is not None:
            self.logger.error(f"Grouping failed: {outcome['error']}")
            return 1

        groups = outcome['groups']
        elapsed = format_time_estimate(time.time() - start)
        if grouper.state == GroupingState.ABORTED:
            self.logger.info(f"Grouping aborted: kept {format_number(len(groups))} groups ({elapsed})")
        else:
            self.logger.info(f"Created {format_number(len(groups))} groups in {elapsed}")
        return 0

    def _cmd_import(self) -> int:
        directory = str(self.args.directory.expanduser().resolve())
        is_valid, error = validate_directory(directory)
        if not is_valid:
            self.logger.error(error)
            return 1

        workers = self.args.workers or get_user_config().default_workers
        self.logger.info(f"Importing images from {directory}...")
        stats = import_directory(
            self.store,
            directory,
            recursive=not self.args.no_recursive,
            max_workers=workers,
            show_progress=self.show_progress,
        )

        self.logger.info(
            f"Found {format_number(stats.discovered)} images: "
            f"{format_number(stats.imported)} imported, "
            f"{format_number(stats.already_known)} already in library, "
            f"{format_number(stats.failed)} failed"
        )
        self.store.update_project_stats()
        return 0

    def _cmd_signals(self) -> int:
        if not self.args.file.is_file():
            self.logger.error(f"Signals file not found: {self.args.file}")
            return 1

        stats = apply_signals(self.store, load_signals(self.args.file))
        self.logger.info(
            f"Updated {format_number(stats.updated)} images, "
            f"{format_number(len(stats.unmatched))} entries unmatched"
        )
        self.store.update_project_stats()
        return 0

    def _cmd_group(self) -> int:
        return self._run_grouping(regroup=False)

    def _cmd_regroup(self) -> int:
        return self._run_grouping(regroup=True)

    def _cmd_disband(self) -> int:
        count = AutoGrouper(self.store).disband_all_groups()
        self.logger.info(f"Disbanded {format_number(count)} groups")
        return 0

    def _cmd_report(self) -> int:
        groups = self.store.list_groups()
        member_ids = [member_id for group in groups for member_id in group.member_ids]
        print_group_report(groups, self.store.get_images(member_ids))
        return 0

    def _cmd_stats(self) -> int:
        print_stats(self.store.update_project_stats())
        return 0


__all__ = ['CLIOrchestrator', 'setup_logging']
