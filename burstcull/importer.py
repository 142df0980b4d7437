"""
Import of image folders into the library.

Discovers image files, computes perceptual hashes in parallel and stores
new image records. Files already in the library are skipped, so re-running
an import only picks up new frames.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

from .config import DEFAULT_WORKERS, IMAGE_EXTENSIONS
from .models import ImageRecord
from .similarity import PreviewDecoder, compute_phash
from .similarity.dependencies import HAS_HEIF_SUPPORT, HAS_TQDM, _tqdm_class

logger = logging.getLogger(__name__)


@dataclass
class ImportStats:
    """Outcome of an import run."""
    discovered: int = 0
    already_known: int = 0
    imported: int = 0
    failed: int = 0
    errors: dict = field(default_factory=dict)


def find_image_files(root_path: str | Path, recursive: bool = True) -> list[str]:
    """
    Find all image files in the given directory.

    Args:
        root_path: Directory path to search for images
        recursive: If True, search subdirectories recursively

    Returns:
        Sorted list of absolute file paths as strings

    Notes:
        - HEIC/HEIF files are skipped if pillow-heif is not installed
        - Symlinks are resolved and each file is listed once
        - Sorting by path keeps burst sequences in shooting order
    """
    root = Path(root_path)

    extensions_to_scan = IMAGE_EXTENSIONS
    if not HAS_HEIF_SUPPORT:
        extensions_to_scan = {ext for ext in IMAGE_EXTENSIONS if ext not in {'.heic', '.heif'}}

    images = set()
    iterator = root.rglob('*') if recursive else root.glob('*')

    for filepath in iterator:
        if filepath.is_file() and filepath.suffix.lower() in extensions_to_scan:
            images.add(str(filepath.resolve()))

    return sorted(images)


def hash_image_file(filepath: str, decoder: PreviewDecoder) -> ImageRecord:
    """
    Decode and hash one file into a new ImageRecord.

    Raises:
        PreviewDecodeError: If the file cannot be decoded
    """
    phash = compute_phash(decoder.decode(filepath))
    return ImageRecord(file_path=filepath, preview_ref=filepath, phash=phash)


def import_directory(
    store,
    root_path: str | Path,
    recursive: bool = True,
    max_workers: int = DEFAULT_WORKERS,
    progress_callback: Optional[Callable[[int, int], None]] = None,
    show_progress: bool = True,
    decoder: Optional[PreviewDecoder] = None,
) -> ImportStats:
    """
    Import every new image under ``root_path`` into ``store``.

    Hashing runs in a thread pool; records are stored in path order once
    all files are hashed. A file that fails to decode is logged and
    counted, never fatal.

    Args:
        store: PhotoStore to add records to
        root_path: Directory to import
        recursive: Whether to descend into subdirectories
        max_workers: Number of hashing threads
        progress_callback: Optional callback(current, total)
        show_progress: Whether to show a tqdm progress bar
        decoder: Preview decoder (defaults to PreviewDecoder())

    Returns:
        ImportStats for the run
    """
    decoder = decoder or PreviewDecoder()
    files = find_image_files(root_path, recursive=recursive)
    stats = ImportStats(discovered=len(files))

    known = store.known_paths()
    to_import = [f for f in files if f not in known]
    stats.already_known = len(files) - len(to_import)

    if stats.already_known:
        logger.info(f"Skipping {stats.already_known:,} files already in the library")
    if not to_import:
        return stats

    pbar: Optional[Any] = None
    if HAS_TQDM and show_progress and _tqdm_class is not None:
        pbar = _tqdm_class(total=len(to_import), desc="Hashing images", unit="img", ncols=80)

    records: dict[str, ImageRecord] = {}
    last_callback_time = time.time()
    callback_interval = 1.0  # seconds

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            executor.submit(hash_image_file, path, decoder): path
            for path in to_import
        }

        for i, future in enumerate(as_completed(futures)):
            path = futures[future]
            try:
                records[path] = future.result()
            except Exception as e:
                stats.failed += 1
                stats.errors[path] = str(e)
                logger.debug(f"Hashing failed for {path}: {e}")

            if pbar is not None:
                pbar.update(1)

            if progress_callback:
                current_time = time.time()
                if current_time - last_callback_time >= callback_interval or i == len(to_import) - 1:
                    progress_callback(i + 1, len(to_import))
                    last_callback_time = current_time

    if pbar is not None:
        pbar.close()

    ordered = [records[path] for path in to_import if path in records]
    stats.imported = store.add_images(ordered)

    if stats.failed:
        logger.warning(f"Could not hash {stats.failed:,} files")
    logger.info(f"Imported {stats.imported:,} of {len(files):,} discovered images")
    return stats


__all__ = ['ImportStats', 'find_image_files', 'hash_image_file', 'import_directory']
