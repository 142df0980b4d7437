"""
Report formatting and display for the CLI interface.

Provides functions to print groups and library statistics in a
human-readable format.
"""

from __future__ import annotations

from ..grouping import calculate_image_score
from ..models import Group, ImageRecord, ProjectStats
from ..similarity import bit_distance
from ..utils.formatters import format_number, format_score


def _print_section_header(title: str) -> None:
    """Print a section header with divider lines."""
    print("\n" + "-" * 70)
    print(title)
    print("-" * 70)


def _bits_from_pick(img: ImageRecord, pick: ImageRecord | None) -> str:
    """Bit-level hash distance to the auto-pick, for judging how close an alternate is."""
    if pick is None or not img.phash or not pick.phash:
        return ""
    try:
        return f" (bits from pick: {bit_distance(pick.phash, img.phash)})"
    except ValueError:
        return ""


def _print_image_in_group(img: ImageRecord, is_pick: bool, pick: ImageRecord | None = None) -> None:
    """
    Print a single image entry in a group.

    Args:
        img: Member record
        is_pick: True if this is the group's auto-pick
        pick: The group's auto-pick, used to show the hash distance of alternates
    """
    if is_pick:
        print(f"  [PICK] {img.file_path}")
    else:
        print(f"  [ALT]  {img.file_path}{_bits_from_pick(img, pick)}")
    print(f"         focus {format_score(img.focus_score)} | "
          f"exposure {format_score(img.exposure_score)} | "
          f"faces {len(img.faces or [])} | rating {img.rating} | "
          f"Score: {calculate_image_score(img):.2f}")


def print_group_report(groups: list[Group], images: dict[str, ImageRecord]) -> None:
    """
    Print every group with its members.

    Args:
        groups: Groups to print
        images: Records keyed by id, covering every member

    Notes:
        - Members are listed in stored order
        - The auto-pick is marked [PICK], the others [ALT] with their
          bit distance from the pick
    """
    print("\n" + "=" * 70)
    print("BURST GROUP REPORT")
    print("=" * 70)

    grouped = sum(g.size for g in groups)
    print(f"\nGroups: {format_number(len(groups))} holding {format_number(grouped)} images")

    if groups:
        _print_section_header("GROUPS")

    for i, group in enumerate(groups, 1):
        print(f"\nGroup {i} ({group.size} images):")
        pick = images.get(group.auto_pick_id)
        for member_id in group.member_ids:
            img = images.get(member_id)
            if img is None:
                continue
            _print_image_in_group(img, member_id == group.auto_pick_id, pick)

    print("\n" + "=" * 70)


def print_stats(stats: ProjectStats) -> None:
    """Print library statistics."""
    print("\n" + "=" * 70)
    print("LIBRARY STATISTICS")
    print("=" * 70)
    print(f"Images:        {format_number(stats.total_images)}")
    print(f"Rated:         {format_number(stats.rated_images)}")
    print(f"Picks:         {format_number(stats.picks)}")
    print(f"Rejects:       {format_number(stats.rejects)}")
    print(f"Groups:        {format_number(stats.groups)}")
    if stats.updated_at:
        print(f"Updated:       {stats.updated_at.isoformat(timespec='seconds')}")
    print("=" * 70)


__all__ = ['print_group_report', 'print_stats']
