"""
Argument parsing for the CLI interface.

Provides functions to create and configure the argument parser for the
burstcull command-line interface.
"""

from __future__ import annotations

import argparse
from pathlib import Path

from ..config import (
    DEFAULT_SIMILARITY_THRESHOLD,
    DEFAULT_SSIM_THRESHOLD,
    DEFAULT_MAX_GROUP_SIZE,
    DEFAULT_WORKERS,
)


def _add_grouping_options(parser: argparse.ArgumentParser) -> None:
    """Options shared by ``group`` and ``regroup``. None means use the user config."""
    parser.add_argument(
        '-t', '--threshold',
        type=int,
        default=None,
        help=f'Max pHash distance in hex digits (0-16, lower=stricter). '
             f'Default: {DEFAULT_SIMILARITY_THRESHOLD}'
    )

    parser.add_argument(
        '--ssim-threshold',
        type=float,
        default=None,
        help=f'Minimum SSIM to confirm a pHash match (0-1). Default: {DEFAULT_SSIM_THRESHOLD}'
    )

    parser.add_argument(
        '--no-ssim',
        action='store_true',
        help='Group on pHash distance alone (skip SSIM refinement)'
    )

    parser.add_argument(
        '--max-group-size',
        type=int,
        default=None,
        help=f'Largest group to build, 0 for unbounded. Default: {DEFAULT_MAX_GROUP_SIZE}'
    )


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog='burstcull',
        description='Group burst shots and near-duplicate photos',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s import /path/to/shoot
      Hash every new image in the folder into the library

  %(prog)s signals analysis.json
      Attach focus, exposure and face data computed elsewhere

  %(prog)s group --threshold 12 --ssim-threshold 0.85
      Group similar images and nominate the best frame of each group

  %(prog)s regroup --no-ssim
      Disband all groups and group again on pHash alone

  %(prog)s report
      Print every group with its auto-pick
        """
    )

    # Global options
    parser.add_argument(
        '--db',
        type=Path,
        default=None,
        help='Library database file (default: ~/.burstcull/library.db)'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Verbose output'
    )

    parser.add_argument(
        '--no-progress',
        action='store_true',
        help='Disable progress bars (useful for piping output)'
    )

    subparsers = parser.add_subparsers(dest='command', metavar='COMMAND')
    subparsers.required = True

    import_parser = subparsers.add_parser('import', help='Import and hash a folder of images')
    import_parser.add_argument(
        'directory',
        type=Path,
        help='Directory to import'
    )
    import_parser.add_argument(
        '-r', '--no-recursive',
        action='store_true',
        help='Do not import subdirectories'
    )
    import_parser.add_argument(
        '-w', '--workers',
        type=int,
        default=None,
        help=f'Number of parallel hashing workers. Default: {DEFAULT_WORKERS}'
    )

    signals_parser = subparsers.add_parser('signals', help='Apply a quality-signals JSON file')
    signals_parser.add_argument(
        'file',
        type=Path,
        help='JSON file with focus, exposure, rating and face data'
    )

    group_parser = subparsers.add_parser('group', help='Group ungrouped images')
    _add_grouping_options(group_parser)

    regroup_parser = subparsers.add_parser('regroup', help='Disband all groups and group again')
    _add_grouping_options(regroup_parser)

    subparsers.add_parser('disband', help='Disband every group')
    subparsers.add_parser('report', help='Print groups and their auto-picks')
    subparsers.add_parser('stats', help='Recompute and print library statistics')

    return parser


def parse_arguments(argv=None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        argv: List of argument strings (default: sys.argv)

    Returns:
        Parsed arguments as Namespace object

    Examples:
        >>> args = parse_arguments(['group', '--threshold', '12'])
        >>> args.command
        'group'
        >>> args.threshold
        12
    """
    parser = create_parser()
    return parser.parse_args(argv)


__all__ = [
    'create_parser',
    'parse_arguments',
]
