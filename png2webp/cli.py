# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Command-line interface for png2webp

Converts PNG files, or every PNG file under the given directories, to
lossless WebP files saved next to the originals. The generation
parameters stored in the PNG are carried over as an EXIF UserComment.

Copyright 2025 DNAi inc.
"""

import argparse
import logging
import sys
from typing import List, Optional

from png2webp import __version__
from png2webp.batch import DEFAULT_WORKERS, convert_all
from png2webp.png_parser import DEFAULT_KEYWORD


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='png2webp',
        description="png2webp - Convert PNG images to lossless WebP, keeping generation parameters",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Convert one image (writes image.webp)
  png2webp image.png

  # Convert every PNG under a directory tree with 4 threads
  png2webp -j 4 outputs/txt2img-images
        """
    )
    parser.add_argument('paths', nargs='+', help='PNG file(s) or directory(ies) to convert')
    parser.add_argument('-k', '--keyword', default=DEFAULT_KEYWORD,
                        help=f'tEXt keyword to carry over as EXIF UserComment (default: {DEFAULT_KEYWORD})')
    parser.add_argument('-j', '--jobs', type=int, default=DEFAULT_WORKERS,
                        help=f'Number of conversion threads (default: {DEFAULT_WORKERS})')
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument('-v', '--verbose', action='store_true', help='Show debug output')
    verbosity.add_argument('-q', '--quiet', action='store_true', help='Only show warnings and errors')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format='%(levelname)s: %(message)s', stream=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the command line tool.

    Returns:
        0 when every file converted, 1 when any conversion failed
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.jobs < 1:
        parser.error('--jobs must be at least 1')

    configure_logging(args.verbose, args.quiet)
    result = convert_all(args.paths, workers=args.jobs, keyword=args.keyword)
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
