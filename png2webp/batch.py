# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Batch conversion of files and directory trees.

Directories are walked recursively and every .png file found is converted
on a thread pool. Each conversion is independent; a failure is reported
for that file and the rest of the batch carries on.

Copyright 2025 DNAi inc.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, Optional, Union

from png2webp.core import Converter
from png2webp.png_parser import DEFAULT_KEYWORD

logger = logging.getLogger(__name__)

SOURCE_SUFFIX = '.png'
DEFAULT_WORKERS = (os.cpu_count() or 1) // 2 + 1


@dataclass
class BatchResult:
    """Outcome of a batch conversion."""
    converted: Dict[Path, Path] = field(default_factory=dict)
    failed: Dict[Path, Exception] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


def iter_png_files(paths: Iterable[Union[str, Path]]) -> Iterator[Path]:
    """
    Yield every .png file named by paths, walking directories recursively.

    Entries of a directory are visited in sorted order. A directory that
    cannot be listed is logged and skipped.
    """
    for path in paths:
        path = Path(path)
        if path.is_dir():
            try:
                entries = sorted(path.iterdir())
            except OSError as e:
                logger.warning("failed to read %s: %s", path, e)
                continue
            yield from iter_png_files(entries)
        elif path.suffix == SOURCE_SUFFIX:
            yield path


def convert_all(
    paths: Iterable[Union[str, Path]],
    workers: int = DEFAULT_WORKERS,
    keyword: str = DEFAULT_KEYWORD,
    converter: Optional[Converter] = None,
    error_handler: Optional[Callable[[Path, Exception], None]] = None
) -> BatchResult:
    """
    Convert every PNG file under paths to WebP.

    Args:
        paths: Files and/or directories to process
        workers: Number of conversion threads
        keyword: tEXt keyword carried over as the EXIF UserComment
        converter: Converter to use instead of a default one built from keyword
        error_handler: Optional callback for failures (path, exception)

    Returns:
        BatchResult mapping each source to its output or its error
    """
    if workers < 1:
        raise ValueError(f"workers must be at least 1, got {workers}")
    if converter is None:
        converter = Converter(keyword=keyword)

    def convert_one(path: Path) -> Path:
        logger.info("converting %s...", path)
        return converter.convert_file(path)

    result = BatchResult()
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [(path, pool.submit(convert_one, path)) for path in iter_png_files(paths)]
        for path, future in futures:
            try:
                result.converted[path] = future.result()
            except Exception as e:
                logger.warning("failed to convert %s: %s", path, e)
                result.failed[path] = e
                if error_handler:
                    error_handler(path, e)
    return result
