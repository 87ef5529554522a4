"""
Shared file utilities for the ingestion module.

Provides the file handling used by the command line scripts: gzip-aware
opening, glob expansion and concatenation of several logs into one stream.
"""

import glob
import gzip
import logging
from pathlib import Path
from typing import IO, Iterable, Iterator, Union

logger = logging.getLogger(__name__)


def open_file_auto_decompress(file_path: Union[str, Path]) -> IO[bytes]:
    """
    Open a file in binary mode, automatically detecting gzip compression.

    Gzip detection is performed by:
    1. Checking for .gz file extension
    2. Checking for gzip magic bytes (0x1f 0x8b) even without .gz extension

    Args:
        file_path: Path to the file

    Returns:
        Open file handle (binary mode)

    Raises:
        FileNotFoundError: If file doesn't exist
        PermissionError: If file cannot be read
    """
    path = Path(file_path)

    if not path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    # Check for gzip by extension
    if path.suffix.lower() == ".gz":
        return gzip.open(path, "rb")

    # Also check magic bytes for gzip files without .gz extension
    with open(path, "rb") as f:
        magic = f.read(2)
    if magic == b"\x1f\x8b":
        return gzip.open(path, "rb")

    return open(path, "rb")


def expand_input_patterns(patterns: Iterable[str]) -> list[Path]:
    """
    Expand glob patterns into a list of paths.

    Patterns without glob characters are kept as-is, so a missing file
    surfaces as FileNotFoundError when it is opened rather than being
    dropped silently. Matches of each pattern are sorted.
    """
    paths: list[Path] = []
    for pattern in patterns:
        if any(c in pattern for c in "*?["):
            matches = sorted(glob.glob(pattern))
            if not matches:
                logger.warning(f"Pattern matched no files: {pattern}")
            paths.extend(Path(m) for m in matches)
        else:
            paths.append(Path(pattern))
    return paths


def iter_concatenated(paths: Iterable[Union[str, Path]]) -> Iterator[bytes]:
    """
    Yield the lines of several files in order, as one stream.

    Each file is opened only when the previous one is exhausted and is
    closed before the next one is opened.
    """
    for path in paths:
        logger.debug(f"Reading {path}")
        with open_file_auto_decompress(path) as handle:
            yield from handle
