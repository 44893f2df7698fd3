"""Helpers for reading small pseudo-files such as those under /proc and /sys.

None of these functions raise on I/O or parse problems. They return an empty
or zero value and log what went wrong.
"""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def read_lines(path: str | Path, report_error: bool = True) -> list[str]:
    """
    Read a text file into a list of lines.

    Args:
        path: File to read.
        report_error: Log a warning if the file cannot be read.

    Returns:
        The lines without trailing newlines, or an empty list if the file
        is missing or unreadable.
    """
    try:
        logger.debug("Reading file %s", path)
        with open(path, encoding="utf-8", errors="replace") as fh:
            return fh.read().splitlines()
    except OSError as exc:
        if report_error:
            logger.warning("Unable to read %s: %s", path, exc)
        return []


def read_bytes(path: str | Path) -> bytes:
    """Read a binary file, returning empty bytes if it cannot be read."""
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        logger.debug("Unable to read %s: %s", path, exc)
        return b""


def get_long_from_file(path: str | Path) -> int:
    """Read the first line of a file as an integer, or 0."""
    lines = read_lines(path, report_error=False)
    if lines:
        logger.debug("Read %s", lines[0])
        try:
            return int(lines[0].strip())
        except ValueError:
            pass
    logger.debug("Unable to read value from %s", path)
    return 0


def get_int_from_file(path: str | Path) -> int:
    """Same as get_long_from_file, kept for callers reading 32-bit values."""
    return get_long_from_file(path)


def get_string_from_file(path: str | Path) -> str:
    """Read the first line of a file, or an empty string."""
    lines = read_lines(path, report_error=False)
    if lines:
        logger.debug("Read %s", lines[0])
        return lines[0]
    return ""


def get_split_from_file(path: str | Path) -> list[str]:
    """Read the first line of a file split on whitespace, or an empty list."""
    return get_string_from_file(path).split()
