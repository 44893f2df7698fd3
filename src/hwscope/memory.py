"""Memory statistics aggregated from /proc/meminfo."""

import logging
import threading
import time
from collections.abc import Callable, Sequence

from hwscope.fileutil import read_lines
from hwscope.models import MemorySnapshot

logger = logging.getLogger(__name__)

PROC_MEMINFO = "/proc/meminfo"

# Minimum interval between two reads of the counter source
STALENESS_MS = 100

_MEMINFO_KEYS = {
    "MemTotal:": "mem_total",
    "MemFree:": "mem_free",
    "MemAvailable:": "mem_available",
    "Active(file):": "active_file",
    "Inactive(file):": "inactive_file",
    "SReclaimable:": "sreclaimable",
    "SwapTotal:": "swap_total",
    "SwapFree:": "swap_free",
}


def parse_meminfo_value(fields: Sequence[str]) -> int:
    """
    Parse the value columns of a split /proc/meminfo line.

    Args:
        fields: The whitespace-split line, e.g. ["MemTotal:", "16384000", "kB"].

    Returns:
        The value in bytes, or 0 if it is missing or not an integer.
    """
    if len(fields) < 2:
        return 0
    try:
        value = int(fields[1])
    except ValueError:
        logger.error("Unable to parse %r to an integer for %s", fields[1], fields[0])
        return 0
    if len(fields) > 2 and fields[2] == "kB":
        value *= 1024
    return value


def scan_meminfo(lines: Sequence[str]) -> dict[str, int]:
    """Collect every known counter present anywhere in the lines."""
    counters: dict[str, int] = {}
    for line in lines:
        fields = line.split()
        if len(fields) < 2:
            continue
        name = _MEMINFO_KEYS.get(fields[0])
        if name is None:
            continue
        counters[name] = parse_meminfo_value(fields)
    return counters


def build_snapshot(counters: dict[str, int], captured_at_millis: int) -> MemorySnapshot:
    """Turn scanned counters into a snapshot, estimating MemAvailable if absent."""
    mem_free = counters.get("mem_free", 0)
    if "mem_available" in counters:
        available = counters["mem_available"]
    else:
        # Kernels before 3.14 do not publish MemAvailable
        available = (
            mem_free
            + counters.get("active_file", 0)
            + counters.get("inactive_file", 0)
            + counters.get("sreclaimable", 0)
        )
    swap_total = counters.get("swap_total", 0)
    return MemorySnapshot(
        total_bytes=counters.get("mem_total", 0),
        free_bytes=mem_free,
        available_bytes=available,
        swap_total_bytes=swap_total,
        swap_used_bytes=swap_total - counters.get("swap_free", 0),
        captured_at_millis=captured_at_millis,
    )


class MemoryAggregator:
    """
    Rate-limited reader of /proc/meminfo.

    Holds one current MemorySnapshot. refresh() re-reads the source at most
    once per staleness window; in between, and whenever the source is
    unreadable, the previous snapshot is returned unchanged.
    """

    def __init__(
        self,
        path: str = PROC_MEMINFO,
        line_source: Callable[[str], list[str]] = read_lines,
        clock: Callable[[], float] = time.monotonic,
        staleness_ms: int = STALENESS_MS,
    ) -> None:
        """
        Initialize the MemoryAggregator.

        Args:
            path: Counter file to read.
            line_source: Callable returning the lines of a path, empty if unreadable.
            clock: Monotonic clock in seconds.
            staleness_ms: Minimum milliseconds between two reads.
        """
        self._path = path
        self._line_source = line_source
        self._clock = clock
        self._staleness_ms = staleness_ms
        self._lock = threading.Lock()
        self._snapshot = MemorySnapshot()
        self._last_refresh: float | None = None

    @property
    def path(self) -> str:
        """Get the counter file path."""
        return self._path

    def refresh(self) -> MemorySnapshot:
        """Re-read the counters if the cached snapshot is stale and return the current snapshot."""
        with self._lock:
            now = self._clock()
            if self._last_refresh is not None and now - self._last_refresh < self._staleness_ms / 1000:
                return self._snapshot

            lines = self._line_source(self._path)
            if not lines:
                logger.debug("No lines read from %s, keeping previous snapshot", self._path)
                return self._snapshot

            snapshot = build_snapshot(scan_meminfo(lines), captured_at_millis=round(now * 1000))
            if snapshot.swap_used_bytes < 0:
                logger.debug("SwapFree exceeds SwapTotal in %s", self._path)
            self._snapshot = snapshot
            self._last_refresh = now
            return snapshot

    def current_snapshot(self) -> MemorySnapshot:
        """Return the most recent snapshot without reading the source."""
        return self._snapshot

    @property
    def total(self) -> int:
        """Total physical memory in bytes."""
        return self.refresh().total_bytes

    @property
    def available(self) -> int:
        """Memory available to new processes in bytes."""
        return self.refresh().available_bytes

    @property
    def swap_total(self) -> int:
        """Total swap in bytes."""
        return self.refresh().swap_total_bytes

    @property
    def swap_used(self) -> int:
        """Swap in use in bytes."""
        return self.refresh().swap_used_bytes
