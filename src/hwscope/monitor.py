"""Background hardware polling for hwscope."""

import glob
import logging
import threading
from dataclasses import dataclass
from queue import Queue

from hwscope.config import DEFAULT_EDID_GLOB
from hwscope.edid import EDID_LENGTH, decode
from hwscope.fileutil import read_bytes
from hwscope.memory import MemoryAggregator
from hwscope.models import DisplayDescriptor, MemorySnapshot

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class HardwareSnapshot:
    """Memory and display state collected in one poll."""

    memory: MemorySnapshot
    displays: list[DisplayDescriptor]


def read_displays(pattern: str = DEFAULT_EDID_GLOB) -> list[DisplayDescriptor]:
    """
    Decode every EDID file matching a glob pattern.

    Disconnected outputs expose an empty edid file; those, and files too
    short to hold a base block, are skipped.
    """
    displays: list[DisplayDescriptor] = []
    for path in sorted(glob.glob(pattern)):
        data = read_bytes(path)
        if len(data) < EDID_LENGTH:
            logger.debug("Skipping %s: %d bytes of EDID", path, len(data))
            continue
        displays.append(decode(data))
    return displays


class HardwareMonitor:
    """
    Hardware monitor that polls memory counters and connected displays.

    Runs in a separate daemon thread and pushes updates to a thread-safe Queue.
    Collection errors are logged and never stop the loop.
    """

    def __init__(
        self,
        update_queue: Queue[HardwareSnapshot],
        aggregator: MemoryAggregator | None = None,
        poll_rate: float = 2.0,
        edid_glob: str = DEFAULT_EDID_GLOB,
    ) -> None:
        """
        Initialize the HardwareMonitor.

        Args:
            update_queue: Thread-safe queue to push updates to.
            aggregator: Memory source. A default /proc/meminfo reader if omitted.
            poll_rate: How often to poll (in seconds). Default 2.0s.
            edid_glob: Glob pattern for EDID files.
        """
        self._queue = update_queue
        self._aggregator = aggregator or MemoryAggregator()
        self._poll_rate = poll_rate
        self._edid_glob = edid_glob
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._displays_lock = threading.Lock()
        self._displays: list[DisplayDescriptor] = []

    @property
    def poll_rate(self) -> float:
        """Get the current poll rate."""
        return self._poll_rate

    @poll_rate.setter
    def poll_rate(self, value: float) -> None:
        """Set the poll rate."""
        self._poll_rate = max(0.1, value)  # Minimum 0.1 seconds

    @property
    def aggregator(self) -> MemoryAggregator:
        """Get the memory source."""
        return self._aggregator

    @property
    def displays(self) -> list[DisplayDescriptor]:
        """Displays found by the last rescan."""
        with self._displays_lock:
            return list(self._displays)

    @property
    def is_running(self) -> bool:
        """Check if the monitor thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def rescan_displays(self) -> list[DisplayDescriptor]:
        """Re-read EDID files. EDID is static, so this only runs on start and on request."""
        try:
            displays = read_displays(self._edid_glob)
        except Exception:
            logger.exception("Display scan failed")
            displays = []
        with self._displays_lock:
            self._displays = displays
        return list(displays)

    def start(self) -> None:
        """Start the monitoring thread."""
        if self.is_running:
            return

        self.rescan_displays()
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._poll_loop,
            daemon=True,
            name="HardwareMonitor",
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the monitoring thread.

        Args:
            timeout: How long to wait for thread to stop (seconds).
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def _poll_loop(self) -> None:
        """Main polling loop running in the background thread."""
        while not self._stop_event.is_set():
            try:
                self._queue.put(self.collect_snapshot())
            except Exception:
                logger.exception("Hardware poll failed")

            # Wait for poll_rate seconds or until stop is requested
            self._stop_event.wait(timeout=self._poll_rate)

    def collect_snapshot(self) -> HardwareSnapshot:
        """Collect a snapshot of the current hardware state."""
        return HardwareSnapshot(memory=self._aggregator.refresh(), displays=self.displays)
