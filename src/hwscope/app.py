"""hwscope - Main Textual application."""

import logging
from queue import Empty, Queue

from textual.app import App, ComposeResult
from textual.containers import Container
from textual.logging import TextualHandler
from textual.widgets import DataTable, Footer, Static

from hwscope.config import Settings
from hwscope.memory import MemoryAggregator
from hwscope.models import DisplayDescriptor, MemorySnapshot
from hwscope.monitor import HardwareMonitor, HardwareSnapshot

logger = logging.getLogger(__name__)


def format_bytes(size: int) -> str:
    """Format bytes as human-readable string."""
    for unit in ["B", "K", "M", "G", "T"]:
        if abs(size) < 1024:
            return f"{size:5.1f}{unit}" if unit != "B" else f"{size:5d}{unit}"
        size = size / 1024
    return f"{size:.1f}P"


def _bar(used: int, total: int, color: str) -> str:
    """Render a 20-cell usage bar."""
    percent = used / total * 100 if total > 0 else 0.0
    bar_len = min(max(int(percent / 5), 0), 20)
    return f"[{color}]█[/{color}]" * bar_len + "[dim]░[/dim]" * (20 - bar_len)


class MemoryStats(Static):
    """Header widget showing memory and swap usage."""

    DEFAULT_CSS = """
    MemoryStats {
        height: auto;
        min-height: 4;
        padding: 1;
        background: $surface;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize MemoryStats."""
        super().__init__(*args, **kwargs)
        self._snapshot = MemorySnapshot()

    @property
    def snapshot(self) -> MemorySnapshot:
        """Get the snapshot currently shown."""
        return self._snapshot

    def on_mount(self) -> None:
        """Show the placeholder text when mounted."""
        self.update(self.stats_text())

    def update_stats(self, snapshot: MemorySnapshot) -> None:
        """Update the statistics from a memory snapshot."""
        self._snapshot = snapshot
        self.update(self.stats_text())

    def stats_text(self) -> str:
        """Get memory info display."""
        snap = self._snapshot
        if snap.total_bytes == 0:
            return "Loading memory info..."

        mem_bar = _bar(snap.used_bytes, snap.total_bytes, "cyan")
        swap_bar = _bar(snap.swap_used_bytes, snap.swap_total_bytes, "yellow")
        # Use escaped brackets for the bar containers
        return (
            f"Mem\\[{mem_bar}] {format_bytes(snap.used_bytes)}/{format_bytes(snap.total_bytes)}\n"
            f"Swp\\[{swap_bar}] {format_bytes(snap.swap_used_bytes)}/{format_bytes(snap.swap_total_bytes)}\n"
            f"Available: {format_bytes(snap.available_bytes)}  Free: {format_bytes(snap.free_bytes)}"
        )


class DisplayTable(Container):
    """Container for the connected displays table."""

    DEFAULT_CSS = """
    DisplayTable {
        height: 1fr;
        border: solid $primary;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize DisplayTable."""
        super().__init__(*args, **kwargs)
        self._displays: list[DisplayDescriptor] = []

    @property
    def displays(self) -> list[DisplayDescriptor]:
        """Get the displays currently shown."""
        return list(self._displays)

    def compose(self) -> ComposeResult:
        """Compose the display table."""
        yield DataTable(id="display-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        table = self.query_one("#display-table", DataTable)
        table.cursor_type = "row"

        table.add_column("MFG", key="mfg", width=5)
        table.add_column("Product", key="product", width=8)
        table.add_column("Serial", key="serial", width=10)
        table.add_column("Made", key="made", width=9)
        table.add_column("EDID", key="version", width=5)
        table.add_column("Input", key="input", width=8)
        table.add_column("Size", key="size", width=10)
        table.add_column("Preferred mode", key="mode", width=28)
        table.add_column("Name", key="name")

    def update_displays(self, displays: list[DisplayDescriptor]) -> None:
        """Replace the table rows when the set of displays changes."""
        if displays == self._displays:
            return

        table = self.query_one("#display-table", DataTable)
        table.clear()
        for index, display in enumerate(displays):
            timing = display.preferred_timing
            table.add_row(
                display.manufacturer_id,
                f"{display.product_id:04x}",
                display.serial_number,
                f"{display.manufacture_year}w{display.manufacture_week:02d}",
                display.version,
                "digital" if display.is_digital_input else "analog",
                f"{display.width_cm}x{display.height_cm}cm",
                timing.describe() if timing else "",
                display.monitor_name,
                key=str(index),
            )
        self._displays = list(displays)


class HwscopeApp(App):
    """Main hwscope application."""

    TITLE = "hwscope"
    SUB_TITLE = "Memory and Display Inspector"

    CSS = """
    Screen {
        layout: vertical;
    }

    #memory-stats {
        dock: top;
        height: auto;
        min-height: 5;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("r", "rescan", "Rescan displays"),
    ]

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the HwscopeApp."""
        super().__init__()
        self._settings = settings or Settings()
        self._update_queue: Queue[HardwareSnapshot] = Queue()
        self._monitor = HardwareMonitor(
            self._update_queue,
            aggregator=MemoryAggregator(self._settings.meminfo_path),
            poll_rate=self._settings.poll_rate,
            edid_glob=self._settings.edid_glob,
        )

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield MemoryStats(id="memory-stats")
        yield DisplayTable()
        yield Footer()

    def on_mount(self) -> None:
        """Start the hardware monitor when the app is mounted."""
        self._monitor.start()
        # Set up a timer to poll the queue for updates
        self.set_interval(0.5, self._check_for_updates)

    def _check_for_updates(self) -> None:
        """Check the queue for hardware updates and refresh the UI."""
        # Drain the queue to get the most recent snapshot
        snapshot = None
        while True:
            try:
                snapshot = self._update_queue.get_nowait()
            except Empty:
                break

        if snapshot is not None:
            self.update_ui(snapshot)

    def update_ui(self, snapshot: HardwareSnapshot) -> None:
        """Update the UI with a new hardware snapshot."""
        try:
            self.query_one("#memory-stats", MemoryStats).update_stats(snapshot.memory)
        except Exception:
            logger.exception("Failed to update memory stats")

        try:
            self.query_one(DisplayTable).update_displays(snapshot.displays)
        except Exception:
            logger.exception("Failed to update display table")

    def action_rescan(self) -> None:
        """Re-read EDID files and show the result."""
        displays = self._monitor.rescan_displays()
        self.query_one(DisplayTable).update_displays(displays)
        self.notify(f"Displays: {len(displays)}")

    def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        self._monitor.stop()
        self.exit()


def main() -> None:
    """Entry point for hwscope application."""
    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level, handlers=[TextualHandler()])
    app = HwscopeApp(settings)
    app.run()


if __name__ == "__main__":
    main()
