"""Tests for hwscope application."""

import pytest

from hwscope.app import DisplayTable, HwscopeApp, MemoryStats, format_bytes
from hwscope.config import Settings
from hwscope.edid import decode
from hwscope.models import MemorySnapshot
from hwscope.monitor import HardwareSnapshot


@pytest.fixture
def settings(tmp_path, meminfo_lines, sample_edid):
    """Settings pointing at a fake /proc/meminfo and one EDID file."""
    meminfo = tmp_path / "meminfo"
    meminfo.write_text("\n".join(meminfo_lines) + "\n")
    card = tmp_path / "card0-DP-1"
    card.mkdir()
    (card / "edid").write_bytes(sample_edid)
    return Settings(
        meminfo_path=str(meminfo),
        edid_glob=str(tmp_path / "*" / "edid"),
        poll_rate=0.1,
    )


def test_format_bytes_bytes():
    """Test format_bytes with byte values."""
    assert "B" in format_bytes(500)


def test_format_bytes_kilobytes():
    """Test format_bytes with kilobyte values."""
    result = format_bytes(2048)
    assert "K" in result


def test_format_bytes_gigabytes():
    """Test format_bytes with gigabyte values."""
    result = format_bytes(1073741824)
    assert "G" in result


def test_format_bytes_negative():
    """Test negative values (inconsistent swap counters) keep their unit."""
    assert format_bytes(-2 * 1024**2).endswith("M")


@pytest.mark.asyncio
async def test_app_creation(settings):
    """Test HwscopeApp can be instantiated."""
    app = HwscopeApp(settings)
    assert app.title == "hwscope"
    assert app._monitor is not None
    assert app._monitor.aggregator.path == settings.meminfo_path


@pytest.mark.asyncio
async def test_app_compose(settings):
    """Test HwscopeApp composes correctly."""
    app = HwscopeApp(settings)
    async with app.run_test() as pilot:
        assert pilot.app.query_one("#memory-stats") is not None
        assert pilot.app.query_one("#display-table") is not None


@pytest.mark.asyncio
async def test_app_quit_binding(settings):
    """Test that 'q' binding triggers quit."""
    app = HwscopeApp(settings)
    async with app.run_test() as pilot:
        await pilot.press("q")
        assert not app._monitor.is_running


@pytest.mark.asyncio
async def test_app_receives_updates_from_monitor(settings):
    """Test that app receives updates from the hardware monitor."""
    app = HwscopeApp(settings)
    async with app.run_test() as pilot:
        await pilot.pause(1.5)

        assert app._monitor.is_running
        stats = pilot.app.query_one("#memory-stats", MemoryStats)
        assert stats.snapshot.total_bytes == 16384000 * 1024
        table = pilot.app.query_one(DisplayTable)
        assert [d.manufacturer_id for d in table.displays] == ["DEL"]


@pytest.mark.asyncio
async def test_update_ui(settings, sample_edid):
    """Test update_ui pushes a snapshot into both widgets."""
    app = HwscopeApp(settings)
    async with app.run_test() as pilot:
        snapshot = HardwareSnapshot(
            memory=MemorySnapshot(
                total_bytes=16 * 1024**3,
                free_bytes=1024**3,
                available_bytes=8 * 1024**3,
                swap_total_bytes=0,
                swap_used_bytes=0,
                captured_at_millis=1,
            ),
            displays=[decode(sample_edid), decode(sample_edid)],
        )

        pilot.app.update_ui(snapshot)

        stats = pilot.app.query_one("#memory-stats", MemoryStats)
        assert stats.snapshot.available_bytes == 8 * 1024**3
        assert "Mem" in stats.stats_text()
        table = pilot.app.query_one("#display-table")
        assert table.row_count == 2


@pytest.mark.asyncio
async def test_memory_stats_loading_text(settings):
    """Test the header shows a placeholder before the first snapshot."""
    app = HwscopeApp(settings)
    async with app.run_test() as pilot:
        stats = pilot.app.query_one("#memory-stats", MemoryStats)
        stats.update_stats(MemorySnapshot())
        assert stats.stats_text() == "Loading memory info..."


@pytest.mark.asyncio
async def test_rescan_binding(settings):
    """Test that 'r' rescans EDID files."""
    app = HwscopeApp(settings)
    async with app.run_test() as pilot:
        await pilot.press("r")
        table = pilot.app.query_one(DisplayTable)
        assert len(table.displays) == 1


@pytest.mark.asyncio
async def test_update_ui_isolates_widget_failures(settings, sample_edid, monkeypatch):
    """Test a failing memory widget does not stop the display table update."""
    app = HwscopeApp(settings)
    async with app.run_test() as pilot:

        def broken_update(self, snapshot):
            raise RuntimeError("render failed")

        monkeypatch.setattr(MemoryStats, "update_stats", broken_update)

        pilot.app.update_ui(
            HardwareSnapshot(memory=MemorySnapshot(), displays=[decode(sample_edid)] * 3)
        )

        table = pilot.app.query_one("#display-table")
        assert table.row_count == 3
