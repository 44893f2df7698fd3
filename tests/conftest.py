"""Shared fixtures for hwscope tests."""

import pytest

# Dell U2419H style base block: DEL / 0xA0C2 / digital / 53x30cm / 1920x1080
SAMPLE_EDID = bytes.fromhex(
    "00ffffffffffff0010acc2a04c4a3031"
    "141c010480351e78ea0565a756529c27"
    "0f5054a54b00714f8180a9c0d1c00101"
    "010101010101023a801871382d40582c"
    "45000f282100001e000000fd00384c1e"
    "5311000a202020202020000000fc0044"
    "454c4c205532343139480a20000000ff"
    "00434656394e3939543041424c0a00e2"
)

MEMINFO_LINES = [
    "MemTotal:       16384000 kB",
    "MemFree:         2048000 kB",
    "MemAvailable:    5000000 kB",
    "Buffers:          123456 kB",
    "Cached:          3000000 kB",
    "Active(file):    1500000 kB",
    "Inactive(file):   800000 kB",
    "SReclaimable:     250000 kB",
    "SwapTotal:       1000000 kB",
    "SwapFree:         200000 kB",
    "HugePages_Total:       0",
]


@pytest.fixture
def sample_edid() -> bytes:
    """A valid 128-byte EDID base block."""
    return SAMPLE_EDID


@pytest.fixture
def meminfo_lines() -> list[str]:
    """Typical /proc/meminfo content."""
    return list(MEMINFO_LINES)
