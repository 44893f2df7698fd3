"""Data models for hwscope."""

from dataclasses import dataclass
from enum import IntEnum


@dataclass(slots=True, frozen=True)
class MemorySnapshot:
    """Immutable snapshot of physical and swap memory."""

    total_bytes: int = 0
    free_bytes: int = 0
    available_bytes: int = 0
    swap_total_bytes: int = 0
    swap_used_bytes: int = 0  # May be negative if SwapFree > SwapTotal
    captured_at_millis: int = 0  # Monotonic clock, 0 = never refreshed

    @property
    def used_bytes(self) -> int:
        """Memory in use, i.e. total minus available."""
        return self.total_bytes - self.available_bytes

    @property
    def swap_free_bytes(self) -> int:
        """Swap not in use."""
        return self.swap_total_bytes - self.swap_used_bytes


class TextKind(IntEnum):
    """Display descriptor tags that carry ASCII text."""

    MONITOR_NAME = 0xFC
    UNSPECIFIED = 0xFE
    SERIAL_NUMBER = 0xFF


@dataclass(slots=True, frozen=True)
class DetailedTimingDescriptor:
    """Preferred or alternate video mode."""

    raw: bytes
    type_tag: int
    pixel_clock_mhz: float
    horizontal_active: int
    vertical_active: int

    def describe(self) -> str:
        """One-line human-readable summary."""
        return (
            f"Clock {self.pixel_clock_mhz:g}MHz, "
            f"Active Pixels {self.horizontal_active}x{self.vertical_active}"
        )


@dataclass(slots=True, frozen=True)
class RangeLimitsDescriptor:
    """Monitor range limits."""

    raw: bytes
    type_tag: int
    vertical_rate_hz: tuple[int, int]
    horizontal_rate_khz: tuple[int, int]
    max_pixel_clock_mhz: int

    def describe(self) -> str:
        """One-line human-readable summary."""
        v_min, v_max = self.vertical_rate_hz
        h_min, h_max = self.horizontal_rate_khz
        return (
            f"Field Rate {v_min}-{v_max} Hz vertical, {h_min}-{h_max} kHz horizontal, "
            f"Max clock: {self.max_pixel_clock_mhz} MHz"
        )


@dataclass(slots=True, frozen=True)
class TextDescriptor:
    """Monitor name, serial number or free-form text."""

    raw: bytes
    type_tag: int
    kind: TextKind
    text: str

    def describe(self) -> str:
        """One-line human-readable summary."""
        label = {
            TextKind.MONITOR_NAME: "Monitor Name",
            TextKind.UNSPECIFIED: "Unspecified Text",
            TextKind.SERIAL_NUMBER: "Serial Number",
        }[self.kind]
        return f"{label}: {self.text}"


@dataclass(slots=True, frozen=True)
class UnknownDescriptor:
    """Descriptor with an unrecognized tag, kept as a hex dump."""

    raw: bytes
    type_tag: int
    hex: str

    def describe(self) -> str:
        """One-line human-readable summary."""
        return f"Type {self.type_tag:08X}: {self.hex}"


DescriptorBlock = DetailedTimingDescriptor | RangeLimitsDescriptor | TextDescriptor | UnknownDescriptor


@dataclass(slots=True, frozen=True)
class DisplayDescriptor:
    """Decoded EDID 1.x base block."""

    manufacturer_id: str
    product_id: int
    serial_number: str
    manufacture_week: int
    manufacture_year: int
    version: str
    is_digital_input: bool
    width_cm: int
    height_cm: int
    descriptors: tuple[DescriptorBlock, ...]
    raw_hex: str

    @property
    def monitor_name(self) -> str:
        """Name from the first monitor-name descriptor, or an empty string."""
        for desc in self.descriptors:
            if isinstance(desc, TextDescriptor) and desc.kind is TextKind.MONITOR_NAME:
                return desc.text
        return ""

    @property
    def preferred_timing(self) -> DetailedTimingDescriptor | None:
        """First detailed timing descriptor, which EDID defines as the preferred mode."""
        for desc in self.descriptors:
            if isinstance(desc, DetailedTimingDescriptor):
                return desc
        return None
