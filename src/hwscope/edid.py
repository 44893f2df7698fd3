"""
EDID 1.x decoding.

Only the 128-byte base block is interpreted. Offsets used below:

    8-9    manufacturer ID, three 5-bit letters
    10-11  product code, little-endian
    12-15  serial number, little-endian
    16     week of manufacture
    17     year of manufacture - 1990
    18-19  EDID version and revision
    20     video input parameters, bit 7 set for digital
    21-22  maximum image size in cm
    54-125 four 18-byte descriptors
"""

import logging
import struct

from hwscope.models import (
    DescriptorBlock,
    DetailedTimingDescriptor,
    DisplayDescriptor,
    RangeLimitsDescriptor,
    TextDescriptor,
    TextKind,
    UnknownDescriptor,
)

logger = logging.getLogger(__name__)

EDID_LENGTH = 128
DESCRIPTOR_OFFSET = 54
DESCRIPTOR_LENGTH = 18
DESCRIPTOR_COUNT = 4

RANGE_LIMITS_TAG = 0xFD

_CONTROL_AND_SPACE = bytes(range(0x21))


class EdidError(ValueError):
    """Base class for EDID decoding errors."""


class BufferTooShort(EdidError):
    """Raised when a buffer is too short to hold an EDID base block."""

    def __init__(self, length: int, required: int = EDID_LENGTH) -> None:
        """Record the offending and required lengths."""
        super().__init__(f"EDID buffer is {length} bytes, need at least {required}")
        self.length = length
        self.required = required


def to_hex(data: bytes) -> str:
    """Uppercase hex dump of a byte string."""
    return data.hex().upper()


def manufacturer_id(edid: bytes) -> str:
    """Decode the three 5-bit letters packed into bytes 8 and 9."""
    (word,) = struct.unpack_from(">H", edid, 8)
    letters = ((word >> 10) & 0x1F, (word >> 5) & 0x1F, word & 0x1F)
    return "".join(chr(ord("A") + v - 1) for v in letters if v)


def product_id(edid: bytes) -> int:
    """Product code from bytes 10-11, little-endian."""
    (value,) = struct.unpack_from("<H", edid, 10)
    return value


def _alnum_or_hex(b: int) -> str:
    """Render a byte as its character if ASCII alphanumeric, else as two hex digits."""
    c = chr(b)
    return c if c.isascii() and c.isalnum() else f"{b:02X}"


def serial_number(edid: bytes) -> str:
    """Bytes 12-15, most significant first, as characters where printable."""
    return "".join(_alnum_or_hex(b) for b in reversed(edid[12:16]))


def descriptor_type(block: bytes) -> int:
    """First four bytes of a descriptor as a big-endian integer."""
    (tag,) = struct.unpack_from(">I", block, 0)
    return tag


def _timing(block: bytes, tag: int) -> DetailedTimingDescriptor:
    """Decode a detailed timing descriptor."""
    (clock,) = struct.unpack_from("<H", block, 0)
    # 12-bit values: low 8 bits in one byte, high 4 bits in the upper nibble of another
    h_active = block[2] | ((block[4] & 0xF0) << 4)
    v_active = block[5] | ((block[7] & 0xF0) << 4)
    return DetailedTimingDescriptor(
        raw=block,
        type_tag=tag,
        pixel_clock_mhz=clock / 100,
        horizontal_active=h_active,
        vertical_active=v_active,
    )


def _range_limits(block: bytes, tag: int) -> RangeLimitsDescriptor:
    """Decode a range limits descriptor."""
    return RangeLimitsDescriptor(
        raw=block,
        type_tag=tag,
        vertical_rate_hz=(block[5], block[6]),
        horizontal_rate_khz=(block[7], block[8]),
        max_pixel_clock_mhz=block[9] * 10,
    )


def _text(block: bytes, tag: int) -> TextDescriptor:
    """Decode a text descriptor."""
    # Byte 4 is a reserved NUL and short strings end in LF plus space padding
    text = block[4:DESCRIPTOR_LENGTH].strip(_CONTROL_AND_SPACE).decode("ascii", errors="replace")
    return TextDescriptor(raw=block, type_tag=tag, kind=TextKind(tag), text=text)


def decode_descriptor(block: bytes) -> DescriptorBlock:
    """
    Decode one 18-byte descriptor.

    A non-zero pixel clock in bytes 0-1 marks a detailed timing descriptor.
    Otherwise byte 3 selects the display descriptor type; types without a
    dedicated decoder are returned as UnknownDescriptor.
    """
    block = bytes(block[:DESCRIPTOR_LENGTH])
    if len(block) < DESCRIPTOR_LENGTH:
        raise BufferTooShort(len(block), DESCRIPTOR_LENGTH)

    tag = descriptor_type(block)
    if block[0] or block[1]:
        return _timing(block, tag)
    if tag == RANGE_LIMITS_TAG:
        return _range_limits(block, tag)
    if tag in (TextKind.MONITOR_NAME, TextKind.UNSPECIFIED, TextKind.SERIAL_NUMBER):
        return _text(block, tag)
    return UnknownDescriptor(raw=block, type_tag=tag, hex=to_hex(block))


def descriptors(edid: bytes) -> tuple[DescriptorBlock, ...]:
    """Decode the four 18-byte descriptors starting at byte 54."""
    return tuple(
        decode_descriptor(edid[start : start + DESCRIPTOR_LENGTH])
        for start in range(
            DESCRIPTOR_OFFSET,
            DESCRIPTOR_OFFSET + DESCRIPTOR_LENGTH * DESCRIPTOR_COUNT,
            DESCRIPTOR_LENGTH,
        )
    )


def decode(buffer: bytes) -> DisplayDescriptor:
    """
    Decode an EDID base block.

    Args:
        buffer: Raw EDID, at least 128 bytes. Extension blocks are ignored.

    Returns:
        The decoded DisplayDescriptor.

    Raises:
        BufferTooShort: If the buffer holds fewer than 128 bytes.
    """
    if len(buffer) < EDID_LENGTH:
        raise BufferTooShort(len(buffer))

    edid = bytes(buffer[:EDID_LENGTH])
    logger.debug("Decoding EDID %s", to_hex(edid))
    (year_offset,) = struct.unpack_from("b", edid, 17)

    return DisplayDescriptor(
        manufacturer_id=manufacturer_id(edid),
        product_id=product_id(edid),
        serial_number=serial_number(edid),
        manufacture_week=edid[16],
        manufacture_year=1990 + year_offset,
        version=f"{edid[18]}.{edid[19]}",
        is_digital_input=bool(edid[20] & 0x80),
        width_cm=edid[21],
        height_cm=edid[22],
        descriptors=descriptors(edid),
        raw_hex=to_hex(edid),
    )
