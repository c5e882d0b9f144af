"""Low-level stream helpers shared by the header codecs."""

from __future__ import annotations

from typing import BinaryIO

from abootimg.errors import HeaderFormatError, ShortRead, ShortWrite


def read_exact(stream: BinaryIO, size: int) -> bytes:
    """Read exactly ``size`` bytes or raise :class:`ShortRead`."""

    chunks = []
    remaining = size
    while remaining:
        chunk = stream.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    data = b"".join(chunks)
    if len(data) != size:
        raise ShortRead(size, len(data))
    return data


def write_all(stream: BinaryIO, data: bytes) -> None:
    """Write ``data`` in full or raise :class:`ShortWrite`."""

    written = stream.write(data)
    # raw file objects report a count, buffered ones may return None
    if written is not None and written != len(data):
        raise ShortWrite(len(data), written)


def padding(size: int, page_size: int) -> int:
    """Number of bytes needed to pad ``size`` up to a multiple of ``page_size``."""

    return (page_size - (size & (page_size - 1))) & (page_size - 1)


def is_power_of_two(value: int) -> bool:
    return value > 0 and value & (value - 1) == 0


def fixed_bytes(name: str, value: bytes, width: int) -> bytes:
    """NUL-pad ``value`` to ``width`` bytes, rejecting longer values."""

    value = bytes(value)
    if len(value) > width:
        raise HeaderFormatError(f"{name} must be at most {width} bytes")
    return value.ljust(width, b"\x00")


def until_nul(value: bytes) -> bytes:
    """Return the contents of a fixed-width field up to the first NUL byte."""

    index = value.find(b"\x00")
    return value if index < 0 else value[:index]
