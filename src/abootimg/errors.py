"""Custom exceptions for abootimg."""

from __future__ import annotations


class BootImageError(Exception):
    """Base exception for abootimg."""


class HeaderFormatError(BootImageError):
    """Header does not match the expected format."""


class BadMagic(HeaderFormatError):
    """Magic bytes at the start of the header are not recognised."""

    def __init__(self, pos: int, expected: bytes, found: bytes) -> None:
        super().__init__(f"Bad magic at offset {pos:#x}: expected {expected!r}, found {found!r}")
        self.pos = pos
        self.expected = expected
        self.found = found


class UnknownVersion(HeaderFormatError):
    """Header version word is outside the supported range."""

    def __init__(self, pos: int, value: int) -> None:
        super().__init__(f"Unknown header version {value} at offset {pos:#x}")
        self.pos = pos
        self.value = value


class HeaderSizeMismatch(HeaderFormatError):
    """Embedded header_size does not match the size fixed by the header version."""

    def __init__(self, variant: str, expected: int, found: int) -> None:
        super().__init__(f"Header size mismatch for {variant}: expected {expected}, found {found}")
        self.variant = variant
        self.expected = expected
        self.found = found


class ShortRead(BootImageError):
    """Byte source ended in the middle of a record."""

    def __init__(self, expected: int, found: int) -> None:
        super().__init__(f"Short read: expected {expected} bytes, got {found}")
        self.expected = expected
        self.found = found


class ShortWrite(BootImageError):
    """Byte sink accepted fewer bytes than written."""

    def __init__(self, expected: int, found: int) -> None:
        super().__init__(f"Short write: expected {expected} bytes, wrote {found}")
        self.expected = expected
        self.found = found
