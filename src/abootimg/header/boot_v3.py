"""Boot image header codec for versions 3 and 4.

The page size is fixed at 4096 bytes. Section layout::

    header | kernel | ramdisk | boot signature (v4)
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from struct import Struct
from typing import BinaryIO, Optional

from abootimg.errors import BadMagic, HeaderFormatError, HeaderSizeMismatch, UnknownVersion
from abootimg.header.boot_v0 import BOOT_MAGIC, MAGIC_LEN, VERSION_OFFSET
from abootimg.header.stream import fixed_bytes, padding, read_exact, until_nul, write_all
from abootimg.header.version import OsVersionPatch

PAGE_SIZE = 4096
CMDLINE_LEN = 1536
RESERVED_LEN = 16

HEADER_V3_SIZE = 1580
HEADER_V4_SIZE = 1584

_PREFIX_STRUCT = Struct("<4I16sI1536s")
_V4_STRUCT = Struct("<I")


@dataclass(frozen=True)
class HeaderV3:
    """Android boot image header for versions 3 and 4.

    The version is inferred from :attr:`v4_signature_size`: ``None`` means
    version 3, any integer means version 4.
    """

    kernel_size: int = 0
    ramdisk_size: int = 0
    osversionpatch: OsVersionPatch = field(default_factory=OsVersionPatch)
    cmdline: bytes = b""
    v4_signature_size: Optional[int] = None

    def __post_init__(self) -> None:
        if not isinstance(self.osversionpatch, OsVersionPatch):
            object.__setattr__(self, "osversionpatch", OsVersionPatch(int(self.osversionpatch)))
        object.__setattr__(self, "cmdline", fixed_bytes("cmdline", self.cmdline, CMDLINE_LEN))

    @classmethod
    def read(cls, stream: BinaryIO) -> HeaderV3:
        magic = read_exact(stream, MAGIC_LEN)
        if magic != BOOT_MAGIC:
            raise BadMagic(0, BOOT_MAGIC, magic)
        (
            kernel_size,
            ramdisk_size,
            osversionpatch,
            header_size,
            _reserved,
            header_version,
            cmdline,
        ) = _PREFIX_STRUCT.unpack(read_exact(stream, _PREFIX_STRUCT.size))

        if header_version == 3:
            v4_signature_size = None
            expected_size = HEADER_V3_SIZE
        elif header_version == 4:
            (v4_signature_size,) = _V4_STRUCT.unpack(read_exact(stream, _V4_STRUCT.size))
            expected_size = HEADER_V4_SIZE
        else:
            raise UnknownVersion(VERSION_OFFSET, header_version)
        if header_size != expected_size:
            raise HeaderSizeMismatch(f"boot v{header_version}", expected_size, header_size)

        return cls(
            kernel_size=kernel_size,
            ramdisk_size=ramdisk_size,
            osversionpatch=OsVersionPatch(osversionpatch),
            cmdline=cmdline,
            v4_signature_size=v4_signature_size,
        )

    def to_bytes(self) -> bytes:
        try:
            prefix = _PREFIX_STRUCT.pack(
                self.kernel_size,
                self.ramdisk_size,
                int(self.osversionpatch),
                self.header_size,
                bytes(RESERVED_LEN),
                self.header_version,
                self.cmdline,
            )
            trailer = b"" if self.v4_signature_size is None else _V4_STRUCT.pack(self.v4_signature_size)
        except struct.error as exc:
            raise HeaderFormatError(f"Header field out of range: {exc}") from exc
        return b"".join([BOOT_MAGIC, prefix, trailer])

    def write(self, stream: BinaryIO) -> None:
        write_all(stream, self.to_bytes())

    @property
    def header_version(self) -> int:
        return 3 if self.v4_signature_size is None else 4

    @property
    def header_size(self) -> int:
        return HEADER_V3_SIZE if self.v4_signature_size is None else HEADER_V4_SIZE

    @property
    def page_size(self) -> int:
        return PAGE_SIZE

    @property
    def cmdline_text(self) -> bytes:
        """Command line up to its first NUL."""
        return until_nul(self.cmdline)

    @property
    def kernel_position(self) -> int:
        return PAGE_SIZE

    @property
    def ramdisk_position(self) -> int:
        return self.kernel_position + self.kernel_size + padding(self.kernel_size, PAGE_SIZE)

    @property
    def bootsig_position(self) -> int:
        """Position of the boot signature; only meaningful at version 4."""
        return self.ramdisk_position + self.ramdisk_size + padding(self.ramdisk_size, PAGE_SIZE)
