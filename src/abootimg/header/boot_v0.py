"""Boot image header codec for versions 0, 1 and 2.

Section layout, every section padded up to ``page_size``::

    header | kernel | ramdisk | second | recovery dtbo/acpio (v1+) | dtb (v2)
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from struct import Struct
from typing import BinaryIO, ClassVar, Optional, Union

from abootimg.errors import BadMagic, HeaderFormatError, HeaderSizeMismatch, UnknownVersion
from abootimg.header.stream import (
    fixed_bytes,
    is_power_of_two,
    padding,
    read_exact,
    until_nul,
    write_all,
)
from abootimg.header.version import OsVersionPatch

BOOT_MAGIC = b"ANDROID!"
MAGIC_LEN = 8
VERSION_OFFSET = 0x28

BOARD_NAME_LEN = 16
CMDLINE_PART_1_LEN = 512
HASH_DIGEST_LEN = 32
CMDLINE_PART_2_LEN = 1024

HEADER_V0_SIZE = 1632
HEADER_V1_SIZE = 1648
HEADER_V2_SIZE = 1660
# kernel offset is computed from the largest v0-family header; v0 and v1
# images leave the unused tail of the first page as padding
KERNEL_OFFSET_BASE = HEADER_V2_SIZE

_PREFIX_STRUCT = Struct("<10I16s512s32s1024s")  # 1624 bytes after the magic
_TRAILER_V1_STRUCT = Struct("<IQI")
_TRAILER_V2_STRUCT = Struct("<IQIIQ")


@dataclass(frozen=True)
class TrailerV0:
    """Version 0 carries no trailing fields."""

    header_version: ClassVar[int] = 0
    header_size: ClassVar[Optional[int]] = None


@dataclass(frozen=True)
class TrailerV1:
    header_version: ClassVar[int] = 1
    header_size: ClassVar[Optional[int]] = HEADER_V1_SIZE

    recovery_dtbo_size: int = 0
    recovery_dtbo_addr: int = 0


@dataclass(frozen=True)
class TrailerV2:
    header_version: ClassVar[int] = 2
    header_size: ClassVar[Optional[int]] = HEADER_V2_SIZE

    recovery_dtbo_size: int = 0
    recovery_dtbo_addr: int = 0
    dtb_size: int = 0
    dtb_addr: int = 0


TrailerV0Family = Union[TrailerV0, TrailerV1, TrailerV2]
_TRAILER_TYPES = (TrailerV0, TrailerV1, TrailerV2)


def _check_header_size(variant: str, expected: int, found: int) -> None:
    if found != expected:
        raise HeaderSizeMismatch(variant, expected, found)


def _read_trailer(stream: BinaryIO, header_version: int) -> TrailerV0Family:
    if header_version == 0:
        return TrailerV0()
    if header_version == 1:
        recovery_dtbo_size, recovery_dtbo_addr, header_size = _TRAILER_V1_STRUCT.unpack(
            read_exact(stream, _TRAILER_V1_STRUCT.size)
        )
        _check_header_size("boot v1", HEADER_V1_SIZE, header_size)
        return TrailerV1(recovery_dtbo_size, recovery_dtbo_addr)
    if header_version == 2:
        (
            recovery_dtbo_size,
            recovery_dtbo_addr,
            header_size,
            dtb_size,
            dtb_addr,
        ) = _TRAILER_V2_STRUCT.unpack(read_exact(stream, _TRAILER_V2_STRUCT.size))
        _check_header_size("boot v2", HEADER_V2_SIZE, header_size)
        return TrailerV2(recovery_dtbo_size, recovery_dtbo_addr, dtb_size, dtb_addr)
    raise UnknownVersion(VERSION_OFFSET, header_version)


def _pack_trailer(trailer: TrailerV0Family) -> bytes:
    if isinstance(trailer, TrailerV1):
        return _TRAILER_V1_STRUCT.pack(
            trailer.recovery_dtbo_size,
            trailer.recovery_dtbo_addr,
            HEADER_V1_SIZE,
        )
    if isinstance(trailer, TrailerV2):
        return _TRAILER_V2_STRUCT.pack(
            trailer.recovery_dtbo_size,
            trailer.recovery_dtbo_addr,
            HEADER_V2_SIZE,
            trailer.dtb_size,
            trailer.dtb_addr,
        )
    return b""


@dataclass(frozen=True)
class HeaderV0:
    """Android boot image header for versions 0, 1 and 2.

    ``header_version`` and ``header_size`` are not stored: both follow from
    the type of :attr:`versioned`. Byte fields are NUL-padded to their wire
    width on construction.
    """

    kernel_size: int = 0
    kernel_addr: int = 0
    ramdisk_size: int = 0
    ramdisk_addr: int = 0
    second_bootloader_size: int = 0
    second_bootloader_addr: int = 0
    tags_addr: int = 0
    page_size: int = 2048
    osversionpatch: OsVersionPatch = field(default_factory=OsVersionPatch)
    board_name: bytes = b""
    cmdline_part_1: bytes = b""
    hash_digest: bytes = b""
    cmdline_part_2: bytes = b""
    versioned: TrailerV0Family = field(default_factory=TrailerV0)

    def __post_init__(self) -> None:
        if not is_power_of_two(self.page_size):
            raise HeaderFormatError(f"page_size must be a power of two, got {self.page_size}")
        if not isinstance(self.versioned, _TRAILER_TYPES):
            raise TypeError(f"Unsupported trailer type: {type(self.versioned).__name__}")
        if not isinstance(self.osversionpatch, OsVersionPatch):
            object.__setattr__(self, "osversionpatch", OsVersionPatch(int(self.osversionpatch)))
        for name, width in (
            ("board_name", BOARD_NAME_LEN),
            ("cmdline_part_1", CMDLINE_PART_1_LEN),
            ("hash_digest", HASH_DIGEST_LEN),
            ("cmdline_part_2", CMDLINE_PART_2_LEN),
        ):
            object.__setattr__(self, name, fixed_bytes(name, getattr(self, name), width))

    @classmethod
    def read(cls, stream: BinaryIO) -> HeaderV0:
        """Read a v0-family header from the current position of ``stream``."""

        magic = read_exact(stream, MAGIC_LEN)
        if magic != BOOT_MAGIC:
            raise BadMagic(0, BOOT_MAGIC, magic)
        (
            kernel_size,
            kernel_addr,
            ramdisk_size,
            ramdisk_addr,
            second_bootloader_size,
            second_bootloader_addr,
            tags_addr,
            page_size,
            header_version,
            osversionpatch,
            board_name,
            cmdline_part_1,
            hash_digest,
            cmdline_part_2,
        ) = _PREFIX_STRUCT.unpack(read_exact(stream, _PREFIX_STRUCT.size))

        versioned = _read_trailer(stream, header_version)
        return cls(
            kernel_size=kernel_size,
            kernel_addr=kernel_addr,
            ramdisk_size=ramdisk_size,
            ramdisk_addr=ramdisk_addr,
            second_bootloader_size=second_bootloader_size,
            second_bootloader_addr=second_bootloader_addr,
            tags_addr=tags_addr,
            page_size=page_size,
            osversionpatch=OsVersionPatch(osversionpatch),
            board_name=board_name,
            cmdline_part_1=cmdline_part_1,
            hash_digest=hash_digest,
            cmdline_part_2=cmdline_part_2,
            versioned=versioned,
        )

    def to_bytes(self) -> bytes:
        try:
            prefix = _PREFIX_STRUCT.pack(
                self.kernel_size,
                self.kernel_addr,
                self.ramdisk_size,
                self.ramdisk_addr,
                self.second_bootloader_size,
                self.second_bootloader_addr,
                self.tags_addr,
                self.page_size,
                self.header_version,
                int(self.osversionpatch),
                self.board_name,
                self.cmdline_part_1,
                self.hash_digest,
                self.cmdline_part_2,
            )
            trailer = _pack_trailer(self.versioned)
        except struct.error as exc:
            raise HeaderFormatError(f"Header field out of range: {exc}") from exc
        return b"".join([BOOT_MAGIC, prefix, trailer])

    def write(self, stream: BinaryIO) -> None:
        """Serialize the header. Payload sections are not written."""

        write_all(stream, self.to_bytes())

    @property
    def header_version(self) -> int:
        return self.versioned.header_version

    @property
    def header_size(self) -> Optional[int]:
        """Size recorded in the header, ``None`` for version 0."""
        return self.versioned.header_size

    @property
    def cmdline_text(self) -> bytes:
        """Both command line parts joined, each taken up to its first NUL."""
        return until_nul(self.cmdline_part_1) + until_nul(self.cmdline_part_2)

    @property
    def board_name_text(self) -> bytes:
        return until_nul(self.board_name)

    @property
    def recovery_dtbo_size(self) -> int:
        if isinstance(self.versioned, TrailerV0):
            return 0
        return self.versioned.recovery_dtbo_size

    @property
    def dtb_size(self) -> int:
        if isinstance(self.versioned, TrailerV2):
            return self.versioned.dtb_size
        return 0

    def _padding(self, size: int) -> int:
        return padding(size, self.page_size)

    @property
    def kernel_position(self) -> int:
        return KERNEL_OFFSET_BASE + self._padding(KERNEL_OFFSET_BASE)

    @property
    def ramdisk_position(self) -> int:
        return self.kernel_position + self.kernel_size + self._padding(self.kernel_size)

    @property
    def second_bootloader_position(self) -> int:
        return self.ramdisk_position + self.ramdisk_size + self._padding(self.ramdisk_size)

    @property
    def recovery_dtbo_position(self) -> Optional[int]:
        """Position of the recovery DTBO/ACPIO, ``None`` at version 0."""
        if isinstance(self.versioned, TrailerV0):
            return None
        return (
            self.second_bootloader_position
            + self.second_bootloader_size
            + self._padding(self.second_bootloader_size)
        )

    @property
    def dtb_position(self) -> Optional[int]:
        """Position of the DTB, only defined at version 2."""
        if not isinstance(self.versioned, TrailerV2):
            return None
        second_end = (
            self.second_bootloader_position
            + self.second_bootloader_size
            + self._padding(self.second_bootloader_size)
        )
        size = self.versioned.recovery_dtbo_size
        return second_end + size + self._padding(size)
