"""Vendor boot image header codec for versions 3 and 4.

Only the header is decoded. The vendor ramdisk table and the bootconfig
section that follow the DTB in version 4 images are left to the caller.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from struct import Struct
from typing import BinaryIO, Optional

from abootimg.errors import BadMagic, HeaderFormatError, HeaderSizeMismatch, UnknownVersion
from abootimg.header.stream import (
    fixed_bytes,
    is_power_of_two,
    padding,
    read_exact,
    until_nul,
    write_all,
)

VENDOR_BOOT_MAGIC = b"VNDRBOOT"
MAGIC_LEN = 8
VENDOR_VERSION_OFFSET = 0x08

VENDOR_CMDLINE_LEN = 2048
VENDOR_BOARD_NAME_LEN = 16

VENDOR_HEADER_V3_SIZE = 2112
VENDOR_HEADER_V4_SIZE = 2128

_PREFIX_STRUCT = Struct("<5I2048sI16sIIQ")
_V4_STRUCT = Struct("<4I")


@dataclass(frozen=True)
class VendorHeaderV4:
    """Version 4 fields of the vendor boot header."""

    vendor_ramdisk_table_size: int = 0
    vendor_ramdisk_table_entry_num: int = 0
    vendor_ramdisk_table_entry_size: int = 0
    bootconfig_size: int = 0


@dataclass(frozen=True)
class VendorHeader:
    """Android vendor boot image header for versions 3 and 4.

    The version is inferred from :attr:`v4`.
    """

    page_size: int = 4096
    kernel_addr: int = 0
    ramdisk_addr: int = 0
    vendor_ramdisk_size: int = 0
    cmdline: bytes = b""
    tags_addr: int = 0
    board_name: bytes = b""
    dtb_size: int = 0
    dtb_addr: int = 0
    v4: Optional[VendorHeaderV4] = None

    def __post_init__(self) -> None:
        if not is_power_of_two(self.page_size):
            raise HeaderFormatError(f"page_size must be a power of two, got {self.page_size}")
        object.__setattr__(self, "cmdline", fixed_bytes("cmdline", self.cmdline, VENDOR_CMDLINE_LEN))
        object.__setattr__(
            self, "board_name", fixed_bytes("board_name", self.board_name, VENDOR_BOARD_NAME_LEN)
        )

    @classmethod
    def read(cls, stream: BinaryIO) -> VendorHeader:
        magic = read_exact(stream, MAGIC_LEN)
        if magic != VENDOR_BOOT_MAGIC:
            raise BadMagic(0, VENDOR_BOOT_MAGIC, magic)
        (
            header_version,
            page_size,
            kernel_addr,
            ramdisk_addr,
            vendor_ramdisk_size,
            cmdline,
            tags_addr,
            board_name,
            header_size,
            dtb_size,
            dtb_addr,
        ) = _PREFIX_STRUCT.unpack(read_exact(stream, _PREFIX_STRUCT.size))

        if header_version == 3:
            v4 = None
            expected_size = VENDOR_HEADER_V3_SIZE
        elif header_version == 4:
            v4 = VendorHeaderV4(*_V4_STRUCT.unpack(read_exact(stream, _V4_STRUCT.size)))
            expected_size = VENDOR_HEADER_V4_SIZE
        else:
            raise UnknownVersion(VENDOR_VERSION_OFFSET, header_version)
        if header_size != expected_size:
            raise HeaderSizeMismatch(f"vendor v{header_version}", expected_size, header_size)

        return cls(
            page_size=page_size,
            kernel_addr=kernel_addr,
            ramdisk_addr=ramdisk_addr,
            vendor_ramdisk_size=vendor_ramdisk_size,
            cmdline=cmdline,
            tags_addr=tags_addr,
            board_name=board_name,
            dtb_size=dtb_size,
            dtb_addr=dtb_addr,
            v4=v4,
        )

    def to_bytes(self) -> bytes:
        try:
            prefix = _PREFIX_STRUCT.pack(
                self.header_version,
                self.page_size,
                self.kernel_addr,
                self.ramdisk_addr,
                self.vendor_ramdisk_size,
                self.cmdline,
                self.tags_addr,
                self.board_name,
                self.header_size,
                self.dtb_size,
                self.dtb_addr,
            )
            trailer = b""
            if self.v4 is not None:
                trailer = _V4_STRUCT.pack(
                    self.v4.vendor_ramdisk_table_size,
                    self.v4.vendor_ramdisk_table_entry_num,
                    self.v4.vendor_ramdisk_table_entry_size,
                    self.v4.bootconfig_size,
                )
        except struct.error as exc:
            raise HeaderFormatError(f"Header field out of range: {exc}") from exc
        return b"".join([VENDOR_BOOT_MAGIC, prefix, trailer])

    def write(self, stream: BinaryIO) -> None:
        write_all(stream, self.to_bytes())

    @property
    def header_version(self) -> int:
        return 3 if self.v4 is None else 4

    @property
    def header_size(self) -> int:
        return VENDOR_HEADER_V3_SIZE if self.v4 is None else VENDOR_HEADER_V4_SIZE

    @property
    def cmdline_text(self) -> bytes:
        return until_nul(self.cmdline)

    @property
    def board_name_text(self) -> bytes:
        return until_nul(self.board_name)

    @property
    def vendor_ramdisk_position(self) -> int:
        return self.header_size + padding(self.header_size, self.page_size)

    @property
    def dtb_position(self) -> int:
        return (
            self.vendor_ramdisk_position
            + self.vendor_ramdisk_size
            + padding(self.vendor_ramdisk_size, self.page_size)
        )
