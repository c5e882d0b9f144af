"""Version dispatch over the boot and vendor boot header codecs."""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from struct import Struct
from typing import BinaryIO, Union

from abootimg.errors import BadMagic, UnknownVersion
from abootimg.header.boot_v0 import BOOT_MAGIC, MAGIC_LEN, VERSION_OFFSET, HeaderV0
from abootimg.header.boot_v3 import HeaderV3
from abootimg.header.stream import read_exact, write_all
from abootimg.header.vendor import VENDOR_BOOT_MAGIC, VendorHeader
from abootimg.header.version import OsVersionPatch

logger = logging.getLogger(__name__)

_VERSION_STRUCT = Struct("<I")

HeaderVariant = Union[HeaderV0, HeaderV3, VendorHeader]


@dataclass(frozen=True)
class Header:
    """A parsed boot, recovery or vendor_boot header.

    Exactly one of :class:`HeaderV0`, :class:`HeaderV3` or
    :class:`VendorHeader` is held in :attr:`inner`; the accessors below
    answer uniformly for all of them.
    """

    inner: HeaderVariant

    def __post_init__(self) -> None:
        if not isinstance(self.inner, (HeaderV0, HeaderV3, VendorHeader)):
            raise TypeError(f"Unsupported header type: {type(self.inner).__name__}")

    @classmethod
    def parse(cls, stream: BinaryIO) -> Header:
        """Parse a header from a readable, seekable binary stream.

        The stream is left positioned just past the header.
        """

        stream.seek(0)
        magic = read_exact(stream, MAGIC_LEN)
        stream.seek(0)
        if magic == VENDOR_BOOT_MAGIC:
            header = VendorHeader.read(stream)
            logger.debug("Parsed vendor boot header version %d", header.header_version)
            return cls(header)
        if magic != BOOT_MAGIC:
            raise BadMagic(0, BOOT_MAGIC, magic)

        stream.seek(VERSION_OFFSET)
        (version,) = _VERSION_STRUCT.unpack(read_exact(stream, _VERSION_STRUCT.size))
        stream.seek(0)

        if version in (0, 1, 2):
            inner: HeaderVariant = HeaderV0.read(stream)
        elif version in (3, 4):
            inner = HeaderV3.read(stream)
        else:
            raise UnknownVersion(VERSION_OFFSET, version)
        logger.debug("Parsed boot header version %d", version)
        return cls(inner)

    def to_bytes(self) -> bytes:
        return self.inner.to_bytes()

    def write(self, stream: BinaryIO) -> None:
        """Serialize the header to an append-only binary stream.

        Only the header is written; payload sections are the caller's job.
        """

        write_all(stream, self.to_bytes())

    @property
    def is_vendor(self) -> bool:
        return isinstance(self.inner, VendorHeader)

    @property
    def magic(self) -> bytes:
        return VENDOR_BOOT_MAGIC if self.is_vendor else BOOT_MAGIC

    @property
    def header_version(self) -> int:
        return self.inner.header_version

    @property
    def osversionpatch(self) -> OsVersionPatch:
        """OS version and patch level; vendor headers do not carry one."""
        if isinstance(self.inner, VendorHeader):
            return OsVersionPatch(0)
        return self.inner.osversionpatch

    @property
    def page_size(self) -> int:
        return self.inner.page_size

    @property
    def kernel_size(self) -> int:
        if isinstance(self.inner, VendorHeader):
            return 0
        return self.inner.kernel_size

    @property
    def kernel_position(self) -> int:
        if isinstance(self.inner, VendorHeader):
            return self.inner.vendor_ramdisk_position
        return self.inner.kernel_position

    @property
    def ramdisk_size(self) -> int:
        if isinstance(self.inner, VendorHeader):
            return self.inner.vendor_ramdisk_size
        return self.inner.ramdisk_size

    @property
    def ramdisk_position(self) -> int:
        if isinstance(self.inner, VendorHeader):
            return self.inner.vendor_ramdisk_position
        return self.inner.ramdisk_position


def parse_header(data: bytes) -> Header:
    """Parse header bytes (optionally followed by payload)."""

    return Header.parse(io.BytesIO(data))
