"""Payload section table and extraction helpers."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import IO

from abootimg.errors import ShortRead
from abootimg.header.boot_v0 import HeaderV0
from abootimg.header.boot_v3 import HeaderV3
from abootimg.header.facade import Header
from abootimg.header.vendor import VendorHeader

STREAM_CHUNK_SIZE = 1024 * 64

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Section:
    name: str
    offset: int
    size: int


def _v0_sections(hdr: HeaderV0) -> list[Section]:
    sections = [
        Section("kernel", hdr.kernel_position, hdr.kernel_size),
        Section("ramdisk", hdr.ramdisk_position, hdr.ramdisk_size),
    ]
    if hdr.second_bootloader_size:
        sections.append(Section("second", hdr.second_bootloader_position, hdr.second_bootloader_size))
    if hdr.recovery_dtbo_position is not None and hdr.recovery_dtbo_size:
        sections.append(Section("recovery_dtbo", hdr.recovery_dtbo_position, hdr.recovery_dtbo_size))
    if hdr.dtb_position is not None and hdr.dtb_size:
        sections.append(Section("dtb", hdr.dtb_position, hdr.dtb_size))
    return sections


def _v3_sections(hdr: HeaderV3) -> list[Section]:
    sections = [
        Section("kernel", hdr.kernel_position, hdr.kernel_size),
        Section("ramdisk", hdr.ramdisk_position, hdr.ramdisk_size),
    ]
    if hdr.v4_signature_size:
        sections.append(Section("boot_signature", hdr.bootsig_position, hdr.v4_signature_size))
    return sections


def _vendor_sections(hdr: VendorHeader) -> list[Section]:
    sections = [Section("vendor_ramdisk", hdr.vendor_ramdisk_position, hdr.vendor_ramdisk_size)]
    if hdr.dtb_size:
        sections.append(Section("dtb", hdr.dtb_position, hdr.dtb_size))
    return sections


def boot_sections(header: Header) -> list[Section]:
    """Sections to extract, in image order. Optional empty sections are omitted."""

    inner = header.inner
    if isinstance(inner, HeaderV0):
        return _v0_sections(inner)
    if isinstance(inner, HeaderV3):
        return _v3_sections(inner)
    return _vendor_sections(inner)


def _copy_range(in_file: IO[bytes], out_file: IO[bytes], offset: int, size: int) -> None:
    in_file.seek(offset)
    remaining = size
    while remaining > 0:
        chunk = in_file.read(min(STREAM_CHUNK_SIZE, remaining))
        if not chunk:
            raise ShortRead(size, size - remaining)
        out_file.write(chunk)
        remaining -= len(chunk)


def extract_sections(in_file: IO[bytes], sections: list[Section], out_dir: Path) -> list[Path]:
    """Copy each section into ``out_dir/<name>``, creating ``out_dir`` if needed."""

    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for section in sections:
        target = out_dir / section.name
        logger.debug("Extracting %s: %d bytes at offset %d", section.name, section.size, section.offset)
        with target.open("wb") as out_file:
            _copy_range(in_file, out_file, section.offset, section.size)
        written.append(target)
    return written


__all__ = [
    "STREAM_CHUNK_SIZE",
    "Section",
    "boot_sections",
    "extract_sections",
]
