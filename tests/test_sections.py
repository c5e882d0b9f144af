import io
from pathlib import Path

import pytest

from abootimg.errors import ShortRead
from abootimg.header import Header, HeaderV0, HeaderV3, TrailerV2, VendorHeader
from abootimg.sections import Section, boot_sections, extract_sections


def test_v2_sections_skip_empty_optional_parts() -> None:
    header = Header(HeaderV0(kernel_size=10, ramdisk_size=0, page_size=2048, versioned=TrailerV2(dtb_size=5)))

    names = [section.name for section in boot_sections(header)]

    assert names == ["kernel", "ramdisk", "dtb"]


def test_v4_signature_section() -> None:
    header = Header(HeaderV3(kernel_size=10, ramdisk_size=20, v4_signature_size=4096))

    sections = boot_sections(header)

    assert sections[-1] == Section("boot_signature", 4096 * 3, 4096)


def test_v4_zero_signature_is_skipped() -> None:
    header = Header(HeaderV3(kernel_size=10, ramdisk_size=20, v4_signature_size=0))

    assert [section.name for section in boot_sections(header)] == ["kernel", "ramdisk"]


def test_vendor_sections() -> None:
    header = Header(VendorHeader(page_size=4096, vendor_ramdisk_size=10, dtb_size=3))

    assert boot_sections(header) == [
        Section("vendor_ramdisk", 4096, 10),
        Section("dtb", 8192, 3),
    ]


def test_extract_sections(tmp_path: Path, assemble_image) -> None:
    inner = HeaderV0(kernel_size=5, ramdisk_size=3, page_size=2048, versioned=TrailerV2(dtb_size=4))
    image = assemble_image(inner.to_bytes(), 2048, b"KERNL", b"RAM", b"DTB!")
    stream = io.BytesIO(image)

    header = Header.parse(stream)
    written = extract_sections(stream, boot_sections(header), tmp_path / "out")

    assert [path.name for path in written] == ["kernel", "ramdisk", "dtb"]
    assert (tmp_path / "out" / "kernel").read_bytes() == b"KERNL"
    assert (tmp_path / "out" / "ramdisk").read_bytes() == b"RAM"
    assert (tmp_path / "out" / "dtb").read_bytes() == b"DTB!"


def test_extract_truncated_image(tmp_path: Path) -> None:
    inner = HeaderV3(kernel_size=100, ramdisk_size=10)
    stream = io.BytesIO(inner.to_bytes().ljust(4096, b"\x00") + b"k" * 50)

    with pytest.raises(ShortRead):
        extract_sections(stream, boot_sections(Header(inner)), tmp_path)


def test_extract_full_v2_layout(tmp_path: Path, assemble_image) -> None:
    inner = HeaderV0(
        kernel_size=5,
        ramdisk_size=3,
        second_bootloader_size=6,
        page_size=2048,
        versioned=TrailerV2(recovery_dtbo_size=7, dtb_size=4),
    )
    image = assemble_image(inner.to_bytes(), 2048, b"KERNL", b"RAM", b"SECOND", b"RECDTBO", b"DTB!")
    stream = io.BytesIO(image)

    header = Header.parse(stream)
    sections = boot_sections(header)
    written = extract_sections(stream, sections, tmp_path / "out")

    assert sections == [
        Section("kernel", 2048, 5),
        Section("ramdisk", 4096, 3),
        Section("second", 6144, 6),
        Section("recovery_dtbo", 8192, 7),
        Section("dtb", 10240, 4),
    ]
    assert [path.read_bytes() for path in written] == [b"KERNL", b"RAM", b"SECOND", b"RECDTBO", b"DTB!"]
