"""Property-based tests for header round-trips and section layout."""

from __future__ import annotations

import io

from hypothesis import given, strategies as st

from abootimg.header import (
    Header,
    HeaderV0,
    HeaderV3,
    OsVersionPatch,
    TrailerV0,
    TrailerV1,
    TrailerV2,
    VendorHeader,
    VendorHeaderV4,
)

u32 = st.integers(min_value=0, max_value=2**32 - 1)
u64 = st.integers(min_value=0, max_value=2**64 - 1)
sizes = st.integers(min_value=0, max_value=2**26)
page_sizes = st.sampled_from([1024, 2048, 4096, 8192, 16384])

trailers = st.one_of(
    st.just(TrailerV0()),
    st.builds(TrailerV1, recovery_dtbo_size=sizes, recovery_dtbo_addr=u64),
    st.builds(TrailerV2, recovery_dtbo_size=sizes, recovery_dtbo_addr=u64, dtb_size=sizes, dtb_addr=u64),
)

v0_headers = st.builds(
    HeaderV0,
    kernel_size=sizes,
    kernel_addr=u32,
    ramdisk_size=sizes,
    ramdisk_addr=u32,
    second_bootloader_size=sizes,
    second_bootloader_addr=u32,
    tags_addr=u32,
    page_size=page_sizes,
    osversionpatch=st.builds(OsVersionPatch, u32),
    board_name=st.binary(max_size=16),
    cmdline_part_1=st.binary(max_size=512),
    hash_digest=st.binary(max_size=32),
    cmdline_part_2=st.binary(max_size=1024),
    versioned=trailers,
)

v3_headers = st.builds(
    HeaderV3,
    kernel_size=sizes,
    ramdisk_size=sizes,
    osversionpatch=st.builds(OsVersionPatch, u32),
    cmdline=st.binary(max_size=1536),
    v4_signature_size=st.none() | u32,
)

vendor_headers = st.builds(
    VendorHeader,
    page_size=page_sizes,
    kernel_addr=u32,
    ramdisk_addr=u32,
    vendor_ramdisk_size=sizes,
    cmdline=st.binary(max_size=2048),
    tags_addr=u32,
    board_name=st.binary(max_size=16),
    dtb_size=u32,
    dtb_addr=u64,
    v4=st.none() | st.builds(VendorHeaderV4, u32, u32, u32, u32),
)


@given(inner=st.one_of(v0_headers, v3_headers, vendor_headers))
def test_round_trip(inner) -> None:
    data = inner.to_bytes()

    header = Header.parse(io.BytesIO(data))

    assert header.inner == inner
    assert header.to_bytes() == data
    if not header.is_vendor:
        assert header.header_version == int.from_bytes(data[0x28:0x2C], "little")


def _assert_aligned_after(position: int, previous_end: int, page_size: int) -> None:
    assert position % page_size == 0
    assert 0 <= position - previous_end < page_size


@given(header=v0_headers)
def test_v0_layout_is_padded_and_monotone(header: HeaderV0) -> None:
    page = header.page_size

    _assert_aligned_after(header.kernel_position, 1660, page)
    _assert_aligned_after(header.ramdisk_position, header.kernel_position + header.kernel_size, page)
    _assert_aligned_after(
        header.second_bootloader_position, header.ramdisk_position + header.ramdisk_size, page
    )
    assert header.kernel_position <= header.ramdisk_position <= header.second_bootloader_position

    if header.recovery_dtbo_position is not None:
        _assert_aligned_after(
            header.recovery_dtbo_position,
            header.second_bootloader_position + header.second_bootloader_size,
            page,
        )
        assert header.second_bootloader_position <= header.recovery_dtbo_position
    if header.dtb_position is not None:
        _assert_aligned_after(
            header.dtb_position, header.recovery_dtbo_position + header.recovery_dtbo_size, page
        )
        assert header.recovery_dtbo_position <= header.dtb_position


@given(header=v3_headers)
def test_v3_layout_is_padded_and_monotone(header: HeaderV3) -> None:
    _assert_aligned_after(header.ramdisk_position, header.kernel_position + header.kernel_size, 4096)
    _assert_aligned_after(header.bootsig_position, header.ramdisk_position + header.ramdisk_size, 4096)
    assert header.kernel_position <= header.ramdisk_position <= header.bootsig_position
