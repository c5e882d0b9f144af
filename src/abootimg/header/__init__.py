"""Public header API re-exported for external users."""
from __future__ import annotations

from abootimg.header.boot_v0 import (
    BOOT_MAGIC,
    HEADER_V1_SIZE,
    HEADER_V2_SIZE,
    VERSION_OFFSET,
    HeaderV0,
    TrailerV0,
    TrailerV1,
    TrailerV2,
)
from abootimg.header.boot_v3 import HEADER_V3_SIZE, HEADER_V4_SIZE, PAGE_SIZE, HeaderV3
from abootimg.header.facade import Header, parse_header
from abootimg.header.vendor import (
    VENDOR_BOOT_MAGIC,
    VENDOR_HEADER_V3_SIZE,
    VENDOR_HEADER_V4_SIZE,
    VendorHeader,
    VendorHeaderV4,
)
from abootimg.header.version import OsPatch, OsVersion, OsVersionPatch

__all__ = [
    "BOOT_MAGIC",
    "HEADER_V1_SIZE",
    "HEADER_V2_SIZE",
    "HEADER_V3_SIZE",
    "HEADER_V4_SIZE",
    "Header",
    "HeaderV0",
    "HeaderV3",
    "OsPatch",
    "OsVersion",
    "OsVersionPatch",
    "PAGE_SIZE",
    "TrailerV0",
    "TrailerV1",
    "TrailerV2",
    "VENDOR_BOOT_MAGIC",
    "VENDOR_HEADER_V3_SIZE",
    "VENDOR_HEADER_V4_SIZE",
    "VERSION_OFFSET",
    "VendorHeader",
    "VendorHeaderV4",
    "parse_header",
]
