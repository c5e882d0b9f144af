import sys
from pathlib import Path
from typing import Callable

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
SRC_DIR = PROJECT_ROOT / "src"
if SRC_DIR.exists():
    sys.path.insert(0, str(SRC_DIR))


def _pad(data: bytes, page_size: int) -> bytes:
    remainder = len(data) % page_size
    return data if remainder == 0 else data + bytes(page_size - remainder)


@pytest.fixture
def assemble_image() -> Callable[..., bytes]:
    """Lay out header and payloads the way mkbootimg does: each padded to a page."""

    def _assemble(header_bytes: bytes, page_size: int, *payloads: bytes) -> bytes:
        return b"".join(_pad(part, page_size) for part in (header_bytes, *payloads))

    return _assemble
