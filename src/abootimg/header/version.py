"""OS version and security patch level packed into a single header word.

Bit layout of the 32-bit word (most significant first)::

    [31..25] version major   (7 bits)
    [24..18] version minor   (7 bits)
    [17..11] version patch   (7 bits)
    [10..4 ] patch year - 2000 (7 bits)
    [ 3..0 ] patch month     (4 bits)

The word is split once: ``raw >> 11`` is the version triple and
``raw & 0x7ff`` is the patch date.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

COMPONENT_MASK = 0x7F
PATCH_BITS = 11
PATCH_MASK = (1 << PATCH_BITS) - 1
BASE_YEAR = 2000

_OS_VERSION_RE = re.compile(r"^(\d{1,3})(?:\.(\d{1,3})(?:\.(\d{1,3}))?)?")
_OS_PATCH_RE = re.compile(r"^(\d{4})-(\d{2})(?:-(\d{2}))?")


@dataclass(frozen=True, order=True)
class OsVersion:
    """``major.minor.patch`` packed as three 7-bit components."""

    bits: int

    @classmethod
    def new(cls, major: int, minor: int, patch: int) -> OsVersion:
        """Pack a version triple. Components above 127 are masked."""
        return cls(
            ((major & COMPONENT_MASK) << 14)
            | ((minor & COMPONENT_MASK) << 7)
            | (patch & COMPONENT_MASK)
        )

    @classmethod
    def parse(cls, text: str) -> OsVersion:
        """Parse ``A``, ``A.B`` or ``A.B.C`` as accepted by mkbootimg ``--os_version``."""
        match = _OS_VERSION_RE.match(text)
        if match is None:
            raise ValueError(f"Invalid OS version: {text!r}")
        parts = [int(group) if group is not None else 0 for group in match.groups()]
        if any(part > COMPONENT_MASK for part in parts):
            raise ValueError(f"OS version components must be below 128: {text!r}")
        return cls.new(*parts)

    @property
    def parts(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    @property
    def major(self) -> int:
        return (self.bits >> 14) & COMPONENT_MASK

    @property
    def minor(self) -> int:
        return (self.bits >> 7) & COMPONENT_MASK

    @property
    def patch(self) -> int:
        return self.bits & COMPONENT_MASK

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def __repr__(self) -> str:
        return f"OsVersion({self})"


@dataclass(frozen=True, order=True)
class OsPatch:
    """Security patch date: 7 bits of ``year - 2000`` and 4 bits of month."""

    bits: int

    @classmethod
    def new(cls, year: int, month: int) -> OsPatch:
        return cls((((year - BASE_YEAR) << 4) | month) & PATCH_MASK)

    @classmethod
    def parse(cls, text: str) -> OsPatch:
        """Parse ``YYYY-MM`` (an optional ``-DD`` suffix is ignored)."""
        match = _OS_PATCH_RE.match(text)
        if match is None:
            raise ValueError(f"Invalid OS patch level: {text!r}")
        year = int(match.group(1))
        month = int(match.group(2))
        if not BASE_YEAR <= year < BASE_YEAR + 128:
            raise ValueError(f"OS patch year out of range: {text!r}")
        if not 1 <= month <= 12:
            raise ValueError(f"OS patch month out of range: {text!r}")
        return cls.new(year, month)

    @property
    def year(self) -> int:
        return (self.bits >> 4) + BASE_YEAR

    @property
    def month(self) -> int:
        return self.bits & 0xF

    def __str__(self) -> str:
        return f"{self.year}-{self.month:02d}"

    def __repr__(self) -> str:
        return f"OsPatch({self})"


@dataclass(frozen=True, order=True)
class OsVersionPatch:
    """The raw ``os_version`` header word."""

    raw: int = 0

    @classmethod
    def new(cls, version: OsVersion, patch: OsPatch) -> OsVersionPatch:
        return cls((version.bits << PATCH_BITS) | (patch.bits & PATCH_MASK))

    @property
    def version(self) -> OsVersion:
        return OsVersion(self.raw >> PATCH_BITS)

    @property
    def patch(self) -> OsPatch:
        return OsPatch(self.raw & PATCH_MASK)

    def __int__(self) -> int:
        return self.raw

    def __repr__(self) -> str:
        return f"OsVersionPatch({self.version}, {self.patch})"
