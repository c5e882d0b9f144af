import pytest
from hypothesis import given, strategies as st

from abootimg.header.version import OsPatch, OsVersion, OsVersionPatch


def test_known_vector() -> None:
    vp = OsVersionPatch(402653574)

    assert repr(vp) == "OsVersionPatch(12.0.0, 2024-06)"
    assert str(vp.version) == "12.0.0"
    assert str(vp.patch) == "2024-06"
    assert vp.version == OsVersion.new(12, 0, 0)
    assert vp.patch == OsPatch.new(2024, 6)
    assert OsVersionPatch.new(vp.version, vp.patch) == vp
    assert int(vp) == 402653574


def test_zero_is_unspecified() -> None:
    vp = OsVersionPatch()

    assert int(vp) == 0
    assert vp.version.parts == (0, 0, 0)
    assert vp.patch.year == 2000
    assert vp.patch.month == 0


def test_projections() -> None:
    version = OsVersion.new(11, 2, 3)
    patch = OsPatch.new(2021, 12)

    assert version.parts == (11, 2, 3)
    assert (version.major, version.minor, version.patch) == (11, 2, 3)
    assert patch.year == 2021
    assert patch.month == 12
    assert str(patch) == "2021-12"


def test_components_are_masked_to_seven_bits() -> None:
    assert OsVersion.new(128 + 5, 0, 0).parts == (5, 0, 0)


def test_parse_mkbootimg_syntax() -> None:
    assert OsVersion.parse("13") == OsVersion.new(13, 0, 0)
    assert OsVersion.parse("13.1") == OsVersion.new(13, 1, 0)
    assert OsVersion.parse("13.1.2") == OsVersion.new(13, 1, 2)
    assert OsPatch.parse("2023-04") == OsPatch.new(2023, 4)
    assert OsPatch.parse("2023-04-05") == OsPatch.new(2023, 4)


@pytest.mark.parametrize("text", ["", "x.1", "200.0.0"])
def test_parse_rejects_bad_version(text: str) -> None:
    with pytest.raises(ValueError):
        OsVersion.parse(text)


@pytest.mark.parametrize("text", ["2023", "1999-01", "2023-13", "2023-00", "2128-01"])
def test_parse_rejects_bad_patch(text: str) -> None:
    with pytest.raises(ValueError):
        OsPatch.parse(text)


@given(
    major=st.integers(min_value=0, max_value=127),
    minor=st.integers(min_value=0, max_value=127),
    patch=st.integers(min_value=0, max_value=127),
    year=st.integers(min_value=2000, max_value=2127),
    month=st.integers(min_value=1, max_value=12),
)
def test_version_patch_round_trip(major: int, minor: int, patch: int, year: int, month: int) -> None:
    version = OsVersion.new(major, minor, patch)
    patch_level = OsPatch.new(year, month)
    vp = OsVersionPatch.new(version, patch_level)

    assert vp.version == version
    assert vp.patch == patch_level
    assert vp.version.parts == (major, minor, patch)
    assert (vp.patch.year, vp.patch.month) == (year, month)
    assert 0 <= int(vp) < 2**32
