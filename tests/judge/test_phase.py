"""Unit tests for src/judge/phase.py"""

import pytest

from src.judge import phase


@pytest.mark.parametrize(
    "code, expected",
    [
        ("S1901M", True),
        ("F1904R", True),
        ("W1901A", True),
        ("U1450M", True),
        ("f1904r", True),
        ("S01M", False),  # two-digit year
        ("X1901M", False),  # unknown season
        ("S1901", False),  # missing phase type
        ("Forming", False),
        ("", False),
    ],
)
def test_is_phase_code(code: str, expected: bool) -> None:
    assert phase.is_phase_code(code) is expected


@pytest.mark.parametrize(
    "season, year, phase_type, expected",
    [
        ("Spring", 1901, "Movement", "S1901M"),
        ("Fall", "1904", "Retreat", "F1904R"),
        ("Autumn", 1904, "Retreats", "F1904R"),
        ("Winter", 1901, "Adjustment", "W1901A"),
        ("Winter", 1901, "Builds", "W1901A"),
        ("Summer", 1455, None, "U1455M"),
        ("Winter", 1901, None, "W1901A"),  # Winter defaults to adjustments
        ("spring", 1901, "whatever", "S1901M"),
    ],
)
def test_encode(season: str, year: int | str, phase_type: str | None, expected: str) -> None:
    assert phase.encode(season, year, phase_type) == expected


@pytest.mark.parametrize(
    "season, year",
    [
        ("Monsoon", 1901),
        ("Spring", 19),
        ("Spring", "year"),
    ],
)
def test_encode_invalid(season: str, year: int | str) -> None:
    assert phase.encode(season, year) is None


@pytest.mark.parametrize(
    "text, year, expected",
    [
        ("Fall 1904 Retreat", None, "F1904R"),
        ("Spring Movement", 1901, "S1901M"),
        ("Movement phase for Spring of 1901", None, "S1901M"),
        ("Winter of 1901", None, "W1901A"),
        ("Spring", "1901", "S1901M"),
        ("Movement", 1901, None),  # no season
        ("Spring Movement", None, None),  # no year
    ],
)
def test_from_description(text: str, year: int | str | None, expected: str | None) -> None:
    assert phase.from_description(text, year) == expected


def test_describe() -> None:
    """Reverse of from_description."""
    assert phase.describe("F1904R") == "Fall 1904 Retreat"
    assert phase.describe("S1901M") == "Spring 1901 Movement"
    assert phase.describe("W1901X") == "Winter 1901"
    assert phase.describe("nonsense") is None
    assert phase.from_description(phase.describe("U1455M")) == "U1455M"


def test_phase_kind() -> None:
    assert phase.phase_kind("S1901M") == "M"
    assert phase.phase_kind("w1901a") == "A"
    assert phase.phase_kind("Forming") is None
    assert phase.phase_kind(None) is None
