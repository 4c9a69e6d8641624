"""
Phase codes: the compact form the judge uses to name a turn.
----

<season letter><four-digit year><phase-type letter>

ex) F1904R is the retreat phase of Fall 1904, S1901M the first movement phase of a standard game.
Reports spell the same phase out in words ("Fall 1904 Retreat", "Status of the Movement phase for Spring of 1901."),
so both parsers go through this module to end up with the same code.
"""

import re
from typing import Optional

PHASE_CODE_PATTERN = re.compile(r"^[SUFW]\d{4}[MRBAX]$", re.IGNORECASE)

SEASON_TO_CODE: dict[str, str] = {
    "spring": "S",
    "summer": "U",
    "fall": "F",
    "autumn": "F",
    "winter": "W",
}
CODE_TO_SEASON: dict[str, str] = {
    "S": "Spring",
    "U": "Summer",
    "F": "Fall",
    "W": "Winter",
}

PHASE_TYPE_TO_CODE: dict[str, str] = {
    "movement": "M",
    "movements": "M",
    "move": "M",
    "moves": "M",
    "retreat": "R",
    "retreats": "R",
    "adjustment": "A",
    "adjustments": "A",
    "build": "A",
    "builds": "A",
}
CODE_TO_PHASE_TYPE: dict[str, str] = {
    "M": "Movement",
    "R": "Retreat",
    "A": "Adjustment",
    "B": "Builds",
}


def is_phase_code(text: str) -> bool:
    return bool(PHASE_CODE_PATTERN.match(text.strip()))


def encode(season: str, year: int | str, phase_type: Optional[str] = None) -> Optional[str]:
    """
    Build a phase code from its spelled out parts.
    If no phase type is given, assume movement (or adjustments, for Winter). Returns None for an unknown season.
    """
    season_code = SEASON_TO_CODE.get(season.strip().lower())
    if season_code is None:
        return None

    year_str = str(year).strip()
    if not (year_str.isdigit() and len(year_str) == 4):
        return None

    if phase_type:
        type_code = PHASE_TYPE_TO_CODE.get(phase_type.strip().lower(), "M")
    else:
        type_code = "A" if season_code == "W" else "M"
    return f"{season_code}{year_str}{type_code}"


def from_description(text: str, year: Optional[int | str] = None) -> Optional[str]:
    """
    Convert free text like "Fall 1904 Retreat", "Spring Movement" (+ year) or "Winter of 1901" into a phase code.
    Word order does not matter, filler words ("of", "phase", commas) are ignored.
    """
    season = None
    phase_type = None
    found_year = None
    for word in re.findall(r"[A-Za-z]+|\d{4}", text):
        lowered = word.lower()
        if lowered in SEASON_TO_CODE and season is None:
            season = lowered
        elif lowered in PHASE_TYPE_TO_CODE and phase_type is None:
            phase_type = lowered
        elif word.isdigit() and found_year is None:
            found_year = word

    year = year if year is not None else found_year
    if season is None or year is None:
        return None
    return encode(season, year, phase_type)


def describe(code: str) -> Optional[str]:
    """reverse operation: F1904R -> 'Fall 1904 Retreat'"""
    if not is_phase_code(code):
        return None
    code = code.strip().upper()
    season = CODE_TO_SEASON[code[0]]
    year = code[1:5]
    phase_type = CODE_TO_PHASE_TYPE.get(code[5])
    return f"{season} {year} {phase_type}" if phase_type else f"{season} {year}"


def phase_kind(code: Optional[str]) -> Optional[str]:
    """The trailing phase-type letter (M, R, A, B, ...) of a valid code."""
    if not code or not is_phase_code(code):
        return None
    return code.strip()[-1].upper()
