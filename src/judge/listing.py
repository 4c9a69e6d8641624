"""
Parse the judge's reply to a LIST command into a GameState.
----

The listing is prose, not a protocol: headers appear in varying order or not at all.
Every line gets tested against a fixed, ordered set of rules, and a section cursor (roster, settings or one of
the unit / supply center blocks) decides which rules apply.
Unrecognized lines are skipped, so parsing never fails on the transcript itself.
"""

import logging
import re
from datetime import datetime, timezone
from enum import Enum, auto
from typing import Any, Optional

from src.core.models import GameState, Player, Unit
from src.core.shared_types import DEFAULT_PLAYER_STATUS, GameStatus
from src.judge import phase
from src.judge.commands import validate_game_name
from src.judge.history import UNIT_LETTERS
from src.judge.powers import is_power

logger = logging.getLogger(__name__)

EMAIL = r"[\w.+-]+@[\w.-]+\.\w+"
PHASE_TOKEN = r"[SUFW]\d{4}[MRBAX]?|Forming"

# --- header rules ---
DEADLINE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(rf"::\s*Deadline:\s*(?P<phase>{PHASE_TOKEN})\s+(?P<deadline>.*)", re.IGNORECASE),
    re.compile(rf"^\s*(?P<phase>{PHASE_TOKEN})\s+Deadline:\s*(?P<deadline>.*)", re.IGNORECASE),
)
NARRATIVE_STATUS_PATTERN = re.compile(
    r"Status of the (?P<kind>\w+) phase for (?P<season>Spring|Summer|Fall|Winter) of (?P<year>\d{4})\.",
    re.IGNORECASE,
)
EXPLICIT_STATUS_PATTERN = re.compile(r"Game status:\s*(?P<status>.*)", re.IGNORECASE)
VARIANT_PATTERN = re.compile(r"Variant:\s*(?P<variant>\S+)\s*(?P<options>.*)", re.IGNORECASE)

# --- roster section ---
ROSTER_HEADER = "The following players are signed up for game"
PLAYER_PATTERN = re.compile(
    rf"^\s*(?P<power>[A-Za-z]+)\s+(?:\S+\s+){{0,2}}?\d+\s+(?P<email>{EMAIL})"
)
MASTER_PATTERN = re.compile(rf"^\s*(?:Master|Moderator)\s+\d+\s+(?P<email>{EMAIL})", re.IGNORECASE)
OBSERVER_PATTERN = re.compile(rf"^\s*Observer\s*:\s*(?P<email>{EMAIL})", re.IGNORECASE)
PLAYER_STATUS_PATTERN = re.compile(r"\((?P<status>[^)]+)\)")

# --- settings section ---
SETTINGS_HEADER_PATTERN = re.compile(
    r"The parameters for .*? are as follows|Game settings:|^flags:", re.IGNORECASE
)
PRESS_PATTERN = re.compile(r"Press:\s*(?P<press>.*?)(?:,|\s*$)", re.IGNORECASE)
DIAS_PATTERN = re.compile(r"\b(NoDIAS|DIAS)\b", re.IGNORECASE)
NMR_PATTERN = re.compile(r"\b(NoNMR|NMR)\b", re.IGNORECASE)
CONCESSIONS_PATTERN = re.compile(r"\b(No Concessions|Concessions)\b", re.IGNORECASE)
FLAGS_PATTERN = re.compile(r"^flags:\s*(?P<flags>.*)", re.IGNORECASE)

# substring (lower case) -> (setting name, value). Matches are independent of each other.
SUBSTRING_FLAGS: tuple[tuple[str, str, Any], ...] = (
    ("gunboat", "gunboat", True),
    ("chaos", "chaos", True),
    ("partial allowed", "partial_press", True),
    ("no partial", "partial_press", False),
    ("observer any", "observer_press", "any"),
    ("observer white", "observer_press", "white"),
    ("observer none", "observer_press", "none"),
    ("strict convoy", "strict_convoy", True),
    ("strict wait", "strict_wait", True),
    ("strict grace", "strict_grace", True),
)

DEFAULT_SETTINGS: dict[str, Any] = {
    "nmr": False,
    "dias": True,
    "concessions": True,
    "gunboat": False,
    "press": "White",
    "partial_press": True,
    "observer_press": "any",
}

# --- position sections ---
# "Austria:" on its own line, followed by indented unit lines ("  A VIE", "  F TRI/NC (dislodged)")
UNIT_HEADER_PATTERN = re.compile(r"^(?P<power>[A-Za-z]+):$")
UNIT_PATTERN = re.compile(
    r"^\s+(?P<type>[AFWGR])\s+(?P<location>[A-Z]{3}(?:/[NESW]C)?)\s*(?:\((?P<status>[^)]+)\))?"
)
# "Austria (3):" on its own line, followed by indented supply center lines ("  BUD")
SUPPLY_CENTER_HEADER_PATTERN = re.compile(r"^(?P<power>[A-Za-z]+)\s+\(\d+\):$")
SUPPLY_CENTER_PATTERN = re.compile(r"^\s+(?P<location>[A-Z]{3}(?:/[NESW]C)?)\b")
# Machiavelli: "Cities Controlled:" followed by "Florence: Florence, Pisa (*home*), Arezzo."
CITIES_HEADER = "Cities Controlled:"
CITIES_PATTERN = re.compile(r"^(?P<power>[A-Za-z]+):\s+(?P<cities>.*?)\.?\s*$")
CITY_NAME_PATTERN = re.compile(r"^(?P<name>[^(*]+)")
DIRECT_UNIT_PATTERN = re.compile(
    r"^\s*(?P<power>[A-Za-z]+):\s+(?P<unit>Army|Fleet|Garrison|Wing|Artillery)\s+(?P<location>.+?)\.\s*$",
    re.IGNORECASE,
)

# Machiavelli "flags:" aliases
FLAG_ALIASES: dict[str, str] = {
    "bank": "loans",
    "bankers": "loans",
    "nobank": "noloans",
    "nobankers": "noloans",
    "forts": "fortresses",
    "noforts": "nofortresses",
    "nocoastalconvoy": "nocoastal_convoys",
}


class Section(Enum):
    """Which part of the listing is being read. Exactly one at a time."""

    IDLE = auto()
    ROSTER = auto()
    SETTINGS = auto()
    UNITS = auto()
    SUPPLY_CENTERS = auto()
    CITIES = auto()


POSITION_SECTIONS = frozenset({Section.UNITS, Section.SUPPLY_CENTERS, Section.CITIES})


def parse_listing(
    game_name: str, transcript: str, now: Optional[datetime] = None
) -> GameState:
    """
    Build a GameState out of a LIST transcript.

    Only the game name is validated (raises InvalidGameNameError). Any transcript, including an empty one,
    gives a GameState: with nothing recognized, every field keeps its default and the status stays Unknown.
    """
    validate_game_name(game_name)
    return ListingParser(game_name, transcript, now).parse()


class ListingParser:
    """Single forward pass over the lines of one LIST transcript."""

    def __init__(
        self, game_name: str, transcript: str, now: Optional[datetime] = None
    ) -> None:
        self.transcript = transcript or ""
        self.state = GameState(
            name=game_name,
            raw_transcript=transcript,
            last_updated=now or datetime.now(timezone.utc),
        )
        self.section = Section.IDLE
        # power whose unit / supply center block is being read
        self.position_power: Optional[str] = None

    def parse(self) -> GameState:
        for line in self.transcript.splitlines():
            self._parse_line(line)
        self._apply_defaults()
        return self.state

    # -- line dispatch --
    def _parse_line(self, line: str) -> None:
        stripped = line.strip()

        if stripped.startswith(ROSTER_HEADER):
            self.section = Section.ROSTER
            return

        if SETTINGS_HEADER_PATTERN.search(stripped):
            # the header line itself may carry settings (e.g. "flags: ..."), so keep going
            self.section = Section.SETTINGS
        elif self._open_position_section(stripped):
            return

        if self._parse_direct_unit_line(line):
            return

        if self.section in POSITION_SECTIONS:
            if self._parse_position_line(line):
                return
            self.section = Section.IDLE
            self.position_power = None

        if self.section is Section.ROSTER:
            if self._parse_roster_line(line):
                return
            self.section = Section.IDLE

        if self.section is Section.SETTINGS:
            if stripped and not NARRATIVE_STATUS_PATTERN.search(stripped):
                self._parse_settings_line(line)
                return
            self.section = Section.IDLE

        self._parse_header_line(line)

    def _parse_header_line(self, line: str) -> None:
        """Rules 1-4, first match wins."""
        for pattern in DEADLINE_PATTERNS:
            match = pattern.search(line)
            if match:
                self._set_deadline(match["phase"], match["deadline"])
                return

        match = NARRATIVE_STATUS_PATTERN.search(line)
        if match:
            code = phase.encode(match["season"], match["year"], match["kind"])
            if code:
                self.state.current_phase = code
            self.state.status = GameStatus.ACTIVE
            return

        match = EXPLICIT_STATUS_PATTERN.search(line)
        if match:
            self._set_explicit_status(match["status"])
            return

        match = VARIANT_PATTERN.search(line)
        if match:
            self._set_variant(match["variant"], match["options"])

    # -- header rules --
    def _set_deadline(self, phase_token: str, deadline: str) -> None:
        phase_token = phase_token.strip().upper()
        self.state.current_phase = phase_token
        self.state.next_deadline = deadline.strip() or None

        # "Forming" in the phase slot says nothing about the game being under way
        if phase_token != "FORMING" and self.state.status in (
            GameStatus.UNKNOWN,
            GameStatus.FORMING,
        ):
            self.state.status = GameStatus.ACTIVE

    def _set_explicit_status(self, text: str) -> None:
        status = GameStatus.from_text(text)
        if status is None:
            logger.debug("Ignoring unrecognized game status %r for %s", text, self.state.name)
            return

        # a generic "Active" restatement never overrides what the deadline/narrative lines told us
        if status is GameStatus.ACTIVE and self.state.status is not GameStatus.UNKNOWN:
            return
        self.state.status = status

    def _set_variant(self, variant: str, options_text: str) -> None:
        self.state.variant = variant.strip()
        options = [
            option
            for option in options_text.replace(",", " ").split()
            if option and option != "Variant:"
        ]
        self.state.options = list(dict.fromkeys(options))

        settings = self.state.settings
        if "Gunboat" in options:
            settings["gunboat"] = True
        settings["nmr"] = "NMR" in options
        if "Chaos" in options:
            settings["chaos"] = True
        if "machiavelli" in self.state.variant.lower():
            settings["is_machiavelli"] = True

    # -- roster section --
    def _parse_roster_line(self, line: str) -> bool:
        """Returns False when the line ends the roster section."""
        if _closes_roster(line.strip()):
            return False

        match = PLAYER_PATTERN.match(line)
        if match and is_power(match["power"]):
            status_match = PLAYER_STATUS_PATTERN.search(line)
            status = status_match["status"].strip() if status_match else DEFAULT_PLAYER_STATUS
            self._add_player(Player(power=match["power"], email=match["email"], status=status))
            return True

        match = MASTER_PATTERN.match(line)
        if match:
            if match["email"] not in self.state.masters:
                self.state.masters.append(match["email"])
            return True

        match = OBSERVER_PATTERN.match(line)
        if match:
            if match["email"] not in self.state.observers:
                self.state.observers.append(match["email"])
            return True

        return False

    def _add_player(self, player: Player) -> None:
        """At most one record per power: a repeated power replaces the earlier line."""
        for index, existing in enumerate(self.state.players):
            if existing.power.lower() == player.power.lower():
                self.state.players[index] = player
                return
        self.state.players.append(player)

    # -- position sections --
    def _open_position_section(self, stripped: str) -> bool:
        """Header lines of the unit, supply center and city blocks."""
        if stripped.startswith(CITIES_HEADER):
            self.section = Section.CITIES
            self.position_power = None
            return True

        match = SUPPLY_CENTER_HEADER_PATTERN.match(stripped)
        if match and is_power(match["power"]):
            self.section = Section.SUPPLY_CENTERS
            self.position_power = match["power"]
            return True

        match = UNIT_HEADER_PATTERN.match(stripped)
        if match and is_power(match["power"]):
            self.section = Section.UNITS
            self.position_power = match["power"]
            return True
        return False

    def _parse_position_line(self, line: str) -> bool:
        """Returns False when the line ends the current position block."""
        stripped = line.strip()
        if not stripped:
            return self.section is Section.CITIES
        if stripped.startswith("-"):
            return True

        if self.section is Section.UNITS:
            match = UNIT_PATTERN.match(line)
            if match:
                self._add_unit(
                    self.position_power,
                    Unit(type=match["type"], location=match["location"], status=match["status"]),
                )
                return True
            return False

        if self.section is Section.SUPPLY_CENTERS:
            match = SUPPLY_CENTER_PATTERN.match(line)
            if match:
                self._add_supply_center(self.position_power, match["location"])
                return True
            return False

        if stripped.startswith("Unowned:") or stripped.startswith("*"):
            return True
        match = CITIES_PATTERN.match(stripped)
        if match and is_power(match["power"]):
            for city in match["cities"].split(","):
                name_match = CITY_NAME_PATTERN.match(city.strip())
                if name_match and name_match["name"].strip():
                    self._add_supply_center(match["power"], name_match["name"].strip())
            return True
        return False

    def _parse_direct_unit_line(self, line: str) -> bool:
        """Direct unit lines ("France: Army Paris.") can appear anywhere in the listing."""
        match = DIRECT_UNIT_PATTERN.match(line)
        if not match or not is_power(match["power"]):
            return False
        letter = UNIT_LETTERS[match["unit"].lower()]
        self._add_unit(match["power"], Unit(type=letter, location=match["location"].strip()))
        return True

    def _add_unit(self, power: str, unit: Unit) -> None:
        units = self.state.units.setdefault(power, [])
        if unit not in units:
            units.append(unit)

    def _add_supply_center(self, power: str, location: str) -> None:
        centers = self.state.supply_centers.setdefault(power, [])
        if location not in centers:
            centers.append(location)

    # -- settings section --
    def _parse_settings_line(self, line: str) -> None:
        """Every pattern is tried, several can match the same line."""
        settings = self.state.settings

        match = PRESS_PATTERN.search(line)
        if match:
            settings["press"] = match["press"].strip()

        match = DIAS_PATTERN.search(line)
        if match:
            settings["dias"] = match[1].upper() == "DIAS"

        match = NMR_PATTERN.search(line)
        if match:
            settings["nmr"] = match[1].upper() == "NMR"

        match = CONCESSIONS_PATTERN.search(line)
        if match:
            settings["concessions"] = match[1].lower() == "concessions"

        match = VARIANT_PATTERN.search(line)
        if match:
            self._set_variant(match["variant"], match["options"])

        lowered = line.lower()
        for needle, key, value in SUBSTRING_FLAGS:
            if needle in lowered:
                settings[key] = value

        match = FLAGS_PATTERN.match(line.strip())
        if match:
            settings.update(parse_flags(match["flags"]))
            if self._is_machiavelli():
                settings.setdefault("mach2", False)

    def _is_machiavelli(self) -> bool:
        return bool(self.state.settings.get("is_machiavelli")) or (
            "machiavelli" in self.state.variant.lower()
        )

    # -- post-pass --
    def _apply_defaults(self) -> None:
        state = self.state
        if state.status is GameStatus.UNKNOWN and state.current_phase not in ("", "Unknown"):
            state.status = (
                GameStatus.FORMING
                if state.current_phase.upper() == "FORMING"
                else GameStatus.ACTIVE
            )

        for key, value in DEFAULT_SETTINGS.items():
            state.settings.setdefault(key, value)

        if self._is_machiavelli():
            state.settings.setdefault("is_machiavelli", True)
            state.settings.setdefault("mach2", False)

        self._drop_unknown_powers()
        self._assign_positions()

        if state.status is GameStatus.UNKNOWN:
            logger.debug("No status recognized in listing for %s", state.name)

    def _roster_variant(self) -> Optional[str]:
        """Chaos games hand out powers that no table lists."""
        if self.state.settings.get("chaos"):
            return None
        return self.state.variant

    def _drop_unknown_powers(self) -> None:
        # the variant line usually comes after the roster, so filtering waits for the whole listing
        variant = self._roster_variant()
        state = self.state
        kept = [player for player in state.players if is_power(player.power, variant)]
        if len(kept) != len(state.players):
            logger.debug(
                "Dropped %d roster line(s) of %s with powers unknown to %s",
                len(state.players) - len(kept),
                state.name,
                state.variant,
            )
        state.players = kept
        state.units = {
            power: units for power, units in state.units.items() if is_power(power, variant)
        }
        state.supply_centers = {
            power: centers
            for power, centers in state.supply_centers.items()
            if is_power(power, variant)
        }

    def _assign_positions(self) -> None:
        units = {power.lower(): power_units for power, power_units in self.state.units.items()}
        centers = {
            power.lower(): power_centers
            for power, power_centers in self.state.supply_centers.items()
        }
        for player in self.state.players:
            player.units = list(units.get(player.power.lower(), []))
            player.supply_centers = list(centers.get(player.power.lower(), []))


def _closes_roster(stripped: str) -> bool:
    return (
        not stripped
        or bool(SETTINGS_HEADER_PATTERN.search(stripped))
        or bool(NARRATIVE_STATUS_PATTERN.search(stripped))
        or any(pattern.search(stripped) for pattern in DEADLINE_PATTERNS)
        or stripped.startswith("Status of the")
    )


def parse_flags(flags_text: str) -> dict[str, Any]:
    """
    Decode a Machiavelli "flags:" line.
    ----

    noX       -> X = False
    key:value -> key = "value"
    transform:move:homecentre,build -> transform = {"move": "homecentre", "build": "HOMECENTRE"}
    anything else is a flag that is switched on.
    """
    flags: dict[str, Any] = {}

    # the two-word coastal convoy flags would otherwise be split apart
    text = flags_text
    if re.search(r"\bnocoastal convoys\b", text, re.IGNORECASE):
        flags["coastal_convoys"] = False
        text = re.sub(r"\bnocoastal convoys\b", "", text, flags=re.IGNORECASE)
    elif re.search(r"\bcoastal convoys\b", text, re.IGNORECASE):
        flags["coastal_convoys"] = True
        text = re.sub(r"\bcoastal convoys\b", "", text, flags=re.IGNORECASE)

    for token in text.split():
        flag = FLAG_ALIASES.get(token.lower(), token)
        if flag.lower().startswith("no") and len(flag) > 2:
            flags[flag[2:].lower()] = False
        elif ":" in flag:
            key, _, value = flag.partition(":")
            if key.lower() == "transform":
                transform = flags.setdefault("transform", {})
                for pair in value.split(","):
                    action, _, target = pair.partition(":")
                    if action:
                        transform[action.lower()] = target or "HOMECENTRE"
            else:
                flags[key.lower()] = value
        else:
            flags[flag.lower()] = True
    return flags
