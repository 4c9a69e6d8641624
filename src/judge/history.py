"""
Parse the judge's reply to a HISTORY command into a GameHistory.
----

A history is a sequence of phases. A phase starts at its deadline line:

    Deadline for Spring Movement, 1901 is Mon Jan 01 2001 23:30:00 UTC

Everything before the first of these lines is skipped, except the game header ("History of demo (Standard)")
and the status timestamp. Within a phase, lines are read one at a time: supply center counts, eliminations,
units and their orders, adjudication results, and press messages.

Press bodies are free text: once inside a message every indented or blank line belongs to it, even when it looks
like something else. The first non-indented line ends the message.
"""

import logging
import re
import textwrap
from dataclasses import dataclass, field
from typing import Optional

from src.core.models import GameHistory, Order, PhaseRecord, PressMessage, Unit
from src.core.shared_types import OrderType
from src.judge import phase
from src.judge.commands import validate_game_name

logger = logging.getLogger(__name__)

GAME_HEADER_PATTERN = re.compile(r"^\s*History of (?P<name>\S+?)\s*\((?P<variant>[^)]*)\)")
TIMESTAMP_PATTERN = re.compile(r"^\s*(?:Status|Report) as of:?\s+(?P<timestamp>.+?)\s*$", re.IGNORECASE)
DEADLINE_HEADER_PATTERN = re.compile(
    r"^\s*Deadline for (?P<description>.+?),?\s+(?P<year>\d{4})\s+is\s+(?P<deadline>.+?)\s*$",
    re.IGNORECASE,
)

SUPPLY_CENTER_PATTERN = re.compile(
    r"^\s*(?P<power>[A-Za-z]+):\s+(?P<count>\d+)\s+Supply\s+cent(?:er|re)s?", re.IGNORECASE
)
ELIMINATION_PATTERN = re.compile(r"^\s*(?P<power>[A-Za-z]+)\s+(?:has been|is)\s+eliminated", re.IGNORECASE)
UNIT_LINE_PATTERN = re.compile(
    r"^\s*(?P<power>[A-Za-z]+):\s+(?P<unit>Army|Fleet|Wing|Garrison|Artillery)\s+(?P<rest>.+?)\s*$",
    re.IGNORECASE,
)
ADJUSTMENT_LINE_PATTERN = re.compile(
    r"^\s*(?P<power>[A-Za-z]+):\s+(?P<rest>(?:builds?|removes?|waives?|removals?|disbands?)\b.*)$",
    re.IGNORECASE,
)
RESULT_PATTERN = re.compile(r"\(\*[^)]*\*\)|\[[^\]]+\]")

PRESS_HEADER_PATTERN = re.compile(r"^\s*Press from (?P<sender>.+?) to (?P<recipient>.+?):\s*$", re.IGNORECASE)
BROADCAST_HEADER_PATTERN = re.compile(r"^\s*Broadcast from (?P<sender>.+?):\s*$", re.IGNORECASE)
BROADCAST_RECIPIENT = "All"

UNIT_LETTERS: dict[str, str] = {
    "army": "A",
    "fleet": "F",
    "wing": "W",
    "garrison": "G",
    "artillery": "R",
}

# First word of a location that starts an order (rather than being part of the location name)
ORDER_START = re.compile(
    r"\s(?:->|-|HOLDS?\b|SUPPORTS?\b|CONVOYS?\b|DISBANDS?\b|RETREATS?\b|MOVES?\b|H\b|S\b|C\b|D\b|R\b)",
)

# Ordered: the first matching rule classifies the order text that follows the unit
UNIT_ORDER_RULES: tuple[tuple[re.Pattern[str], OrderType], ...] = (
    (re.compile(r"^(?:CONVOYS?|C)\b", re.IGNORECASE), OrderType.CONVOY),
    (re.compile(r"^(?:SUPPORTS?|S)\b.*(?:->|\s-\s|\bMOVES?\b)", re.IGNORECASE), OrderType.SUPPORT_MOVE),
    (re.compile(r"^(?:SUPPORTS?|S)\b", re.IGNORECASE), OrderType.SUPPORT_HOLD),
    (re.compile(r"^(?:DISBANDS?|D)\b", re.IGNORECASE), OrderType.DISBAND),
    (re.compile(r"^(?:RETREATS?|R)\b", re.IGNORECASE), OrderType.RETREAT),
    (re.compile(r"^(?:->|-|MOVES?\b)", re.IGNORECASE), OrderType.MOVE),
    (re.compile(r"^(?:HOLDS?|H)\b", re.IGNORECASE), OrderType.HOLD),
)

ADJUSTMENT_ORDER_RULES: tuple[tuple[re.Pattern[str], OrderType], ...] = (
    (re.compile(r"^waives?\b.*\bremov|^removals?\b.*\bwaived?\b", re.IGNORECASE), OrderType.WAIVE_REMOVAL),
    (re.compile(r"^waives?\b|^builds?\b.*\bwaived?\b", re.IGNORECASE), OrderType.WAIVE_BUILD),
    (re.compile(r"^builds?\b", re.IGNORECASE), OrderType.BUILD),
    (re.compile(r"^(?:removes?|removals?)\b", re.IGNORECASE), OrderType.REMOVE),
    (re.compile(r"^disbands?\b", re.IGNORECASE), OrderType.DISBAND),
)


@dataclass
class PressCursor:
    """A press message being read."""

    sender: str
    recipient: str
    lines: list[str] = field(default_factory=list)

    def to_message(self) -> Optional[PressMessage]:
        """Drop surrounding blank lines and common indentation. None for an empty message."""
        lines = list(self.lines)
        while lines and not lines[0].strip():
            lines.pop(0)
        while lines and not lines[-1].strip():
            lines.pop()
        body = textwrap.dedent("\n".join(lines)).strip("\n")
        if not body.strip():
            return None
        return PressMessage(sender=self.sender, recipient=self.recipient, message=body)


def parse_history(game_name: str, transcript: str) -> GameHistory:
    """Build a GameHistory from a HISTORY transcript. Only the game name is validated."""
    validate_game_name(game_name)
    return HistoryParser(game_name, transcript).parse()


class HistoryParser:
    """Single forward pass: a phase cursor plus an independent press cursor."""

    def __init__(self, game_name: str, transcript: str) -> None:
        self.transcript = transcript or ""
        self.history = GameHistory(game_name=game_name)
        self.current_phase: Optional[PhaseRecord] = None
        self.press: Optional[PressCursor] = None
        self._header_seen = False

    def parse(self) -> GameHistory:
        for line in self.transcript.splitlines():
            self._parse_line(line)
        self._flush_press()
        self._flush_phase()
        return self.history

    # -- line dispatch --
    def _parse_line(self, line: str) -> None:
        if self.press is not None:
            if self._start_press(line):
                return
            if not line.strip() or line[:1].isspace():
                self.press.lines.append(line)
                return
            # non-indented text: the message is over, the line itself is read normally
            self._flush_press()

        deadline = DEADLINE_HEADER_PATTERN.match(line)
        if deadline:
            self._start_phase(deadline["description"], deadline["year"], deadline["deadline"])
            return

        if self.current_phase is None:
            self._parse_preamble_line(line)
            return

        if self._start_press(line):
            return

        self._parse_phase_line(line, self.current_phase)

    def _parse_preamble_line(self, line: str) -> None:
        if not self._header_seen:
            match = GAME_HEADER_PATTERN.match(line)
            if match:
                self.history.variant = match["variant"].strip() or None
                self._header_seen = True
                return

        match = TIMESTAMP_PATTERN.match(line)
        if match:
            self.history.status_timestamp = match["timestamp"]

    # -- phases --
    def _start_phase(self, description: str, year: str, deadline: str) -> None:
        self._flush_press()
        self._flush_phase()

        code = phase.from_description(description, year)
        if code is None:
            logger.debug("Unrecognized phase %r %s in history of %s", description, year, self.history.game_name)
            code = f"{description.strip()} {year}"
        self.current_phase = PhaseRecord(phase_code=code, deadline=deadline)

    def _flush_phase(self) -> None:
        if self.current_phase is not None:
            self.history.phases.append(self.current_phase)
        self.current_phase = None

    def _parse_phase_line(self, line: str, record: PhaseRecord) -> None:
        """Several of these can apply to the same line (an order followed by its result for instance)."""
        match = SUPPLY_CENTER_PATTERN.match(line)
        if match:
            record.supply_centers[match["power"]] = int(match["count"])

        match = ELIMINATION_PATTERN.match(line)
        if match and match["power"] not in record.eliminations:
            record.eliminations.append(match["power"])

        match = UNIT_LINE_PATTERN.match(line)
        if match:
            self._add_unit_line(record, match["power"], match["unit"], match["rest"], line)
        else:
            match = ADJUSTMENT_LINE_PATTERN.match(line)
            if match:
                order_type = classify(match["rest"], ADJUSTMENT_ORDER_RULES)
                if order_type is not None:
                    record.orders.setdefault(match["power"], []).append(Order(line.strip(), order_type))

        if RESULT_PATTERN.search(line):
            record.results.append(line.strip())

    def _add_unit_line(self, record: PhaseRecord, power: str, unit_word: str, rest: str, line: str) -> None:
        """'France: Army Paris -> Burgundy.' gives a unit in Paris and a move order."""
        # results are not part of the order text
        order_text = RESULT_PATTERN.sub("", rest).strip().rstrip(".").strip()
        split = ORDER_START.search(f" {order_text}")
        if split:
            location = order_text[: max(split.start() - 1, 0)].strip()
            order_part = order_text[split.start() :].strip()
        else:
            location, order_part = order_text, ""

        unit = Unit(type=UNIT_LETTERS[unit_word.lower()], location=location)
        units = record.units.setdefault(power, [])
        if location and unit not in units:
            units.append(unit)

        if not order_part:
            return
        order_type = classify(order_part, UNIT_ORDER_RULES)
        if order_type is None:
            return
        if order_type is OrderType.MOVE and phase.phase_kind(record.phase_code) == "R":
            order_type = OrderType.RETREAT
        record.orders.setdefault(power, []).append(Order(line.strip(), order_type))

    # -- press --
    def _start_press(self, line: str) -> bool:
        match = PRESS_HEADER_PATTERN.match(line)
        if match:
            sender, recipient = match["sender"], match["recipient"]
        else:
            match = BROADCAST_HEADER_PATTERN.match(line)
            if not match:
                return False
            sender, recipient = match["sender"], BROADCAST_RECIPIENT

        self._flush_press()
        self.press = PressCursor(sender=sender.strip(), recipient=recipient.strip())
        return True

    def _flush_press(self) -> None:
        if self.press is not None and self.current_phase is not None:
            message = self.press.to_message()
            if message is not None:
                self.current_phase.press.append(message)
        self.press = None


def classify(text: str, rules: tuple[tuple[re.Pattern[str], OrderType], ...]) -> Optional[OrderType]:
    """First matching rule wins."""
    for pattern, order_type in rules:
        if pattern.search(text):
            return order_type
    return None
