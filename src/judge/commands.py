"""
What the judge's commands look like, and what we can tell from them without asking the judge.
----

* Lookup tables (built once, never mutated) that sort commands by the context they need.
* Game name validation / extraction from a command line.
* Interpretation of the judge's reply (did the sign on work? did the game change?).
* The mail envelope the judge reads its commands from.
"""

import re
from datetime import datetime
from email.utils import format_datetime
from typing import Iterable, Optional

from src.core.exceptions import InvalidGameNameError
from src.core.models import CommandOutcome

GAME_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9]{1,8}$")

SIGN_OFF = "SIGN OFF"

# Commands that never need a game context
NO_CONTEXT_COMMANDS: frozenset[str] = frozenset(
    {
        "REGISTER",
        "WHOIS",
        "INFO",
        "GET",
        "VERSION",
        "HELP",
        "LIST",
        "CREATE",
        "SET PASSWORD",
        "SET ADDRESS",
        "MANUAL",
        "I AM ALSO",
        "GET DEDICATION",
        "INFO PLAYER",
        "SEND",
        "MAP",
    }
)

# Commands that need a game context, unless they name the game themselves
GAME_NAME_OPTIONAL_COMMANDS: frozenset[str] = frozenset(
    {"LIST", "HISTORY", "SUMMARY", "WHOGAME", "OBSERVE", "WATCH"}
)

# Commands whose second word may be a game name
GAME_NAME_COMMANDS: frozenset[str] = GAME_NAME_OPTIONAL_COMMANDS | {"SIGN", "CREATE", "EJECT"}

# Words that can follow a command verb but are never game names
RESERVED_KEYWORDS: frozenset[str] = frozenset(
    {"FULL", "FROM", "TO", "LINES", "EXCLSTART", "EXCLEND", "BROAD", "ON", "?", "MASTER"}
)

# Commands that (may) change the stored state of the game they are sent to
STATE_CHANGING_COMMANDS: frozenset[str] = frozenset(
    {
        "PROCESS",
        "SET",
        "RESIGN",
        "WITHDRAW",
        "EJECT",
        "TERMINATE",
        "ROLLBACK",
        "FORCE BEGIN",
        "UNSTART",
        "PROMOTE",
        "PAUSE",
        "RESUME",
        "BECOME MASTER",
        "CLEAR",
        "BORROW",
        "GIVE",
        "PAY",
        "ALLY",
        "EXPENSE",
        "ORDERS",
    }
)

# Lower case fragments of a reply that confirm a state changing command went through
REFRESH_MARKERS: tuple[str, ...] = (
    "processed",
    "terminated",
    "resigned",
    "ejected",
    "rolled back",
    "set",
    "promoted",
    "paused",
    "resumed",
    "cleared",
    "moderated",
    "accepted",
    "order received",
    "borrowed",
    "paid",
    "loaned",
    "allied",
    "expense recorded",
)

SIGN_ON_SUCCESS_PATTERN = re.compile(r"signed on as (?:\w+)\s*(?:in game)?\s*'(\w+)'", re.IGNORECASE)
OBSERVE_SUCCESS_PATTERN = re.compile(r"(?:Observing|Watching) game '(\w+)'", re.IGNORECASE)
CREATE_SUCCESS_PATTERN = re.compile(r"Game '(\w+)' created", re.IGNORECASE)


# --- game names ---
def looks_like_game_name(token: Optional[str]) -> bool:
    return bool(token) and bool(GAME_NAME_PATTERN.match(token))


def validate_game_name(name: Optional[str]) -> str:
    """Raise an InvalidGameNameError for anything but 1-8 alphanumeric characters."""
    if name is None or not looks_like_game_name(name):
        raise InvalidGameNameError(
            f"Invalid game name: {name!r}. Use 1-8 letters or digits."
        )
    return name


# --- command words ---
def split_command(command: str) -> list[str]:
    """The words of the first line of a command."""
    stripped = command.strip()
    first_line = stripped.splitlines()[0] if stripped else ""
    return first_line.split()


def command_verb(command: str) -> str:
    parts = split_command(command)
    return parts[0].upper() if parts else ""


def matches_command(command: str, table: Iterable[str]) -> bool:
    """
    True if the command starts with one of the entries of the table.
    Entries can span multiple words (e.g. "SET PASSWORD" matches, while "SET DEADLINE" does not).
    """
    words = [word.upper() for word in split_command(command)]
    for entry in table:
        entry_words = entry.split()
        if words[: len(entry_words)] == entry_words:
            return True
    return False


def is_sign_on(command: str) -> bool:
    """The judge's own authentication command: SIGN ON <power><game> <password>"""
    parts = [word.upper() for word in split_command(command)]
    return len(parts) >= 2 and parts[0] == "SIGN" and parts[1] == "ON"


def extract_game_name(command: str) -> Optional[str]:
    """
    The game a command names explicitly, if any.
    ----

    LIST demo        -> demo
    SIGN ON Fdemo pw -> demo  (F is the power initial)
    SIGN ON ?demo pw -> demo
    CREATE ?demo pw  -> demo
    EJECT x@y.com    -> None  (an email, not a game)
    HISTORY FULL     -> None  (reserved keyword)
    """
    parts = split_command(command)
    if len(parts) < 2:
        return None

    verb = parts[0].upper()
    if verb not in GAME_NAME_COMMANDS:
        return None

    candidate: Optional[str] = parts[1]
    if verb == "SIGN":
        if not is_sign_on(command) or len(parts) < 3:
            return None
        candidate = parts[2]
        if candidate.startswith("?"):
            candidate = candidate[1:]
        elif len(candidate) > 1 and candidate[0].isalpha():
            candidate = candidate[1:]
    elif verb == "CREATE" and candidate.startswith("?"):
        candidate = candidate[1:]
    elif verb == "EJECT" and "@" in candidate:
        candidate = None

    if candidate and looks_like_game_name(candidate) and candidate.upper() not in RESERVED_KEYWORDS:
        return candidate
    return None


# --- judge replies ---
def interpret_outcome(command: str, output: str, success: bool = True) -> CommandOutcome:
    """
    Read the judge's reply to a command.
    ----

    Detects a successful sign on / observe / create (which game the user is now in), and whether the
    stored state of the game is outdated and should be refreshed with a new LIST.
    """
    verb = command_verb(command)
    signed_on_game = None
    created_game = None

    sign_on = SIGN_ON_SUCCESS_PATTERN.search(output)
    observe = OBSERVE_SUCCESS_PATTERN.search(output)
    create = CREATE_SUCCESS_PATTERN.search(output)
    if sign_on and is_sign_on(command):
        signed_on_game = sign_on[1]
    elif observe and verb in {"OBSERVE", "WATCH"}:
        signed_on_game = observe[1]
    elif create and verb == "CREATE":
        signed_on_game = created_game = create[1]

    requires_refresh = signed_on_game is not None
    if success and matches_command(command, STATE_CHANGING_COMMANDS):
        lowered = output.lower()
        requires_refresh = requires_refresh or any(marker in lowered for marker in REFRESH_MARKERS)
    if success and verb == "LIST" and extract_game_name(command):
        requires_refresh = True

    return CommandOutcome(
        signed_on_game=signed_on_game,
        created_game=created_game,
        requires_refresh=requires_refresh,
    )


# --- envelope ---
def build_engine_input(
    identity: str, command_stream: str, judge_email: str, sent_at: datetime
) -> str:
    """The judge reads mail: header lines, a blank line, then the commands."""
    return (
        f"FROM: {identity}\n"
        f"TO: {judge_email}\n"
        f"Subject: judge relay via {identity}\n"
        f"Date: {format_datetime(sent_at)}\n"
        f"\n"
        f"{command_stream}\n"
    )
