"""
The judge keeps a master list of all its games (dip.master). Reading it tells us which games exist
without sending a LIST for every one of them.

Blocks are separated by a line holding a single "-". The first line of a block looks like:

    demo     1234  S1901M ...
    newgame  1300  Forming ...
"""

import logging
import re
from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

from src.core.models import GameState, MasterFileEntry
from src.core.shared_types import GameStatus
from src.judge import phase

logger = logging.getLogger(__name__)

BLOCK_SEPARATOR = re.compile(r"^\s*-\s*$", re.MULTILINE)
GAME_LINE_PATTERN = re.compile(
    r"^(?P<name>[a-zA-Z0-9]{1,8})\s+(?P<id>\S+)\s+(?P<phase>[SFUW]\d{4}[MRBAX]|Forming|Paused|Finished|Terminated)",
    re.IGNORECASE,
)

# Pseudo game the judge uses for its own bookkeeping
CONTROL_GAME = "control"


def parse_master_file(text: str) -> dict[str, MasterFileEntry]:
    """All games announced in the master file, by name. The first block for a name wins."""
    entries: dict[str, MasterFileEntry] = {}
    for block in BLOCK_SEPARATOR.split(text or ""):
        block = block.strip()
        if not block:
            continue

        match = GAME_LINE_PATTERN.match(block.splitlines()[0].strip())
        if not match:
            continue

        name = match["name"]
        if name == CONTROL_GAME or name in entries:
            continue

        token = match["phase"]
        if phase.is_phase_code(token):
            entries[name] = MasterFileEntry(name, GameStatus.ACTIVE, token.upper())
        else:
            entries[name] = MasterFileEntry(name, GameStatus.from_text(token) or GameStatus.UNKNOWN)

    logger.debug("Found %d games in master file", len(entries))
    return entries


def reconcile(
    existing: Optional[GameState], entry: MasterFileEntry, now: Optional[datetime] = None
) -> Optional[GameState]:
    """
    Merge what the master file says into the stored state.
    Returns the state to store, or None if the stored state is already up to date.
    """
    now = now or datetime.now(timezone.utc)
    if existing is None:
        return GameState(
            name=entry.name,
            status=entry.status,
            current_phase=entry.current_phase,
            last_updated=now,
        )

    updated = replace(existing)
    changed = False
    if entry.current_phase != "Unknown" and updated.current_phase != entry.current_phase:
        updated.current_phase = entry.current_phase
        changed = True
    if entry.status != GameStatus.UNKNOWN and updated.status != entry.status:
        updated.status = entry.status
        changed = True

    if not changed:
        return None
    updated.last_updated = now
    return updated
