"""
Type definitions used across layers
"""

from enum import StrEnum
from typing import Optional, Self


class GameStatus(StrEnum):
    UNKNOWN = "Unknown"
    FORMING = "Forming"
    ACTIVE = "Active"
    PAUSED = "Paused"
    FINISHED = "Finished"
    TERMINATED = "Terminated"

    @classmethod
    def from_text(cls, text: str) -> Optional[Self]:
        """Case-insensitive lookup. Returns None for text the judge never uses as a status."""
        cleaned = text.strip().rstrip(".").lower()
        return next((status for status in cls if status.value.lower() == cleaned), None)


class Role(StrEnum):
    MASTER = "master"
    PLAYER = "player"
    OBSERVER = "observer"
    UNINVOLVED = "uninvolved"


class OrderType(StrEnum):
    HOLD = "hold"
    MOVE = "move"
    SUPPORT_HOLD = "support-hold"
    SUPPORT_MOVE = "support-move"
    CONVOY = "convoy"
    RETREAT = "retreat"
    DISBAND = "disband"
    BUILD = "build"
    WAIVE_BUILD = "waive-build"
    REMOVE = "remove"
    WAIVE_REMOVAL = "waive-removal"


# Player status when the roster line carries no "(...)" marker
DEFAULT_PLAYER_STATUS = "Playing"

# A player with one of these statuses no longer submits orders
INACTIVE_PLAYER_STATUSES: frozenset[str] = frozenset(
    {"CD", "RESIGNED", "ABANDONED", "ELIMINATED"}
)
