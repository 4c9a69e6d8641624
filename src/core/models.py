"""
Boundary layer data model(s).

These objects are what the parsers produce, what the repository stores and what the Service hands to the API layer.
(Decouples the text formats of the judge and the DB tables from the information needed to send across boundaries)
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from src.core.shared_types import DEFAULT_PLAYER_STATUS, GameStatus, OrderType

# Type aliases to make the models easier to read
PowerName = str
Email = str
PhaseCode = str


@dataclass(frozen=True)
class Unit:
    type: str  # single letter: A, F, W, G, R
    location: str
    status: Optional[str] = None  # e.g. "dislodged"


@dataclass
class Player:
    power: PowerName
    email: Optional[Email] = None
    status: str = DEFAULT_PLAYER_STATUS
    name: Optional[str] = None
    units: list[Unit] = field(default_factory=list)
    supply_centers: list[str] = field(default_factory=list)


@dataclass
class GameState:
    """Normalized view of one game, rebuilt from every LIST transcript."""

    name: str
    status: GameStatus = GameStatus.UNKNOWN
    variant: str = "Standard"
    options: list[str] = field(default_factory=list)
    current_phase: PhaseCode = "Unknown"
    next_deadline: Optional[str] = None
    players: list[Player] = field(default_factory=list)
    masters: list[Email] = field(default_factory=list)
    observers: list[Email] = field(default_factory=list)
    settings: dict[str, Any] = field(default_factory=dict)
    units: dict[PowerName, list[Unit]] = field(default_factory=dict)
    supply_centers: dict[PowerName, list[str]] = field(default_factory=dict)
    raw_transcript: Optional[str] = None
    last_updated: Optional[datetime] = None

    def find_player(self, email: Optional[Email]) -> Optional[Player]:
        if not email:
            return None
        return next((player for player in self.players if player.email == email), None)


@dataclass
class Order:
    raw: str
    type: OrderType


@dataclass
class PressMessage:
    sender: str
    recipient: str
    message: str


@dataclass
class PhaseRecord:
    phase_code: PhaseCode
    deadline: Optional[str] = None
    supply_centers: dict[PowerName, int] = field(default_factory=dict)
    eliminations: list[PowerName] = field(default_factory=list)
    units: dict[PowerName, list[Unit]] = field(default_factory=dict)
    orders: dict[PowerName, list[Order]] = field(default_factory=dict)
    results: list[str] = field(default_factory=list)
    press: list[PressMessage] = field(default_factory=list)


@dataclass
class GameHistory:
    game_name: str
    variant: Optional[str] = None
    status_timestamp: Optional[str] = None
    phases: list[PhaseRecord] = field(default_factory=list)


@dataclass(frozen=True)
class CommandContext:
    """What has to be prepended to a command before the judge accepts it."""

    requires_preamble: bool
    preamble: Optional[str] = None
    effective_game_name: Optional[str] = None


@dataclass
class RecommendationSet:
    recommended: list[str] = field(default_factory=list)
    player_actions: list[str] = field(default_factory=list)
    settings: list[str] = field(default_factory=list)
    game_info: list[str] = field(default_factory=list)
    master: list[str] = field(default_factory=list)
    machiavelli: list[str] = field(default_factory=list)  # money commands of Machiavelli games
    general: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CommandOutcome:
    """What the judge's reply to a command tells us about the game context."""

    signed_on_game: Optional[str] = None
    created_game: Optional[str] = None
    requires_refresh: bool = False


@dataclass(frozen=True)
class MasterFileEntry:
    """One game as announced in the judge's master game list."""

    name: str
    status: GameStatus
    current_phase: PhaseCode = "Unknown"
