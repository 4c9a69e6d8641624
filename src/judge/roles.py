"""
Who is the user in a given game?

Used by both the context resolver (which sign on to prepend) and the recommendations (which commands make sense).
"""

from dataclasses import dataclass
from typing import Optional

from src.core.models import GameState, Player
from src.core.shared_types import INACTIVE_PLAYER_STATUSES, Role

# Sign on markers for the roles that do not play a power
MASTER_MARKER = "M"
OBSERVER_MARKER = "O"
JOIN_MARKER = "?"


@dataclass(frozen=True)
class RoleAssignment:
    """
    The single role used to sign on, plus the flags needed to filter commands.
    NOTE: a master can also play a power. The primary role is then PLAYER, while is_master stays True.
    """

    role: Role
    player: Optional[Player] = None
    is_master: bool = False

    @property
    def is_player(self) -> bool:
        return self.player is not None

    @property
    def is_observer(self) -> bool:
        return self.role is Role.OBSERVER

    @property
    def is_member(self) -> bool:
        return self.role is not Role.UNINVOLVED

    @property
    def is_active_player(self) -> bool:
        if self.player is None:
            return False
        return (self.player.status or "").upper() not in INACTIVE_PLAYER_STATUSES

    @property
    def sign_on_marker(self) -> str:
        """The character that goes in front of the game name in SIGN ON."""
        if self.role is Role.PLAYER and self.player is not None and self.player.power:
            return self.player.power[0].upper()
        if self.role is Role.MASTER:
            return MASTER_MARKER
        if self.role is Role.OBSERVER:
            return OBSERVER_MARKER
        return JOIN_MARKER


UNINVOLVED = RoleAssignment(Role.UNINVOLVED)


def classify_role(game_state: Optional[GameState], identity: Optional[str]) -> RoleAssignment:
    """
    Exactly one role applies.
    ----
    1. listed as a player (with a power) -> PLAYER
    2. listed as a master                -> MASTER
    3. listed as an observer             -> OBSERVER (only if neither of the above)
    4. otherwise                         -> UNINVOLVED
    """
    if game_state is None or not identity:
        return UNINVOLVED

    player = game_state.find_player(identity)
    is_master = identity in game_state.masters

    if player is not None and player.power:
        return RoleAssignment(Role.PLAYER, player=player, is_master=is_master)
    if is_master:
        return RoleAssignment(Role.MASTER, player=player, is_master=True)
    if player is None and identity in game_state.observers:
        return RoleAssignment(Role.OBSERVER)
    return UNINVOLVED
