"""Protocol repository (SQL Alchemy implementation in sql_repository.py, a dict does the job in tests)"""

from typing import Optional, Protocol

from src.core.models import GameState


class GameStateRepository(Protocol):
    """Persistence layer orchestration. Records are keyed by the exact game name."""

    def get_game_state(self, name: str) -> GameState | None:
        """Get the stored state of a game, if record exists."""
        ...

    def save_game_state(self, name: str, state: GameState) -> GameState:
        """Store the state of a game. Overwrites (does not merge with) an existing record."""
        ...

    def list_game_states(
        self,
        status: Optional[str] = None,
        variant: Optional[str] = None,
        phase: Optional[str] = None,
        player: Optional[str] = None,
    ) -> dict[str, GameState]:
        """All stored games by name, optionally filtered. Sorted by name."""
        ...

    def count_games_by_status(self) -> dict[str, int]:
        """Number of stored games per status."""
        ...
