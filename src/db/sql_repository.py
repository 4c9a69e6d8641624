"""Implementation of (GameState)Repository using SQLAlchemy"""

import logging
from dataclasses import asdict
from datetime import timezone
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.core.exceptions import BackingStoreUnavailableError
from src.core.models import GameState, Player, Unit
from src.core.shared_types import GameStatus
from src.db.schema import DBGameState, utc_now
from src.judge.commands import validate_game_name

logger = logging.getLogger(__name__)


class SQLGameStateRepository:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_game_state(self, name: str) -> GameState | None:
        """Get the stored state of a game, if record exists."""
        try:
            state_db = self.db.get(DBGameState, name)
        except SQLAlchemyError as err:
            raise self._unavailable(f"read state of game {name!r}", err) from err
        if state_db:
            return self._to_model(state_db)
        return None

    def save_game_state(self, name: str, state: GameState) -> GameState:
        """Store the state of a game. Overwrites an existing record."""
        validate_game_name(name)
        try:
            state_db = self.db.get(DBGameState, name)
            if state_db is None:
                state_db = DBGameState(name=name)
                self.db.add(state_db)
            self._copy_to_db(state, state_db)
            self.db.commit()
            self.db.refresh(state_db)
        except SQLAlchemyError as err:
            self.db.rollback()
            raise self._unavailable(f"save state of game {name!r}", err) from err
        return self._to_model(state_db)

    def list_game_states(
        self,
        status: Optional[str] = None,
        variant: Optional[str] = None,
        phase: Optional[str] = None,
        player: Optional[str] = None,
    ) -> dict[str, GameState]:
        """All stored games by name, optionally filtered. Sorted by name."""
        query = select(DBGameState).order_by(DBGameState.name)
        if status:
            query = query.where(DBGameState.status == status)
        if variant:
            query = query.where(DBGameState.variant == variant)
        if phase:
            query = query.where(DBGameState.current_phase == phase)
        try:
            rows = self.db.scalars(query).all()
        except SQLAlchemyError as err:
            raise self._unavailable("list game states", err) from err

        states = {row.name: self._to_model(row) for row in rows}
        if player:
            # players are stored as JSON, filter on the model instead of in SQL
            states = {
                name: state
                for name, state in states.items()
                if any(player in (p.email or "") for p in state.players)
            }
        return states

    def count_games_by_status(self) -> dict[str, int]:
        """Number of stored games per status."""
        query = (
            select(DBGameState.status, func.count())
            .group_by(DBGameState.status)
            .order_by(DBGameState.status)
        )
        try:
            rows = self.db.execute(query).all()
        except SQLAlchemyError as err:
            raise self._unavailable("count game states", err) from err
        return {status: count for status, count in rows}

    def _copy_to_db(self, state: GameState, state_db: DBGameState) -> None:
        state_db.status = str(state.status)
        state_db.variant = state.variant
        state_db.options = list(state.options)
        state_db.current_phase = state.current_phase
        state_db.next_deadline = state.next_deadline
        state_db.masters = list(state.masters)
        state_db.players = [asdict(player) for player in state.players if player.power]
        state_db.observers = list(state.observers)
        state_db.settings = dict(state.settings)
        state_db.units = {
            power: [asdict(unit) for unit in units] for power, units in state.units.items()
        }
        state_db.supply_centers = {
            power: list(centers) for power, centers in state.supply_centers.items()
        }
        state_db.raw_transcript = state.raw_transcript
        state_db.last_updated = state.last_updated or utc_now()

    def _to_model(self, state_db: DBGameState) -> GameState:
        """Convert SQLAlchemy model to data transfer model."""
        last_updated = state_db.last_updated
        # SQLite hands back naive datetimes
        if last_updated is not None and last_updated.tzinfo is None:
            last_updated = last_updated.replace(tzinfo=timezone.utc)
        return GameState(
            name=state_db.name,
            status=GameStatus.from_text(state_db.status) or GameStatus.UNKNOWN,
            variant=state_db.variant,
            options=list(state_db.options or []),
            current_phase=state_db.current_phase,
            next_deadline=state_db.next_deadline,
            players=[_player_from_db(player) for player in state_db.players or []],
            masters=list(state_db.masters or []),
            observers=list(state_db.observers or []),
            settings=dict(state_db.settings or {}),
            units={
                power: [Unit(**unit) for unit in units]
                for power, units in (state_db.units or {}).items()
            },
            supply_centers={
                power: list(centers)
                for power, centers in (state_db.supply_centers or {}).items()
            },
            raw_transcript=state_db.raw_transcript,
            last_updated=last_updated,
        )

    def _unavailable(self, action: str, err: SQLAlchemyError) -> BackingStoreUnavailableError:
        logger.error("Could not %s: %s", action, err)
        return BackingStoreUnavailableError(f"Could not {action}.")


def _player_from_db(player: dict) -> Player:
    fields = dict(player)
    fields["units"] = [Unit(**unit) for unit in fields.get("units") or []]
    fields["supply_centers"] = list(fields.get("supply_centers") or [])
    return Player(**fields)
