"""Orchestration of communication from API layer to the transcript parsers, resolver and persistence layers (and the reverse direction)."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Self

from src.api.models import (
    CommandOutputRequest,
    ExecuteCommandRequest,
    GameFilterRequest,
    GameSummaryResponse,
    HistoryRequest,
    ListingRequest,
    PreparedCommandResponse,
    RecommendationRequest,
    RecommendationResponse,
    StatusCountResponse,
)
from src.core.config import Settings
from src.core.exceptions import GameNotFoundError, InvalidRequestError
from src.core.models import CommandOutcome, GameHistory, GameState
from src.db.repository import GameStateRepository
from src.judge.commands import build_engine_input, extract_game_name, interpret_outcome
from src.judge.context import compose_command, resolve_command_context
from src.judge.history import parse_history
from src.judge.listing import parse_listing
from src.judge.master_file import parse_master_file, reconcile
from src.judge.recommendations import recommend

logger = logging.getLogger(__name__)


class JudgeService:
    """Orchestration of layers between the users and the judge."""

    def __init__(
        self,
        repository: GameStateRepository,
        judge_email: str,
        master_file_path: Optional[str] = None,
    ) -> None:
        self.repo = repository
        self.judge_email = judge_email
        self.master_file_path = master_file_path

    @classmethod
    def from_settings(cls, repository: GameStateRepository, settings: Settings) -> Self:
        return cls(repository, settings.judge_email, settings.master_file_path)

    # -- transcripts --
    def ingest_listing(
        self, request: ListingRequest, now: Optional[datetime] = None
    ) -> GameState:
        """Parse a LIST transcript and store the result (overwriting what was stored for the game)."""
        state = parse_listing(request.game_name, request.transcript, now)
        stored = self.repo.save_game_state(request.game_name, state)
        logger.info("Stored state of %s: %s, phase %s", stored.name, stored.status, stored.current_phase)
        return stored

    def read_history(self, request: HistoryRequest) -> GameHistory:
        """HISTORY transcripts are parsed on request, never stored."""
        return parse_history(request.game_name, request.transcript)

    # -- commands --
    def prepare_command(
        self, request: ExecuteCommandRequest, now: Optional[datetime] = None
    ) -> PreparedCommandResponse:
        """
        Turn a user's command into the mail the judge reads.
        ----

        MissingContextError and BackingStoreUnavailableError are raised to the caller.
        Nothing gets stored: a failing command leaves the repository untouched.
        """
        context = resolve_command_context(
            identity=request.identity,
            raw_command=request.command,
            target_game=request.target_game,
            target_password=request.target_password,
            target_variant=request.target_variant,
            lookup_game_state=self.repo.get_game_state,
        )
        command = compose_command(request.command, context)
        engine_input = build_engine_input(
            request.identity, command, self.judge_email, now or datetime.now(timezone.utc)
        )
        return PreparedCommandResponse(
            requires_preamble=context.requires_preamble,
            effective_game_name=context.effective_game_name,
            command=command,
            engine_input=engine_input,
        )

    def handle_command_output(
        self, request: CommandOutputRequest, now: Optional[datetime] = None
    ) -> CommandOutcome:
        """
        Interpret the judge's reply to a command.
        A successful LIST of a single game is a fresh listing, so it gets stored right away.
        """
        outcome = interpret_outcome(request.command, request.output, request.success)

        listed_game = extract_game_name(request.command)
        if request.success and listed_game and request.command.strip().upper().startswith("LIST"):
            self.ingest_listing(ListingRequest(game_name=listed_game, transcript=request.output), now)
            logger.info("Stored listing of %s requested by %s", listed_game, request.identity)
        return outcome

    # -- recommendations --
    def recommend(self, request: RecommendationRequest) -> RecommendationResponse:
        game_state = self.repo.get_game_state(request.game_name) if request.game_name else None
        recommendations = recommend(game_state, request.identity)
        return RecommendationResponse(
            recommended=recommendations.recommended,
            player_actions=recommendations.player_actions,
            settings=recommendations.settings,
            game_info=recommendations.game_info,
            master=recommendations.master,
            machiavelli=recommendations.machiavelli,
            general=recommendations.general,
        )

    # -- game list --
    def get_game_state(self, game_name: str) -> GameState:
        """Attempt to find the game in the repository and raise error if it fails."""
        state = self.repo.get_game_state(game_name)
        if state is None:
            raise GameNotFoundError(f"Game {game_name!r} not found.")
        return state

    def list_games(self, request: GameFilterRequest) -> list[GameSummaryResponse]:
        states = self.repo.list_game_states(
            status=request.status,
            variant=request.variant,
            phase=request.phase,
            player=request.player,
        )
        return [
            GameSummaryResponse(
                name=state.name,
                status=str(state.status),
                variant=state.variant,
                phase=state.current_phase,
                players=[player.email for player in state.players if player.email],
                masters=list(state.masters),
                next_deadline=state.next_deadline,
            )
            for state in states.values()
        ]

    def game_counts_by_status(self) -> list[StatusCountResponse]:
        counts = self.repo.count_games_by_status()
        return [
            StatusCountResponse(status=status, count=count)
            for status, count in sorted(counts.items())
        ]

    def sync_master_file(
        self, master_file_text: str, now: Optional[datetime] = None
    ) -> list[str]:
        """Bring the stored games in line with the judge's master list. Returns the names of the games that were (re)stored."""
        entries = parse_master_file(master_file_text)
        existing = self.repo.list_game_states()

        updated: list[str] = []
        for name, entry in entries.items():
            new_state = reconcile(existing.get(name), entry, now)
            if new_state is None:
                continue
            self.repo.save_game_state(name, new_state)
            updated.append(name)

        logger.info("Master file sync: %d games, %d updated", len(entries), len(updated))
        return updated

    def sync_master_file_at(
        self, path: Optional[str] = None, now: Optional[datetime] = None
    ) -> list[str]:
        """Same as sync_master_file, reading the master list from disk (defaults to the configured path)."""
        path = path or self.master_file_path
        if not path:
            raise InvalidRequestError("No master file path configured.")
        text = Path(path).read_text(encoding="utf-8")
        return self.sync_master_file(text, now)
