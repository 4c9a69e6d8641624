"""Unit tests for src/judge/recommendations.py"""

from dataclasses import replace

import pytest

from src.core.models import GameState, Player
from src.core.shared_types import GameStatus
from src.judge.recommendations import (
    JOIN_SUGGESTIONS,
    MACHIAVELLI_PLAYER_COMMANDS,
    MASTER_COMMANDS,
    recommend,
)
from tests.sample_data import MASTER_EMAIL, OBSERVER_EMAIL, PLAYER_EMAIL, STRANGER_EMAIL

INFO = ["HISTORY", "LIST", "SUMMARY", "WHOGAME"]


def test_no_game_suggests_joining() -> None:
    recommendations = recommend(None, None)
    assert recommendations.recommended == sorted(JOIN_SUGGESTIONS)
    assert recommendations.player_actions == []
    assert recommendations.settings == []
    assert recommendations.master == []
    assert "MANUAL" in recommendations.general


def test_forming_game_uninvolved(active_game: GameState) -> None:
    game = replace(active_game, status=GameStatus.FORMING, current_phase="Forming")
    recommendations = recommend(game, STRANGER_EMAIL)
    assert recommendations.recommended == ["LIST", "SIGN ON ?game", "WHOGAME"]
    assert recommendations.master == []
    assert recommendations.player_actions == []
    assert recommendations.settings == []
    assert "SIGN ON ?game" in recommendations.game_info


def test_forming_game_master(active_game: GameState) -> None:
    game = replace(active_game, status=GameStatus.FORMING, current_phase="Forming")
    recommendations = recommend(game, MASTER_EMAIL)
    assert recommendations.recommended == ["FORCE BEGIN", "LIST", "SET", "WHOGAME"]
    assert recommendations.master == sorted(set(MASTER_COMMANDS))


def test_active_game_player(active_game: GameState) -> None:
    recommendations = recommend(active_game, PLAYER_EMAIL)
    assert recommendations.recommended == [
        "BROADCAST",
        "DIARY",
        "HISTORY",
        "LIST",
        "ORDERS",
        "PRESS",
        "SET CONCEDE",
        "SET DRAW",
        "SET WAIT",
        "SUMMARY",
        "WHOGAME",
    ]
    assert recommendations.master == []
    assert "SET PREFERENCE" in recommendations.settings
    # members are not offered to join again
    assert recommendations.game_info == INFO


def test_active_game_respects_settings(active_game: GameState) -> None:
    settings = dict(active_game.settings, press="None", dias=False, concessions=False, wait=False)
    recommendations = recommend(replace(active_game, settings=settings), PLAYER_EMAIL)
    for command in ("PRESS", "BROADCAST", "SET DRAW", "SET CONCEDE", "SET WAIT"):
        assert command not in recommendations.recommended
    assert "ORDERS" in recommendations.recommended


def test_active_game_outside_order_phase(active_game: GameState) -> None:
    recommendations = recommend(replace(active_game, current_phase="Unknown"), PLAYER_EMAIL)
    assert "ORDERS" not in recommendations.recommended


@pytest.mark.parametrize("status", ["CD", "Resigned", "abandoned"])
def test_inactive_player_gets_no_orders(active_game: GameState, status: str) -> None:
    game = replace(active_game, players=[Player(power="France", email=PLAYER_EMAIL, status=status)])
    recommendations = recommend(game, PLAYER_EMAIL)
    assert "ORDERS" not in recommendations.recommended
    assert recommendations.recommended == INFO


def test_active_game_observer(active_game: GameState) -> None:
    recommendations = recommend(active_game, OBSERVER_EMAIL)
    assert recommendations.recommended == sorted(["BROADCAST", "PRESS", *INFO])
    assert recommendations.player_actions == ["BROADCAST", "PRESS", "RESIGN", "WITHDRAW"]
    assert recommendations.settings == []
    assert recommendations.master == []


def test_active_game_observer_without_observer_press(active_game: GameState) -> None:
    settings = dict(active_game.settings, observer_press="none")
    recommendations = recommend(replace(active_game, settings=settings), OBSERVER_EMAIL)
    assert recommendations.recommended == INFO


def test_active_game_master(active_game: GameState) -> None:
    recommendations = recommend(active_game, MASTER_EMAIL)
    assert recommendations.recommended == sorted(
        ["PROCESS", "SET DEADLINE", "PAUSE", "EJECT", "BECOME", *INFO]
    )
    assert "ROLLBACK" in recommendations.master


def test_active_game_uninvolved(active_game: GameState) -> None:
    recommendations = recommend(active_game, STRANGER_EMAIL)
    assert recommendations.recommended == sorted(["SIGN ON power", "OBSERVE", *INFO])
    assert "CREATE ?" in recommendations.game_info


def test_paused_game(active_game: GameState) -> None:
    game = replace(active_game, status=GameStatus.PAUSED)
    assert recommend(game, MASTER_EMAIL).recommended == sorted(["RESUME", "TERMINATE", *INFO])
    assert recommend(game, PLAYER_EMAIL).recommended == sorted(["BROADCAST", "PRESS", *INFO])


@pytest.mark.parametrize("status", [GameStatus.FINISHED, GameStatus.TERMINATED])
def test_finished_game(active_game: GameState, status: GameStatus) -> None:
    game = replace(active_game, status=status)
    assert recommend(game, PLAYER_EMAIL).recommended == ["HISTORY", "LIST", "SUMMARY"]
    assert recommend(game, STRANGER_EMAIL).recommended == ["HISTORY", "LIST", "SUMMARY"]
    assert recommend(game, MASTER_EMAIL).recommended == [
        "HISTORY",
        "LIST",
        "ROLLBACK",
        "SUMMARY",
        "UNSTART",
    ]


def test_unknown_status(active_game: GameState) -> None:
    game = replace(active_game, status=GameStatus.UNKNOWN)
    assert recommend(game, STRANGER_EMAIL).recommended == sorted(["SIGN ON power", "OBSERVE", *INFO])
    assert recommend(game, PLAYER_EMAIL).recommended == INFO


def test_categories_are_clean(active_game: GameState) -> None:
    """Sorted, no duplicates, and never REGISTER / SIGN OFF."""
    for identity in (PLAYER_EMAIL, MASTER_EMAIL, OBSERVER_EMAIL, STRANGER_EMAIL, None):
        recommendations = recommend(active_game, identity)
        for commands in (
            recommendations.recommended,
            recommendations.player_actions,
            recommendations.settings,
            recommendations.game_info,
            recommendations.master,
            recommendations.machiavelli,
            recommendations.general,
        ):
            assert commands == sorted(set(commands))
            assert "REGISTER" not in commands
            assert "SIGN OFF" not in commands
        assert "MANUAL" in recommendations.general


def test_does_not_modify_game(active_game: GameState) -> None:
    before = replace(active_game, settings=dict(active_game.settings))
    recommend(active_game, PLAYER_EMAIL)
    assert active_game == before


def test_duplicates_are_removed_per_category_only(active_game: GameState) -> None:
    recommendations = recommend(active_game, PLAYER_EMAIL)
    # LIST is suggested and is also an info command: both categories keep it
    assert "LIST" in recommendations.recommended
    assert "LIST" in recommendations.game_info
    assert "LIST" in recommendations.general
    assert recommendations.game_info.count("LIST") == 1


def test_master_commands_cover_phase_and_machiavelli_options(active_game: GameState) -> None:
    master = recommend(active_game, MASTER_EMAIL).master
    for command in (
        "SET MOVE",
        "SET RETREAT",
        "SET ADJUST",
        "SET COMMENT BEGIN",
        "SET TRANSFORM",
        "SET MONEY",
    ):
        assert command in master


# -- Machiavelli --
@pytest.fixture
def money_game(active_game: GameState) -> GameState:
    return replace(
        active_game,
        variant="Machiavelli",
        players=[
            Player(power="Florence", email=PLAYER_EMAIL),
            Player(power="Venice", email="venice@example.com"),
        ],
        settings=dict(active_game.settings, is_machiavelli=True, money=True),
    )


def test_machiavelli_money_commands_for_player(money_game: GameState) -> None:
    recommendations = recommend(money_game, PLAYER_EMAIL)
    assert recommendations.machiavelli == sorted(MACHIAVELLI_PLAYER_COMMANDS)
    for command in MACHIAVELLI_PLAYER_COMMANDS:
        assert command in recommendations.recommended


@pytest.mark.parametrize(
    ("identity", "expected"),
    [
        (MASTER_EMAIL, sorted(MACHIAVELLI_PLAYER_COMMANDS)),
        (OBSERVER_EMAIL, []),
        (STRANGER_EMAIL, []),
    ],
)
def test_machiavelli_money_commands_by_role(
    money_game: GameState, identity: str, expected: list[str]
) -> None:
    recommendations = recommend(money_game, identity)
    assert recommendations.machiavelli == expected
    assert "BORROW" not in recommendations.recommended


def test_machiavelli_without_money(money_game: GameState) -> None:
    game = replace(money_game, settings=dict(money_game.settings, money=False))
    recommendations = recommend(game, PLAYER_EMAIL)
    assert recommendations.machiavelli == []
    assert "PAY" not in recommendations.recommended


def test_money_setting_outside_machiavelli(active_game: GameState) -> None:
    game = replace(active_game, settings=dict(active_game.settings, money=True))
    assert recommend(game, PLAYER_EMAIL).machiavelli == []
