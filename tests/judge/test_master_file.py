"""Unit tests for src/judge/master_file.py"""

from dataclasses import replace

from src.core.models import GameState, MasterFileEntry
from src.core.shared_types import GameStatus
from src.judge.master_file import parse_master_file, reconcile
from tests.sample_data import FIXED_NOW

MASTER_FILE = """\
demo     1234  S1901M  0 0 0
  some continuation line
-
newgame  1300  Forming
-
control  1     S1901M
-
demo     99    F1902M
-
old      5     Finished
-
not a game line
"""


def test_parse_master_file() -> None:
    entries = parse_master_file(MASTER_FILE)
    assert entries == {
        "demo": MasterFileEntry("demo", GameStatus.ACTIVE, "S1901M"),
        "newgame": MasterFileEntry("newgame", GameStatus.FORMING),
        "old": MasterFileEntry("old", GameStatus.FINISHED),
    }


def test_parse_empty_master_file() -> None:
    assert parse_master_file("") == {}


def test_reconcile_new_game() -> None:
    entry = MasterFileEntry("newgame", GameStatus.FORMING)
    state = reconcile(None, entry, FIXED_NOW)
    assert state == GameState(name="newgame", status=GameStatus.FORMING, last_updated=FIXED_NOW)


def test_reconcile_up_to_date(active_game: GameState) -> None:
    entry = MasterFileEntry("demo", GameStatus.ACTIVE, "S1901M")
    assert reconcile(active_game, entry, FIXED_NOW) is None


def test_reconcile_keeps_listing_details(active_game: GameState) -> None:
    """Only status and phase come from the master file, the rest of the stored state stays."""
    before = replace(active_game)
    entry = MasterFileEntry("demo", GameStatus.ACTIVE, "F1901M")
    state = reconcile(active_game, entry, FIXED_NOW)

    assert state is not None
    assert state.current_phase == "F1901M"
    assert state.players == active_game.players
    assert state.settings == active_game.settings
    # stored state itself is left alone
    assert active_game == before


def test_reconcile_unknown_entry_changes_nothing(active_game: GameState) -> None:
    entry = MasterFileEntry("demo", GameStatus.UNKNOWN)
    assert reconcile(active_game, entry, FIXED_NOW) is None
