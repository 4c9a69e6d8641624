"""Unit tests for src/judge/history.py"""

import pytest

from src.core.exceptions import InvalidGameNameError
from src.core.models import PressMessage, Unit
from src.core.shared_types import OrderType
from src.judge.history import parse_history

HISTORY = """\
History of demo (Standard)
Status as of Tue Feb 03 2004 10:00:00 UTC

Some preamble noise
Austria: Army Vienna -> Trieste.

Deadline for Spring Movement, 1901 is Mon Jan 19 2004 23:30:00 UTC

Austria: Army Vienna -> Trieste.
Austria: Fleet Trieste -> Albania.
England: Fleet London SUPPORT Fleet North Sea -> English Channel.
France: Army Paris HOLD.
Germany: Army Munich -> Burgundy.  (*bounce*)
Italy: Fleet Naples CONVOY Army Apulia -> Tunis.
Russia: Army Warsaw SUPPORT Army Moscow.

Press from France to England:
  Shall we ally against Germany?
    Deadline for Spring Movement, 1901 is soon

  Regards, Paris
Press from England to France:
Broadcast from Germany:
  Hello.
Austria:   3 Supply centers,  3 Units:  Builds   0 units.

Deadline for Fall Retreat, 1901 is Tue Jan 27 2004 23:30:00 UTC

Germany: Army Burgundy -> Ruhr.
Italy has been eliminated.

Deadline for Winter Adjustment, 1901 is Mon Feb 02 2004 23:30:00 UTC

Austria: Builds an army in Vienna.
Russia: Removes the fleet in Sevastopol.
Turkey: Waives a build.
England: Removal waived.
"""


@pytest.fixture
def history():
    return parse_history("demo", HISTORY)


def test_header(history) -> None:
    assert history.game_name == "demo"
    assert history.variant == "Standard"
    assert history.status_timestamp == "Tue Feb 03 2004 10:00:00 UTC"


def test_phases_in_order(history) -> None:
    """Lines before the first deadline never end up in a phase."""
    assert [record.phase_code for record in history.phases] == ["S1901M", "F1901R", "W1901A"]
    assert history.phases[0].deadline == "Mon Jan 19 2004 23:30:00 UTC"


def test_units(history) -> None:
    units = history.phases[0].units
    assert units["Austria"] == [Unit("A", "Vienna"), Unit("F", "Trieste")]
    assert units["England"] == [Unit("F", "London")]
    assert units["Germany"] == [Unit("A", "Munich")]


@pytest.mark.parametrize(
    "power, expected",
    [
        ("Austria", [OrderType.MOVE, OrderType.MOVE]),
        ("England", [OrderType.SUPPORT_MOVE]),
        ("France", [OrderType.HOLD]),
        ("Germany", [OrderType.MOVE]),
        ("Italy", [OrderType.CONVOY]),
        ("Russia", [OrderType.SUPPORT_HOLD]),
    ],
)
def test_movement_orders(history, power: str, expected: list[OrderType]) -> None:
    orders = history.phases[0].orders[power]
    assert [order.type for order in orders] == expected


def test_order_keeps_raw_line(history) -> None:
    order = history.phases[0].orders["France"][0]
    assert order.raw == "France: Army Paris HOLD."


def test_results(history) -> None:
    assert history.phases[0].results == ["Germany: Army Munich -> Burgundy.  (*bounce*)"]


def test_supply_centers(history) -> None:
    assert history.phases[0].supply_centers == {"Austria": 3}


def test_press(history) -> None:
    """Indented lines stay in the message, even when they look like a phase header. Empty messages are dropped."""
    assert history.phases[0].press == [
        PressMessage(
            sender="France",
            recipient="England",
            message="Shall we ally against Germany?\n  Deadline for Spring Movement, 1901 is soon\n\nRegards, Paris",
        ),
        PressMessage(sender="Germany", recipient="All", message="Hello."),
    ]


def test_retreat_phase(history) -> None:
    retreat = history.phases[1]
    assert [order.type for order in retreat.orders["Germany"]] == [OrderType.RETREAT]
    assert retreat.eliminations == ["Italy"]
    assert retreat.press == []


def test_adjustment_phase(history) -> None:
    orders = history.phases[2].orders
    assert orders["Austria"][0].type is OrderType.BUILD
    assert orders["Russia"][0].type is OrderType.REMOVE
    assert orders["Turkey"][0].type is OrderType.WAIVE_BUILD
    assert orders["England"][0].type is OrderType.WAIVE_REMOVAL


def test_short_phase_headers() -> None:
    transcript = """\
Deadline for Spring 1901 is Mon Jan 19 2004
France: Army Paris -> Burgundy.
Deadline for Fall 1901 is Mon Jan 26 2004
"""
    history = parse_history("demo", transcript)
    assert [record.phase_code for record in history.phases] == ["S1901M", "F1901M"]
    assert history.phases[1].orders == {}


def test_press_at_end_of_transcript() -> None:
    transcript = """\
Deadline for Spring Movement, 1901 is Mon Jan 19 2004
Press from Italy to Austria:
  Lepanto?"""
    history = parse_history("demo", transcript)
    assert history.phases[0].press == [PressMessage("Italy", "Austria", "Lepanto?")]


def test_empty_transcript() -> None:
    history = parse_history("demo", "")
    assert history.phases == []
    assert history.variant is None
    assert history.status_timestamp is None


def test_invalid_game_name() -> None:
    with pytest.raises(InvalidGameNameError):
        parse_history("", HISTORY)
