"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

from typing import Generator

import pytest
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.core.models import GameState, Player
from src.core.shared_types import GameStatus
from src.db.schema import Base
from tests.sample_data import FIXED_NOW, MASTER_EMAIL, OBSERVER_EMAIL, PLAYER_EMAIL

# Setup an in-memory SQLite database for testing
DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autoflush=False, bind=engine)


@pytest.fixture
def db_session_repo() -> Generator[Session, None, None]:
    """Connection to a test database. Tables are removed at teardown to make unit tests of repository independent of each other."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        Base.metadata.drop_all(bind=engine)
        db.close()


@pytest.fixture
def active_game() -> GameState:
    """A running game with one player per role we care about."""
    return GameState(
        name="demo",
        status=GameStatus.ACTIVE,
        variant="Standard",
        current_phase="S1901M",
        next_deadline="Mon Jan 19 2004 23:30:00 CET",
        players=[
            Player(power="Austria", email="austria@example.com"),
            Player(power="France", email=PLAYER_EMAIL),
        ],
        masters=[MASTER_EMAIL],
        observers=[OBSERVER_EMAIL],
        settings={
            "nmr": False,
            "dias": True,
            "concessions": True,
            "gunboat": False,
            "press": "White",
            "partial_press": True,
            "observer_press": "any",
        },
        last_updated=FIXED_NOW,
    )
