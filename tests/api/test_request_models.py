"""Unit tests for src/api/models.py"""

import pytest

from src.api.models import (
    CommandOutputRequest,
    ExecuteCommandRequest,
    ListingRequest,
    RecommendationRequest,
)
from src.core.exceptions import InvalidGameNameError, InvalidRequestError


# -- Validation - ExecuteCommandRequest --
def test_valid_command_request() -> None:
    request = ExecuteCommandRequest(
        identity=" france@example.com ",
        command="ORDERS",
        target_game="demo",
        target_password="secret",
        target_variant="Gunboat",
    )
    assert request.identity == "france@example.com"
    assert request.target_game == "demo"
    assert request.target_password == "secret"
    assert request.target_variant == "Gunboat"


def test_blank_context_fields_are_none() -> None:
    """Empty form fields mean nothing was selected."""
    request = ExecuteCommandRequest(
        identity="france@example.com",
        command="LIST",
        target_game="  ",
        target_password="",
        target_variant=" ",
    )
    assert request.target_game is None
    assert request.target_password is None
    assert request.target_variant is None


@pytest.mark.parametrize(
    "identity",
    [
        "",
        "not an email",
        "missing-at.example.com",
        "two@@example.com",
    ],
)
def test_invalid_identity(identity: str) -> None:
    with pytest.raises(InvalidRequestError):
        _ = ExecuteCommandRequest(identity=identity, command="LIST")


def test_empty_command() -> None:
    with pytest.raises(InvalidRequestError):
        _ = ExecuteCommandRequest(identity="france@example.com", command=" \n ")


@pytest.mark.parametrize("game_name", ["toolongname", "bad-name", "two words"])
def test_invalid_target_game(game_name: str) -> None:
    with pytest.raises(InvalidGameNameError):
        _ = ExecuteCommandRequest(
            identity="france@example.com", command="ORDERS", target_game=game_name
        )


# -- Validation - other requests --
def test_listing_request_game_name() -> None:
    assert ListingRequest(game_name="demo", transcript="").game_name == "demo"
    with pytest.raises(InvalidGameNameError):
        _ = ListingRequest(game_name="", transcript="")


def test_recommendation_request_is_optional() -> None:
    request = RecommendationRequest(game_name="", identity=None)
    assert request.game_name is None
    assert request.identity is None


def test_command_output_identity() -> None:
    with pytest.raises(InvalidRequestError):
        _ = CommandOutputRequest(identity="nobody", command="LIST", output="")
