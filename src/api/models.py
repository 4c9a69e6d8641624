"""Requests and Response models"""

import re
from typing import Optional

from pydantic import BaseModel, field_validator

from src.core.exceptions import InvalidRequestError
from src.judge.commands import validate_game_name

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _validate_identity(value: str) -> str:
    if not EMAIL_PATTERN.match(value.strip()):
        raise InvalidRequestError(f"Not a valid email address: {value!r}")
    return value.strip()


def _validate_optional_game_name(value: Optional[str]) -> Optional[str]:
    # empty form fields count as "no game selected"
    if value is None or not value.strip():
        return None
    return validate_game_name(value.strip())


# --- REQUEST MODELS ---
class ExecuteCommandRequest(BaseModel):
    identity: str
    command: str
    target_game: Optional[str] = None
    target_password: Optional[str] = None
    target_variant: Optional[str] = None

    @field_validator("identity")
    @classmethod
    def validate_identity(cls, value: str) -> str:
        return _validate_identity(value)

    @field_validator("command")
    @classmethod
    def validate_command(cls, value: str) -> str:
        if not value.strip():
            raise InvalidRequestError("Missing command.")
        return value

    @field_validator("target_game")
    @classmethod
    def validate_target_game(cls, value: Optional[str]) -> Optional[str]:
        return _validate_optional_game_name(value)

    @field_validator(*["target_password", "target_variant"])
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()


class ListingRequest(BaseModel):
    game_name: str
    transcript: str

    @field_validator("game_name")
    @classmethod
    def validate_game_name(cls, value: str) -> str:
        return validate_game_name(value)


class HistoryRequest(BaseModel):
    game_name: str
    transcript: str

    @field_validator("game_name")
    @classmethod
    def validate_game_name(cls, value: str) -> str:
        return validate_game_name(value)


class CommandOutputRequest(BaseModel):
    identity: str
    command: str
    output: str
    success: bool = True

    @field_validator("identity")
    @classmethod
    def validate_identity(cls, value: str) -> str:
        return _validate_identity(value)


class RecommendationRequest(BaseModel):
    game_name: Optional[str] = None
    identity: Optional[str] = None

    @field_validator("game_name")
    @classmethod
    def validate_game_name(cls, value: Optional[str]) -> Optional[str]:
        return _validate_optional_game_name(value)


class GameFilterRequest(BaseModel):
    status: Optional[str] = None
    variant: Optional[str] = None
    phase: Optional[str] = None
    player: Optional[str] = None


# --- RESPONSE MODELS ---
class PreparedCommandResponse(BaseModel):
    requires_preamble: bool
    effective_game_name: Optional[str]
    command: str
    engine_input: str


class RecommendationResponse(BaseModel):
    recommended: list[str]
    player_actions: list[str]
    settings: list[str]
    game_info: list[str]
    master: list[str]
    machiavelli: list[str]
    general: list[str]


class GameSummaryResponse(BaseModel):
    name: str
    status: str
    variant: str
    phase: str
    players: list[str]
    masters: list[str]
    next_deadline: Optional[str]


class StatusCountResponse(BaseModel):
    status: str
    count: int
