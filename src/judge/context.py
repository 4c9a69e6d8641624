"""
Decide what has to be sent in front of a user's command so the judge accepts it.
----

Most in-game commands are only accepted after a "SIGN ON <marker><game> <password>" line in the same mail.
The marker depends on who the user is in that game (power initial, M for master, O for observer, ? to join),
which is why the stored GameState gets consulted.
"""

import logging
from typing import Callable, Optional

from src.core.exceptions import BackingStoreUnavailableError, MissingContextError, RepositoryError
from src.core.models import CommandContext, GameState
from src.judge.commands import (
    GAME_NAME_OPTIONAL_COMMANDS,
    NO_CONTEXT_COMMANDS,
    SIGN_OFF,
    command_verb,
    extract_game_name,
    is_sign_on,
    matches_command,
    validate_game_name,
)
from src.judge.roles import JOIN_MARKER, classify_role

logger = logging.getLogger(__name__)

GameStateLookup = Callable[[str], Optional[GameState]]


def resolve_command_context(
    identity: str,
    raw_command: str,
    target_game: Optional[str],
    target_password: Optional[str],
    target_variant: Optional[str],
    lookup_game_state: GameStateLookup,
) -> CommandContext:
    """
    Work out the sign on preamble (if any) for a command.
    ----

    1. SIGN ON commands establish their own context.
    2. Account / info / global commands never need one.
    3. Commands that may name their game (LIST demo, HISTORY demo, ...) do not need one when they do.
    4. Anything else needs one as soon as a target game is known.

    Raises InvalidGameNameError for a malformed target game, MissingContextError when a preamble is needed
    but game or password is missing, and BackingStoreUnavailableError when the stored game state cannot be read.
    """
    if target_game:
        validate_game_name(target_game)
    verb = command_verb(raw_command)
    named_game = extract_game_name(raw_command)

    if is_sign_on(raw_command):
        return CommandContext(requires_preamble=False, effective_game_name=named_game or target_game)

    if matches_command(raw_command, NO_CONTEXT_COMMANDS):
        return CommandContext(requires_preamble=False, effective_game_name=named_game or target_game)

    if verb in GAME_NAME_OPTIONAL_COMMANDS and named_game:
        if target_game and target_game != named_game:
            logger.info(
                "%s names game %r, overriding target game %r", verb, named_game, target_game
            )
        return CommandContext(requires_preamble=False, effective_game_name=named_game)

    if not target_game:
        return CommandContext(requires_preamble=False)

    if not target_password:
        raise MissingContextError(
            f'Command "{verb}" requires a target game and password.'
        )

    preamble = _build_preamble(
        identity, target_game, target_password, target_variant, lookup_game_state
    )
    return CommandContext(
        requires_preamble=True, preamble=preamble, effective_game_name=target_game
    )


def compose_command(raw_command: str, context: CommandContext) -> str:
    """Preamble + command, always closed by a single SIGN OFF."""
    command = raw_command.strip()
    if context.requires_preamble and context.preamble:
        command = f"{context.preamble}\n{command}"
    if not command.upper().endswith(SIGN_OFF):
        command = f"{command}\n{SIGN_OFF}"
    return command


def _build_preamble(
    identity: str,
    game: str,
    password: str,
    variant: Optional[str],
    lookup_game_state: GameStateLookup,
) -> str:
    # An explicit variant means the user asks to join with those options, whatever role they have now
    if variant and variant.strip():
        return f"SIGN ON {JOIN_MARKER}{game} {password} {variant.strip()}"

    try:
        game_state = lookup_game_state(game)
    except RepositoryError as err:
        logger.error("Cannot look up state of game %s to sign on: %s", game, err)
        if isinstance(err, BackingStoreUnavailableError):
            raise
        raise BackingStoreUnavailableError(
            f"Cannot determine role in game {game!r}: {err}"
        ) from err

    marker = classify_role(game_state, identity).sign_on_marker
    return f"SIGN ON {marker}{game} {password}"
