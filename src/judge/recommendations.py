"""
Suggest the commands that make sense for a user, given the (stored) state of a game.

Pure function of its inputs: no lookups, no side effects.
"""

from typing import Optional

from src.core.models import GameState, RecommendationSet
from src.core.shared_types import GameStatus
from src.judge import phase
from src.judge.roles import RoleAssignment, classify_role

GENERAL_COMMANDS: tuple[str, ...] = (
    "GET",
    "HELP",
    "VERSION",
    "WHOIS",
    "LIST",
    "HISTORY",
    "SUMMARY",
    "WHOGAME",
    "MAP",
    "GET DEDICATION",
    "INFO PLAYER",
    "MANUAL",
)
ACCOUNT_COMMANDS: tuple[str, ...] = ("REGISTER", "I AM ALSO", "SET PASSWORD", "SET ADDRESS")
JOINING_COMMANDS: tuple[str, ...] = (
    "CREATE ?",
    "SIGN ON ?",
    "SIGN ON ?game",
    "SIGN ON power",
    "OBSERVE",
    "WATCH",
)
PLAYER_ACTION_COMMANDS: tuple[str, ...] = (
    "ORDERS",
    "PRESS",
    "BROADCAST",
    "POSTAL PRESS",
    "DIARY",
    "RESIGN",
    "WITHDRAW",
)
OBSERVER_ACTION_COMMANDS: frozenset[str] = frozenset({"RESIGN", "WITHDRAW", "PRESS", "BROADCAST"})
PLAYER_SETTING_COMMANDS: tuple[str, ...] = (
    "SET WAIT",
    "SET NOWAIT",
    "SET ABSENCE",
    "SET NOABSENCE",
    "SET HOLIDAY",
    "SET VACATION",
    "SET DRAW",
    "SET NODRAW",
    "SET CONCEDE",
    "SET NOCONCEDE",
    "SET PREFERENCE",
    "PHASE",
    "IF",
    "CLEAR",
)
MASTER_COMMANDS: tuple[str, ...] = (
    "BECOME MASTER",
    "SET MODERATE",
    "SET UNMODERATE",
    "BECOME",
    "EJECT",
    "FORCE BEGIN",
    "PAUSE",
    "PREDICT",
    "PROMOTE",
    "PROCESS",
    "ROLLBACK",
    "TERMINATE",
    "RESUME",
    "UNSTART",
    "SET",
    "SET DEADLINE",
    "SET GRACE",
    "SET START",
    "SET COMMENT",
    "SET COMMENT BEGIN",
    "SET CD",
    "SET NMR",
    "SET CONCESSIONS",
    "SET DIAS",
    "SET LIST",
    "SET PUBLIC",
    "SET PRIVATE",
    "SET AUTO PROCESS",
    "SET MANUAL PROCESS",
    "SET AUTO START",
    "SET MANUAL START",
    "SET RATED",
    "SET UNRATED",
    "SET MAX ABSENCE",
    "SET LATE COUNT",
    "SET STRICT GRACE",
    "SET STRICT WAIT",
    "SET MOVE",
    "SET RETREAT",
    "SET ADJUST",
    "SET ALL PRESS",
    "SET NORMAL PRESS",
    "SET QUIET",
    "SET NO QUIET",
    "SET WATCH ALL PRESS",
    "SET NO WATCH ALL PRESS",
    "SET ACCESS",
    "SET ALLOW PLAYER",
    "SET DENY PLAYER",
    "SET LEVEL",
    "SET DEDICATION",
    "SET ONTIMERAT",
    "SET RESRAT",
    "SET APPROVAL",
    "SET APPROVE",
    "SET NOT APPROVE",
    "SET BLANK PRESS",
    "SET BROADCAST",
    "SET NORMAL BROADCAST",
    "SET NO FAKE",
    "SET GREY",
    "SET NO WHITE",
    "SET GREY/WHITE",
    "SET LATE PRESS",
    "SET MINOR PRESS",
    "SET MUST ORDER",
    "SET NO PRESS",
    "SET NONE",
    "SET OBSERVER",
    "SET PARTIAL",
    "SET PARTIAL FAKES BROADCAST",
    "SET PARTIAL MAY",
    "SET POSTAL PRESS",
    "SET WHITE",
    "SET WHITE/GREY",
    "SET VARIANT",
    "SET NOT VARIANT",
    # Machiavelli game options
    "SET MACH2",
    "SET SUMMER",
    "SET MONEY",
    "SET DICE",
    "SET LOANS",
    "SET BANK",
    "SET BANKERS",
    "SET FAMINE",
    "SET PLAGUE",
    "SET STORM",
    "SET ASSASSINS",
    "SET ASSASSINATION",
    "SET GARRISONS",
    "SET SPECIAL",
    "SET FORTRESSES",
    "SET FORTS",
    "SET ADJACENCY",
    "SET ADJACENT",
    "SET COASTAL CONVOYS",
    "SET DISBAND",
    "SET TRANSFORM",
    "SET ATTACKTRANSFORM",
)
# Money commands, only in Machiavelli games played with money
MACHIAVELLI_PLAYER_COMMANDS: tuple[str, ...] = ("BORROW", "GIVE", "PAY", "ALLY", "EXPENSE")

INFO_COMMANDS: tuple[str, ...] = ("LIST", "HISTORY", "SUMMARY", "WHOGAME")
HISTORICAL_COMMANDS: tuple[str, ...] = ("HISTORY", "SUMMARY", "LIST")
JOIN_SUGGESTIONS: tuple[str, ...] = ("SIGN ON ?", "SIGN ON ?game", "SIGN ON power", "OBSERVE", "LIST", "CREATE ?")

# Phase types during which orders can be submitted
ORDER_PHASE_KINDS: frozenset[str] = frozenset({"M", "R", "B", "A"})

CATCH_ALL_COMMAND = "MANUAL"
# These have dedicated flows (registration form, logging out) and are never suggested
EXCLUDED_COMMANDS: frozenset[str] = frozenset({"REGISTER", "SIGN OFF"})


def recommend(game_state: Optional[GameState], identity: Optional[str]) -> RecommendationSet:
    """
    Categorized command suggestions.
    ----

    recommended     -> what to do now, depends on the game's status and the user's role
    player_actions  -> only for players (observers keep press / resign / withdraw)
    settings        -> only for players
    game_info       -> joining commands for outsiders + read-only info for everyone
    master          -> only for masters of the game
    machiavelli     -> money commands of Machiavelli games with money, for players and masters
    general         -> account / info commands, always available
    """
    recommendations = RecommendationSet(
        player_actions=list(PLAYER_ACTION_COMMANDS),
        settings=list(PLAYER_SETTING_COMMANDS),
        game_info=list(JOINING_COMMANDS),
        master=list(MASTER_COMMANDS),
        general=[*GENERAL_COMMANDS, *ACCOUNT_COMMANDS],
    )
    if game_state is not None and _uses_money(game_state):
        recommendations.machiavelli = list(MACHIAVELLI_PLAYER_COMMANDS)

    if game_state is None or not identity:
        recommendations.recommended = list(JOIN_SUGGESTIONS)
        _prune_by_role(recommendations, classify_role(None, None))
    else:
        role = classify_role(game_state, identity)
        recommendations.recommended = _recommended_for(game_state, role)
        if role.is_member:
            recommendations.game_info = []
        recommendations.game_info.extend(INFO_COMMANDS)
        _prune_by_role(recommendations, role)

    if CATCH_ALL_COMMAND not in recommendations.general:
        recommendations.general.append(CATCH_ALL_COMMAND)

    return RecommendationSet(
        recommended=_clean(recommendations.recommended),
        player_actions=_clean(recommendations.player_actions),
        settings=_clean(recommendations.settings),
        game_info=_clean(recommendations.game_info),
        master=_clean(recommendations.master),
        machiavelli=_clean(recommendations.machiavelli),
        general=_clean(recommendations.general),
    )


def _recommended_for(game_state: GameState, role: RoleAssignment) -> list[str]:
    """The 'recommended' category: branch on the lifecycle stage of the game."""
    settings = game_state.settings
    press_allowed = str(settings.get("press", "")).lower() != "none"
    observer_press_allowed = str(settings.get("observer_press", "")).lower() != "none"
    recommended: list[str] = []

    status = game_state.status
    if status == GameStatus.FORMING:
        if role.is_player:
            recommended.append("SET PREFERENCE")
        elif not role.is_member:
            recommended.append("SIGN ON ?game")
        if role.is_master:
            recommended.extend(["FORCE BEGIN", "SET"])
        recommended.extend(["LIST", "WHOGAME"])

    elif status == GameStatus.ACTIVE:
        if role.is_active_player:
            if phase.phase_kind(game_state.current_phase) in ORDER_PHASE_KINDS:
                recommended.append("ORDERS")
            if press_allowed:
                recommended.extend(["PRESS", "BROADCAST"])
            if settings.get("wait") is not False:
                recommended.append("SET WAIT")
            if settings.get("dias") is not False:
                recommended.append("SET DRAW")
            if settings.get("concessions") is not False:
                recommended.append("SET CONCEDE")
            recommended.append("DIARY")
            if _uses_money(game_state):
                recommended.extend(MACHIAVELLI_PLAYER_COMMANDS)
        elif role.is_observer and press_allowed and observer_press_allowed:
            recommended.extend(["PRESS", "BROADCAST"])
        elif not role.is_member:
            recommended.extend(["SIGN ON power", "OBSERVE"])
        if role.is_master:
            recommended.extend(["PROCESS", "SET DEADLINE", "PAUSE", "EJECT", "BECOME"])
        recommended.extend(INFO_COMMANDS)

    elif status == GameStatus.PAUSED:
        if role.is_master:
            recommended.extend(["RESUME", "TERMINATE"])
        if press_allowed and (
            role.is_active_player or (role.is_observer and observer_press_allowed)
        ):
            recommended.extend(["PRESS", "BROADCAST"])
        recommended.extend(INFO_COMMANDS)

    elif status in (GameStatus.FINISHED, GameStatus.TERMINATED):
        recommended.extend(HISTORICAL_COMMANDS)
        if role.is_master:
            recommended.extend(["ROLLBACK", "UNSTART"])

    else:
        recommended.extend(INFO_COMMANDS)
        if not role.is_member:
            recommended.extend(["SIGN ON power", "OBSERVE"])

    return recommended


def _prune_by_role(recommendations: RecommendationSet, role: RoleAssignment) -> None:
    if not role.is_master:
        recommendations.master = []

    if not role.is_member:
        recommendations.player_actions = []
        recommendations.settings = []
        recommendations.machiavelli = []
    elif role.is_observer:
        recommendations.player_actions = [
            command
            for command in recommendations.player_actions
            if command in OBSERVER_ACTION_COMMANDS
        ]
        recommendations.settings = []
        recommendations.machiavelli = []


def _clean(commands: list[str]) -> list[str]:
    """Remove duplicates and never-suggested commands, sort alphabetically."""
    return sorted({command for command in commands if command not in EXCLUDED_COMMANDS})


def _uses_money(game_state: GameState) -> bool:
    settings = game_state.settings
    is_machiavelli = bool(settings.get("is_machiavelli")) or "machiavelli" in game_state.variant.lower()
    return is_machiavelli and bool(settings.get("money"))
