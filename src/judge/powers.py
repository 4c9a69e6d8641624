"""The powers that can appear on a roster, per variant."""

from typing import Optional

STANDARD_POWERS: tuple[str, ...] = (
    "Austria",
    "England",
    "France",
    "Germany",
    "Italy",
    "Russia",
    "Turkey",
)

MACHIAVELLI_POWERS: tuple[str, ...] = (
    "Austria",
    "Florence",
    "France",
    "Milan",
    "Naples",
    "Papacy",
    "Turkey",
    "Venice",
    "Autonomous",
)

VARIANT_POWERS: dict[str, tuple[str, ...]] = {
    "standard": STANDARD_POWERS,
    "machiavelli": MACHIAVELLI_POWERS,
}

# Every power we have a table for
ALL_POWERS: frozenset[str] = frozenset(
    power.lower() for powers in VARIANT_POWERS.values() for power in powers
)

# Words that start roster / report lines the same way a power name does
NON_POWER_WORDS: frozenset[str] = frozenset(
    {"master", "moderator", "observer", "unowned", "flags", "variant", "press", "deadline"}
)


def powers_for(variant: Optional[str]) -> Optional[tuple[str, ...]]:
    """
    Powers of the given variant, or None when we have no table for it (Colonial, Chaos, ...).
    Variants are matched on their leading name (Machiavelli2 -> machiavelli).
    """
    lowered = (variant or "standard").strip().lower()
    for name, powers in VARIANT_POWERS.items():
        if lowered.startswith(name):
            return powers
    return None


def is_power(name: str, variant: Optional[str] = None) -> bool:
    """
    Known variants only accept powers from our tables.
    Pass variant=None for a variant without a table: then any single alphabetic word is accepted.
    """
    lowered = name.strip().lower()
    if not lowered.isalpha() or lowered in NON_POWER_WORDS:
        return False
    if variant is None or powers_for(variant) is None:
        return True
    return lowered in ALL_POWERS
