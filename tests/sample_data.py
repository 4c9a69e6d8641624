"""Identities and clock shared by the unit tests."""

from datetime import datetime, timezone

FIXED_NOW = datetime(2004, 1, 19, 12, 0, tzinfo=timezone.utc)

PLAYER_EMAIL = "france@example.com"
MASTER_EMAIL = "master@example.com"
OBSERVER_EMAIL = "watcher@example.com"
STRANGER_EMAIL = "stranger@example.com"
