"""Room classification and graph-wide constants."""

from __future__ import annotations

from enum import IntEnum

# Number of edge slots per room (``C``). Bounds out-degree.
DEFAULT_CAPACITY = 6

# Inclusive upper bound for a persisted monster index.
MONSTER_INDEX_MAX = 65535


class RoomType(IntEnum):
    """Room kinds, valued as they appear in the persisted ``roomType`` field."""

    EMPTY = 0
    BATTLE = 1
    GOAL = 2
