"""
World placement types shared by the host and the provider.

Game modes and dimensions are persisted as small integer ids. The tables
below are injective in both directions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional


class GameMode(Enum):
    """Player game modes."""

    SURVIVAL = "survival"
    CREATIVE = "creative"
    ADVENTURE = "adventure"
    SPECTATOR = "spectator"


class Dimension(Enum):
    """World dimensions."""

    OVERWORLD = "overworld"
    NETHER = "nether"
    END = "end"


GAME_MODE_IDS: Dict[GameMode, int] = {
    GameMode.SURVIVAL: 0,
    GameMode.CREATIVE: 1,
    GameMode.ADVENTURE: 2,
    GameMode.SPECTATOR: 3,
}

DIMENSION_IDS: Dict[Dimension, int] = {
    Dimension.OVERWORLD: 0,
    Dimension.NETHER: 1,
    Dimension.END: 2,
}

_GAME_MODES_BY_ID = {mode_id: mode for mode, mode_id in GAME_MODE_IDS.items()}
_DIMENSIONS_BY_ID = {dim_id: dim for dim, dim_id in DIMENSION_IDS.items()}


def game_mode_id(mode: GameMode) -> Optional[int]:
    return GAME_MODE_IDS.get(mode)


def game_mode_by_id(mode_id: int) -> Optional[GameMode]:
    return _GAME_MODES_BY_ID.get(mode_id)


def dimension_id(dimension: Dimension) -> Optional[int]:
    return DIMENSION_IDS.get(dimension)


def dimension_by_id(dim_id: int) -> Optional[Dimension]:
    return _DIMENSIONS_BY_ID.get(dim_id)


@dataclass(eq=False)
class World:
    """
    Handle to a loaded world.

    Compared by identity: two handles are the same world only if they are the
    same object.
    """

    name: str
    dimension: Dimension


# Called with a dimension, returns the world a player should be placed in or
# None when the host has nothing loaded for it.
WorldResolver = Callable[[Dimension], Optional[World]]
