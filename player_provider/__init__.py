"""
Write-behind player data persistence for game servers.
"""

from .core.errors import (
    PlayerDataDecodeError,
    PlayerDataError,
    PlayerDataIOError,
    PlayerDataNotFoundError,
    ProviderClosedError,
)
from .services.player_provider import PlayerProvider

__all__ = [
    "PlayerDataDecodeError",
    "PlayerDataError",
    "PlayerDataIOError",
    "PlayerDataNotFoundError",
    "PlayerProvider",
    "ProviderClosedError",
]
