"""
Error types raised by the player data provider.

Callers distinguish a first-time join (PlayerDataNotFoundError) from real
failures; everything else derives from PlayerDataError so hosts can catch the
whole family.
"""

from uuid import UUID


class PlayerDataError(Exception):
    """Base class for provider errors."""

    def __init__(self, player_id: UUID, message: str):
        super().__init__(message)
        self.player_id = player_id


class PlayerDataNotFoundError(PlayerDataError):
    """No data file exists for the player. Expected on first join."""

    def __init__(self, player_id: UUID):
        super().__init__(player_id, f"player data not found: {player_id}")


class PlayerDataDecodeError(PlayerDataError):
    """The data file exists but is not valid JSON for a player record."""


class PlayerDataIOError(PlayerDataError):
    """Reading or writing the data file failed for a reason other than absence."""


class ProviderClosedError(RuntimeError):
    """The provider was used after close()."""
