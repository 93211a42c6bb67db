"""
Player persistence services.

Provides the pieces behind PlayerProvider:
- PlayerProvider: Load/save entry point used by the host server
- PlayerCache: Locked in-memory map of pending player state
- FlushScheduler: Background task that drains the cache to disk
- PlayerFileStore: One JSON document per player
- RecordCodec: Conversion between live state and persisted records
"""

from .file_store import PlayerFileStore
from .flush_scheduler import FlushScheduler
from .player_cache import PlayerCache
from .player_provider import PlayerProvider
from .record_codec import RecordCodec

__all__ = [
    "FlushScheduler",
    "PlayerCache",
    "PlayerFileStore",
    "PlayerProvider",
    "RecordCodec",
]
