"""
In-memory cache of player state keyed by player UUID.

A single asyncio.Lock guards the whole map. It is held only for the map
operation itself; callers do their file I/O after releasing it.
"""

import asyncio
import copy
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from player_provider.core.metrics import cached_players
from player_provider.game.player import PlayerState


def snapshot(state: PlayerState) -> PlayerState:
    """Deep copy of a live state that still shares the world handle."""
    memo = {id(state.world): state.world} if state.world is not None else {}
    return copy.deepcopy(state, memo)


class PlayerCache:
    """Identity -> PlayerState map behind one lock."""

    def __init__(self):
        self._lock = asyncio.Lock()
        self._data: Dict[UUID, PlayerState] = {}

    async def get(self, player_id: UUID) -> Optional[PlayerState]:
        async with self._lock:
            return self._data.get(player_id)

    async def put(self, player_id: UUID, state: PlayerState) -> None:
        async with self._lock:
            self._data[player_id] = state
            cached_players.set(len(self._data))

    async def drain_all(self) -> List[Tuple[UUID, PlayerState]]:
        """Remove and return every entry in one step."""
        async with self._lock:
            drained = list(self._data.items())
            self._data = {}
            cached_players.set(0)
        return drained

    async def put_if_absent(self, player_id: UUID, state: PlayerState) -> PlayerState:
        """Insert unless an entry exists. Returns whichever entry is cached."""
        async with self._lock:
            current = self._data.setdefault(player_id, state)
            cached_players.set(len(self._data))
            return current

    async def clear(self) -> int:
        """Drop every entry without writing anything. Returns how many were dropped."""
        async with self._lock:
            dropped = len(self._data)
            self._data = {}
            cached_players.set(0)
        return dropped

    async def size(self) -> int:
        async with self._lock:
            return len(self._data)

    async def contains(self, player_id: UUID) -> bool:
        async with self._lock:
            return player_id in self._data
