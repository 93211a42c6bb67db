"""
Player data provider.

Write-behind persistence for player state. Saves always land in the
in-memory cache; with AUTO_SAVE they are also written to disk immediately,
otherwise the flush task writes them on its next tick. Loads are served from
the cache when possible and fall back to the player's data file.

close() drops the cache without a final flush. With AUTO_SAVE disabled,
anything saved since the last flush tick is lost on close. This is the
intended shutdown behaviour; hosts that need durability on shutdown should
run with AUTO_SAVE enabled or call flush() before close().
"""

import dataclasses
from typing import Optional
from uuid import UUID

from player_provider.core.config import Settings, settings as default_settings
from player_provider.core.errors import (
    PlayerDataError,
    PlayerDataNotFoundError,
    ProviderClosedError,
)
from player_provider.core.logging_config import get_logger
from player_provider.core.metrics import player_loads_total, player_saves_total
from player_provider.game.player import PlayerState
from player_provider.game.world import WorldResolver
from player_provider.services.file_store import PlayerFileStore
from player_provider.services.flush_scheduler import FlushScheduler
from player_provider.services.player_cache import PlayerCache, snapshot
from player_provider.services.record_codec import RecordCodec

logger = get_logger(__name__)


class PlayerProvider:
    """
    Loads and saves player state for the host server.

    Must be constructed inside a running event loop; the flush task starts
    immediately.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        codec: Optional[RecordCodec] = None,
        store: Optional[PlayerFileStore] = None,
        default_world_factory: Optional[WorldResolver] = None,
    ):
        self._settings = settings if settings is not None else default_settings
        self._codec = codec if codec is not None else RecordCodec(
            default_world_factory=default_world_factory
        )
        self._store = store if store is not None else PlayerFileStore(
            self._settings.data_directory
        )
        self._cache = PlayerCache()
        self._closed = False

        self._scheduler = FlushScheduler(
            self._cache, self._store, self._codec, self._settings
        )
        self._scheduler.start()

        logger.info(
            "Player provider started",
            extra={
                "path": str(self._store.directory),
                "auto_save": self._settings.AUTO_SAVE,
                "flush_rate": self._settings.FLUSH_RATE,
            },
        )

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def cache(self) -> PlayerCache:
        return self._cache

    @property
    def store(self) -> PlayerFileStore:
        return self._store

    @property
    def scheduler(self) -> FlushScheduler:
        return self._scheduler

    @property
    def closed(self) -> bool:
        return self._closed

    def _ensure_open(self) -> None:
        if self._closed:
            raise ProviderClosedError("player provider is closed")

    async def load(
        self, player_id: UUID, world_resolver: Optional[WorldResolver] = None
    ) -> PlayerState:
        """
        Load a player's state.

        Args:
            player_id: Player UUID
            world_resolver: Returns the world to place the player in for a dimension

        Returns:
            A copy of the player's state

        Raises:
            PlayerDataNotFoundError: If the player has never been saved (first join)
            PlayerDataDecodeError: If the data file is corrupt
            PlayerDataIOError: If the data file cannot be read
            ProviderClosedError: If the provider has been closed
        """
        self._ensure_open()

        cached = await self._cache.get(player_id)
        if cached is not None:
            player_loads_total.labels(source="cache").inc()
            return self._from_cache(cached, world_resolver)

        try:
            record = await self._store.read_async(player_id)
        except PlayerDataNotFoundError:
            player_loads_total.labels(source="not_found").inc()
            if self._settings.FIRST_JOIN_MESSAGE:
                logger.info(
                    self._settings.FIRST_JOIN_MESSAGE, extra={"uuid": str(player_id)}
                )
            raise
        except PlayerDataError as e:
            player_loads_total.labels(source="error").inc()
            logger.error(
                "Failed to load player data",
                extra={"uuid": str(player_id), "error": str(e)},
            )
            raise

        state = self._codec.from_record(record, world_resolver)
        # A save that landed while the file was being read wins
        state = await self._cache.put_if_absent(player_id, state)
        player_loads_total.labels(source="disk").inc()
        return snapshot(state)

    def _from_cache(
        self, cached: PlayerState, world_resolver: Optional[WorldResolver]
    ) -> PlayerState:
        state = snapshot(cached)
        if self._settings.REUSE_CACHED_WORLD or cached.world is None:
            return state

        dimension = cached.world.dimension
        world = world_resolver(dimension) if world_resolver is not None else None
        if world is None:
            world = self._codec.default_world(dimension)
        if world is None:
            return state
        return dataclasses.replace(state, world=world)

    async def save(self, player_id: UUID, state: PlayerState) -> None:
        """
        Save a player's state.

        The cache is always updated. With AUTO_SAVE the record is also written
        to disk before returning, and write errors propagate. A failed autosave
        is not retried: the flush task only drops autosaved entries, so the
        cached state is served to loads until the next tick and is then lost
        unless the caller saves again.

        Raises:
            PlayerDataIOError: If AUTO_SAVE is on and the write fails
            ProviderClosedError: If the provider has been closed
        """
        self._ensure_open()

        state = snapshot(state)
        await self._cache.put(player_id, state)

        if not self._settings.AUTO_SAVE:
            player_saves_total.labels(mode="buffered").inc()
            return

        player_saves_total.labels(mode="autosave").inc()
        record = self._codec.to_record(state, self._settings.SAVE_POLICY)
        await self._store.write_async(player_id, record)

    async def save_player(self, state: PlayerState) -> None:
        """Save a player under its own UUID."""
        await self.save(state.uuid, state)

    async def flush(self) -> int:
        """Run one flush immediately. Returns the number of players written."""
        self._ensure_open()
        return await self._scheduler.flush_once()

    async def close(self) -> None:
        """
        Close the provider.

        Stops the flush task at its next wake-up and drops the cache without
        writing it. Calling close() more than once is a no-op.
        """
        if self._closed:
            return
        self._closed = True
        self._scheduler.stop()

        dropped = await self._cache.clear()

        if dropped and not self._settings.AUTO_SAVE:
            logger.warning(
                "Provider closed with unflushed player data",
                extra={"players": dropped},
            )
        logger.info("Player provider closed")

    async def wait_closed(self) -> None:
        """Wait until the flush task has exited after close()."""
        await self._scheduler.wait_stopped()

    async def __aenter__(self) -> "PlayerProvider":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
