"""
Periodic flush of the player cache to disk.

Runs as one asyncio task for the lifetime of a provider. Every interval it
drains the cache; with autosave off the drained players are written to the
file store, with autosave on they were already written and are just dropped.
"""

import asyncio
from typing import Optional

from player_provider.core.config import Settings
from player_provider.core.logging_config import get_logger
from player_provider.core.metrics import (
    flush_duration_seconds,
    flush_failures_total,
    players_flushed_total,
)
from player_provider.services.file_store import PlayerFileStore
from player_provider.services.player_cache import PlayerCache
from player_provider.services.record_codec import RecordCodec

logger = get_logger(__name__)


class FlushScheduler:
    """Background task that drains a PlayerCache into a PlayerFileStore."""

    def __init__(
        self,
        cache: PlayerCache,
        store: PlayerFileStore,
        codec: RecordCodec,
        settings: Settings,
    ):
        self._cache = cache
        self._store = store
        self._codec = codec
        self._settings = settings
        self._stopped = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the flush task on the running event loop."""
        if self._task is not None:
            return
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name="player-provider-flush"
        )

    def stop(self) -> None:
        """
        Ask the task to stop.

        A flush already in progress runs to completion; no extra flush is done.
        """
        self._stopped.set()

    async def wait_stopped(self) -> None:
        if self._task is not None:
            await self._task

    async def _run(self) -> None:
        interval = self._settings.FLUSH_RATE
        logger.info("Flush task started", extra={"interval": interval})

        while True:
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass

            if self._stopped.is_set():
                break

            try:
                await self.flush_once()
            except Exception as e:
                logger.error(
                    "Error in flush task",
                    extra={"error": str(e), "interval": interval},
                )

        logger.info("Flush task stopped")

    async def flush_once(self) -> int:
        """
        Drain the cache and persist it unless autosave already did.

        Returns:
            Number of players written to disk
        """
        entries = await self._cache.drain_all()
        if self._settings.AUTO_SAVE or not entries:
            return 0

        written = 0
        with flush_duration_seconds.time():
            for player_id, state in entries:
                try:
                    record = self._codec.to_record(state, self._settings.SAVE_POLICY)
                    await self._store.write_async(player_id, record)
                    written += 1
                except Exception as e:
                    flush_failures_total.inc()
                    logger.error(
                        "Failed to flush player data",
                        extra={"uuid": str(player_id), "error": str(e)},
                    )

        players_flushed_total.inc(written)
        logger.debug(
            "Flushed player cache",
            extra={"players": len(entries), "written": written},
        )
        return written
