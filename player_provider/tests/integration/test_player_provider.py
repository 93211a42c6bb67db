"""
Integration tests for the player provider: cache, file store and flush task together.
"""

import asyncio
import json
import logging
import uuid

import pytest

from player_provider.core.config import SavePolicy
from player_provider.core.errors import (
    PlayerDataDecodeError,
    PlayerDataError,
    PlayerDataIOError,
    PlayerDataNotFoundError,
    ProviderClosedError,
)
from player_provider.game.world import Dimension, World


async def wait_for_condition(predicate, timeout: float = 2.0, interval: float = 0.01) -> bool:
    """Poll predicate until it returns True or the timeout expires."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while loop.time() < deadline:
        if await predicate():
            return True
        await asyncio.sleep(interval)
    return await predicate()


class TestLoad:
    async def test_first_join_raises_not_found_and_caches_nothing(self, make_provider, world_resolver):
        provider = make_provider()
        with pytest.raises(PlayerDataNotFoundError):
            await provider.load(uuid.uuid4(), world_resolver)
        assert await provider.cache.size() == 0

    async def test_first_join_message_is_logged(self, make_provider, world_resolver, caplog):
        provider = make_provider(FIRST_JOIN_MESSAGE="Welcome, new player")
        player_id = uuid.uuid4()
        with caplog.at_level(logging.INFO, logger="provider.services"):
            with pytest.raises(PlayerDataNotFoundError):
                await provider.load(player_id, world_resolver)
        assert "Welcome, new player" in caplog.text

    async def test_corrupt_file_raises_and_caches_nothing(self, make_provider, world_resolver):
        provider = make_provider()
        player_id = uuid.uuid4()
        provider.store.directory.mkdir(parents=True)
        provider.store.path_for(player_id).write_text("[]")
        with pytest.raises(PlayerDataDecodeError):
            await provider.load(player_id, world_resolver)
        assert await provider.cache.size() == 0

    async def test_malformed_stack_does_not_fail_the_load(self, make_provider, world_resolver):
        provider = make_provider()
        player_id = uuid.uuid4()
        provider.store.directory.mkdir(parents=True)
        provider.store.path_for(player_id).write_text(
            json.dumps(
                {
                    "UUID": str(player_id),
                    "Health": 12.0,
                    "Inventory": {
                        "Items": [
                            {"Name": "minecraft:apple", "Count": 3},
                            {"Name": "minecraft:bread", "Count": 2, "Data": {"tags": ["a", "b"]}},
                        ]
                    },
                }
            )
        )

        state = await provider.load(player_id, world_resolver)

        items = state.inventory.items
        assert len(items) == 2
        assert items[0].item.name == "minecraft:apple"
        assert items[0].count == 3
        assert items[1].is_empty()
        assert state.health == 12.0
        assert await provider.cache.contains(player_id)

    async def test_load_from_disk_populates_cache(self, make_provider, make_player, world_resolver):
        state = make_player()
        writer = make_provider(AUTO_SAVE=True)
        await writer.save_player(state)

        reader = make_provider()
        loaded = await reader.load(state.uuid, world_resolver)

        assert loaded == state
        assert await reader.cache.contains(state.uuid)

    async def test_loaded_state_is_a_copy(self, make_provider, make_player, world_resolver):
        provider = make_provider()
        state = make_player()
        await provider.save_player(state)

        loaded = await provider.load(state.uuid, world_resolver)
        loaded.health = 0.5
        loaded.inventory.items.clear()

        again = await provider.load(state.uuid, world_resolver)
        assert again.health == 17.5
        assert len(again.inventory.items) == 9


class TestSave:
    async def test_buffered_save_served_from_cache_without_writing(
        self, make_provider, make_player, world_resolver
    ):
        provider = make_provider(AUTO_SAVE=False)
        state = make_player()

        await provider.save(state.uuid, state)
        loaded = await provider.load(state.uuid, world_resolver)

        assert loaded == state
        assert not provider.store.path_for(state.uuid).exists()

    async def test_later_save_overwrites_earlier(self, make_provider, make_player, world_resolver):
        provider = make_provider()
        state = make_player()
        await provider.save_player(state)
        state.experience = 9000
        await provider.save_player(state)
        assert (await provider.load(state.uuid, world_resolver)).experience == 9000

    async def test_save_does_not_alias_live_state(self, make_provider, make_player, world_resolver):
        provider = make_provider()
        state = make_player()
        await provider.save_player(state)
        state.health = 1.0
        assert (await provider.load(state.uuid, world_resolver)).health == 17.5

    async def test_autosave_writes_immediately(self, make_provider, make_player):
        provider = make_provider(AUTO_SAVE=True)
        state = make_player()

        await provider.save_player(state)

        record = provider.store.read(state.uuid)
        assert record.username == "Steve"
        assert record.health == 17.5
        assert await provider.cache.contains(state.uuid)

    async def test_autosave_applies_save_policy(self, make_provider, make_player, world_resolver):
        provider = make_provider(AUTO_SAVE=True, SAVE_POLICY=SavePolicy(health=False))
        state = make_player()
        await provider.save_player(state)

        record = provider.store.read(state.uuid)
        assert record.health == 0.0
        assert record.hunger == 18

    async def test_autosave_write_failure_propagates(self, make_provider, make_player, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        provider = make_provider(AUTO_SAVE=True, PLAYER_DATA_PATH=str(blocker / "players"))
        state = make_player()

        with pytest.raises(PlayerDataIOError):
            await provider.save_player(state)
        # The cache is updated before the write is attempted
        assert await provider.cache.contains(state.uuid)


class TestConcurrency:
    async def test_concurrent_saves_and_loads(self, make_provider, make_player, world_resolver):
        provider = make_provider()
        players = [make_player(experience=i) for i in range(50)]

        await asyncio.gather(*(provider.save_player(p) for p in players))
        loaded = await asyncio.gather(*(provider.load(p.uuid, world_resolver) for p in players))

        assert await provider.cache.size() == len(players)
        assert [p.experience for p in loaded] == list(range(50))
        assert loaded == players

    async def test_concurrent_autosaves_and_flushes(self, make_provider, make_player):
        provider = make_provider(AUTO_SAVE=True)
        players = [make_player() for _ in range(20)]

        await asyncio.gather(
            *(provider.save_player(p) for p in players),
            provider.flush(),
            provider.flush(),
        )

        for player in players:
            assert provider.store.read(player.uuid).uuid == player.uuid


class TestFlush:
    async def test_scheduler_drains_cache_to_disk(self, make_provider, make_player):
        provider = make_provider(AUTO_SAVE=False, FLUSH_RATE=0.05)
        players = [make_player() for _ in range(5)]
        for player in players:
            await provider.save_player(player)

        async def all_written():
            try:
                return all(provider.store.read(p.uuid).username == "Steve" for p in players)
            except PlayerDataError:
                return False

        assert await wait_for_condition(all_written)
        assert await provider.cache.size() == 0

    async def test_manual_flush_writes_and_clears(self, make_provider, make_player, world_resolver):
        provider = make_provider(AUTO_SAVE=False)
        state = make_player()
        await provider.save_player(state)

        assert await provider.flush() == 1
        assert await provider.cache.size() == 0
        assert provider.store.path_for(state.uuid).exists()

        # Reloaded from disk after the flush
        assert await provider.load(state.uuid, world_resolver) == state

    async def test_flush_with_autosave_only_clears_cache(self, make_provider, make_player):
        provider = make_provider(AUTO_SAVE=True)
        state = make_player()
        await provider.save_player(state)
        path = provider.store.path_for(state.uuid)
        path.unlink()

        assert await provider.flush() == 0
        assert await provider.cache.size() == 0
        assert not path.exists()

    async def test_failed_write_does_not_stop_the_drain(self, make_provider, make_player, caplog):
        provider = make_provider(AUTO_SAVE=False)
        bad = make_player(game_mode="hardcore")
        good = [make_player() for _ in range(3)]
        await provider.save_player(bad)
        for player in good:
            await provider.save_player(player)

        with caplog.at_level(logging.ERROR, logger="provider.services"):
            assert await provider.flush() == 3

        assert "Failed to flush player data" in caplog.text
        assert not provider.store.path_for(bad.uuid).exists()
        for player in good:
            assert provider.store.path_for(player.uuid).exists()

    async def test_unexpected_encode_error_does_not_lose_other_players(
        self, make_provider, make_player, caplog
    ):
        provider = make_provider(AUTO_SAVE=False)
        broken = make_player(position=(1.0, None, 2.0))
        good = [make_player() for _ in range(3)]
        await provider.save_player(broken)
        for player in good:
            await provider.save_player(player)

        with caplog.at_level(logging.ERROR, logger="provider.services"):
            assert await provider.flush() == 3

        assert "Failed to flush player data" in caplog.text
        assert await provider.cache.size() == 0
        assert not provider.store.path_for(broken.uuid).exists()
        for player in good:
            assert provider.store.read(player.uuid).username == "Steve"


class TestClose:
    async def test_close_drops_unflushed_data(self, make_provider, make_player, world_resolver):
        provider = make_provider(AUTO_SAVE=False)
        state = make_player()
        await provider.save_player(state)

        await provider.close()

        assert provider.closed
        assert await provider.cache.size() == 0
        assert not provider.store.path_for(state.uuid).exists()

    async def test_close_stops_flush_task(self, make_provider):
        provider = make_provider(FLUSH_RATE=30.0)
        assert provider.scheduler.running
        await provider.close()
        await asyncio.wait_for(provider.wait_closed(), timeout=1.0)
        assert not provider.scheduler.running

    async def test_close_is_idempotent(self, make_provider):
        provider = make_provider()
        await provider.close()
        await provider.close()
        assert provider.closed

    async def test_operations_after_close_raise(self, make_provider, make_player, world_resolver):
        provider = make_provider()
        await provider.close()
        state = make_player()
        with pytest.raises(ProviderClosedError):
            await provider.save_player(state)
        with pytest.raises(ProviderClosedError):
            await provider.load(state.uuid, world_resolver)
        with pytest.raises(ProviderClosedError):
            await provider.flush()

    async def test_async_context_manager_closes(self, make_provider):
        async with make_provider() as provider:
            assert not provider.closed
        assert provider.closed


class TestWorldResolution:
    async def test_cached_world_reused_by_default(self, make_provider, make_player, worlds):
        provider = make_provider()
        state = make_player()
        await provider.save_player(state)

        replacement = World("other_nether", Dimension.NETHER)
        loaded = await provider.load(state.uuid, lambda dimension: replacement)
        assert loaded.world is worlds[Dimension.NETHER]

    async def test_cached_world_re_resolved_when_disabled(self, make_provider, make_player):
        provider = make_provider(REUSE_CACHED_WORLD=False)
        state = make_player()
        await provider.save_player(state)

        replacement = World("other_nether", Dimension.NETHER)
        loaded = await provider.load(state.uuid, lambda dimension: replacement)
        assert loaded.world is replacement

    async def test_default_world_factory_used_on_disk_load(self, make_provider, make_player):
        fallback = World("fallback_nether", Dimension.NETHER)
        writer = make_provider(AUTO_SAVE=True)
        state = make_player()
        await writer.save_player(state)

        reader = make_provider(default_world_factory=lambda dimension: fallback)
        loaded = await reader.load(state.uuid, lambda dimension: None)
        assert loaded.world is fallback
