import uuid
from datetime import timedelta
from pathlib import Path
from typing import Callable, Dict

import pytest
import pytest_asyncio

from player_provider.core.config import SavePolicy, Settings
from player_provider.game.effects import Effect, default_effect_registry
from player_provider.game.items import (
    Enchantment,
    ItemStack,
    default_enchantment_registry,
    default_item_registry,
)
from player_provider.game.player import InventoryState, PlayerState
from player_provider.game.world import Dimension, GameMode, World
from player_provider.services.player_provider import PlayerProvider
from player_provider.services.record_codec import RecordCodec

ITEMS = default_item_registry()
ENCHANTMENTS = default_enchantment_registry()
EFFECTS = default_effect_registry()


@pytest.fixture
def worlds() -> Dict[Dimension, World]:
    """One loaded world per dimension except the end."""
    return {
        Dimension.OVERWORLD: World("world", Dimension.OVERWORLD),
        Dimension.NETHER: World("world_nether", Dimension.NETHER),
    }


@pytest.fixture
def world_resolver(worlds):
    return worlds.get


@pytest.fixture
def codec() -> RecordCodec:
    return RecordCodec(ITEMS, ENCHANTMENTS, EFFECTS)


@pytest.fixture
def sword() -> ItemStack:
    """An enchanted, renamed sword carrying custom values."""
    return (
        ItemStack.of(ITEMS.lookup("minecraft:diamond_sword"), 1)
        .with_custom_name("Excalibur")
        .with_lore("Pulled from a stone", "Still sharp")
        .with_durability(1400)
        .with_anvil_cost(3)
        .with_value("owner", "steve")
        .with_value("kills", 12)
        .with_value("ratio", 0.75)
        .with_value("bound", True)
        .with_value("origin", {"x": 10, "z": -4, "tags": {"quest": "main"}})
        .with_enchantments(
            Enchantment(ENCHANTMENTS.lookup("Sharpness"), 5),
            Enchantment(ENCHANTMENTS.lookup("Unbreaking"), 3),
        )
    )


@pytest.fixture
def make_player(sword, worlds) -> Callable[..., PlayerState]:
    """Factory for a player with every persisted field set to a non-zero value."""

    def _make_player(player_id: uuid.UUID = None, **overrides) -> PlayerState:
        items = [ItemStack.empty() for _ in range(9)]
        items[0] = sword
        items[3] = ItemStack.of(ITEMS.lookup("minecraft:apple"), 32)
        items[8] = ItemStack.of(ITEMS.lookup("minecraft:wool", 14), 5)

        state = PlayerState(
            uuid=player_id or uuid.uuid4(),
            username="Steve",
            position=(12.5, 64.0, -30.25),
            velocity=(0.1, -0.08, 0.0),
            yaw=90.0,
            pitch=-15.5,
            health=17.5,
            max_health=20.0,
            hunger=18,
            food_tick=40,
            exhaustion_level=1.25,
            saturation_level=3.5,
            absorption_level=4.0,
            enchantment_seed=123456789,
            experience=1500,
            air_supply=250,
            max_air_supply=300,
            game_mode=GameMode.CREATIVE,
            inventory=InventoryState(
                items=items,
                helmet=ItemStack.of(ITEMS.lookup("minecraft:iron_helmet"), 1)
                .with_enchantments(Enchantment(ENCHANTMENTS.lookup("Protection"), 2)),
                chestplate=ItemStack.of(ITEMS.lookup("minecraft:iron_chestplate"), 1),
                leggings=ItemStack.empty(),
                boots=ItemStack.of(ITEMS.lookup("minecraft:iron_boots"), 1).with_durability(120),
                off_hand=ItemStack.of(ITEMS.lookup("minecraft:shield"), 1),
                main_hand_slot=3,
            ),
            ender_chest_inventory=[
                ItemStack.of(ITEMS.lookup("minecraft:diamond"), 64),
                ItemStack.empty(),
                ItemStack.of(ITEMS.lookup("minecraft:bread"), 16),
            ],
            effects=[
                Effect(EFFECTS.lookup(1), amplifier=1, duration=timedelta(seconds=90)),
                Effect(
                    EFFECTS.lookup(10),
                    amplifier=0,
                    duration=timedelta(minutes=2, milliseconds=500),
                    ambient=True,
                    show_particles=False,
                ),
                Effect.instant(EFFECTS.lookup(6), amplifier=1),
            ],
            fire_ticks=60,
            fall_distance=2.5,
            world=worlds[Dimension.NETHER],
        )
        for name, value in overrides.items():
            setattr(state, name, value)
        return state

    return _make_player


@pytest.fixture
def make_settings(tmp_path: Path) -> Callable[..., Settings]:
    """Settings pointing at a per-test data directory."""

    def _make_settings(**overrides) -> Settings:
        values = {
            "PLAYER_DATA_PATH": str(tmp_path / "players"),
            "FLUSH_RATE": 60.0,
            "AUTO_SAVE": False,
            "SAVE_POLICY": SavePolicy(),
        }
        values.update(overrides)
        return Settings(**values)

    return _make_settings


@pytest_asyncio.fixture
async def make_provider(make_settings, codec):
    """
    Factory for providers bound to the test's event loop.

    Every provider created is closed when the test ends.
    """
    providers = []

    def _make_provider(**overrides) -> PlayerProvider:
        world_factory = overrides.pop("default_world_factory", None)
        settings = make_settings(**overrides)
        if world_factory is not None:
            provider_codec = RecordCodec(
                ITEMS, ENCHANTMENTS, EFFECTS, default_world_factory=world_factory
            )
        else:
            provider_codec = codec
        provider = PlayerProvider(settings, codec=provider_codec)
        providers.append(provider)
        return provider

    yield _make_provider

    for provider in providers:
        await provider.close()
        await provider.wait_closed()
