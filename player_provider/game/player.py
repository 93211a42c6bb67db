"""
Live player state as held by the host.

This is the behaviour-free subset of a player that the provider persists.
Hosts build it from their player objects on save and apply it back on load.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple
from uuid import UUID

from player_provider.game.effects import Effect
from player_provider.game.items import ItemStack
from player_provider.game.world import GameMode, World

Vec3 = Tuple[float, float, float]

# Slots in the main inventory, hotbar included
INVENTORY_SIZE = 36
ENDER_CHEST_SIZE = 27


@dataclass
class InventoryState:
    items: List[ItemStack] = field(default_factory=list)
    helmet: ItemStack = field(default_factory=ItemStack.empty)
    chestplate: ItemStack = field(default_factory=ItemStack.empty)
    leggings: ItemStack = field(default_factory=ItemStack.empty)
    boots: ItemStack = field(default_factory=ItemStack.empty)
    off_hand: ItemStack = field(default_factory=ItemStack.empty)
    main_hand_slot: int = 0


@dataclass
class PlayerState:
    uuid: UUID
    username: str = ""
    position: Vec3 = (0.0, 0.0, 0.0)
    velocity: Vec3 = (0.0, 0.0, 0.0)
    yaw: float = 0.0
    pitch: float = 0.0
    health: float = 20.0
    max_health: float = 20.0
    hunger: int = 20
    food_tick: int = 0
    exhaustion_level: float = 0.0
    saturation_level: float = 5.0
    absorption_level: float = 0.0
    enchantment_seed: int = 0
    experience: int = 0
    air_supply: int = 300
    max_air_supply: int = 300
    game_mode: GameMode = GameMode.SURVIVAL
    inventory: InventoryState = field(default_factory=InventoryState)
    ender_chest_inventory: List[ItemStack] = field(default_factory=list)
    effects: List[Effect] = field(default_factory=list)
    fire_ticks: int = 0
    fall_distance: float = 0.0
    world: Optional[World] = None
