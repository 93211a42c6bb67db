"""
Conversion between live player state and persisted player records.

Saving goes through FIELD_GROUPS: each save-policy switch names a group, and
the group lists the record fields it controls together with the function
that produces each field from the live state. Fields of disabled groups keep
their zero value and are therefore left out of the written document.

Loading ignores the policy and restores whatever the record contains. Item,
enchantment and effect entries decode one by one; entries that reference
something the registries do not know are dropped instead of failing the load.
"""

from datetime import timedelta
from typing import Any, Callable, Dict, List, Optional, Tuple

from player_provider.core.config import SavePolicy
from player_provider.core.logging_config import get_logger
from player_provider.game.effects import Effect, EffectRegistry, default_effect_registry
from player_provider.game.items import (
    Enchantment,
    EnchantmentRegistry,
    ItemRegistry,
    ItemStack,
    default_enchantment_registry,
    default_item_registry,
)
from player_provider.game.player import InventoryState, PlayerState
from player_provider.game.world import (
    Dimension,
    GameMode,
    World,
    WorldResolver,
    dimension_by_id,
    dimension_id,
    game_mode_by_id,
    game_mode_id,
)
from player_provider.schemas.effect import EffectRecord
from player_provider.schemas.item import EnchantmentRecord, InventoryRecord, ItemStackRecord
from player_provider.schemas.player import PlayerRecord

logger = get_logger(__name__)

_NANOS_PER_MICROSECOND = 1000


# =============================================================================
# Item stacks and enchantments
# =============================================================================


def enchantments_to_records(enchantments) -> List[EnchantmentRecord]:
    return [
        EnchantmentRecord(name=enchantment.type.name, level=enchantment.level)
        for enchantment in enchantments
    ]


def record_to_enchantment(
    record: EnchantmentRecord, enchantments: EnchantmentRegistry
) -> Optional[Enchantment]:
    """Resolve an enchantment record, or None if its name is not registered."""
    enchantment_type = enchantments.lookup(record.name)
    if enchantment_type is None:
        return None
    return Enchantment(type=enchantment_type, level=record.level)


def stack_to_record(stack: ItemStack) -> ItemStackRecord:
    """Convert a stack to its record. Empty stacks become the zero record."""
    if stack.is_empty():
        return ItemStackRecord()
    return ItemStackRecord(
        name=stack.item.name,
        meta=stack.item.meta,
        count=stack.count,
        custom_name=stack.custom_name,
        lore=list(stack.lore),
        damage=stack.durability,
        anvil_cost=stack.anvil_cost,
        data=dict(stack.values),
        enchantments=enchantments_to_records(stack.enchantments),
    )


def record_to_stack(
    record: ItemStackRecord,
    items: ItemRegistry,
    enchantments: EnchantmentRegistry,
) -> ItemStack:
    """
    Convert a record back to a stack.

    Unknown items decode to an empty stack; unknown enchantments are dropped
    from the stack without affecting the others.
    """
    if record.is_empty():
        return ItemStack.empty()

    item = items.lookup(record.name, record.meta)
    if item is None:
        logger.debug(
            "Dropping unknown item",
            extra={"item_name": record.name, "meta": record.meta},
        )
        return ItemStack.empty()

    stack = ItemStack.of(item, record.count)
    if record.custom_name:
        stack = stack.with_custom_name(record.custom_name)
    if record.lore:
        stack = stack.with_lore(*record.lore)
    stack = stack.with_durability(record.damage).with_anvil_cost(record.anvil_cost)
    for key, value in record.data.items():
        stack = stack.with_value(key, value)

    for enchantment_record in record.enchantments:
        enchantment = record_to_enchantment(enchantment_record, enchantments)
        if enchantment is None:
            logger.debug(
                "Dropping unknown enchantment",
                extra={"enchantment": enchantment_record.name, "item_name": record.name},
            )
            continue
        stack = stack.with_enchantments(enchantment)

    return stack


def inventory_to_record(inventory: InventoryState) -> InventoryRecord:
    return InventoryRecord(
        items=[stack_to_record(stack) for stack in inventory.items],
        boots=stack_to_record(inventory.boots),
        leggings=stack_to_record(inventory.leggings),
        chestplate=stack_to_record(inventory.chestplate),
        helmet=stack_to_record(inventory.helmet),
        off_hand=stack_to_record(inventory.off_hand),
        main_hand_slot=inventory.main_hand_slot,
    )


def record_to_inventory(
    record: InventoryRecord,
    items: ItemRegistry,
    enchantments: EnchantmentRegistry,
) -> InventoryState:
    return InventoryState(
        items=[record_to_stack(stack, items, enchantments) for stack in record.items],
        boots=record_to_stack(record.boots, items, enchantments),
        leggings=record_to_stack(record.leggings, items, enchantments),
        chestplate=record_to_stack(record.chestplate, items, enchantments),
        helmet=record_to_stack(record.helmet, items, enchantments),
        off_hand=record_to_stack(record.off_hand, items, enchantments),
        main_hand_slot=record.main_hand_slot,
    )


# =============================================================================
# Effects
# =============================================================================


def effect_to_record(effect: Effect) -> EffectRecord:
    duration = 0
    if not effect.is_instant():
        microseconds = effect.duration // timedelta(microseconds=1)
        duration = microseconds * _NANOS_PER_MICROSECOND
    return EffectRecord(
        id=effect.type.id,
        amplifier=effect.amplifier,
        duration=duration,
        ambient=effect.ambient,
        show_particles=effect.show_particles,
    )


def _duration_from_nanos(nanos: int) -> timedelta:
    # Rounded up so a positive duration never collapses to the instant marker
    return timedelta(microseconds=-(-nanos // _NANOS_PER_MICROSECOND))


def record_to_effect(record: EffectRecord, effects: EffectRegistry) -> Optional[Effect]:
    """
    Convert a record back to an effect.

    Returns None for unknown effect ids and for instant-only types stored
    with a duration.
    """
    effect_type = effects.lookup(record.id)
    if effect_type is None:
        logger.debug("Dropping unknown effect", extra={"effect_id": record.id})
        return None

    if record.duration <= 0:
        return Effect(
            type=effect_type,
            amplifier=record.amplifier,
            ambient=record.ambient,
            show_particles=record.show_particles,
        )

    if not effect_type.lasting:
        logger.debug(
            "Dropping instant effect stored with a duration",
            extra={"effect_id": record.id, "duration": record.duration},
        )
        return None

    return Effect(
        type=effect_type,
        amplifier=record.amplifier,
        duration=_duration_from_nanos(record.duration),
        ambient=record.ambient,
        show_particles=record.show_particles,
    )


# =============================================================================
# Field groups
# =============================================================================

FieldEncoder = Callable[["RecordCodec", PlayerState], Any]


def _attr(name: str) -> FieldEncoder:
    return lambda codec, state: getattr(state, name)


def _vector(name: str) -> FieldEncoder:
    return lambda codec, state: [float(c) for c in getattr(state, name)]


def _encode_game_mode(codec: "RecordCodec", state: PlayerState) -> int:
    mode_id = game_mode_id(state.game_mode)
    if mode_id is None:
        raise ValueError(f"game mode {state.game_mode!r} has no persisted id")
    return mode_id


def _encode_dimension(codec: "RecordCodec", state: PlayerState) -> int:
    if state.world is None:
        logger.debug("Player has no world, dimension not saved", extra={"uuid": str(state.uuid)})
        return 0
    dim_id = dimension_id(state.world.dimension)
    if dim_id is None:
        raise ValueError(f"dimension {state.world.dimension!r} has no persisted id")
    return dim_id


def _encode_inventory(codec: "RecordCodec", state: PlayerState) -> InventoryRecord:
    return inventory_to_record(state.inventory)


def _encode_ender_chest(codec: "RecordCodec", state: PlayerState) -> List[ItemStackRecord]:
    return [stack_to_record(stack) for stack in state.ender_chest_inventory]


def _encode_effects(codec: "RecordCodec", state: PlayerState) -> List[EffectRecord]:
    return [effect_to_record(effect) for effect in state.effects]


# Save-policy group -> (record field, encoder) pairs. Adding a group means
# adding a switch to SavePolicy and an entry here.
FIELD_GROUPS: Dict[str, Tuple[Tuple[str, FieldEncoder], ...]] = {
    "position": (("position", _vector("position")),),
    "velocity": (("velocity", _vector("velocity")),),
    "rotation": (("yaw", _attr("yaw")), ("pitch", _attr("pitch"))),
    "health": (("health", _attr("health")), ("max_health", _attr("max_health"))),
    "hunger": (
        ("hunger", _attr("hunger")),
        ("food_tick", _attr("food_tick")),
        ("exhaustion_level", _attr("exhaustion_level")),
        ("saturation_level", _attr("saturation_level")),
    ),
    "absorption": (("absorption_level", _attr("absorption_level")),),
    "enchantment_seed": (("enchantment_seed", _attr("enchantment_seed")),),
    "experience": (("experience", _attr("experience")),),
    "game_mode": (("game_mode", _encode_game_mode),),
    "inventory": (("inventory", _encode_inventory),),
    "effects": (("effects", _encode_effects),),
    "ender_chest": (("ender_chest_inventory", _encode_ender_chest),),
    "air_supply": (
        ("air_supply", _attr("air_supply")),
        ("max_air_supply", _attr("max_air_supply")),
    ),
    "fall_distance": (("fall_distance", _attr("fall_distance")),),
    "fire_ticks": (("fire_ticks", _attr("fire_ticks")),),
    "dimension": (("dimension", _encode_dimension),),
}


class RecordCodec:
    """Converts between PlayerState and PlayerRecord using the host's registries."""

    def __init__(
        self,
        items: Optional[ItemRegistry] = None,
        enchantments: Optional[EnchantmentRegistry] = None,
        effects: Optional[EffectRegistry] = None,
        default_world_factory: Optional[WorldResolver] = None,
    ):
        self.items = items if items is not None else default_item_registry()
        self.enchantments = (
            enchantments if enchantments is not None else default_enchantment_registry()
        )
        self.effects = effects if effects is not None else default_effect_registry()
        self._default_world_factory = default_world_factory

    def to_record(self, state: PlayerState, policy: SavePolicy) -> PlayerRecord:
        """Build the record to persist, copying only the enabled field groups."""
        values: Dict[str, Any] = {"uuid": state.uuid, "username": state.username}
        for group, fields in FIELD_GROUPS.items():
            if not policy.is_enabled(group):
                continue
            for field_name, encode in fields:
                values[field_name] = encode(self, state)
        return PlayerRecord(**values)

    def from_record(
        self, record: PlayerRecord, world_resolver: Optional[WorldResolver] = None
    ) -> PlayerState:
        """Rebuild live state from a record, restoring every field it holds."""
        game_mode = game_mode_by_id(record.game_mode)
        if game_mode is None:
            logger.warning(
                "Unknown game mode, defaulting to survival",
                extra={"uuid": str(record.uuid), "game_mode": record.game_mode},
            )
            game_mode = GameMode.SURVIVAL

        effects = []
        for effect_record in record.effects:
            effect = record_to_effect(effect_record, self.effects)
            if effect is not None:
                effects.append(effect)

        return PlayerState(
            uuid=record.uuid,
            username=record.username,
            position=tuple(record.position),
            velocity=tuple(record.velocity),
            yaw=record.yaw,
            pitch=record.pitch,
            health=record.health,
            max_health=record.max_health,
            hunger=record.hunger,
            food_tick=record.food_tick,
            exhaustion_level=record.exhaustion_level,
            saturation_level=record.saturation_level,
            absorption_level=record.absorption_level,
            enchantment_seed=record.enchantment_seed,
            experience=record.experience,
            air_supply=record.air_supply,
            max_air_supply=record.max_air_supply,
            game_mode=game_mode,
            inventory=record_to_inventory(record.inventory, self.items, self.enchantments),
            ender_chest_inventory=[
                record_to_stack(stack, self.items, self.enchantments)
                for stack in record.ender_chest_inventory
            ],
            effects=effects,
            fire_ticks=record.fire_ticks,
            fall_distance=record.fall_distance,
            world=self.resolve_world(record, world_resolver),
        )

    def resolve_world(
        self, record: PlayerRecord, world_resolver: Optional[WorldResolver] = None
    ) -> Optional[World]:
        """
        Find the world for the record's dimension.

        Asks the caller's resolver first and falls back to the default world
        factory when it has nothing for that dimension.
        """
        dimension = dimension_by_id(record.dimension)
        if dimension is None:
            logger.warning(
                "Unknown dimension, world not restored",
                extra={"uuid": str(record.uuid), "dimension": record.dimension},
            )
            return None

        world = world_resolver(dimension) if world_resolver is not None else None
        if world is None:
            world = self.default_world(dimension)
        return world

    def default_world(self, dimension: Dimension) -> Optional[World]:
        if self._default_world_factory is None:
            return None
        return self._default_world_factory(dimension)
