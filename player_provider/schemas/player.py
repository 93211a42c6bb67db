"""
Pydantic schema for the persisted player record.
Used for the JSON documents written by the file store.
"""

from typing import Annotated, ClassVar, FrozenSet, List
from uuid import UUID

from pydantic import BeforeValidator, Field

from player_provider.schemas.base import FlexibleInt, RecordModel, drop_invalid_entries
from player_provider.schemas.effect import EffectRecord
from player_provider.schemas.item import InventoryRecord, SlotRecord

ZERO_VECTOR = (0.0, 0.0, 0.0)


class PlayerRecord(RecordModel):
    """
    Flat, serializable snapshot of a player.

    Every field but the identity is optional and defaults to its zero value.
    Which fields are populated on save depends on the save policy.
    """

    always_serialized: ClassVar[FrozenSet[str]] = frozenset({"UUID", "uuid"})

    uuid: UUID = Field(alias="UUID", frozen=True)
    username: str = ""

    position: List[float] = Field(default_factory=lambda: list(ZERO_VECTOR), min_length=3, max_length=3)
    velocity: List[float] = Field(default_factory=lambda: list(ZERO_VECTOR), min_length=3, max_length=3)
    yaw: float = 0.0
    pitch: float = 0.0

    health: float = 0.0
    max_health: float = 0.0
    hunger: FlexibleInt = 0
    food_tick: FlexibleInt = 0
    exhaustion_level: float = 0.0
    saturation_level: float = 0.0
    absorption_level: float = 0.0

    enchantment_seed: FlexibleInt = 0
    experience: FlexibleInt = 0
    air_supply: FlexibleInt = 0
    max_air_supply: FlexibleInt = 0
    game_mode: FlexibleInt = 0

    inventory: InventoryRecord = Field(default_factory=InventoryRecord)
    ender_chest_inventory: List[SlotRecord] = Field(default_factory=list)
    effects: Annotated[
        List[EffectRecord], BeforeValidator(drop_invalid_entries(EffectRecord))
    ] = Field(default_factory=list)

    fire_ticks: FlexibleInt = 0
    fall_distance: float = 0.0
    dimension: FlexibleInt = 0
