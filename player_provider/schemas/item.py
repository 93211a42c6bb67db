"""
Pydantic schemas for persisted item stacks, enchantments and inventories.
"""

from typing import Annotated, Any, Dict, List

from pydantic import AfterValidator, BeforeValidator, Field, ValidationError, WrapValidator

from player_provider.core.logging_config import get_logger
from player_provider.schemas.base import FlexibleInt, RecordModel, drop_invalid_entries

logger = get_logger(__name__)


def _check_property_value(key: str, value: Any) -> None:
    if isinstance(value, (bool, int, float, str)):
        return
    if isinstance(value, dict):
        for nested_key, nested_value in value.items():
            if not isinstance(nested_key, str):
                raise ValueError(f"property {key!r} has a non-string nested key")
            _check_property_value(f"{key}.{nested_key}", nested_value)
        return
    raise ValueError(
        f"property {key!r} has unsupported type {type(value).__name__}; "
        "expected number, string, boolean or mapping"
    )


def _check_property_bag(data: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in data.items():
        _check_property_value(key, value)
    return data


# Arbitrary per-stack values set by plugins. Values are restricted to numbers,
# strings, booleans and nested mappings of those.
PropertyBag = Annotated[Dict[str, Any], AfterValidator(_check_property_bag)]


class EnchantmentRecord(RecordModel):
    """An enchantment by registry name and level."""

    name: str = ""
    level: FlexibleInt = 0


class ItemStackRecord(RecordModel):
    """
    A single item stack.

    The zero value (no name, zero count) is an empty slot.
    """

    name: str = ""
    meta: FlexibleInt = 0
    count: FlexibleInt = 0
    custom_name: str = ""
    lore: List[str] = Field(default_factory=list)
    damage: FlexibleInt = 0
    anvil_cost: FlexibleInt = 0
    data: PropertyBag = Field(default_factory=dict)
    enchantments: Annotated[
        List[EnchantmentRecord], BeforeValidator(drop_invalid_entries(EnchantmentRecord))
    ] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return self == ItemStackRecord()


def _stack_or_empty(value: Any, handler) -> ItemStackRecord:
    try:
        return handler(value)
    except ValidationError as e:
        logger.debug("Replacing malformed item stack with an empty slot", extra={"error": str(e)})
        return ItemStackRecord()


# A stack slot that decodes to an empty slot when the stored stack is malformed,
# so one bad entry never fails the surrounding document.
SlotRecord = Annotated[ItemStackRecord, WrapValidator(_stack_or_empty)]


class InventoryRecord(RecordModel):
    """Main inventory slots plus armour, off hand and the selected hotbar slot."""

    items: List[SlotRecord] = Field(default_factory=list)
    boots: SlotRecord = Field(default_factory=ItemStackRecord)
    leggings: SlotRecord = Field(default_factory=ItemStackRecord)
    chestplate: SlotRecord = Field(default_factory=ItemStackRecord)
    helmet: SlotRecord = Field(default_factory=ItemStackRecord)
    off_hand: SlotRecord = Field(default_factory=ItemStackRecord)
    main_hand_slot: FlexibleInt = Field(default=0, ge=0)
