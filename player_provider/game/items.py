"""
Item stacks, enchantments and their lookup registries.

The host owns the real item catalogue; the provider only needs to turn a
persisted (name, meta) pair back into an item type, and an enchantment name
back into an enchantment type. Both lookups are exact-match tables.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, Optional, Tuple


@dataclass(frozen=True)
class ItemType:
    """An item identified by its namespaced name and numeric variant."""

    name: str
    meta: int = 0
    max_count: int = 64


@dataclass(frozen=True)
class EnchantmentType:
    name: str
    max_level: int = 1


@dataclass(frozen=True)
class Enchantment:
    type: EnchantmentType
    level: int


@dataclass(frozen=True, eq=False)
class ItemStack:
    """
    An immutable stack of items.

    A stack with no item or a count of zero is empty; all empty stacks are
    equal to ItemStack.empty().
    """

    item: Optional[ItemType] = None
    count: int = 0
    custom_name: str = ""
    lore: Tuple[str, ...] = ()
    durability: int = 0
    anvil_cost: int = 0
    values: Dict[str, Any] = field(default_factory=dict)
    enchantments: Tuple[Enchantment, ...] = ()

    @classmethod
    def of(cls, item: ItemType, count: int) -> "ItemStack":
        return cls(item=item, count=count)

    @classmethod
    def empty(cls) -> "ItemStack":
        return cls()

    def is_empty(self) -> bool:
        return self.item is None or self.count <= 0

    def with_custom_name(self, name: str) -> "ItemStack":
        return replace(self, custom_name=name)

    def with_lore(self, *lines: str) -> "ItemStack":
        return replace(self, lore=tuple(lines))

    def with_durability(self, durability: int) -> "ItemStack":
        return replace(self, durability=durability)

    def with_anvil_cost(self, cost: int) -> "ItemStack":
        return replace(self, anvil_cost=cost)

    def with_value(self, key: str, value: Any) -> "ItemStack":
        values = dict(self.values)
        values[key] = value
        return replace(self, values=values)

    def with_enchantments(self, *enchantments: Enchantment) -> "ItemStack":
        """Add enchantments, replacing any existing one of the same type."""
        new_types = {e.type for e in enchantments}
        kept = tuple(e for e in self.enchantments if e.type not in new_types)
        return replace(self, enchantments=kept + tuple(enchantments))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ItemStack):
            return NotImplemented
        if self.is_empty() or other.is_empty():
            return self.is_empty() and other.is_empty()
        return (
            self.item == other.item
            and self.count == other.count
            and self.custom_name == other.custom_name
            and self.lore == other.lore
            and self.durability == other.durability
            and self.anvil_cost == other.anvil_cost
            and self.values == other.values
            and self.enchantments == other.enchantments
        )


class ItemRegistry:
    """Item types keyed by (name, meta)."""

    def __init__(self, items: Iterable[ItemType] = ()):
        self._items: Dict[Tuple[str, int], ItemType] = {}
        for item in items:
            self.register(item)

    def register(self, item: ItemType) -> None:
        self._items[(item.name, item.meta)] = item

    def lookup(self, name: str, meta: int = 0) -> Optional[ItemType]:
        return self._items.get((name, meta))

    def __len__(self) -> int:
        return len(self._items)


class EnchantmentRegistry:
    """Enchantment types keyed by exact name."""

    def __init__(self, enchantments: Iterable[EnchantmentType] = ()):
        self._enchantments: Dict[str, EnchantmentType] = {}
        for enchantment in enchantments:
            self.register(enchantment)

    def register(self, enchantment: EnchantmentType) -> None:
        self._enchantments[enchantment.name] = enchantment

    def lookup(self, name: str) -> Optional[EnchantmentType]:
        return self._enchantments.get(name)


# Vanilla subset used when the host does not supply its own catalogue
DEFAULT_ITEMS = (
    ItemType("minecraft:apple"),
    ItemType("minecraft:bread"),
    ItemType("minecraft:arrow"),
    ItemType("minecraft:diamond", max_count=64),
    ItemType("minecraft:diamond_sword", max_count=1),
    ItemType("minecraft:bow", max_count=1),
    ItemType("minecraft:iron_helmet", max_count=1),
    ItemType("minecraft:iron_chestplate", max_count=1),
    ItemType("minecraft:iron_leggings", max_count=1),
    ItemType("minecraft:iron_boots", max_count=1),
    ItemType("minecraft:shield", max_count=1),
    ItemType("minecraft:wool", meta=0),
    ItemType("minecraft:wool", meta=14),
)

DEFAULT_ENCHANTMENTS = (
    EnchantmentType("Sharpness", max_level=5),
    EnchantmentType("Unbreaking", max_level=3),
    EnchantmentType("Protection", max_level=4),
    EnchantmentType("Power", max_level=5),
    EnchantmentType("Infinity", max_level=1),
    EnchantmentType("Mending", max_level=1),
)


def default_item_registry() -> ItemRegistry:
    return ItemRegistry(DEFAULT_ITEMS)


def default_enchantment_registry() -> EnchantmentRegistry:
    return EnchantmentRegistry(DEFAULT_ENCHANTMENTS)
