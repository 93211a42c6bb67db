"""
Status effects and the id-keyed effect type registry.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Dict, Iterable, Optional


@dataclass(frozen=True)
class EffectType:
    id: int
    name: str
    # Lasting types tick down over a duration; the rest apply once.
    lasting: bool = True


@dataclass(frozen=True)
class Effect:
    """
    An active effect on a player.

    A zero duration marks an instant effect.
    """

    type: EffectType
    amplifier: int = 0
    duration: timedelta = timedelta(0)
    ambient: bool = False
    show_particles: bool = True

    @classmethod
    def instant(cls, effect_type: EffectType, amplifier: int = 0) -> "Effect":
        return cls(type=effect_type, amplifier=amplifier)

    def is_instant(self) -> bool:
        return self.duration <= timedelta(0)


class EffectRegistry:
    """Effect types keyed by numeric id."""

    def __init__(self, effect_types: Iterable[EffectType] = ()):
        self._types: Dict[int, EffectType] = {}
        for effect_type in effect_types:
            self.register(effect_type)

    def register(self, effect_type: EffectType) -> None:
        self._types[effect_type.id] = effect_type

    def lookup(self, effect_id: int) -> Optional[EffectType]:
        return self._types.get(effect_id)


DEFAULT_EFFECT_TYPES = (
    EffectType(1, "speed"),
    EffectType(2, "slowness"),
    EffectType(3, "haste"),
    EffectType(4, "mining_fatigue"),
    EffectType(5, "strength"),
    EffectType(6, "instant_health", lasting=False),
    EffectType(7, "instant_damage", lasting=False),
    EffectType(8, "jump_boost"),
    EffectType(10, "regeneration"),
    EffectType(11, "resistance"),
    EffectType(12, "fire_resistance"),
    EffectType(13, "water_breathing"),
    EffectType(14, "invisibility"),
    EffectType(16, "night_vision"),
    EffectType(19, "poison"),
    EffectType(22, "absorption"),
    EffectType(23, "saturation", lasting=False),
)


def default_effect_registry() -> EffectRegistry:
    return EffectRegistry(DEFAULT_EFFECT_TYPES)
