"""
Pydantic schema for persisted status effects.
"""

from pydantic import Field

from player_provider.schemas.base import FlexibleInt, RecordModel


class EffectRecord(RecordModel):
    """
    An active effect.

    Duration is stored in nanoseconds; zero marks an instant effect.
    """

    id: FlexibleInt = Field(default=0, alias="ID")
    amplifier: FlexibleInt = 0
    duration: FlexibleInt = 0
    ambient: bool = False
    show_particles: bool = False
