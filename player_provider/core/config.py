import os
import yaml
from pathlib import Path
from typing import Dict, Any, List
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def load_provider_config() -> Dict[str, Any]:
    """Load provider defaults from config.yml"""
    config_path = Path(os.getenv("PLAYER_PROVIDER_CONFIG", "config.yml"))

    if config_path.exists():
        with open(config_path, "r") as f:
            return yaml.safe_load(f) or {}
    return {}


# Load provider config from YAML
provider_config = load_provider_config().get("provider", {})


class SavePolicy(BaseModel):
    """
    Field-inclusion policy applied when a player is written to disk.

    One switch per field group; the groups and the record fields they control
    are listed in services.record_codec.FIELD_GROUPS.
    """

    position: bool = True
    velocity: bool = True
    rotation: bool = True
    health: bool = True
    hunger: bool = True
    absorption: bool = True
    enchantment_seed: bool = True
    experience: bool = True
    game_mode: bool = True
    inventory: bool = True
    effects: bool = True
    ender_chest: bool = True
    air_supply: bool = True
    fall_distance: bool = True
    fire_ticks: bool = True
    dimension: bool = True

    def is_enabled(self, group: str) -> bool:
        return getattr(self, group)

    def enabled_groups(self) -> List[str]:
        return [group for group in type(self).model_fields if getattr(self, group)]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Storage settings
    PLAYER_DATA_PATH: str = provider_config.get("path", "assets/players")
    # Seconds between cache flushes
    FLUSH_RATE: float = float(provider_config.get("flush_rate", 60.0))
    # True: every save is written immediately. False: buffered until the next flush.
    AUTO_SAVE: bool = bool(provider_config.get("auto_save", True))

    # Logged when a player without a data file joins. Empty disables it.
    FIRST_JOIN_MESSAGE: str = provider_config.get("first_join_message", "")
    # Cache hits return the world stored at save time instead of re-resolving it.
    REUSE_CACHED_WORLD: bool = bool(provider_config.get("reuse_cached_world", True))

    SAVE_POLICY: SavePolicy = Field(
        default_factory=lambda: SavePolicy(**provider_config.get("save", {}))
    )

    # Logging settings
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    @model_validator(mode="after")
    def validate_flush_rate(self) -> "Settings":
        """Reject intervals that would spin the flush task."""
        if self.FLUSH_RATE <= 0:
            raise ValueError("FLUSH_RATE must be a positive number of seconds")
        return self

    @property
    def data_directory(self) -> Path:
        return Path(self.PLAYER_DATA_PATH)


settings = Settings()
