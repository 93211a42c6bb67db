"""
File storage for player records.

One tab-indented JSON document per player at <directory>/<uuid>.json. This
is the only part of the provider that touches the filesystem. The blocking
read/write calls have async wrappers that run them in a worker thread.
"""

import asyncio
import json
from pathlib import Path
from typing import Union
from uuid import UUID

from pydantic import ValidationError

from player_provider.core.errors import (
    PlayerDataDecodeError,
    PlayerDataIOError,
    PlayerDataNotFoundError,
)
from player_provider.core.logging_config import get_logger
from player_provider.schemas.player import PlayerRecord

logger = get_logger(__name__)

DIRECTORY_MODE = 0o777


class PlayerFileStore:
    """Reads and writes player records under a single directory."""

    def __init__(self, directory: Union[str, Path]):
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, player_id: UUID) -> Path:
        return self._directory / f"{player_id}.json"

    @staticmethod
    def encode(record: PlayerRecord) -> bytes:
        """Serialize a record exactly as it is written to disk."""
        data = record.model_dump(mode="json", by_alias=True)
        return json.dumps(data, indent="\t").encode("utf-8")

    def write(self, player_id: UUID, record: PlayerRecord) -> None:
        """
        Write a record, replacing any existing file for the player.

        Raises:
            PlayerDataIOError: If the directory or file cannot be written
        """
        payload = self.encode(record)
        path = self.path_for(player_id)
        try:
            self._directory.mkdir(mode=DIRECTORY_MODE, parents=True, exist_ok=True)
            path.write_bytes(payload)
        except OSError as e:
            raise PlayerDataIOError(
                player_id, f"failed to write player data to {path}: {e}"
            ) from e

        logger.debug(
            "Wrote player data", extra={"uuid": str(player_id), "bytes": len(payload)}
        )

    def read(self, player_id: UUID) -> PlayerRecord:
        """
        Read the record for a player.

        Raises:
            PlayerDataNotFoundError: If the player has no data file
            PlayerDataDecodeError: If the file is not a valid player record
            PlayerDataIOError: If the file exists but cannot be read
        """
        path = self.path_for(player_id)
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            raise PlayerDataNotFoundError(player_id) from None
        except OSError as e:
            raise PlayerDataIOError(
                player_id, f"failed to read player data from {path}: {e}"
            ) from e

        try:
            return PlayerRecord.model_validate_json(raw)
        except ValidationError as e:
            raise PlayerDataDecodeError(
                player_id, f"invalid player data in {path}: {e}"
            ) from e

    async def write_async(self, player_id: UUID, record: PlayerRecord) -> None:
        await asyncio.to_thread(self.write, player_id, record)

    async def read_async(self, player_id: UUID) -> PlayerRecord:
        return await asyncio.to_thread(self.read, player_id)
