"""
Shared pieces for the persisted record schemas.

Records are written with PascalCase keys (the on-disk format predates this
package) and with zero-valued fields left out of the document.
"""

from typing import Annotated, Any, Callable, ClassVar, FrozenSet, Type

from pydantic import BaseModel, BeforeValidator, ConfigDict, ValidationError, model_serializer
from pydantic.alias_generators import to_pascal

from player_provider.core.logging_config import get_logger

logger = get_logger(__name__)


def _truncate_float(value: Any) -> Any:
    # Counts and durations may have been written as floating literals
    if isinstance(value, float):
        return int(value)
    return value


# An int field that also accepts a JSON float, truncating toward zero.
FlexibleInt = Annotated[int, BeforeValidator(_truncate_float)]


def is_zero_value(value: Any) -> bool:
    """True for values the on-disk format leaves out."""
    if value is None or value is False:
        return True
    if isinstance(value, (int, float, str, dict)):
        return not value
    if isinstance(value, list):
        # Vectors are zero when every component is; other lists only when empty
        return all(
            isinstance(v, (int, float)) and not isinstance(v, bool) and v == 0
            for v in value
        )
    return False


class RecordModel(BaseModel):
    """Base class for persisted records."""

    model_config = ConfigDict(
        alias_generator=to_pascal,
        populate_by_name=True,
        extra="ignore",
    )

    # Keys written even when zero-valued
    always_serialized: ClassVar[FrozenSet[str]] = frozenset()

    @model_serializer(mode="wrap")
    def _omit_zero_fields(self, handler):
        data = handler(self)
        return {
            key: value
            for key, value in data.items()
            if key in self.always_serialized or not is_zero_value(value)
        }


def drop_invalid_entries(model: Type[BaseModel]) -> Callable[[Any], Any]:
    """
    Build a before-validator for a list of ``model`` entries that discards
    the entries failing validation instead of rejecting the whole list.
    """

    def validate(value: Any) -> Any:
        if not isinstance(value, list):
            return value
        kept = []
        for entry in value:
            try:
                kept.append(model.model_validate(entry))
            except ValidationError as e:
                logger.debug(
                    "Dropping malformed entry",
                    extra={"record": model.__name__, "error": str(e)},
                )
        return kept

    return validate
