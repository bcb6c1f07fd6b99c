"""
Shared base classes for the documents this engine stores in MongoDB.
"""

from datetime import datetime, timezone
from typing import Annotated, Any, Optional

from bson import ObjectId
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer, field_validator


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (as stored by older writers) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_object_id(value: Any) -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    raise ValueError(f"Invalid ObjectId: {value!r}")


# Kept as ObjectId for the driver, rendered as a string in JSON
PyObjectId = Annotated[
    ObjectId,
    BeforeValidator(_to_object_id),
    PlainSerializer(str, return_type=str, when_used="json"),
]


class BaseDocument(BaseModel):
    """A document owned by this engine, with ``_id`` and timestamps."""

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        use_enum_values=True,
    )

    id: Optional[PyObjectId] = Field(default=None, alias="_id")
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("created_at", "updated_at", mode="after")
    @classmethod
    def _timestamps_utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    def model_dump_mongo(self) -> dict[str, Any]:
        """Dictionary ready for the driver; ``_id`` is omitted until assigned."""
        data = self.model_dump(by_alias=True, exclude_none=True)
        if data.get("_id") is None:
            data.pop("_id", None)
        return data


class EmbeddedModel(BaseModel):
    """Subdocument stored inside a BaseDocument."""

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
    )
