"""Base model classes for MongoDB documents.

Identifiers are stored as strings. Documents created by the service get a
stringified ``ObjectId``; question bank documents may use any string id.
"""

from datetime import datetime
from typing import Any, Dict, List, Type, TypeVar

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator

from colorquiz.utils.datetime_utils import utc_now


def new_object_id() -> str:
    """Generate a new document identifier.

    Returns:
        str: Hex string of a fresh ObjectId
    """
    return str(ObjectId())


class BaseDocument(BaseModel):
    """Base model for all MongoDB documents."""

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
        json_schema_extra={
            "example": {
                "_id": "507f1f77bcf86cd799439011",
                "created_at": "2024-01-01T00:00:00Z",
            }
        },
    )

    id: str = Field(default_factory=new_object_id, alias="_id")
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_object_id(cls, value: Any) -> Any:
        """Accept raw ObjectIds read back from MongoDB."""
        if isinstance(value, ObjectId):
            return str(value)
        return value

    def to_dict(self, **kwargs: Any) -> Dict[str, Any]:
        """Convert model to a MongoDB-ready dictionary.

        Args:
            **kwargs: Additional arguments for model_dump

        Returns:
            Dict[str, Any]: Dictionary keyed by field alias
        """
        return self.model_dump(by_alias=True, **kwargs)

    @classmethod
    def from_dict(cls: Type["T"], data: Dict[str, Any]) -> "T":
        """Create model instance from a MongoDB document.

        Args:
            data: Document as returned by the driver

        Returns:
            Model instance
        """
        return cls.model_validate(data)

    @classmethod
    def create_index_keys(cls) -> List[tuple]:
        """Return index specifications for this model's collection.

        Returns:
            List[tuple]: ``(keys, options)`` pairs
        """
        return []


T = TypeVar("T", bound=BaseDocument)


class EmbeddedDocument(BaseModel):
    """Base model for embedded documents and derived value objects."""

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
    )
