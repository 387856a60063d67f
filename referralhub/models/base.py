"""Base models and mixins for Firestore documents"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from datetime import datetime, timezone
import enum
from typing import Any, Dict, Iterable, Optional

def utcnow() -> datetime:
    """Timezone-aware current time used for every document timestamp"""
    return datetime.now(timezone.utc)

class Document(BaseModel):
    """
    Base document model

    Documents are stored with camelCase field names so records written by the
    mobile client stay readable. Python code uses snake_case attributes.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
        extra="ignore",
    )

    @classmethod
    def alias_for(cls, field: str) -> str:
        """Stored document key for a model field"""
        return cls.model_fields[field].alias or to_camel(field)

    def to_document(self, include: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        """Convert model instance to a Firestore document dict"""
        data = self.model_dump(by_alias=True, include=set(include) if include is not None else None)
        for key, value in data.items():
            if isinstance(value, enum.Enum):
                data[key] = value.value
        return data

    @classmethod
    def from_document(cls, data: Dict[str, Any]):
        """Build model instance from a Firestore document dict"""
        return cls.model_validate(data)

class TimestampedDocument(Document):
    """Mixin for adding createdAt and updatedAt timestamps"""

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

__all__ = [
    "Document",
    "TimestampedDocument",
    "utcnow",
]
