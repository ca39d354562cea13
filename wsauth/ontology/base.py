"""CoreModel — base pydantic model with system fields for all wsauth entities."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    """Timezone-aware current UTC time. All timestamps in wsauth are aware."""
    return datetime.now(timezone.utc)


class CoreModel(BaseModel):
    """Base model for all wsauth entities.

    Every entity table shares these system fields. Rows coming back from
    asyncpg are validated straight into subclasses (``from_attributes``).
    """

    __table_name__: ClassVar[str]

    id: UUID = Field(default_factory=uuid4)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    deleted_at: datetime | None = None

    model_config = {"from_attributes": True}
