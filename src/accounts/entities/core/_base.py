import uuid
from datetime import UTC, datetime

from pydantic import BaseModel
from pydantic import Field as PydanticField
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(UTC)


class Entity(BaseModel):
    """Base entity class with auto-generated UUID identifier."""

    id: str = PydanticField(
        default_factory=lambda: str(uuid.uuid4()),
        description="Unique identifier for the entity",
        frozen=True,
    )

    created_at: datetime = PydanticField(default_factory=utcnow)
    updated_at: datetime | None = PydanticField(default=None)

    def touch(self) -> None:
        """Refresh ``updated_at``; every mutating operation calls this."""
        self.updated_at = utcnow()


class EntityTable(SQLModel, table=False):
    """Base table with a string UUID primary key and timestamps."""

    id: str = Field(
        primary_key=True,
        default_factory=lambda: str(uuid.uuid4()),
        description="Unique identifier for the entity",
    )

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime | None = Field(default=None)
