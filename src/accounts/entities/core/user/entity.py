"""User domain entity."""

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import Field

from src.accounts.entities.core._base import Entity


class UserRole(StrEnum):
    """Closed set of roles; values double as identity-provider group names."""

    ADMIN = "admin"
    USER = "user"


class User(Entity):
    """User entity representing an account in the system.

    This is the domain model that carries the identity invariants: ``id`` and
    ``email`` never change after creation, ``external_id`` is assigned once
    when the identity provider accepts the registration, and every mutating
    method refreshes ``updated_at``.
    """

    name: str | None = Field(default=None, description="User's display name")
    email: str = Field(description="User's email address", frozen=True)
    role: UserRole = Field(default=UserRole.USER, description="User's role")
    is_onboarded: bool = Field(
        default=False, description="Whether the user completed onboarding"
    )
    external_id: str | None = Field(
        default=None, description="Identifier assigned by the identity provider"
    )
    deleted_at: datetime | None = Field(default=None, description="Soft-delete timestamp")

    @classmethod
    def create(cls, **props: Any) -> "User":
        """Build a user, dropping ``None`` values so field defaults apply."""
        return cls(**{key: value for key, value in props.items() if value is not None})

    def mark_as_onboarded(self) -> None:
        self.is_onboarded = True
        self.touch()

    def set_external_id(self, external_id: str) -> None:
        if self.external_id is not None:
            raise ValueError(f"User {self.id} already has an external id")
        self.external_id = external_id
        self.touch()

    def to_record(self) -> dict[str, Any]:
        """Return the persisted representation of the user."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "is_onboarded": self.is_onboarded,
            "external_id": self.external_id,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "deleted_at": self.deleted_at,
        }
