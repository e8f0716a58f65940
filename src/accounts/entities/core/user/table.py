"""User database table model."""

from datetime import datetime

from sqlmodel import Field

from src.accounts.entities.core._base import EntityTable
from src.accounts.entities.core.user.entity import UserRole


class UserTable(EntityTable, table=True):
    """Database persistence model for users.

    This represents how the User entity is stored in the database.
    It's separate from the domain entity to maintain clean architecture
    while keeping related code together.
    """

    __tablename__ = "users"

    name: str | None = Field(default=None, max_length=255)
    email: str = Field(max_length=255, unique=True, index=True)
    role: UserRole = Field(default=UserRole.USER)
    is_onboarded: bool = Field(default=False)
    external_id: str | None = Field(default=None, index=True)
    deleted_at: datetime | None = Field(default=None)
