"""User repository for database operations."""

import math
from collections.abc import Iterator
from contextlib import contextmanager
from enum import IntEnum
from typing import Any

from loguru import logger
from pydantic import BaseModel, Field
from sqlmodel import Session, col, func, select

from src.accounts.entities.core.user.entity import User, UserRole
from src.accounts.entities.core.user.table import UserTable


class ItemsPerPage(IntEnum):
    FIVE = 5
    TEN = 10
    FIFTEEN = 15
    TWENTY = 20
    TWENTY_FIVE = 25
    FIFTY = 50


class Pagination(BaseModel):
    items_per_page: ItemsPerPage = ItemsPerPage.TEN
    page: int = Field(default=1, ge=1)

    @property
    def offset(self) -> int:
        return int(self.items_per_page) * (self.page - 1)


class UserSearchFilters(BaseModel):
    name: str | None = None
    email: str | None = None
    role: UserRole | None = None
    is_onboarded: bool | None = None


class SearchMeta(BaseModel):
    total: int
    items_per_page: int
    total_pages: int
    page: int


class UserSearchResult(BaseModel):
    users: list[User]
    meta: SearchMeta


class UserRepository:
    """Repository for User entity database operations.

    Each write runs in its own transaction on the injected session; a
    failure rolls the transaction back and re-raises.
    """

    def __init__(self, session: Session):
        self._session = session

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[Session]:
        try:
            yield self._session
            self._session.commit()
        except Exception as exc:
            self._session.rollback()
            logger.error(
                "User repository write failed",
                operation=operation,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise

    def _to_entity(self, row: UserTable | None) -> User | None:
        if row is None or row.deleted_at is not None:
            return None
        return User.model_validate(row, from_attributes=True)

    def find_user(self, user_id: str) -> User | None:
        """Get a user by internal id."""
        return self._to_entity(self._session.get(UserTable, user_id))

    def find_user_by_email(self, email: str) -> User | None:
        statement = select(UserTable).where(
            UserTable.email == email, col(UserTable.deleted_at).is_(None)
        )
        return self._to_entity(self._session.exec(statement).first())

    def find_user_by_external_id(self, external_id: str) -> User | None:
        statement = select(UserTable).where(UserTable.external_id == external_id)
        return self._to_entity(self._session.exec(statement).first())

    def create_user(self, user: User) -> None:
        with self._transaction("create_user") as session:
            session.add(UserTable.model_validate(user.to_record()))

    def update_user(self, record: dict[str, Any]) -> None:
        """Write the columns present in ``record`` onto the row keyed by its id."""
        user_id = record["id"]
        with self._transaction("update_user") as session:
            row = session.get(UserTable, user_id)
            if row is None:
                raise LookupError(f"User with ID {user_id} not found")
            for key, value in record.items():
                if key in ("id", "email", "created_at"):
                    continue
                setattr(row, key, value)
            session.add(row)

    def search_users(
        self, filters: UserSearchFilters, pagination: Pagination
    ) -> UserSearchResult:
        conditions = [col(UserTable.deleted_at).is_(None)]
        if filters.name:
            conditions.append(UserTable.name == filters.name)
        if filters.email:
            conditions.append(UserTable.email == filters.email)
        if filters.role:
            conditions.append(UserTable.role == filters.role)
        if filters.is_onboarded is not None:
            conditions.append(UserTable.is_onboarded == filters.is_onboarded)

        count_statement = select(func.count()).select_from(UserTable).where(*conditions)
        total = self._session.exec(count_statement).one()

        statement = (
            select(UserTable)
            .where(*conditions)
            .order_by(UserTable.created_at)
            .offset(pagination.offset)
            .limit(int(pagination.items_per_page))
        )
        rows = self._session.exec(statement).all()

        items_per_page = int(pagination.items_per_page)
        return UserSearchResult(
            users=[User.model_validate(row, from_attributes=True) for row in rows],
            meta=SearchMeta(
                total=total,
                items_per_page=items_per_page,
                total_pages=math.ceil(total / items_per_page),
                page=pagination.page,
            ),
        )
