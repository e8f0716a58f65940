"""Capability contracts the use cases depend on.

Use cases type their collaborators against these protocols rather than the
concrete repository, gateway or saga classes, so tests can pass mocks and
each use case only asks for the capabilities it actually calls.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Protocol, TypeVar

from src.accounts.entities.core.user import (
    Pagination,
    User,
    UserSearchFilters,
    UserSearchResult,
)

T = TypeVar("T")


# --- User repository capabilities ---
class FindUserByEmail(Protocol):
    def find_user_by_email(self, email: str) -> User | None: ...


class FindUser(Protocol):
    def find_user(self, user_id: str) -> User | None: ...


class CreateUser(Protocol):
    def create_user(self, user: User) -> None: ...


class UpdateUser(Protocol):
    def update_user(self, record: dict[str, Any]) -> None: ...


class SearchUsers(Protocol):
    def search_users(
        self, filters: UserSearchFilters, pagination: Pagination
    ) -> UserSearchResult: ...


class SigninUserRepository(FindUserByEmail, CreateUser, Protocol): ...


class EditUserRepository(FindUser, UpdateUser, Protocol): ...


# --- Identity provider gateway ---
@dataclass(frozen=True)
class AuthTokens:
    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class RegisteredIdentity:
    external_id: str


class IdentityGateway(Protocol):
    async def authenticate_user(self, email: str, password: str) -> AuthTokens: ...

    async def register_user(
        self, email: str, password: str, internal_id: str
    ) -> RegisteredIdentity: ...

    async def add_user_to_role(self, username: str, role_name: str) -> None: ...

    async def remove_user_from_role(self, username: str, role_name: str) -> None: ...

    async def remove_user(self, user_id: str) -> None: ...


# --- Saga ---
class CompensatingTransaction(Protocol):
    def add_compensation(self, fn: Callable[[], Awaitable[None]]) -> None: ...

    async def run(self, fn: Callable[[], Awaitable[T]]) -> T: ...
