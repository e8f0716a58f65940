"""User entity module.

This module contains all User-related classes organized by responsibility:
- User: Domain entity with business logic
- UserTable: Database persistence model
- UserRepository: Data access layer
- UserUpdateBuilder: Partial-update assembly for account edits
"""

from .builder import PendingUpdate, UserUpdateBuilder
from .entity import User, UserRole
from .repository import (
    ItemsPerPage,
    Pagination,
    SearchMeta,
    UserRepository,
    UserSearchFilters,
    UserSearchResult,
)
from .table import UserTable

__all__ = [
    "ItemsPerPage",
    "Pagination",
    "PendingUpdate",
    "SearchMeta",
    "User",
    "UserRepository",
    "UserRole",
    "UserSearchFilters",
    "UserSearchResult",
    "UserTable",
    "UserUpdateBuilder",
]
