"""Entities organised by business concept.

Each entity package keeps its domain model (entity.py), persistence model
(table.py) and data access layer (repository.py) side by side.
"""

from .core.user import User, UserRepository, UserTable

__all__ = [
    "User",
    "UserTable",
    "UserRepository",
]
