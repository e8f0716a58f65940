"""Partial-update builder for the User entity."""

from dataclasses import dataclass
from typing import Any

from src.accounts.entities.core.user.entity import User, UserRole


@dataclass(frozen=True)
class PendingUpdate:
    """Candidate user state produced by :class:`UserUpdateBuilder`."""

    user: User
    should_mark_onboarded: bool


class UserUpdateBuilder:
    """Accumulate optional field changes on top of a base user snapshot.

    Supplying a name is treated as completing onboarding; the role is staged
    only when the caller is allowed to change it. The base snapshot is never
    mutated, ``build`` always returns a fresh ``User``.
    """

    def __init__(self, base_user: User):
        self._base_user = base_user
        self._update_data: dict[str, Any] = {}
        self._should_mark_onboarded = False

    def with_name(self, name: str | None = None) -> "UserUpdateBuilder":
        if name:
            self._update_data["name"] = name
            self._should_mark_onboarded = True
        return self

    def with_role(
        self, role: UserRole | None = None, can_edit_role: bool = False
    ) -> "UserUpdateBuilder":
        if role is not None and can_edit_role:
            self._update_data["role"] = role
        return self

    def build(self) -> PendingUpdate:
        user = User.create(**{**self._base_user.to_record(), **self._update_data})
        return PendingUpdate(
            user=user, should_mark_onboarded=self._should_mark_onboarded
        )
