from src.accounts.core.errors import InsufficientPermissionsError


class UserPermission:
    """Edit-permission rules for the two-role model (admin, user)."""

    @staticmethod
    def validate_edit_permissions(
        *, is_admin: bool, is_editing_self: bool, has_role_change: bool
    ) -> None:
        """Raise ``InsufficientPermissionsError`` when the edit is not allowed.

        Rules are checked in order and the first violation wins:
        editing another user requires admin, and so does changing a role
        (including one's own).
        """
        can_edit_others = UserPermission.can_user_edit_other_users(is_admin)
        can_edit_role = UserPermission.can_user_edit_roles(is_admin)

        if not is_editing_self and not can_edit_others:
            raise InsufficientPermissionsError(
                "You do not have permission to edit other users"
            )

        if has_role_change and not can_edit_role:
            raise InsufficientPermissionsError("Only admins can modify roles")

    @staticmethod
    def can_user_edit_other_users(is_admin: bool) -> bool:
        return is_admin

    @staticmethod
    def can_user_edit_roles(is_admin: bool) -> bool:
        return is_admin
