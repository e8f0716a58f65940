"""Edit a user's profile (name) and, for admins, role."""

from pydantic import BaseModel

from src.accounts.core.contracts import EditUserRepository
from src.accounts.core.errors import ResourceNotFoundError
from src.accounts.core.services.user_permission import UserPermission
from src.accounts.entities.core.user import UserRole, UserUpdateBuilder


class EditAccountInput(BaseModel):
    current_user_id: str | None = None
    current_user_roles: list[str] | None = None
    user_id: str | None = None
    name: str | None = None
    role: UserRole | None = None


class EditAccountOutput(BaseModel):
    id: str
    name: str
    email: str
    role: UserRole
    is_onboarded: bool


class EditAccountUseCase:
    def __init__(self, user_repo: EditUserRepository):
        self._user_repo = user_repo

    async def execute(self, data: EditAccountInput) -> EditAccountOutput:
        is_admin = UserRole.ADMIN.value in (data.current_user_roles or [])
        user_id_to_edit = data.user_id or data.current_user_id
        is_editing_self = user_id_to_edit == data.current_user_id

        UserPermission.validate_edit_permissions(
            is_admin=is_admin,
            is_editing_self=is_editing_self,
            has_role_change=data.role is not None,
        )

        if not user_id_to_edit:
            raise ResourceNotFoundError("User ID is required")

        current = self._user_repo.find_user(user_id_to_edit)
        if current is None:
            raise ResourceNotFoundError(f"User with ID {user_id_to_edit} not found")

        # The role gate repeats the permission check above; both stay.
        pending = (
            UserUpdateBuilder(current)
            .with_name(data.name)
            .with_role(data.role, is_admin)
            .build()
        )
        user = pending.user

        if pending.should_mark_onboarded:
            user.mark_as_onboarded()

        self._user_repo.update_user(user.to_record())

        return EditAccountOutput(
            id=user.id,
            name=user.name or current.name or "",
            email=user.email,
            role=user.role,
            is_onboarded=user.is_onboarded,
        )
