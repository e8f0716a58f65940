from pydantic import BaseModel

from src.accounts.core.contracts import FindUser
from src.accounts.core.errors import ResourceNotFoundError
from src.accounts.entities.core.user import UserRole


class GetMeOutput(BaseModel):
    id: str
    name: str | None = None
    email: str
    role: UserRole
    is_onboarded: bool


class GetMeUseCase:
    def __init__(self, user_repo: FindUser):
        self._user_repo = user_repo

    async def execute(self, user_id: str) -> GetMeOutput:
        user = self._user_repo.find_user(user_id)
        if user is None:
            raise ResourceNotFoundError(f"User with ID {user_id} not found")

        return GetMeOutput(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            is_onboarded=user.is_onboarded,
        )
