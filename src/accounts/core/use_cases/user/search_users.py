from pydantic import BaseModel, Field

from src.accounts.core.contracts import SearchUsers
from src.accounts.entities.core.user import (
    Pagination,
    SearchMeta,
    UserRole,
    UserSearchFilters,
)


class SearchUsersInput(BaseModel):
    filters: UserSearchFilters = Field(default_factory=UserSearchFilters)
    pagination: Pagination = Field(default_factory=Pagination)


class UserSummary(BaseModel):
    id: str
    name: str
    email: str
    role: UserRole
    is_onboarded: bool


class SearchUsersOutput(BaseModel):
    users: list[UserSummary]
    meta: SearchMeta


class SearchUsersUseCase:
    def __init__(self, user_repo: SearchUsers):
        self._user_repo = user_repo

    async def execute(self, data: SearchUsersInput) -> SearchUsersOutput:
        result = self._user_repo.search_users(data.filters, data.pagination)

        return SearchUsersOutput(
            users=[
                UserSummary(
                    id=user.id,
                    name=user.name or "",
                    email=user.email,
                    role=user.role,
                    is_onboarded=user.is_onboarded,
                )
                for user in result.users
            ],
            meta=result.meta,
        )
