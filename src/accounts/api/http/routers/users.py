"""User account endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field, model_validator

from src.accounts.api.http.deps import (
    get_current_principal,
    get_edit_account_use_case,
    get_me_use_case,
    get_search_users_use_case,
    require_role,
)
from src.accounts.core.services import Principal
from src.accounts.core.use_cases import (
    EditAccountInput,
    EditAccountOutput,
    EditAccountUseCase,
    GetMeOutput,
    GetMeUseCase,
    SearchUsersInput,
    SearchUsersOutput,
    SearchUsersUseCase,
)
from src.accounts.entities.core.user import (
    ItemsPerPage,
    Pagination,
    UserRole,
    UserSearchFilters,
)

router = APIRouter(prefix="/users", tags=["users"])


class EditAccountRequest(BaseModel):
    user_id: UUID | None = None
    name: str | None = Field(default=None, min_length=1)
    role: UserRole | None = None

    @model_validator(mode="after")
    def require_one_change(self) -> "EditAccountRequest":
        if self.name is None and self.role is None:
            raise ValueError("At least one field (name or role) must be provided")
        return self


@router.get("/me", response_model=GetMeOutput)
async def get_me(
    principal: Principal = Depends(get_current_principal),
    use_case: GetMeUseCase = Depends(get_me_use_case),
) -> GetMeOutput:
    return await use_case.execute(principal.internal_id)


@router.patch("", response_model=EditAccountOutput)
async def edit_account(
    body: EditAccountRequest,
    principal: Principal = Depends(get_current_principal),
    use_case: EditAccountUseCase = Depends(get_edit_account_use_case),
) -> EditAccountOutput:
    """Edit the caller's own account, or any account when the caller is an admin."""
    return await use_case.execute(
        EditAccountInput(
            user_id=str(body.user_id) if body.user_id else None,
            current_user_id=principal.internal_id,
            current_user_roles=principal.roles,
            name=body.name,
            role=body.role,
        )
    )


@router.get(
    "",
    response_model=SearchUsersOutput,
    dependencies=[Depends(require_role(UserRole.ADMIN.value))],
)
async def search_users(
    name: str | None = None,
    email: str | None = None,
    role: UserRole | None = None,
    is_onboarded: bool | None = None,
    items_per_page: ItemsPerPage = Query(default=ItemsPerPage.TEN),
    page: int = Query(default=1, ge=1),
    use_case: SearchUsersUseCase = Depends(get_search_users_use_case),
) -> SearchUsersOutput:
    """Admin-only paginated user search."""
    return await use_case.execute(
        SearchUsersInput(
            filters=UserSearchFilters(
                name=name, email=email, role=role, is_onboarded=is_onboarded
            ),
            pagination=Pagination(items_per_page=items_per_page, page=page),
        )
    )
