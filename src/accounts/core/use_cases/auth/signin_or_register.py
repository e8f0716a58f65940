"""Sign in an existing account or register a new one."""

from collections.abc import Callable

from loguru import logger
from pydantic import BaseModel

from src.accounts.core.contracts import (
    CompensatingTransaction,
    IdentityGateway,
    SigninUserRepository,
)
from src.accounts.core.patterns.saga import Saga
from src.accounts.entities.core.user import User, UserRole


class SigninOrRegisterInput(BaseModel):
    email: str
    password: str
    name: str | None = None
    role: UserRole | None = None


class SigninOrRegisterOutput(BaseModel):
    access_token: str
    refresh_token: str
    is_onboarded: bool
    is_new_user: bool = False


class SigninOrRegisterUseCase:
    """Authenticate a known email, or register it first.

    Registration spans three systems: the identity provider account, its
    role group membership and the local user row. It runs inside a saga
    whose only compensation deletes the provider account, registered as
    soon as that account exists. Authentication happens after the saga
    resolves, so a failed sign-in never rolls back a created account.
    """

    def __init__(
        self,
        user_repo: SigninUserRepository,
        auth_gateway: IdentityGateway,
        saga_factory: Callable[[], CompensatingTransaction] = Saga,
    ):
        self._user_repo = user_repo
        self._auth_gateway = auth_gateway
        self._saga_factory = saga_factory

    async def execute(self, data: SigninOrRegisterInput) -> SigninOrRegisterOutput:
        existing_user = self._user_repo.find_user_by_email(data.email)

        if existing_user:
            tokens = await self._auth_gateway.authenticate_user(
                data.email, data.password
            )
            return SigninOrRegisterOutput(
                access_token=tokens.access_token,
                refresh_token=tokens.refresh_token,
                is_onboarded=existing_user.is_onboarded,
            )

        user = await self._register(data)

        tokens = await self._auth_gateway.authenticate_user(data.email, data.password)
        return SigninOrRegisterOutput(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            is_onboarded=user.is_onboarded,
            is_new_user=True,
        )

    async def _register(self, data: SigninOrRegisterInput) -> User:
        saga = self._saga_factory()

        async def register() -> User:
            user = User.create(email=data.email, name=data.name, role=data.role)

            registered = await self._auth_gateway.register_user(
                data.email, data.password, user.id
            )
            external_id = registered.external_id

            async def remove_external_identity() -> None:
                await self._auth_gateway.remove_user(external_id)

            saga.add_compensation(remove_external_identity)

            user.set_external_id(external_id)

            await self._auth_gateway.add_user_to_role(data.email, user.role.value)

            self._user_repo.create_user(user)
            return user

        user = await saga.run(register)
        logger.info("Registered new user", user_id=user.id, role=user.role.value)
        return user
