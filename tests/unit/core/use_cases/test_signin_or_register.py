"""Unit tests for the sign-in-or-register use case."""

from unittest.mock import AsyncMock, Mock

import pytest

from src.accounts.core.contracts import AuthTokens, RegisteredIdentity
from src.accounts.core.errors import AuthenticationError, IdentityProviderError
from src.accounts.core.patterns.saga import Saga
from src.accounts.core.use_cases import SigninOrRegisterInput, SigninOrRegisterUseCase
from src.accounts.entities.core.user import User, UserRole


@pytest.fixture
def user_repo() -> Mock:
    repo = Mock()
    repo.find_user_by_email.return_value = None
    return repo


@pytest.fixture
def auth_gateway() -> AsyncMock:
    gateway = AsyncMock()
    gateway.register_user.return_value = RegisteredIdentity(external_id="E1")
    gateway.authenticate_user.return_value = AuthTokens(
        access_token="access", refresh_token="refresh"
    )
    return gateway


@pytest.fixture
def signup_input() -> SigninOrRegisterInput:
    return SigninOrRegisterInput(
        email="a@x.com", password="Password123!", role=UserRole.USER
    )


class TestRegisterNewUser:
    @pytest.mark.asyncio
    async def test_registers_and_authenticates(self, user_repo, auth_gateway, signup_input):
        use_case = SigninOrRegisterUseCase(user_repo, auth_gateway)

        result = await use_case.execute(signup_input)

        assert result.is_onboarded is False
        assert result.is_new_user is True
        assert result.access_token == "access"
        assert result.refresh_token == "refresh"

        created: User = user_repo.create_user.call_args.args[0]
        assert created.external_id == "E1"
        assert created.role is UserRole.USER
        assert created.is_onboarded is False
        auth_gateway.register_user.assert_awaited_once_with(
            "a@x.com", "Password123!", created.id
        )
        auth_gateway.add_user_to_role.assert_awaited_once_with("a@x.com", "user")
        auth_gateway.authenticate_user.assert_awaited_once_with(
            "a@x.com", "Password123!"
        )
        auth_gateway.remove_user.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_role_defaults_to_user(self, user_repo, auth_gateway):
        use_case = SigninOrRegisterUseCase(user_repo, auth_gateway)

        await use_case.execute(
            SigninOrRegisterInput(email="b@x.com", password="Password123!")
        )

        auth_gateway.add_user_to_role.assert_awaited_once_with("b@x.com", "user")

    @pytest.mark.asyncio
    async def test_persistence_failure_removes_external_identity(
        self, user_repo, auth_gateway, signup_input
    ):
        db_fail = RuntimeError("DB_FAIL")
        user_repo.create_user.side_effect = db_fail
        use_case = SigninOrRegisterUseCase(user_repo, auth_gateway)

        with pytest.raises(RuntimeError) as exc_info:
            await use_case.execute(signup_input)

        assert exc_info.value is db_fail
        auth_gateway.remove_user.assert_awaited_once_with("E1")
        auth_gateway.authenticate_user.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_role_assignment_failure_removes_external_identity(
        self, user_repo, auth_gateway, signup_input
    ):
        auth_gateway.add_user_to_role.side_effect = IdentityProviderError(
            "Group user not found in identity provider"
        )
        use_case = SigninOrRegisterUseCase(user_repo, auth_gateway)

        with pytest.raises(IdentityProviderError):
            await use_case.execute(signup_input)

        auth_gateway.remove_user.assert_awaited_once_with("E1")
        user_repo.create_user.assert_not_called()

    @pytest.mark.asyncio
    async def test_registration_failure_has_nothing_to_compensate(
        self, user_repo, auth_gateway, signup_input
    ):
        auth_gateway.register_user.side_effect = IdentityProviderError(
            "User already exists", status_code=409
        )
        use_case = SigninOrRegisterUseCase(user_repo, auth_gateway)

        with pytest.raises(IdentityProviderError, match="User already exists"):
            await use_case.execute(signup_input)

        auth_gateway.remove_user.assert_not_awaited()
        auth_gateway.add_user_to_role.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_compensation_keeps_original_error(
        self, user_repo, auth_gateway, signup_input
    ):
        user_repo.create_user.side_effect = RuntimeError("DB_FAIL")
        auth_gateway.remove_user.side_effect = IdentityProviderError("provider down")
        use_case = SigninOrRegisterUseCase(user_repo, auth_gateway)

        with pytest.raises(RuntimeError, match="DB_FAIL"):
            await use_case.execute(signup_input)

    @pytest.mark.asyncio
    async def test_authentication_failure_keeps_new_account(
        self, user_repo, auth_gateway, signup_input
    ):
        auth_gateway.authenticate_user.side_effect = AuthenticationError()
        use_case = SigninOrRegisterUseCase(user_repo, auth_gateway)

        with pytest.raises(AuthenticationError):
            await use_case.execute(signup_input)

        user_repo.create_user.assert_called_once()
        auth_gateway.remove_user.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_registration_runs_inside_a_fresh_saga(
        self, user_repo, auth_gateway, signup_input
    ):
        sagas: list[Saga] = []

        def saga_factory() -> Saga:
            saga = Saga()
            sagas.append(saga)
            return saga

        use_case = SigninOrRegisterUseCase(
            user_repo, auth_gateway, saga_factory=saga_factory
        )

        await use_case.execute(signup_input)
        await use_case.execute(signup_input)

        assert len(sagas) == 2
        assert sagas[0] is not sagas[1]


class TestSigninExistingUser:
    @pytest.mark.asyncio
    async def test_only_authenticates(self, user_repo, auth_gateway, user_factory):
        user_repo.find_user_by_email.return_value = user_factory(
            email="a@x.com", is_onboarded=True
        )
        saga_factory = Mock()
        use_case = SigninOrRegisterUseCase(
            user_repo, auth_gateway, saga_factory=saga_factory
        )

        result = await use_case.execute(
            SigninOrRegisterInput(email="a@x.com", password="Password123!")
        )

        assert result.is_onboarded is True
        assert result.is_new_user is False
        assert result.access_token == "access"
        saga_factory.assert_not_called()
        auth_gateway.register_user.assert_not_awaited()
        auth_gateway.add_user_to_role.assert_not_awaited()
        user_repo.create_user.assert_not_called()
        auth_gateway.authenticate_user.assert_awaited_once_with(
            "a@x.com", "Password123!"
        )

    @pytest.mark.asyncio
    async def test_wrong_password_propagates(self, user_repo, auth_gateway, user_factory):
        user_repo.find_user_by_email.return_value = user_factory(email="a@x.com")
        auth_gateway.authenticate_user.side_effect = AuthenticationError()
        use_case = SigninOrRegisterUseCase(user_repo, auth_gateway)

        with pytest.raises(AuthenticationError):
            await use_case.execute(
                SigninOrRegisterInput(email="a@x.com", password="wrong")
            )
