"""Application use cases."""

from .auth.signin_or_register import (
    SigninOrRegisterInput,
    SigninOrRegisterOutput,
    SigninOrRegisterUseCase,
)
from .health.health_check import HealthCheckOutput, HealthCheckUseCase, HealthStatus
from .user.edit_account import EditAccountInput, EditAccountOutput, EditAccountUseCase
from .user.get_me import GetMeOutput, GetMeUseCase
from .user.search_users import (
    SearchUsersInput,
    SearchUsersOutput,
    SearchUsersUseCase,
    UserSummary,
)

__all__ = [
    "EditAccountInput",
    "EditAccountOutput",
    "EditAccountUseCase",
    "GetMeOutput",
    "GetMeUseCase",
    "HealthCheckOutput",
    "HealthCheckUseCase",
    "HealthStatus",
    "SearchUsersInput",
    "SearchUsersOutput",
    "SearchUsersUseCase",
    "SigninOrRegisterInput",
    "SigninOrRegisterOutput",
    "SigninOrRegisterUseCase",
    "UserSummary",
]
