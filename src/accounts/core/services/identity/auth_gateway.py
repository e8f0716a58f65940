"""Identity-provider gateway used by the account use cases."""

from src.accounts.core.contracts import AuthTokens, RegisteredIdentity
from src.accounts.core.services.identity.keycloak_client import KeycloakClient


class AuthGateway:
    """Adapt :class:`KeycloakClient` to the ``IdentityGateway`` contract.

    Roles are modelled as realm groups named after the role value.
    """

    def __init__(self, client: KeycloakClient):
        self._client = client

    async def authenticate_user(self, email: str, password: str) -> AuthTokens:
        tokens = await self._client.sign_in(email, password)
        return AuthTokens(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token or "",
        )

    async def register_user(
        self, email: str, password: str, internal_id: str
    ) -> RegisteredIdentity:
        external_id = await self._client.sign_up(email, password, internal_id)
        return RegisteredIdentity(external_id=external_id)

    async def remove_user(self, user_id: str) -> None:
        await self._client.delete_user(user_id)

    # Role management
    async def add_user_to_role(self, username: str, role_name: str) -> None:
        await self._client.add_to_group(username, role_name)

    async def remove_user_from_role(self, username: str, role_name: str) -> None:
        await self._client.remove_from_group(username, role_name)
