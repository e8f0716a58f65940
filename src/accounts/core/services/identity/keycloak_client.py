"""Keycloak OpenID Connect and Admin REST API client."""

import time
from typing import Any

import httpx
from loguru import logger
from pydantic import BaseModel

from src.accounts.core.errors import AuthenticationError, IdentityProviderError
from src.accounts.runtime.config.config_data import IdentityProviderConfig

ADMIN_TOKEN_REFRESH_MARGIN = 30


class TokenResponse(BaseModel):
    """OIDC token response model."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: int = 300
    refresh_token: str | None = None
    id_token: str | None = None
    issued_at: float = 0.0

    @property
    def expires_at(self) -> float:
        return self.issued_at + self.expires_in


class KeycloakClient:
    """Async client for the realm's token endpoint and Admin REST API.

    Admin calls authenticate with the client-credentials grant of the
    confidential API client; the service-account token is cached until
    shortly before it expires.
    """

    def __init__(
        self,
        config: IdentityProviderConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._config = config
        self._http = httpx.AsyncClient(timeout=config.timeout, transport=transport)
        self._admin_token: TokenResponse | None = None

    async def aclose(self) -> None:
        await self._http.aclose()

    # Token endpoint
    async def _request_token(self, data: dict[str, str]) -> httpx.Response:
        payload = {"client_id": self._config.client_id, **data}
        if self._config.client_secret:
            payload["client_secret"] = self._config.client_secret
        try:
            return await self._http.post(
                self._config.token_endpoint,
                data=payload,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except httpx.HTTPError as exc:
            raise IdentityProviderError(
                f"Identity provider unreachable: {exc}"
            ) from exc

    async def sign_in(self, email: str, password: str) -> TokenResponse:
        """Exchange user credentials for tokens (resource owner password grant)."""
        response = await self._request_token(
            {
                "grant_type": "password",
                "username": email,
                "password": password,
                "scope": "openid",
            }
        )

        if response.status_code == 401 or (
            response.status_code == 400
            and _error_code(response) in ("invalid_grant", "invalid_request")
        ):
            raise AuthenticationError()
        _raise_for_status(response, "Sign in")

        tokens = TokenResponse(**response.json(), issued_at=time.time())
        if not tokens.access_token or not tokens.refresh_token:
            raise IdentityProviderError(f"Cannot authenticate user: {email}")
        return tokens

    async def _get_admin_token(self) -> str:
        cached = self._admin_token
        if cached and time.time() < cached.expires_at - ADMIN_TOKEN_REFRESH_MARGIN:
            return cached.access_token

        response = await self._request_token({"grant_type": "client_credentials"})
        _raise_for_status(response, "Admin authentication")

        self._admin_token = TokenResponse(**response.json(), issued_at=time.time())
        logger.debug("Obtained identity provider admin token")
        return self._admin_token.access_token

    # Admin API
    async def _admin_request(
        self, method: str, path: str, **kwargs: Any
    ) -> httpx.Response:
        token = await self._get_admin_token()
        headers = {"Authorization": f"Bearer {token}"}
        try:
            return await self._http.request(
                method, f"{self._config.admin_url}{path}", headers=headers, **kwargs
            )
        except httpx.HTTPError as exc:
            raise IdentityProviderError(
                f"Identity provider unreachable: {exc}"
            ) from exc

    async def sign_up(self, email: str, password: str, internal_id: str) -> str:
        """Create the user in the realm and return its Keycloak id."""
        user_data = {
            "username": email,
            "email": email,
            "enabled": True,
            "emailVerified": True,
            "attributes": {self._config.internal_id_attribute: [internal_id]},
            "credentials": [
                {"type": "password", "value": password, "temporary": False}
            ],
        }
        response = await self._admin_request("POST", "/users", json=user_data)

        if response.status_code == 409:
            raise IdentityProviderError("User already exists", status_code=409)
        _raise_for_status(response, "Sign up")

        location = response.headers.get("Location", "")
        external_id = location.rstrip("/").rsplit("/", 1)[-1] if location else ""
        if not external_id:
            raise IdentityProviderError(f"Cannot signup user: {email}")
        return external_id

    async def delete_user(self, external_id: str) -> None:
        response = await self._admin_request("DELETE", f"/users/{external_id}")
        if response.status_code == 404:
            logger.warning(
                "Identity provider user already absent", external_id=external_id
            )
            return
        _raise_for_status(response, "Delete user")

    async def add_to_group(self, username: str, group_name: str) -> None:
        user_id = await self._find_user_id(username)
        group_id = await self._find_group_id(group_name)
        response = await self._admin_request(
            "PUT", f"/users/{user_id}/groups/{group_id}"
        )
        _raise_for_status(response, "Add user to group")

    async def remove_from_group(self, username: str, group_name: str) -> None:
        user_id = await self._find_user_id(username)
        group_id = await self._find_group_id(group_name)
        response = await self._admin_request(
            "DELETE", f"/users/{user_id}/groups/{group_id}"
        )
        _raise_for_status(response, "Remove user from group")

    async def _find_user_id(self, username: str) -> str:
        response = await self._admin_request(
            "GET", "/users", params={"username": username, "exact": "true"}
        )
        _raise_for_status(response, "Find user")
        users = response.json()
        if not users:
            raise IdentityProviderError(
                f"User {username} not found in identity provider", status_code=404
            )
        return users[0]["id"]

    async def _find_group_id(self, group_name: str) -> str:
        response = await self._admin_request(
            "GET", "/groups", params={"search": group_name, "exact": "true"}
        )
        _raise_for_status(response, "Find group")
        for group in response.json():
            if group.get("name") == group_name:
                return group["id"]
        raise IdentityProviderError(
            f"Group {group_name} not found in identity provider", status_code=404
        )


def _error_code(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    return body.get("error") if isinstance(body, dict) else None


def _raise_for_status(response: httpx.Response, action: str) -> None:
    if response.is_error:
        raise IdentityProviderError(
            f"{action} failed with status {response.status_code}",
            status_code=response.status_code,
        )
