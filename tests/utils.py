import base64
import time
from typing import Any

from authlib.jose import jwt


def oct_jwk(key: bytes, kid: str) -> dict[str, str]:
    return {
        "kty": "oct",
        "k": base64.urlsafe_b64encode(key).rstrip(b"=").decode("ascii"),
        "alg": "HS256",
        "kid": kid,
    }


def issue_token(
    key: bytes,
    kid: str,
    issuer: str,
    expires_in: int = 300,
    **claims: Any,
) -> str:
    now = int(time.time())
    payload = {"iss": issuer, "iat": now, "exp": now + expires_in, **claims}
    token = jwt.encode({"alg": "HS256", "kid": kid}, payload, key)
    return token.decode("utf-8") if isinstance(token, bytes) else token
