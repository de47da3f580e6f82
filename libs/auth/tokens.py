"""Access-token minting and decoding (HS256 JWT via python-jose).

A token only proves *who* it was issued to; whether it is still valid is
decided by the token registry row keyed on its ``jti``, so revocation is a
row delete and takes effect on the very next request.
"""

import secrets
from datetime import datetime, timedelta
from typing import NamedTuple, Optional

from jose import JWTError, jwt
from pydantic import ValidationError

from libs.auth.models import TokenClaims
from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now


class IssuedToken(NamedTuple):
    token: str
    token_id: str
    expires_at: Optional[datetime]


class TokenDecodeError(Exception):
    """Raised when a bearer token is malformed, tampered with, or expired."""


def new_token_id() -> str:
    return secrets.token_hex(20)


def issue_access_token(user_id: int, now: Optional[datetime] = None) -> IssuedToken:
    settings = get_settings()
    now = now or utc_now()
    token_id = new_token_id()

    claims: dict = {"sub": str(user_id), "jti": token_id, "iat": int(now.timestamp())}
    expires_at = None
    if settings.ACCESS_TOKEN_EXPIRE_MINUTES:
        expires_at = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        claims["exp"] = int(expires_at.timestamp())

    token = jwt.encode(
        claims, settings.SECRET_KEY, algorithm=settings.ACCESS_TOKEN_ALGORITHM
    )
    return IssuedToken(token=token, token_id=token_id, expires_at=expires_at)


def decode_access_token(token: str) -> TokenClaims:
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ACCESS_TOKEN_ALGORITHM],
        )
        return TokenClaims(**payload)
    except (JWTError, ValidationError) as exc:
        raise TokenDecodeError(str(exc)) from exc
