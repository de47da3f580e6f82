"""Request dependencies: bearer-token authentication against the token registry."""

from datetime import timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from libs.auth.models import AuthUser
from libs.auth.tokens import TokenDecodeError, decode_access_token
from libs.common.datetime_utils import utc_now
from libs.common.errors import Unauthenticated
from libs.common.logging import get_logger
from libs.db.base import is_row_id
from libs.db.session import get_async_db
from services.members_service.models import PersonalAccessToken, User

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_async_db),
) -> AuthUser:
    """
    Resolve the bearer token to its user.

    The token must decode, and its registry row must still exist and be
    unexpired. Deleting the row (logout) invalidates the token immediately.
    """
    if credentials is None:
        raise Unauthenticated()

    try:
        claims = decode_access_token(credentials.credentials)
        user_id = claims.user_id
    except (TokenDecodeError, ValueError):
        logger.debug("Rejected undecodable bearer token")
        raise Unauthenticated()
    if not is_row_id(user_id):
        raise Unauthenticated()

    result = await db.execute(
        select(PersonalAccessToken, User)
        .join(User, User.id == PersonalAccessToken.user_id)
        .where(
            PersonalAccessToken.token_id == claims.jti,
            PersonalAccessToken.user_id == user_id,
        )
    )
    row = result.first()
    if row is None:
        raise Unauthenticated()
    token, user = row

    now = utc_now()
    expires_at = token.expires_at
    if expires_at is not None:
        # SQLite hands back naive datetimes.
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        if expires_at <= now:
            raise Unauthenticated()

    token.last_used_at = now
    await db.commit()

    return AuthUser(
        user_id=user.id, email=user.email, name=user.name, token_id=token.token_id
    )
