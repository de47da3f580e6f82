"""Registration, login and token lifecycle for the credential store."""

from typing import Any, Mapping, NamedTuple, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from libs.auth.models import AuthUser
from libs.auth.passwords import DUMMY_PASSWORD_HASH, hash_password, verify_password
from libs.auth.tokens import issue_access_token
from libs.common.config import get_settings
from libs.common.errors import Conflict, InvalidCredentials, Unauthenticated
from libs.common.logging import get_logger
from libs.db.session import atomic
from services.members_service.models import MemberProfile, PersonalAccessToken, User
from services.members_service.services import queries
from services.members_service.validation import validate_login, validate_registration

logger = get_logger(__name__)

EMAIL_TAKEN_MESSAGE = "The email has already been taken."


class LoginResult(NamedTuple):
    user: User
    token: str


async def _email_taken(db: AsyncSession, email: str) -> bool:
    result = await db.execute(select(User.id).where(func.lower(User.email) == email))
    return result.first() is not None


async def register(db: AsyncSession, *, data: Mapping[str, Any]) -> User:
    """Create a user with a hashed password. No token is issued."""
    cleaned = validate_registration(data)
    if await _email_taken(db, cleaned.email):
        raise Conflict(EMAIL_TAKEN_MESSAGE, errors={"email": [EMAIL_TAKEN_MESSAGE]})

    user = User(
        name=cleaned.name,
        email=cleaned.email,
        password=hash_password(cleaned.password),
    )
    try:
        async with atomic(db):
            db.add(user)
            await db.flush()
    except IntegrityError as exc:
        # Lost a race with a concurrent registration for the same address.
        raise Conflict(EMAIL_TAKEN_MESSAGE, errors={"email": [EMAIL_TAKEN_MESSAGE]}) from exc

    logger.info(
        "User registered",
        extra={"extra_fields": {"user_id": user.id, "email": user.email}},
    )
    return user


async def login(db: AsyncSession, *, data: Mapping[str, Any]) -> LoginResult:
    """Check credentials and issue a new bearer token.

    Unknown email and wrong password fail identically.
    """
    cleaned = validate_login(data)

    result = await db.execute(select(User).where(func.lower(User.email) == cleaned.email))
    user = result.scalar_one_or_none()
    if user is None:
        verify_password(cleaned.password, DUMMY_PASSWORD_HASH)
        logger.info("Login failed: unknown email")
        raise InvalidCredentials()
    if not verify_password(cleaned.password, user.password):
        logger.info(
            "Login failed: wrong password",
            extra={"extra_fields": {"user_id": user.id}},
        )
        raise InvalidCredentials()

    issued = issue_access_token(user.id)
    async with atomic(db):
        db.add(
            PersonalAccessToken(
                user_id=user.id,
                name=get_settings().ACCESS_TOKEN_NAME,
                token_id=issued.token_id,
                expires_at=issued.expires_at,
            )
        )

    logger.info("User logged in", extra={"extra_fields": {"user_id": user.id}})
    return LoginResult(user=user, token=issued.token)


async def logout(db: AsyncSession, *, actor: Optional[AuthUser]) -> None:
    """Revoke the token the current request was authenticated with."""
    if actor is None or actor.token_id is None:
        raise Unauthenticated()

    async with atomic(db):
        await db.execute(
            delete(PersonalAccessToken).where(
                PersonalAccessToken.user_id == actor.user_id,
                PersonalAccessToken.token_id == actor.token_id,
            )
        )

    logger.info("User logged out", extra={"extra_fields": {"user_id": actor.user_id}})


async def logout_all_devices(db: AsyncSession, *, actor: Optional[AuthUser]) -> int:
    """Revoke every token of the actor, the current one included."""
    if actor is None:
        raise Unauthenticated()

    async with atomic(db):
        result = await db.execute(
            delete(PersonalAccessToken).where(
                PersonalAccessToken.user_id == actor.user_id
            )
        )
    revoked = result.rowcount or 0

    logger.info(
        "User logged out from all devices",
        extra={"extra_fields": {"user_id": actor.user_id, "revoked": revoked}},
    )
    return revoked


async def get_authenticated_user(
    db: AsyncSession, *, actor: Optional[AuthUser]
) -> tuple[User, Optional[MemberProfile]]:
    """Return the actor's user record and live member profile, if any."""
    if actor is None:
        raise Unauthenticated()

    user = await db.get(User, actor.user_id)
    if user is None:
        raise Unauthenticated()

    result = await db.execute(
        queries.member_profiles().where(MemberProfile.user_id == user.id)
    )
    return user, result.scalar_one_or_none()
