"""Password hashing with passlib (bcrypt)."""

from passlib.context import CryptContext

from libs.common.config import get_settings

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=get_settings().PASSWORD_HASH_ROUNDS,
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    """Constant-time check of a plain password against a stored hash."""
    return pwd_context.verify(password, hashed)


# Verified against when the email is unknown so both login failure paths do
# the same amount of work.
DUMMY_PASSWORD_HASH = hash_password("not-a-real-password")
