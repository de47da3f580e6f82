from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class AuthUser(BaseModel):
    """
    The actor resolved from a bearer token for the current request.
    """

    user_id: int
    email: EmailStr
    name: str
    token_id: Optional[str] = Field(
        default=None, description="Identifier (jti) of the token used for this request"
    )

    model_config = ConfigDict(frozen=True)


class TokenClaims(BaseModel):
    """Decoded access-token payload."""

    sub: str
    jti: str
    iat: int
    exp: Optional[int] = None

    @property
    def user_id(self) -> int:
        return int(self.sub)
