"""Pydantic response schemas for the members service.

Request bodies are plain JSON mappings handed to ``validation``; these
schemas describe what goes back over the wire.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from services.members_service.models import Gender, MembershipStatus, MembershipType


# ============================================================================
# USERS
# ============================================================================


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    email_verified_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class UserWithProfileResponse(UserResponse):
    member_profile: Optional["MemberResponse"] = None


# ============================================================================
# MEMBER PROFILES
# ============================================================================


class MemberResponse(BaseModel):
    id: int
    user_id: int

    # Personal
    first_name: str
    last_name: str
    full_name: str
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None

    # Address
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None

    # Membership
    membership_start_date: date
    membership_end_date: Optional[date] = None
    membership_status: MembershipStatus
    membership_type: MembershipType
    is_expired: bool = False

    # Emergency contact
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    user: Optional[UserResponse] = None


class PaginationMeta(BaseModel):
    total: int
    per_page: int
    current_page: int
    last_page: int
    from_: Optional[int] = Field(default=None, alias="from")
    to: Optional[int] = None

    model_config = ConfigDict(populate_by_name=True)


# ============================================================================
# ENVELOPES
# ============================================================================


class MessageResponse(BaseModel):
    message: str


class RegisterResponse(MessageResponse):
    user: UserResponse


class LoginResponse(MessageResponse):
    user: UserResponse
    token: str


class LogoutAllResponse(MessageResponse):
    revoked: int


class MeResponse(BaseModel):
    user: UserWithProfileResponse


class MemberEnvelope(BaseModel):
    data: MemberResponse


class MemberMessageEnvelope(MessageResponse):
    data: MemberResponse


class MemberListResponse(BaseModel):
    data: list[MemberResponse]
    meta: PaginationMeta


class MemberCollectionResponse(BaseModel):
    data: list[MemberResponse]


UserWithProfileResponse.model_rebuild()
