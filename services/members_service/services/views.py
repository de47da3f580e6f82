"""Computed views over stored records and their response mapping."""

from datetime import date
from typing import Any, Optional

from services.members_service.models import MemberProfile, MembershipStatus, User
from services.members_service.schemas import (
    MemberResponse,
    UserResponse,
    UserWithProfileResponse,
)

# Columns a member update may touch; also the "current" record for cross-field rules.
EDITABLE_FIELDS = (
    "first_name",
    "last_name",
    "phone",
    "date_of_birth",
    "gender",
    "address",
    "city",
    "state",
    "postal_code",
    "membership_start_date",
    "membership_end_date",
    "membership_status",
    "membership_type",
    "emergency_contact_name",
    "emergency_contact_phone",
)


def full_name(profile: MemberProfile) -> str:
    return f"{profile.first_name} {profile.last_name}"


def is_expired(profile: MemberProfile, today: date) -> bool:
    """End date has passed but the status was not moved to ``expired`` yet."""
    return bool(
        profile.membership_end_date
        and profile.membership_end_date < today
        and profile.membership_status != MembershipStatus.EXPIRED
    )


def profile_values(profile: MemberProfile) -> dict[str, Any]:
    return {name: getattr(profile, name) for name in EDITABLE_FIELDS}


def user_response(user: User) -> UserResponse:
    return UserResponse.model_validate(user)


def member_response(
    profile: MemberProfile, today: date, *, include_user: bool = True
) -> MemberResponse:
    data = profile_values(profile)
    data.update(
        id=profile.id,
        user_id=profile.user_id,
        full_name=full_name(profile),
        is_expired=is_expired(profile, today),
        created_at=profile.created_at,
        updated_at=profile.updated_at,
        deleted_at=profile.deleted_at,
    )
    if include_user and profile.user is not None:
        data["user"] = user_response(profile.user)
    return MemberResponse(**data)


def user_with_profile_response(
    user: User, profile: Optional[MemberProfile], today: date
) -> UserWithProfileResponse:
    response = UserWithProfileResponse.model_validate(user)
    if profile is not None:
        response.member_profile = member_response(profile, today, include_user=False)
    return response
