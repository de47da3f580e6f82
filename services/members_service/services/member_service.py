"""
Member profile operations.

Every operation that writes runs inside ``atomic(db)``: the reads it depends
on, the authorization decision and the writes commit together or not at all.
All date rules read "today" from the injected clock.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.common.datetime_utils import Clock, SystemClock, utc_now
from libs.common.errors import Conflict, NotFound
from libs.common.logging import get_logger
from libs.db.base import is_row_id
from libs.db.session import atomic
from services.members_service.models import (
    MemberProfile,
    MembershipStatus,
    MembershipType,
    User,
)
from services.members_service.policies import Action, authorize
from services.members_service.services import queries
from services.members_service.services.views import profile_values
from services.members_service.validation import (
    validate_member_create,
    validate_member_update,
)

logger = get_logger(__name__)

DUPLICATE_PROFILE_MESSAGE = "User already has a member profile."


@dataclass
class MemberPage:
    items: list[MemberProfile]
    total: int
    page: queries.PageRequest

    @property
    def last_page(self) -> int:
        return max(1, -(-self.total // self.page.per_page))

    @property
    def first_item(self) -> Optional[int]:
        return self.page.offset + 1 if self.items else None

    @property
    def last_item(self) -> Optional[int]:
        return self.page.offset + len(self.items) if self.items else None


async def _find_profile(
    db: AsyncSession,
    member_id: int,
    *,
    include_trashed: bool = False,
    for_update: bool = False,
) -> MemberProfile:
    if not is_row_id(member_id):
        raise NotFound("Member profile not found.")
    query = (
        queries.member_profiles(include_trashed=include_trashed)
        .where(MemberProfile.id == member_id)
        .execution_options(populate_existing=True)
    )
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    profile = result.scalar_one_or_none()
    if profile is None:
        raise NotFound("Member profile not found.")
    return profile


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def list_members(
    db: AsyncSession,
    *,
    actor: AuthUser,
    status: Optional[str] = None,
    search: Optional[str] = None,
    page: Optional[int] = None,
    per_page: Optional[int] = None,
) -> MemberPage:
    """List live profiles ordered by last then first name.

    ``status="active"`` restricts to active memberships; any other value lists
    all. The page size is clamped into the configured range.
    """
    authorize(actor, Action.LIST_ANY)

    query = queries.member_profiles()
    if status == MembershipStatus.ACTIVE.value:
        query = queries.active(query)
    query = queries.search(query, search)

    page_request = queries.PageRequest.clamped(page, per_page)
    total = (await db.execute(queries.count_of(query))).scalar_one()
    result = await db.execute(
        queries.paginate(queries.ordered_by_name(query), page_request)
    )
    return MemberPage(items=list(result.scalars().all()), total=total, page=page_request)


async def get_member(
    db: AsyncSession,
    member_id: int,
    *,
    actor: Optional[AuthUser] = None,
    include_trashed: bool = False,
) -> MemberProfile:
    """Fetch a profile; soft-deleted ones only with ``include_trashed``.

    When an actor is given, the view policy is applied.
    """
    profile = await _find_profile(db, member_id, include_trashed=include_trashed)
    if actor is not None:
        authorize(actor, Action.VIEW, profile)
    return profile


async def list_expiring_memberships(
    db: AsyncSession,
    *,
    actor: AuthUser,
    within_days: Optional[int] = None,
    clock: Optional[Clock] = None,
) -> list[MemberProfile]:
    """Active profiles whose end date falls within the next ``within_days`` days."""
    authorize(actor, Action.LIST_ANY)
    days = (
        get_settings().EXPIRING_WITHIN_DAYS_DEFAULT if within_days is None else within_days
    )
    today = (clock or SystemClock()).today()

    query = queries.expiring_within(queries.member_profiles(), today=today, days=days)
    query = query.order_by(
        MemberProfile.membership_end_date.asc(), MemberProfile.last_name.asc()
    )
    result = await db.execute(query)
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


async def create_profile(
    db: AsyncSession,
    *,
    actor: AuthUser,
    data: Mapping[str, Any],
    clock: Optional[Clock] = None,
) -> MemberProfile:
    """Create the actor's member profile.

    The existence check and the insert share one transaction; the unique
    constraint on ``member_profiles.user_id`` settles concurrent attempts, and
    the losing insert is reported as a conflict.
    """
    authorize(actor, Action.CREATE)
    today = (clock or SystemClock()).today()

    try:
        async with atomic(db):
            # Row lock on the owner serializes creates where the backend supports it.
            await db.execute(
                select(User.id).where(User.id == actor.user_id).with_for_update()
            )
            existing = await db.execute(
                queries.member_profiles(include_trashed=True).where(
                    MemberProfile.user_id == actor.user_id
                )
            )
            current = existing.scalar_one_or_none()
            if current is not None:
                if current.is_trashed:
                    raise Conflict(
                        "User has a deleted member profile. Restore it instead."
                    )
                raise Conflict(DUPLICATE_PROFILE_MESSAGE)

            cleaned = validate_member_create(data, today=today)
            values = cleaned.model_dump(exclude_unset=True)
            values.setdefault("membership_start_date", today)
            values.setdefault("membership_status", MembershipStatus.ACTIVE)
            values.setdefault("membership_type", MembershipType.BASIC)

            profile = MemberProfile(user_id=actor.user_id, **values)
            db.add(profile)
            await db.flush()
            profile_id = profile.id
    except IntegrityError as exc:
        logger.info("Concurrent profile create rejected for user %s", actor.user_id)
        raise Conflict(DUPLICATE_PROFILE_MESSAGE) from exc

    logger.info("Created member profile %s for user %s", profile_id, actor.user_id)
    return await _find_profile(db, profile_id)


async def update_profile(
    db: AsyncSession,
    member_id: int,
    *,
    actor: AuthUser,
    data: Mapping[str, Any],
    clock: Optional[Clock] = None,
) -> MemberProfile:
    """Merge the supplied fields over the stored profile.

    Cross-field rules are checked on the merged record, so e.g. an "active"
    status is rejected against a stored end date that has already passed.
    """
    today = (clock or SystemClock()).today()

    async with atomic(db):
        profile = await _find_profile(db, member_id, for_update=True)
        authorize(actor, Action.UPDATE, profile)

        cleaned = validate_member_update(
            data, today=today, current=profile_values(profile)
        )
        changes = cleaned.model_dump(exclude_unset=True)
        for field, value in changes.items():
            setattr(profile, field, value)
        # Touch even when nothing changed.
        profile.updated_at = utc_now()

    logger.info(
        "Updated member profile %s (fields: %s)",
        member_id,
        ", ".join(sorted(changes)) or "none",
    )
    return await _find_profile(db, member_id)


async def delete_profile(db: AsyncSession, member_id: int, *, actor: AuthUser) -> None:
    """Soft delete: set the deletion marker, keep the row."""
    async with atomic(db):
        profile = await _find_profile(db, member_id, for_update=True)
        authorize(actor, Action.DELETE, profile)
        profile.deleted_at = utc_now()

    logger.info("Soft-deleted member profile %s", member_id)


async def restore_profile(
    db: AsyncSession, member_id: int, *, actor: AuthUser
) -> MemberProfile:
    """Clear the deletion marker of a soft-deleted profile."""
    async with atomic(db):
        profile = await _find_profile(
            db, member_id, include_trashed=True, for_update=True
        )
        authorize(actor, Action.RESTORE, profile)
        if not profile.is_trashed:
            raise Conflict("Member profile is not deleted.")
        profile.deleted_at = None
        profile.updated_at = utc_now()

    logger.info("Restored member profile %s", member_id)
    return await _find_profile(db, member_id)
