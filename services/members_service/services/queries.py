"""Query builders for member profiles.

Each builder takes a ``Select`` and returns a new one, so list endpoints
compose exactly the filters they need and nothing is applied implicitly.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from sqlalchemy import Select, String, cast, func, or_, select

from libs.common.config import get_settings
from libs.db.base import MAX_ROW_ID
from services.members_service.models import MemberProfile, MembershipStatus, User

# Keeps OFFSET inside a 64-bit integer at the largest page size.
MAX_PAGE = MAX_ROW_ID


def member_profiles(*, include_trashed: bool = False) -> Select:
    """Base query over member profiles with the soft-delete filter applied."""
    query = select(MemberProfile)
    if not include_trashed:
        query = query.where(MemberProfile.deleted_at.is_(None))
    return query


def active(query: Select) -> Select:
    return query.where(MemberProfile.membership_status == MembershipStatus.ACTIVE)


def search(query: Select, term: Optional[str]) -> Select:
    """Case-insensitive substring match on names, owner email and membership type.

    Terms shorter than the configured minimum are ignored.
    """
    term = (term or "").strip()
    if len(term) < get_settings().SEARCH_MIN_LENGTH:
        return query

    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    pattern = f"%{escaped}%"
    full_name = MemberProfile.first_name + " " + MemberProfile.last_name
    return query.join(User, User.id == MemberProfile.user_id).where(
        or_(
            MemberProfile.first_name.ilike(pattern, escape="\\"),
            MemberProfile.last_name.ilike(pattern, escape="\\"),
            full_name.ilike(pattern, escape="\\"),
            User.email.ilike(pattern, escape="\\"),
            cast(MemberProfile.membership_type, String).ilike(pattern, escape="\\"),
        )
    )


def ordered_by_name(query: Select) -> Select:
    return query.order_by(
        MemberProfile.last_name.asc(),
        MemberProfile.first_name.asc(),
        MemberProfile.id.asc(),
    )


def expiring_within(query: Select, *, today: date, days: int) -> Select:
    """Active memberships whose end date falls in ``[today, today + days]``."""
    return active(query).where(
        MemberProfile.membership_end_date.is_not(None),
        MemberProfile.membership_end_date.between(today, today + timedelta(days=days)),
    )


def count_of(query: Select) -> Select:
    return select(func.count()).select_from(query.order_by(None).subquery())


@dataclass(frozen=True)
class PageRequest:
    page: int
    per_page: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page

    @classmethod
    def clamped(cls, page: Optional[int] = None, per_page: Optional[int] = None) -> "PageRequest":
        """Build a page request, clamping the size into the configured range.

        Pages past ``MAX_PAGE`` are read as ``MAX_PAGE``: both lie beyond the
        last row, so the result is the same empty page.
        """
        settings = get_settings()
        size = settings.MEMBERS_PER_PAGE_DEFAULT if per_page is None else per_page
        size = min(max(size, settings.MEMBERS_PER_PAGE_MIN), settings.MEMBERS_PER_PAGE_MAX)
        return cls(page=min(max(page or 1, 1), MAX_PAGE), per_page=size)


def paginate(query: Select, page: PageRequest) -> Select:
    return query.offset(page.offset).limit(page.per_page)
