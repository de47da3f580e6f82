"""Member profile model: the business record attached to a user."""

from datetime import date, datetime
from typing import TYPE_CHECKING, Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from sqlalchemy import Date, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .enums import Gender, MembershipStatus, MembershipType, enum_values

if TYPE_CHECKING:
    from .user import User


class MemberProfile(Base):
    """Personal, address, membership and emergency-contact data for one user.

    Rows are never physically removed: ``deleted_at`` marks a soft delete.
    """

    __tablename__ = "member_profiles"
    __table_args__ = (
        Index("ix_member_profiles_name", "last_name", "first_name"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # unique=True is the store-level one-profile-per-user guarantee; it also
    # counts soft-deleted rows.
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )

    # Personal
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    date_of_birth: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    gender: Mapped[Optional[Gender]] = mapped_column(
        SAEnum(
            Gender,
            name="gender_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=True,
    )

    # Address
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    postal_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    # Membership
    membership_start_date: Mapped[date] = mapped_column(Date, nullable=False)
    membership_end_date: Mapped[Optional[date]] = mapped_column(
        Date, nullable=True, index=True
    )
    membership_status: Mapped[MembershipStatus] = mapped_column(
        SAEnum(
            MembershipStatus,
            name="membership_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=MembershipStatus.ACTIVE,
        server_default=MembershipStatus.ACTIVE.value,
        nullable=False,
        index=True,
    )
    membership_type: Mapped[MembershipType] = mapped_column(
        SAEnum(
            MembershipType,
            name="membership_type_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=MembershipType.BASIC,
        server_default=MembershipType.BASIC.value,
        nullable=False,
        index=True,
    )

    # Emergency contact
    emergency_contact_name: Mapped[Optional[str]] = mapped_column(
        String(100), nullable=True
    )
    emergency_contact_phone: Mapped[Optional[str]] = mapped_column(
        String(20), nullable=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, index=True
    )

    user: Mapped["User"] = relationship("User", lazy="selectin")

    @property
    def is_trashed(self) -> bool:
        return self.deleted_at is not None

    def __repr__(self):
        return f"<MemberProfile {self.id} user={self.user_id}>"
