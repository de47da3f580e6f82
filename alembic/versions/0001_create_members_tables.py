"""create users, tokens and member profiles

Revision ID: 0001_create_members_tables
Revises:
Create Date: 2026-01-09 06:38:49.000000
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001_create_members_tables"
down_revision = None
branch_labels = None
depends_on = None

gender_enum = sa.Enum(
    "male", "female", "other", "prefer_not_to_say", name="gender_enum"
)
membership_status_enum = sa.Enum(
    "active", "inactive", "suspended", "expired", name="membership_status_enum"
)
membership_type_enum = sa.Enum("basic", "premium", "vip", name="membership_type_enum")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password", sa.String(length=255), nullable=False),
        sa.Column("email_verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "personal_access_tokens",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("token_id", sa.String(length=64), nullable=False),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_personal_access_tokens_user_id", "personal_access_tokens", ["user_id"]
    )
    op.create_index(
        "ix_personal_access_tokens_token_id",
        "personal_access_tokens",
        ["token_id"],
        unique=True,
    )

    op.create_table(
        "member_profiles",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("gender", gender_enum, nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("city", sa.String(length=100), nullable=True),
        sa.Column("state", sa.String(length=100), nullable=True),
        sa.Column("postal_code", sa.String(length=20), nullable=True),
        sa.Column("membership_start_date", sa.Date(), nullable=False),
        sa.Column("membership_end_date", sa.Date(), nullable=True),
        sa.Column(
            "membership_status",
            membership_status_enum,
            server_default="active",
            nullable=False,
        ),
        sa.Column(
            "membership_type",
            membership_type_enum,
            server_default="basic",
            nullable=False,
        ),
        sa.Column("emergency_contact_name", sa.String(length=100), nullable=True),
        sa.Column("emergency_contact_phone", sa.String(length=20), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        # One profile per user, soft-deleted rows included.
        sa.UniqueConstraint("user_id"),
    )
    op.create_index(
        "ix_member_profiles_name", "member_profiles", ["last_name", "first_name"]
    )
    op.create_index(
        "ix_member_profiles_membership_end_date",
        "member_profiles",
        ["membership_end_date"],
    )
    op.create_index(
        "ix_member_profiles_membership_status", "member_profiles", ["membership_status"]
    )
    op.create_index(
        "ix_member_profiles_membership_type", "member_profiles", ["membership_type"]
    )
    op.create_index("ix_member_profiles_deleted_at", "member_profiles", ["deleted_at"])


def downgrade() -> None:
    op.drop_index("ix_member_profiles_deleted_at", table_name="member_profiles")
    op.drop_index("ix_member_profiles_membership_type", table_name="member_profiles")
    op.drop_index("ix_member_profiles_membership_status", table_name="member_profiles")
    op.drop_index("ix_member_profiles_membership_end_date", table_name="member_profiles")
    op.drop_index("ix_member_profiles_name", table_name="member_profiles")
    op.drop_table("member_profiles")

    op.drop_index("ix_personal_access_tokens_token_id", table_name="personal_access_tokens")
    op.drop_index("ix_personal_access_tokens_user_id", table_name="personal_access_tokens")
    op.drop_table("personal_access_tokens")

    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")

    bind = op.get_bind()
    membership_type_enum.drop(bind, checkfirst=True)
    membership_status_enum.drop(bind, checkfirst=True)
    gender_enum.drop(bind, checkfirst=True)
