"""Payload validation for registration, login and member profiles.

Pure functions, no I/O. Each validator takes the decoded JSON mapping and
returns a typed record, or raises ``ValidationFailed`` carrying every failing
field with its messages.

Rules are plain functions composed per field:

* a *parser* turns the raw value into its type (or raises ``ValueError``);
* *checks* take the typed value and return an error message or ``None``;
* *record rules* run after all fields, over the effective record, and report
  ``(field, message)`` for cross-field problems.

Checks that depend on "today" or on settings close over those values when the
pipeline is built, so the same input always yields the same result for a
given day.
"""

import re
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel

from libs.common.config import get_settings
from libs.common.datetime_utils import age_on
from libs.common.errors import ValidationFailed
from services.members_service.models.enums import (
    Gender,
    MembershipStatus,
    MembershipType,
)

PHONE_PATTERN = re.compile(r"^0[0-9]{9,10}$")

ACTIVE_STATUS_MESSAGE = (
    'Cannot set status as "active" when membership end date is in the past.'
)

Parser = Callable[[Any], Any]
Check = Callable[[Any], Optional[str]]
RecordRule = Callable[[Mapping[str, Any]], Optional[tuple[str, str]]]


# ---------------------------------------------------------------------------
# Typed records
# ---------------------------------------------------------------------------


class LoginData(BaseModel):
    email: str
    password: str


class RegistrationData(BaseModel):
    name: str
    email: str
    password: str


class MemberProfileData(BaseModel):
    """Normalized member fields.

    Only the fields present in the input are *set*; use
    ``model_dump(exclude_unset=True)`` to get the changes to apply.
    """

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    membership_start_date: Optional[date] = None
    membership_end_date: Optional[date] = None
    membership_status: Optional[MembershipStatus] = None
    membership_type: Optional[MembershipType] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FieldRule:
    name: str
    parse: Parser
    checks: tuple[Check, ...] = ()
    required: bool = False
    # False for columns that always hold a value (they fall back to a default
    # on create and cannot be cleared on update).
    nullable: bool = True
    trim: bool = True

    @property
    def label(self) -> str:
        return self.name.replace("_", " ")


def _blank_to_none(value: Any, trim: bool = True) -> Any:
    if isinstance(value, str):
        if trim:
            value = value.strip()
        return value or None
    return value


def run_pipeline(
    data: Mapping[str, Any],
    fields: Sequence[FieldRule],
    record_rules: Iterable[tuple[tuple[str, ...], RecordRule]] = (),
    *,
    partial: bool = False,
    current: Optional[Mapping[str, Any]] = None,
) -> dict[str, Any]:
    """Validate ``data`` and return the cleaned values of the fields it carries.

    With ``partial`` (updates) absent fields are skipped; record rules then see
    ``current`` merged with the cleaned values, i.e. the record as it would be
    stored.
    """
    errors: dict[str, list[str]] = defaultdict(list)
    cleaned: dict[str, Any] = {}

    for rule in fields:
        present = rule.name in data
        if partial and not present:
            continue

        raw = _blank_to_none(data.get(rule.name), rule.trim)
        if raw is None:
            if rule.required or (partial and not rule.nullable):
                errors[rule.name].append(f"The {rule.label} field is required.")
            elif present and rule.nullable:
                cleaned[rule.name] = None
            continue

        try:
            value = rule.parse(raw)
        except ValueError as exc:
            errors[rule.name].append(str(exc).replace("{label}", rule.label))
            continue

        messages = [msg for msg in (check(value) for check in rule.checks) if msg]
        if messages:
            errors[rule.name].extend(messages)
        else:
            cleaned[rule.name] = value

    effective = {**(current or {}), **cleaned}
    for depends_on, record_rule in record_rules:
        if any(name in errors for name in depends_on):
            continue
        failure = record_rule(effective)
        if failure:
            field, message = failure
            errors[field].append(message)

    if errors:
        raise ValidationFailed(dict(errors))
    return cleaned


# ---------------------------------------------------------------------------
# Parsers
# ---------------------------------------------------------------------------


def as_string(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError("The {label} field must be a string.")
    return value


def as_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        for parse in (date.fromisoformat, lambda v: datetime.fromisoformat(v).date()):
            try:
                return parse(value)
            except ValueError:
                continue
    raise ValueError("The {label} field must be a valid date.")


def as_enum(enum_cls: type[Enum]) -> Parser:
    def parse(value: Any) -> Enum:
        try:
            return enum_cls(value)
        except ValueError:
            raise ValueError("The selected {label} is invalid.") from None

    return parse


def as_email(value: Any) -> str:
    value = as_string(value)
    try:
        result = validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        raise ValueError("The {label} field must be a valid email address.") from None
    return result.normalized.lower()


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------


def max_length(limit: int) -> Check:
    def check(value: str) -> Optional[str]:
        if len(value) > limit:
            return f"Must not be greater than {limit} characters."
        return None

    return check


def min_length(limit: int) -> Check:
    def check(value: str) -> Optional[str]:
        if len(value) < limit:
            return f"Must be at least {limit} characters."
        return None

    return check


def matches(pattern: re.Pattern, message: str) -> Check:
    def check(value: str) -> Optional[str]:
        return None if pattern.fullmatch(value) else message

    return check


def before(cutoff: date, message: str) -> Check:
    def check(value: date) -> Optional[str]:
        return None if value < cutoff else message

    return check


def min_age(years: int, today: date) -> Check:
    def check(value: date) -> Optional[str]:
        if age_on(value, today) < years:
            return f"Member must be at least {years} years old."
        return None

    return check


def password_policy() -> tuple[Check, ...]:
    """Checks for the password policy configured for this deployment."""
    settings = get_settings()
    checks: list[Check] = [min_length(settings.PASSWORD_MIN_LENGTH)]
    if settings.PASSWORD_REQUIRE_MIXED_CASE:
        checks.append(
            lambda v: None
            if re.search(r"[a-z]", v) and re.search(r"[A-Z]", v)
            else "Must contain at least one uppercase and one lowercase letter."
        )
    if settings.PASSWORD_REQUIRE_NUMBERS:
        checks.append(
            lambda v: None if re.search(r"[0-9]", v) else "Must contain at least one number."
        )
    if settings.PASSWORD_REQUIRE_SYMBOLS:
        checks.append(
            lambda v: None
            if re.search(r"[^\w\s]", v)
            else "Must contain at least one symbol."
        )
    return tuple(checks)


# ---------------------------------------------------------------------------
# Record rules
# ---------------------------------------------------------------------------


def end_after_start(today: date) -> RecordRule:
    """End date must fall strictly after the start date (which defaults to today)."""

    def rule(record: Mapping[str, Any]) -> Optional[tuple[str, str]]:
        end = record.get("membership_end_date")
        if end is None:
            return None
        start = record.get("membership_start_date") or today
        if end <= start:
            return (
                "membership_end_date",
                "Membership end date must be after start date.",
            )
        return None

    return rule


def active_requires_current_end_date(today: date) -> RecordRule:
    """An active membership cannot carry an end date earlier than today."""

    def rule(record: Mapping[str, Any]) -> Optional[tuple[str, str]]:
        status = record.get("membership_status") or MembershipStatus.ACTIVE
        end = record.get("membership_end_date")
        if status == MembershipStatus.ACTIVE and end is not None and end < today:
            return "membership_status", ACTIVE_STATUS_MESSAGE
        return None

    return rule


# ---------------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------------


def validate_login(data: Mapping[str, Any]) -> LoginData:
    """Shape check only; the password format is not inspected at login."""
    cleaned = run_pipeline(
        data,
        [
            FieldRule("email", as_email, required=True),
            FieldRule("password", as_string, required=True, trim=False),
        ],
    )
    return LoginData(**cleaned)


def validate_registration(data: Mapping[str, Any]) -> RegistrationData:
    password = data.get("password")

    def confirmed(value: str) -> Optional[str]:
        return None if value == password else "The password confirmation does not match."

    cleaned = run_pipeline(
        data,
        [
            FieldRule("name", as_string, (max_length(255),), required=True),
            FieldRule("email", as_email, (max_length(255),), required=True),
            FieldRule("password", as_string, password_policy(), required=True, trim=False),
            FieldRule(
                "password_confirmation", as_string, (confirmed,), required=True, trim=False
            ),
        ],
    )
    cleaned.pop("password_confirmation")
    return RegistrationData(**cleaned)


def member_field_rules(today: date, *, names_required: bool) -> list[FieldRule]:
    """Field rules shared by member create and update."""
    phone = matches(
        PHONE_PATTERN,
        "Phone must be 10-11 digits starting with 0 (e.g. 0123456789).",
    )
    emergency_phone = matches(
        PHONE_PATTERN,
        "Emergency contact phone must be 10-11 digits starting with 0 (e.g. 0123456789).",
    )
    return [
        FieldRule("first_name", as_string, (max_length(100),), required=names_required, nullable=False),
        FieldRule("last_name", as_string, (max_length(100),), required=names_required, nullable=False),
        FieldRule("phone", as_string, (phone,)),
        FieldRule(
            "date_of_birth",
            as_date,
            (
                before(today, "Date of birth must be in the past."),
                min_age(get_settings().MEMBER_MIN_AGE_YEARS, today),
            ),
        ),
        FieldRule("gender", as_enum(Gender)),
        FieldRule("address", as_string, (max_length(500),)),
        FieldRule("city", as_string, (max_length(100),)),
        FieldRule("state", as_string, (max_length(100),)),
        FieldRule("postal_code", as_string, (max_length(20),)),
        FieldRule("membership_start_date", as_date, nullable=False),
        FieldRule("membership_end_date", as_date),
        FieldRule("membership_status", as_enum(MembershipStatus), nullable=False),
        FieldRule("membership_type", as_enum(MembershipType), nullable=False),
        FieldRule("emergency_contact_name", as_string, (max_length(100),)),
        FieldRule("emergency_contact_phone", as_string, (emergency_phone,)),
    ]


def member_record_rules(today: date) -> list[tuple[tuple[str, ...], RecordRule]]:
    return [
        (("membership_start_date", "membership_end_date"), end_after_start(today)),
        (
            ("membership_status", "membership_end_date"),
            active_requires_current_end_date(today),
        ),
    ]


def validate_member_create(data: Mapping[str, Any], *, today: date) -> MemberProfileData:
    cleaned = run_pipeline(
        data,
        member_field_rules(today, names_required=True),
        member_record_rules(today),
    )
    return MemberProfileData(**cleaned)


def validate_member_update(
    data: Mapping[str, Any],
    *,
    today: date,
    current: Optional[Mapping[str, Any]] = None,
) -> MemberProfileData:
    """Validate a partial update.

    Fields absent from ``data`` keep their stored value; cross-field rules are
    evaluated against ``current`` (the stored values) merged with the update.
    """
    cleaned = run_pipeline(
        data,
        member_field_rules(today, names_required=False),
        member_record_rules(today),
        partial=True,
        current=current,
    )
    return MemberProfileData(**cleaned)
