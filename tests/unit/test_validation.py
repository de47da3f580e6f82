"""Unit tests for payload validation.

Validators are pure: they take the decoded JSON mapping and a "today" and
either return a typed record or raise ValidationFailed with per-field messages.
"""

from datetime import date

import pytest
from libs.common.errors import ValidationFailed
from services.members_service.models import Gender, MembershipStatus, MembershipType
from services.members_service.validation import (
    ACTIVE_STATUS_MESSAGE,
    validate_login,
    validate_member_create,
    validate_member_update,
    validate_registration,
)
from tests.factories import TODAY, days_from_today, member_payload


def _errors(exc_info) -> dict:
    return exc_info.value.errors


# ---------------------------------------------------------------------------
# Registration / login
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_registration_normalizes_name_and_email():
    data = validate_registration(
        {
            "name": "  Jane Doe ",
            "email": " Jane.Doe@FitCentre.com ",
            "password": "Secret#123",
            "password_confirmation": "Secret#123",
        }
    )

    assert data.name == "Jane Doe"
    assert data.email == "jane.doe@fitcentre.com"
    assert data.password == "Secret#123"


@pytest.mark.unit
def test_registration_reports_every_missing_field():
    with pytest.raises(ValidationFailed) as exc_info:
        validate_registration({})

    errors = _errors(exc_info)
    assert errors["name"] == ["The name field is required."]
    assert errors["email"] == ["The email field is required."]
    assert errors["password"] == ["The password field is required."]
    assert "password_confirmation" in errors


@pytest.mark.unit
def test_registration_rejects_short_password_and_mismatch():
    with pytest.raises(ValidationFailed) as exc_info:
        validate_registration(
            {
                "name": "Jane",
                "email": "jane@fitcentre.com",
                "password": "short",
                "password_confirmation": "different",
            }
        )

    errors = _errors(exc_info)
    assert errors["password"] == ["Must be at least 8 characters."]
    assert errors["password_confirmation"] == [
        "The password confirmation does not match."
    ]


@pytest.mark.unit
def test_registration_rejects_invalid_email():
    with pytest.raises(ValidationFailed) as exc_info:
        validate_registration(
            {
                "name": "Jane",
                "email": "not-an-email",
                "password": "Secret#123",
                "password_confirmation": "Secret#123",
            }
        )

    assert _errors(exc_info)["email"] == [
        "The email field must be a valid email address."
    ]


@pytest.mark.unit
def test_login_does_not_apply_password_policy():
    data = validate_login({"email": "JANE@fitcentre.com", "password": "x"})

    assert data.email == "jane@fitcentre.com"
    assert data.password == "x"


@pytest.mark.unit
def test_login_requires_both_fields():
    with pytest.raises(ValidationFailed) as exc_info:
        validate_login({"email": ""})

    assert set(_errors(exc_info)) == {"email", "password"}


# ---------------------------------------------------------------------------
# Member create
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_member_create_parses_full_payload():
    data = validate_member_create(member_payload(), today=TODAY)

    assert data.first_name == "Jane"
    assert data.date_of_birth == date(1990, 5, 20)
    assert data.gender is Gender.FEMALE
    assert data.membership_status is MembershipStatus.ACTIVE
    assert data.membership_type is MembershipType.PREMIUM
    assert data.membership_end_date == days_from_today(365)


@pytest.mark.unit
def test_member_create_only_sets_supplied_fields():
    data = validate_member_create({"first_name": "Ann", "last_name": "Lee"}, today=TODAY)

    assert data.model_dump(exclude_unset=True) == {"first_name": "Ann", "last_name": "Lee"}


@pytest.mark.unit
def test_member_create_requires_names():
    with pytest.raises(ValidationFailed) as exc_info:
        validate_member_create({"phone": "0123456789"}, today=TODAY)

    errors = _errors(exc_info)
    assert errors["first_name"] == ["The first name field is required."]
    assert errors["last_name"] == ["The last name field is required."]


@pytest.mark.unit
def test_blank_optional_strings_become_null():
    data = validate_member_create(
        {"first_name": "Ann", "last_name": "Lee", "city": "   "}, today=TODAY
    )

    assert data.model_dump(exclude_unset=True)["city"] is None


@pytest.mark.unit
def test_null_defaulted_fields_are_left_to_their_defaults_on_create():
    data = validate_member_create(
        member_payload(membership_status=None, membership_type=None), today=TODAY
    )

    assert "membership_status" not in data.model_dump(exclude_unset=True)
    assert "membership_type" not in data.model_dump(exclude_unset=True)


@pytest.mark.unit
@pytest.mark.parametrize("phone", ["0123456789", "01234567890"])
def test_phone_accepts_ten_or_eleven_digits_starting_with_zero(phone):
    data = validate_member_create(member_payload(phone=phone), today=TODAY)
    assert data.phone == phone


@pytest.mark.unit
@pytest.mark.parametrize(
    "phone",
    [
        "123456789",
        "1234567890",
        "012345678901",
        "01234-6789",
        # Arabic-Indic digits
        "0\u0661\u0662\u0663\u0664\u0665\u0666\u0667\u0668\u0669",
    ],
)
def test_phone_rejects_other_formats(phone):
    with pytest.raises(ValidationFailed) as exc_info:
        validate_member_create(
            member_payload(phone=phone, emergency_contact_phone=phone), today=TODAY
        )

    errors = _errors(exc_info)
    assert errors["phone"][0].startswith("Phone must be 10-11 digits")
    assert errors["emergency_contact_phone"][0].startswith(
        "Emergency contact phone must be 10-11 digits"
    )


@pytest.mark.unit
def test_member_must_be_at_least_eighteen():
    seventeen = date(TODAY.year - 18, TODAY.month, TODAY.day + 1)

    with pytest.raises(ValidationFailed) as exc_info:
        validate_member_create(
            member_payload(date_of_birth=seventeen.isoformat()), today=TODAY
        )

    assert _errors(exc_info)["date_of_birth"] == ["Member must be at least 18 years old."]


@pytest.mark.unit
def test_eighteenth_birthday_today_is_accepted():
    birthday = date(TODAY.year - 18, TODAY.month, TODAY.day)

    data = validate_member_create(
        member_payload(date_of_birth=birthday.isoformat()), today=TODAY
    )

    assert data.date_of_birth == birthday


@pytest.mark.unit
def test_date_of_birth_must_be_in_the_past():
    with pytest.raises(ValidationFailed) as exc_info:
        validate_member_create(
            member_payload(date_of_birth=days_from_today(1).isoformat()), today=TODAY
        )

    assert "Date of birth must be in the past." in _errors(exc_info)["date_of_birth"]


@pytest.mark.unit
def test_unparseable_date_is_reported():
    with pytest.raises(ValidationFailed) as exc_info:
        validate_member_create(member_payload(date_of_birth="15/03/1990"), today=TODAY)

    assert _errors(exc_info)["date_of_birth"] == [
        "The date of birth field must be a valid date."
    ]


@pytest.mark.unit
def test_unknown_enum_value_is_reported():
    with pytest.raises(ValidationFailed) as exc_info:
        validate_member_create(member_payload(membership_type="gold"), today=TODAY)

    assert _errors(exc_info)["membership_type"] == [
        "The selected membership type is invalid."
    ]


@pytest.mark.unit
def test_non_string_name_is_reported():
    with pytest.raises(ValidationFailed) as exc_info:
        validate_member_create(member_payload(first_name=123), today=TODAY)

    assert _errors(exc_info)["first_name"] == ["The first name field must be a string."]


@pytest.mark.unit
def test_name_length_is_limited():
    with pytest.raises(ValidationFailed) as exc_info:
        validate_member_create(member_payload(first_name="x" * 101), today=TODAY)

    assert _errors(exc_info)["first_name"] == [
        "Must not be greater than 100 characters."
    ]


@pytest.mark.unit
@pytest.mark.parametrize("end_offset", [0, -1])
def test_end_date_must_be_after_start_date(end_offset):
    with pytest.raises(ValidationFailed) as exc_info:
        validate_member_create(
            member_payload(
                membership_start_date=days_from_today(10).isoformat(),
                membership_end_date=days_from_today(10 + end_offset).isoformat(),
            ),
            today=TODAY,
        )

    assert _errors(exc_info)["membership_end_date"] == [
        "Membership end date must be after start date."
    ]


@pytest.mark.unit
def test_missing_start_date_counts_as_today():
    payload = member_payload(membership_end_date=TODAY.isoformat())
    del payload["membership_start_date"]

    with pytest.raises(ValidationFailed) as exc_info:
        validate_member_create(payload, today=TODAY)
    assert "membership_end_date" in _errors(exc_info)

    payload["membership_end_date"] = days_from_today(1).isoformat()
    assert validate_member_create(payload, today=TODAY).membership_end_date == days_from_today(1)


@pytest.mark.unit
def test_active_status_rejects_past_end_date():
    with pytest.raises(ValidationFailed) as exc_info:
        validate_member_create(
            member_payload(
                membership_start_date=days_from_today(-60).isoformat(),
                membership_end_date=days_from_today(-1).isoformat(),
                membership_status="active",
            ),
            today=TODAY,
        )

    assert _errors(exc_info) == {"membership_status": [ACTIVE_STATUS_MESSAGE]}


@pytest.mark.unit
def test_omitted_status_is_treated_as_active():
    payload = member_payload(
        membership_start_date=days_from_today(-60).isoformat(),
        membership_end_date=days_from_today(-1).isoformat(),
    )
    del payload["membership_status"]

    with pytest.raises(ValidationFailed) as exc_info:
        validate_member_create(payload, today=TODAY)

    assert _errors(exc_info) == {"membership_status": [ACTIVE_STATUS_MESSAGE]}


@pytest.mark.unit
def test_expired_status_allows_past_end_date():
    data = validate_member_create(
        member_payload(
            membership_start_date=days_from_today(-60).isoformat(),
            membership_end_date=days_from_today(-1).isoformat(),
            membership_status="expired",
        ),
        today=TODAY,
    )

    assert data.membership_status is MembershipStatus.EXPIRED


# ---------------------------------------------------------------------------
# Member update
# ---------------------------------------------------------------------------


def _stored(**overrides) -> dict:
    current = {
        "first_name": "Jane",
        "last_name": "Doe",
        "membership_start_date": days_from_today(-90),
        "membership_end_date": days_from_today(90),
        "membership_status": MembershipStatus.ACTIVE,
        "membership_type": MembershipType.BASIC,
    }
    current.update(overrides)
    return current


@pytest.mark.unit
def test_update_only_touches_supplied_fields():
    data = validate_member_update({"city": "Penang"}, today=TODAY, current=_stored())

    assert data.model_dump(exclude_unset=True) == {"city": "Penang"}


@pytest.mark.unit
def test_update_can_clear_optional_field():
    data = validate_member_update({"phone": None}, today=TODAY, current=_stored())

    assert data.model_dump(exclude_unset=True) == {"phone": None}


@pytest.mark.unit
def test_update_cannot_clear_required_field():
    with pytest.raises(ValidationFailed) as exc_info:
        validate_member_update(
            {"first_name": "", "membership_type": None}, today=TODAY, current=_stored()
        )

    errors = _errors(exc_info)
    assert errors["first_name"] == ["The first name field is required."]
    assert errors["membership_type"] == ["The membership type field is required."]


@pytest.mark.unit
def test_update_checks_status_against_stored_end_date():
    current = _stored(
        membership_end_date=days_from_today(-5),
        membership_status=MembershipStatus.EXPIRED,
    )

    with pytest.raises(ValidationFailed) as exc_info:
        validate_member_update({"membership_status": "active"}, today=TODAY, current=current)

    assert _errors(exc_info) == {"membership_status": [ACTIVE_STATUS_MESSAGE]}


@pytest.mark.unit
def test_update_checks_end_date_against_stored_start_date():
    with pytest.raises(ValidationFailed) as exc_info:
        validate_member_update(
            {"membership_end_date": days_from_today(-90).isoformat()},
            today=TODAY,
            current=_stored(),
        )

    assert "membership_end_date" in _errors(exc_info)


@pytest.mark.unit
def test_invalid_field_suppresses_dependent_record_rule():
    with pytest.raises(ValidationFailed) as exc_info:
        validate_member_update(
            {"membership_end_date": "soon"}, today=TODAY, current=_stored()
        )

    assert _errors(exc_info) == {
        "membership_end_date": ["The membership end date field must be a valid date."]
    }
