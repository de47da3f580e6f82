"""Unit tests for member profile authorization policies."""

import pytest
from libs.auth.models import AuthUser
from libs.common.errors import Forbidden
from services.members_service.models import MemberProfile
from services.members_service.policies import OWNER_ONLY, Action, authorize, can

OWNER = AuthUser(user_id=1, email="owner@fitcentre.com", name="Owner")
OTHER = AuthUser(user_id=2, email="other@fitcentre.com", name="Other")


@pytest.fixture
def profile() -> MemberProfile:
    return MemberProfile(id=10, user_id=OWNER.user_id, first_name="Jane", last_name="Doe")


@pytest.mark.unit
@pytest.mark.parametrize("action", [Action.LIST_ANY, Action.CREATE])
def test_any_authenticated_user_may_list_and_create(action):
    assert can(OTHER, action) is True


@pytest.mark.unit
@pytest.mark.parametrize("action", sorted(OWNER_ONLY, key=lambda a: a.value))
def test_owner_only_actions(action, profile):
    assert can(OWNER, action, profile) is True
    assert can(OTHER, action, profile) is False


@pytest.mark.unit
def test_permanent_delete_is_never_allowed(profile):
    assert can(OWNER, Action.PERMANENT_DELETE, profile) is False


@pytest.mark.unit
def test_authorize_raises_forbidden_for_non_owner(profile):
    authorize(OWNER, Action.UPDATE, profile)

    with pytest.raises(Forbidden) as exc_info:
        authorize(OTHER, Action.UPDATE, profile)
    assert exc_info.value.status_code == 403


@pytest.mark.unit
def test_missing_actor_is_a_programming_error(profile):
    with pytest.raises(ValueError):
        can(None, Action.VIEW, profile)


@pytest.mark.unit
def test_owner_only_action_needs_a_profile():
    with pytest.raises(ValueError):
        can(OWNER, Action.DELETE)
