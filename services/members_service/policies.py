"""Ownership-based authorization for member profiles.

Pure predicates over ``(actor, action, profile)``. The actor must already be
resolved: unauthenticated requests are rejected by the auth dependency before
reaching this layer, so a missing actor here is a programming error.
"""

import enum
from typing import Optional

from libs.auth.models import AuthUser
from libs.common.errors import Forbidden
from services.members_service.models import MemberProfile


class Action(str, enum.Enum):
    LIST_ANY = "list_any"
    VIEW = "view"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    RESTORE = "restore"
    PERMANENT_DELETE = "permanent_delete"


# Actions that need a target profile and are limited to its owner.
OWNER_ONLY = frozenset({Action.VIEW, Action.UPDATE, Action.DELETE, Action.RESTORE})


def _is_owner(actor: AuthUser, profile: MemberProfile) -> bool:
    return actor.user_id == profile.user_id


def can(actor: AuthUser, action: Action, profile: Optional[MemberProfile] = None) -> bool:
    """Return whether ``actor`` may perform ``action`` on ``profile``."""
    if actor is None:
        raise ValueError("An authenticated actor is required for authorization checks")

    if action in (Action.LIST_ANY, Action.CREATE):
        # One-profile-per-user is enforced by the member service, not here.
        return True
    if action == Action.PERMANENT_DELETE:
        return False
    if action in OWNER_ONLY:
        if profile is None:
            raise ValueError(f"Action {action.value!r} requires a target profile")
        return _is_owner(actor, profile)
    raise ValueError(f"Unknown action: {action!r}")


def authorize(actor: AuthUser, action: Action, profile: Optional[MemberProfile] = None) -> None:
    """Raise ``Forbidden`` unless ``actor`` may perform ``action``."""
    if not can(actor, action, profile):
        raise Forbidden()
