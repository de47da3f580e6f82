"""Client-side session store.

One ``ClientState`` per logged-in session holds the user, the bearer token and
the most recently fetched members. It changes only through the methods below.
"""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class ClientState:
    user: Optional[dict[str, Any]] = None
    token: Optional[str] = None
    members: list[dict[str, Any]] = field(default_factory=list)
    meta: Optional[dict[str, Any]] = None
    current_member: Optional[dict[str, Any]] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token and self.user)

    def set_session(self, user: dict[str, Any], token: str) -> None:
        self.user = user
        self.token = token

    def clear_session(self) -> None:
        """Forget the session and everything fetched with it."""
        self.user = None
        self.token = None
        self.members = []
        self.meta = None
        self.current_member = None

    def cache_members(
        self, members: list[dict[str, Any]], meta: Optional[dict[str, Any]] = None
    ) -> None:
        self.members = list(members)
        self.meta = meta

    def cache_member(self, member: dict[str, Any]) -> None:
        """Make ``member`` current and refresh its entry in the cached page."""
        self.current_member = member
        for index, cached in enumerate(self.members):
            if cached.get("id") == member.get("id"):
                self.members[index] = member
                break

    def forget_member(self, member_id: int) -> None:
        self.members = [m for m in self.members if m.get("id") != member_id]
        if self.current_member and self.current_member.get("id") == member_id:
            self.current_member = None
