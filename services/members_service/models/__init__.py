"""Members Service models package.

Re-exports all models and enums so that Alembic's env.py and SQLAlchemy's
mapper registry see every model class on import.

  - models/user.py: User and PersonalAccessToken (credential store)
  - models/member.py: MemberProfile (member profile store)
"""

from services.members_service.models.enums import (  # noqa: F401
    Gender,
    MembershipStatus,
    MembershipType,
    enum_values,
)
from services.members_service.models.member import MemberProfile  # noqa: F401
from services.members_service.models.user import (  # noqa: F401
    PersonalAccessToken,
    User,
)
