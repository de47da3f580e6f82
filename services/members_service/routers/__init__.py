"""Members service routers package."""

from services.members_service.routers.auth import router as auth_router
from services.members_service.routers.members import router as members_router

__all__ = [
    "auth_router",
    "members_router",
]
