"""FastAPI application for the Fitness Centre members API."""

from dotenv import load_dotenv
from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

load_dotenv()

from libs.common.config import get_settings
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import limiter, rate_limit_exceeded_handler
from services.members_service.routers import auth_router, members_router


def create_app() -> FastAPI:
    """Create and configure the members API app."""
    settings = get_settings()
    app = FastAPI(
        title="Fitness Centre Members API",
        version="0.1.0",
        description="Authentication and member profile management.",
        debug=settings.DEBUG,
    )

    # Add rate limiter state to app
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability (structured logging + request tracing)
    add_observability_middleware(app)

    # Add global exception handlers for consistent error responses
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "members"}

    api = APIRouter(prefix="/api")
    api.include_router(auth_router)
    api.include_router(members_router)
    app.include_router(api)

    return app


app = create_app()
