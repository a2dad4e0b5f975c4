import logging
import time
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from event_manager.core.config import Settings
from event_manager.core.database import Database
from event_manager.core.exceptions import AppError
from event_manager.services.notification_service import build_email_provider
from event_manager.services.user_info_cache import UserInfoCache
from event_manager.api.routes import auth, events, users

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Render every failure as JSON {"detail": ...}"""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message},
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        # Missing or malformed fields are a plain 400 for clients
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        # get_db has already rolled the session back
        logger.error(f"Database error on {request.method} {request.url.path}", exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Database error occurred"},
        )


def register_middleware(app: FastAPI, settings: Settings) -> None:
    trusted_domains = set(settings.get_trusted_domains())
    restricted_methods = settings.get_restricted_methods()

    @app.middleware("http")
    async def restrict_methods_for_untrusted(request: Request, call_next):
        """Only trusted origins may use restricted methods such as PUT and DELETE"""
        if request.method in restricted_methods:
            origin = request.headers.get("origin")
            if not origin or origin not in trusted_domains:
                logger.warning(f"Rejected {request.method} {request.url.path} from origin {origin!r}")
                return JSONResponse(
                    status_code=status.HTTP_403_FORBIDDEN,
                    content={"detail": "Method not allowed for this origin"},
                )
        return await call_next(request)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.1f}ms")
        return response

    # CORS middleware - added last so it wraps every response, including 403s above
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    Settings, the database, the user info cache and the email provider are
    created here and kept on app.state; request handlers reach them through
    the dependencies in api/dependencies.py.
    """
    settings = settings or Settings()
    configure_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Create tables if they don't exist; use migrations for schema changes in production
        app.state.database.create_all()
        logger.info("Event manager API started")
        yield
        app.state.database.dispose()

    app = FastAPI(
        title="Event Manager API",
        description="Events, participants and user accounts with soft delete",
        version="1.0.0",
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.database = Database.from_settings(settings)
    app.state.user_cache = UserInfoCache(
        max_entries=settings.USER_CACHE_MAX_ENTRIES,
        ttl_seconds=settings.USER_CACHE_TTL_SECONDS,
    )
    app.state.email_provider = build_email_provider(settings)

    register_exception_handlers(app)
    register_middleware(app, settings)

    app.include_router(auth.router)
    app.include_router(events.router)
    app.include_router(users.router)

    @app.get("/")
    async def root():
        """Root endpoint - API information"""
        return {"message": "Event Manager API", "version": "1.0.0"}

    @app.get("/health")
    async def health():
        """Health check endpoint - used by monitoring/deployment tools"""
        return {"status": "healthy"}

    return app


app = create_app()
