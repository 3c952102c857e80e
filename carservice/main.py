from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from carservice.config import Settings, settings as default_settings
from carservice.db import Database
from carservice.errors import ServiceError, Unauthorized
from carservice.logging_config import setup_logging
from carservice.routers import auth, bookings
from carservice.utils.auth import make_password_context

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    "lifespan for initing and closing the database"
    app.state.database.init()
    yield
    app.state.database.dispose()


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    # loc looks like ("body", "serviceType") or ("path", "booking_id")
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    return f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid request")


async def service_error_handler(request: Request, exc: ServiceError):
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": _validation_message(exc)},
    )


async def internal_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def create_app(settings: Settings = None, database: Database = None) -> FastAPI:
    settings = settings or default_settings
    setup_logging(settings.log_level)

    app = FastAPI(
        lifespan=lifespan,
        title=settings.project_name,
        description="Vehicle service bookings with token authentication.",
        version=settings.api_version,
    )
    app.state.settings = settings
    app.state.database = database or Database.from_settings(settings)
    app.state.pwd_context = make_password_context(settings.bcrypt_rounds)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, internal_error_handler)
    app.add_exception_handler(Exception, internal_error_handler)

    app.include_router(auth.router)
    app.include_router(bookings.router)

    @app.get("/api/health", tags=["health"])
    def health():
        return {"status": "ok"}

    return app


app = create_app()
