import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from sqlalchemy.exc import SQLAlchemyError, OperationalError
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

from app import models  # noqa: F401 (registers tables on Base.metadata)
from app.config import settings
from app.database import Base, engine
from app.exceptions import AppError
from app.limits import limiter, RateLimitExceeded, SlowAPIMiddleware
from app.routers import (
    admin,
    ai,
    announcements,
    auth,
    bot_commands,
    payments,
    settings as settings_router,
    storage,
    telegram,
)

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

CORS_ALLOW_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]

app = FastAPI(title="Community Announcements API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=CORS_ALLOW_HEADERS,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)


def error_envelope(
    status_code: int, message: str, error_type: str, headers: dict | None = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message, "error_type": error_type},
        headers=headers,
    )


HTTP_ERROR_TYPES = {
    status.HTTP_400_BAD_REQUEST: "invalid_input",
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
    status.HTTP_409_CONFLICT: "conflict",
}


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{exc.error_type} on {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.error_type} on {request.url.path}: {exc.message}")
    return error_envelope(exc.status_code, exc.message, exc.error_type)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return error_envelope(
        exc.status_code,
        exc.detail if isinstance(exc.detail, str) else str(exc.detail),
        HTTP_ERROR_TYPES.get(exc.status_code, "http_error"),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    # Malformed or mistyped bodies are invalid input like any other
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return error_envelope(
        status.HTTP_400_BAD_REQUEST,
        f"{location}: {message}" if location else message,
        "invalid_input",
    )


@app.exception_handler(OperationalError)
async def database_operational_error_handler(request: Request, exc: OperationalError):
    """Handle database connection/operation errors"""
    logger.error(f"Database operational error: {exc}", exc_info=True)
    error_msg = str(exc).lower()

    if "could not connect" in error_msg or "connection" in error_msg:
        return error_envelope(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "Database connection error. Please try again.",
            "database_connection_error",
        )
    elif "timeout" in error_msg:
        return error_envelope(
            status.HTTP_504_GATEWAY_TIMEOUT,
            "Database query timeout. Please try again.",
            "database_timeout",
        )
    return error_envelope(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "Database error occurred", "database_error"
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    """Handle general SQLAlchemy errors"""
    logger.error(f"Database error: {exc}", exc_info=True)
    return error_envelope(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "Database error occurred", "database_error"
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
    return error_envelope(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", "internal_error",
        # Runs outside CORSMiddleware, so the header is added here
        headers={"Access-Control-Allow-Origin": "*"},
    )


# Production schemas come from Alembic; only SQLite gets tables created on startup
if settings.DATABASE_URL.startswith("sqlite"):
    Base.metadata.create_all(bind=engine)


@app.get("/healthy", status_code=status.HTTP_200_OK)
def health_check():
    return {"status": "Healthy"}


app.include_router(auth.router)
app.include_router(admin.router)
app.include_router(announcements.router)
app.include_router(ai.router)
app.include_router(telegram.router)
app.include_router(bot_commands.router)
app.include_router(settings_router.router)
app.include_router(storage.router)
app.include_router(payments.router)
