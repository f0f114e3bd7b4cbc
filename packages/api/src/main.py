# This project was developed with assistance from AI tools.
"""FastAPI application entry point."""

import logging
import uuid
from contextlib import asynccontextmanager

import uvicorn
from db.database import crm_db_service, db_service, ledger_db_service
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import settings
from .core.errors import PortalError
from .routes import (
    auth,
    campaigns,
    health,
    notifications,
    payments,
    projects,
    properties,
    referrals,
)
from .schemas.error import ErrorResponse
from .services.daraja import close_daraja_client, init_daraja_client
from .services.email import init_email_service
from .services.notification import close_push_dispatcher, init_push_dispatcher

logger = logging.getLogger(__name__)

_DATABASE_SERVICES = (db_service, crm_db_service, ledger_db_service)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Application startup/shutdown lifecycle."""
    logging.getLogger().setLevel(settings.LOG_LEVEL.upper())

    for service in _DATABASE_SERVICES:
        if not await service.health_check():
            raise RuntimeError(f"Database '{service.name}' is unreachable at startup")

    init_email_service(settings)
    init_daraja_client(settings)
    init_push_dispatcher(settings)
    logger.info("%s started (CORS origin=%s)", settings.APP_NAME, settings.CORS_ORIGIN)
    yield
    await close_daraja_client()
    await close_push_dispatcher()
    for service in _DATABASE_SERVICES:
        await service.close()


app = FastAPI(
    title="Customer Portal API",
    description="Customer self-service portal for property buyers paying in installments",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.CORS_ORIGIN],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
    max_age=settings.CORS_MAX_AGE,
)

_HTTP_STATUS_TITLES: dict[int, str] = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    409: "Conflict",
    500: "Internal Server Error",
    503: "Service Unavailable",
}


def _request_id(request: Request) -> str:
    return request.headers.get("x-request-id", str(uuid.uuid4()))


def _build_error(status_code: int, detail: str, request_id: str) -> ErrorResponse:
    return ErrorResponse(
        type="about:blank",
        title=_HTTP_STATUS_TITLES.get(status_code, "Error"),
        status=status_code,
        detail=detail,
        request_id=request_id,
    )


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    """Map service-level errors to RFC 7807 Problem Details."""
    request_id = _request_id(request)
    if exc.status_code >= 500:
        logger.error("%s: %s (request_id=%s)", type(exc).__name__, exc.detail, request_id)
    body = _build_error(exc.status_code, exc.detail, request_id)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Convert HTTPException to RFC 7807 Problem Details."""
    body = _build_error(exc.status_code, str(exc.detail), _request_id(request))
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies and missing fields are client errors (400)."""
    body = _build_error(400, str(exc.errors()), _request_id(request))
    return JSONResponse(status_code=400, content=body.model_dump())


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch-all for unhandled exceptions -- log and return 500."""
    request_id = _request_id(request)
    logger.exception("Unhandled exception (request_id=%s)", request_id)
    body = _build_error(500, "An unexpected error occurred.", request_id)
    return JSONResponse(status_code=500, content=body.model_dump())


app.include_router(health.router, tags=["health"])
app.include_router(auth.router, tags=["auth"])
app.include_router(properties.router, tags=["properties"])
app.include_router(projects.router, tags=["projects"])
app.include_router(payments.router, tags=["payments"])
app.include_router(notifications.router, tags=["notifications"])
app.include_router(referrals.router, tags=["referrals"])
app.include_router(campaigns.router, tags=["campaigns"])


def run() -> None:
    """Console-script entry point."""
    uvicorn.run("src.main:app", host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())
