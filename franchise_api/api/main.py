from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from fastapi import APIRouter, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from franchise_api.api.routes import (
    accounts,
    auth,
    inventory,
    learning_centers,
    learning_groups,
    orders,
    products,
    programs,
    reports,
    students,
    subprograms,
    teachers,
    trainings,
    users,
)
from franchise_api.core.errors import DomainError
from franchise_api.core.logging import configure_logging, request_context
from franchise_api.core.settings import get_app_settings
from franchise_api.db.run_migrations import upgrade_head
from franchise_api.db.seed import seed_all
from franchise_api.db.session import dispose_engine
from franchise_api.schemas.common import ErrorInfo, ErrorResponse, MessageResponse

configure_logging()
logger = logging.getLogger(__name__)

settings = get_app_settings()

ROUTE_MODULES = (
    auth,
    users,
    accounts,
    learning_centers,
    programs,
    subprograms,
    students,
    teachers,
    trainings,
    learning_groups,
    products,
    inventory,
    orders,
    reports,
)

openapi_tags = [
    {"name": "Health", "description": "Liveness check."},
    {"name": "Auth", "description": "Authentication, tokens and role-based navigation."},
    {"name": "Users", "description": "User administration endpoints."},
    {"name": "Accounts", "description": "HQ, Master Franchisee and Teacher Trainer accounts."},
    {"name": "Learning Centers", "description": "Learning Center accounts under Master Franchisees."},
    {"name": "Programs", "description": "Program catalog with PRIVATE/SHARED/PUBLIC visibility."},
    {"name": "SubPrograms", "description": "Subprograms and their pricing models."},
    {"name": "Students", "description": "Student records owned by Learning Centers."},
    {"name": "Teachers", "description": "Teacher records, contracts and HQ approval."},
    {"name": "Learning Groups", "description": "Classes tying a program, a teacher and a roster together."},
    {"name": "Trainings", "description": "Training types (HQ) and trainings run by Teacher Trainers."},
    {"name": "Products", "description": "Product catalog and stock receipts."},
    {"name": "Inventory", "description": "Stock summary, movements and adjustments."},
    {"name": "Orders", "description": "Product orders placed by LCs and MFs."},
    {"name": "Reports", "description": "Exportable reports (CSV/Excel/PDF), including royalties."},
]

app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    openapi_tags=openapi_tags,
)

if settings.CORS_ALLOW_CREDENTIALS and not settings.cors_credentials_allowed:
    logger.warning("CORS_ALLOW_CREDENTIALS=True with '*' origins is not permitted; disabling credentials.")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.cors_credentials_allowed,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    """
    Tag the request with a correlation id (taken from X-Correlation-ID or
    X-Request-ID, else generated) and echo it back on the response. The
    principal is bound later by the auth dependency.
    """
    corr = request.headers.get("X-Correlation-ID") or request.headers.get("X-Request-ID") or str(uuid4())
    request.state.correlation_id = corr
    with request_context(corr):
        logger.info("%s %s", request.method, request.url.path)
        response = await call_next(request)
    response.headers["X-Correlation-ID"] = corr
    return response


def _error_response(
    request: Request,
    status_code: int,
    error_type: str,
    message: str,
    details: Any | None = None,
    headers: dict | None = None,
) -> JSONResponse:
    """Render the ErrorResponse envelope shared by every error handler."""
    err = ErrorResponse(
        status=status_code,
        error=ErrorInfo(type=error_type, message=message, details=jsonable_encoder(details)),
        correlation_id=getattr(request.state, "correlation_id", None),
        principal=getattr(request.state, "principal", None),
        path=request.url.path,
        method=request.method,
        timestamp=datetime.now(tz=timezone.utc),
    )
    return JSONResponse(status_code=status_code, content=err.model_dump(mode="json"), headers=headers)


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError):
    """Business-rule failures raised by services."""
    logger.info("Rejected %s %s (%s): %s", request.method, request.url.path, exc.status_code, exc.message)
    return _error_response(request, exc.status_code, exc.error_type, exc.message, exc.details)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """HTTPException from routes and dependencies, and routing errors such as unknown paths."""
    if isinstance(exc.detail, str):
        message, details = exc.detail, None
    else:
        message, details = "HTTP Error", exc.detail
    return _error_response(request, exc.status_code, "http_error", message, details, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return _error_response(request, 422, "validation_error", "Request validation failed", exc.errors())


@app.exception_handler(IntegrityError)
async def integrity_exception_handler(request: Request, exc: IntegrityError):
    """Unique or foreign key violations that got past the service checks."""
    logger.warning("Integrity error: %s", exc.orig)
    return _error_response(request, 409, "conflict", "The request conflicts with existing data")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error processing request")
    return _error_response(request, 500, "internal_error", "An unexpected error occurred")


@app.on_event("startup")
async def on_startup() -> None:
    """
    Optionally migrate and seed the database.

    Alembic's env.py drives its own event loop, so the upgrade runs in a worker
    thread. Failures are logged and the API still starts.
    """
    if settings.RUN_MIGRATIONS_ON_STARTUP:
        try:
            await asyncio.to_thread(upgrade_head)
            logger.info("Migrations completed")
        except Exception:
            logger.exception("Migration step failed")

    if settings.AUTO_SEED:
        try:
            await seed_all()
        except Exception:
            logger.exception("Seeding step failed")


@app.on_event("shutdown")
async def on_shutdown() -> None:
    await dispose_engine()


api_v1 = APIRouter(prefix="/api/v1")


# PUBLIC_INTERFACE
@api_v1.get(
    "/health",
    response_model=MessageResponse,
    summary="Health Check",
    tags=["Health"],
)
def health_check() -> MessageResponse:
    """Liveness check; does not touch the database."""
    return MessageResponse(message="Healthy")


for module in ROUTE_MODULES:
    api_v1.include_router(module.router)

app.include_router(api_v1)
