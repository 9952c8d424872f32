"""FastAPI application for the customer, invoice and phone number API."""

from __future__ import annotations

import logging
import random
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..config import Settings
from ..errors import ApiProblem, ProblemTypes
from ..repository import AppDatabase
from ..seed import populate_demo_data
from ..services import CustomerService
from .problems import (
    NO_CACHE_HEADERS,
    STATUS_TITLES,
    TRACE_HEADER,
    collect_validation_errors,
    problem_response,
    render_problem,
    trace_id_for,
)
from .routers import customers_router, invoices_router, phone_numbers_router
from .schemas import HealthOut

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[AppDatabase] = None,
) -> FastAPI:
    settings = settings or Settings()
    database = database or AppDatabase()
    service = CustomerService(database)
    ensure_demo_data(database, settings)

    app = FastAPI(title=settings.title)
    app.state.settings = settings
    app.state.database = database
    app.state.customer_service = service

    @app.middleware("http")
    async def response_headers(request: Request, call_next):
        trace_id = trace_id_for(request)
        response = await call_next(request)
        response.headers.update(NO_CACHE_HEADERS)
        response.headers[TRACE_HEADER] = trace_id
        return response

    @app.exception_handler(ApiProblem)
    async def api_problem_handler(request: Request, exc: ApiProblem):
        return render_problem(request, exc)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = collect_validation_errors(exc.errors())
        logger.warning(
            "%s %s failed validation (trace %s): %s",
            request.method,
            request.url.path,
            trace_id_for(request),
            errors,
        )
        return problem_response(
            request,
            status=400,
            title="Validation Failed",
            detail="One or more validation errors occurred. "
            "Please review the 'errors' property for details.",
            problem_type=ProblemTypes.VALIDATION_FAILED,
            errors=errors,
            extensions={"errorCount": len(errors)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        logger.warning(
            "%s %s answered %d (trace %s)",
            request.method,
            request.url.path,
            exc.status_code,
            trace_id_for(request),
        )
        return problem_response(
            request,
            status=exc.status_code,
            title=STATUS_TITLES.get(exc.status_code, "Request Failed"),
            detail=str(exc.detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(
            "Unhandled error on %s %s (trace %s)",
            request.method,
            request.url.path,
            trace_id_for(request),
        )
        return problem_response(
            request,
            status=500,
            title="Internal Server Error",
            detail="An unexpected error occurred while processing the request.",
            problem_type=ProblemTypes.INTERNAL_ERROR,
        )

    @app.get("/health", response_model=HealthOut, tags=["system"])
    async def health():
        return HealthOut()

    app.include_router(customers_router)
    app.include_router(invoices_router)
    app.include_router(phone_numbers_router)

    logger.info(
        "%s ready with %d customers, %d invoices and %d phone numbers; API token %s",
        settings.title,
        database.customer_count(),
        database.invoice_count(),
        database.phone_number_count(),
        mask_token(settings.api_token),
    )
    return app


def mask_token(token: Optional[str]) -> str:
    if not token:
        return "<not configured>"
    return token[:4] + "***"


def ensure_demo_data(database: AppDatabase, settings: Settings) -> None:
    if not settings.seed_demo_data or database.customer_count() > 0:
        return
    rng = (
        random.Random(settings.seed_random_seed)
        if settings.seed_random_seed is not None
        else None
    )
    populate_demo_data(database, settings.seed_customer_count, rng=rng)


__all__ = ["create_app", "ensure_demo_data", "mask_token"]
