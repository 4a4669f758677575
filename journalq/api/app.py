"""FastAPI server for the journal analysis engine"""

from __future__ import annotations

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from journalq.api.middleware.rate_limit import RateLimitMiddleware
from journalq.api.routes.analyze import router as analyze_router
from journalq.api.routes.health import router as health_router
from journalq.api.routes.reports import router as reports_router
from journalq.config import API_HOST, API_PORT, APP_VERSION
from journalq.infrastructure.rate_limiter import RateLimitExceeded
from journalq.infrastructure.settings import is_development
from journalq.journal.service import AnalysisEngine
from journalq.observability.logging import get_logger
from journalq.observability.telemetry import counter, log_event
from journalq.storage.repository import JournalRepository
from journalq.utils.error_sanitizer import get_safe_error_detail
from journalq.utils.redaction import redact
from journalq.utils.validators import ValidationError

logger = get_logger(__name__)

DEV_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:8000",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:8000",
]


def _allowed_origins() -> list[str]:
    origins = [o.strip() for o in os.getenv("JOURNALQ_ALLOWED_ORIGINS", "").split(",") if o.strip()]
    # Allow localhost in development only
    if is_development():
        origins.extend(DEV_ORIGINS)
    return origins


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    engine: AnalysisEngine = app.state.engine
    engine.start_sweepers()
    log_event("api.startup", service="journalq", version=APP_VERSION)
    try:
        yield
    finally:
        await engine.stop()
        log_event("api.shutdown", service="journalq")


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        counter("api.validation_errors")
        logger.info("Rejected request on %s: %s", request.url.path, exc.message)
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Sanitized 400 for schema failures; internal validation rules are not leaked."""
        logger.warning("Validation error on %s: %s", redact(str(request.url)), exc.errors())
        counter("api.validation_errors")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": "Invalid request body",
                "details": "Invalid request format. Please check your request and try again.",
                "invalid_fields": [str(err["loc"][-1]) for err in exc.errors()],
            },
        )

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content={"error": "Rate limit exceeded", "retry_after": exc.retry_after_seconds},
            headers={"Retry-After": str(exc.retry_after_seconds)},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        counter("api.internal_errors")
        logger.error("Request processing error on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Internal server error",
                "details": get_safe_error_detail(exc, status_code=500),
            },
        )


def create_app(
    engine: AnalysisEngine | None = None,
    repository: JournalRepository | None = None,
) -> FastAPI:
    """
    Build the API with one engine and one repository for its lifetime.

    Args:
        engine: Analysis engine (a default Gemini-backed one when None)
        repository: Journal repository (in-memory when None)
    """
    app = FastAPI(title="Journal Analysis API", version=APP_VERSION, lifespan=lifespan)
    app.state.engine = engine if engine is not None else AnalysisEngine()
    app.state.repository = repository if repository is not None else JournalRepository()

    _register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_allowed_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "HEAD", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
    )

    # Rate limiting - one admission per analysis request, per client IP
    app.add_middleware(RateLimitMiddleware)

    app.include_router(health_router)
    app.include_router(analyze_router)
    app.include_router(reports_router)

    @app.get("/")
    def root() -> dict[str, Any]:
        return {
            "service": "Journal Analysis API",
            "version": APP_VERSION,
            "status": "running",
            "endpoints": {
                "health": "/health",
                "analyze_batch": "/api/analyze",
                "analyze_entry": "/api/analyze/entry",
                "health_score": "/api/reports/health-score",
            },
        }

    return app


def main() -> None:
    """Run the API with uvicorn (console script: journalq-api)."""
    import uvicorn

    load_dotenv()
    uvicorn.run(create_app(), host=API_HOST, port=API_PORT)
