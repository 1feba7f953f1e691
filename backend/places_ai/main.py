"""
Favorite Places AI Backend - FastAPI Application Factory
=========================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routers.
Who:   uvicorn (`uvicorn places_ai.main:app`) and the test client.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────┐ ┌──────────┐ ┌──────────┐ ┌────────────┐  │
    │  │ CORS │→│ Req ID   │→│ Logging  │→│ Rate Limit │  │
    │  └──────┘ └──────────┘ └──────────┘ └────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  POST /ai/summarize-notes   POST /ai/suggest-tags   │
    │  POST /ai/smart-search      GET / , GET /health     │
    │                                                     │
    │  Exception Handlers:                                │
    │  ValidationError→400 │ AITaskError→500 │ other→500  │
    └─────────────────────────────────────────────────────┘
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from places_ai import __version__
from places_ai.config import settings
from places_ai.exceptions import AITaskError, PlacesAIError, ValidationError
from places_ai.middleware.logging import RequestLoggingMiddleware
from places_ai.middleware.rate_limit import RateLimitMiddleware
from places_ai.middleware.request_id import RequestIDMiddleware, request_id_var
from places_ai.routes import ai, health

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the whole process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout.
    Called once from the lifespan, before any other startup work.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    for noisy in ("uvicorn.access", "httpcore", "httpx", "google", "grpc"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("Favorite Places AI backend starting (env=%s)", settings.environment)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: health checks stay up and AI calls fail with 500
        logger.error("Configuration error: %s", str(e))

    logger.info("Gemini model: %s", settings.gemini_model)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Favorite Places AI backend shutting down.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to the shared error body {error, message, details?, request_id}.

        ValidationError          → 400
        RequestValidationError   → 400 (body is not a JSON object, wrong types)
        HTTPException (404, 405) → same status, JSON body
        AITaskError              → 500 with the task's generic message
        PlacesAIError / other    → 500 generic

    Underlying failure details are added to 500 bodies only in development.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return JSONResponse(
            status_code=400,
            content={
                "error": exc.error_code,
                "message": exc.message,
                "details": exc.context or None,
                "request_id": rid,
            },
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Malformed request body: %s", rid, exc.errors())
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": "Request body is invalid",
                "details": {"errors": [
                    {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
                    for err in exc.errors()
                ]},
                "request_id": rid,
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        rid = request_id_var.get("")
        if exc.status_code == 404:
            content = {
                "error": "not_found",
                "message": f"Route {request.method} {request.url.path} not found",
                "request_id": rid,
            }
        else:
            content = {
                "error": "http_error",
                "message": str(exc.detail),
                "request_id": rid,
            }
        return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)

    @app.exception_handler(AITaskError)
    async def handle_ai_task_error(request: Request, exc: AITaskError):
        rid = request_id_var.get("")
        logger.error("[%s] %s failed (%s): %s", rid, exc.task, exc.kind, exc.detail)
        content = {
            "error": exc.error_code,
            "message": exc.message,
            "request_id": rid,
        }
        if settings.is_development:
            content["details"] = {"kind": exc.kind, "message": exc.detail}
        return JSONResponse(status_code=500, content=content)

    @app.exception_handler(PlacesAIError)
    async def handle_app_error(request: Request, exc: PlacesAIError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error (%s): %s", rid, exc.error_code, exc.message)
        content = {
            "error": "internal_server_error",
            "message": "Something went wrong",
            "request_id": rid,
        }
        if settings.is_development:
            content["details"] = {"kind": exc.error_code, "message": exc.message}
        return JSONResponse(status_code=500, content=content)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        content = {
            "error": "internal_server_error",
            "message": "Something went wrong",
            "request_id": rid,
        }
        if settings.is_development:
            content["details"] = {"kind": type(exc).__name__, "message": str(exc)}
        return JSONResponse(status_code=500, content=content)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Favorite Places AI API",
        description=(
            "AI relay for the Favorite Places app: note summaries, photo tag "
            "suggestions and natural-language search, backed by Google Gemini "
            "and (optionally) Google Cloud Vision."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware executes in reverse order of addition (last added = outermost)
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # CORS is outermost: preflights are answered before the rate limiter
    # counts them, and 429 bodies still carry Access-Control-Allow-Origin
    origins = settings.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Browsers reject credentials with a wildcard origin
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(ai.router)

    return app


app = create_app()
