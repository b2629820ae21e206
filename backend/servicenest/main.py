"""
ServiceNest Backend — FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() assembles middleware, exception handlers and routers.
       The document store and identity verifier are handles on app.state:
       either injected by the caller (tests) or built in the lifespan from
       settings.
Who:   uvicorn (uvicorn servicenest.main:app, or the `servicenest` script).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware: Request ID → Logging → GZip → CORS     │
    │                                                     │
    │  Routes:                                            │
    │   /services  /bookings  /messages  /health          │
    │                                                     │
    │  Exception Handlers:                                │
    │   Unauthorized→401  Validation→400  Store→500       │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Configure logging
    2. Connect to MongoDB and ping it (fail fast when unreachable)
    3. Initialize the Firebase Admin app (fail fast on bad credentials)

    Shutdown:
    1. Delete the Firebase app
    2. Close the MongoDB client
    Only handles created by the lifespan are torn down; injected ones
    belong to the caller.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from servicenest import __version__
from servicenest.config import Settings, settings as default_settings
from servicenest.database import DocumentStore
from servicenest.exceptions import (
    ServiceNestError,
    StoreError,
    UnauthorizedError,
    ValidationError,
)
from servicenest.middleware.logging import RequestLoggingMiddleware
from servicenest.middleware.request_id import RequestIDMiddleware, request_id_var
from servicenest.routes import bookings, health, messages, services
from servicenest.services.identity import FirebaseIdentityVerifier, IdentityVerifier

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout.
    Called once from the lifespan, before any other initialization.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Our access log replaces uvicorn's; the driver logs every heartbeat at DEBUG
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Build missing handles on startup, release the ones built here on shutdown.

    Raises:
        RuntimeError: MongoDB did not answer the startup ping.
        ValueError:   Identity provider credentials are missing or invalid.
    """
    config: Settings = app.state.settings
    setup_logging(config.log_level)
    logger.info("ServiceNest Backend %s starting up...", __version__)

    owned_store: Optional[DocumentStore] = None
    owned_verifier: Optional[IdentityVerifier] = None

    if app.state.store is None:
        owned_store = DocumentStore.from_settings(config)
        if not await owned_store.ping():
            logger.error("MongoDB connection failed (host: %s)", config.db_host)
            await owned_store.close()
            raise RuntimeError("MongoDB is unreachable")
        app.state.store = owned_store

    if app.state.verifier is None:
        try:
            owned_verifier = FirebaseIdentityVerifier.from_settings(config)
        except ValueError as e:
            logger.error("Configuration error: %s", e)
            if owned_store is not None:
                await owned_store.close()
            raise
        app.state.verifier = owned_verifier

    logger.info("MongoDB connected & routes ready")
    logger.info("Server ready at http://%s:%d", config.host, config.port)

    yield

    logger.info("ServiceNest Backend shutting down...")
    if owned_verifier is not None:
        owned_verifier.close()
        app.state.verifier = None
    if owned_store is not None:
        await owned_store.close()
        app.state.store = None
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to HTTP responses. Every error body is {"message": "..."}.

    Handler hierarchy:
        UnauthorizedError       → 401 (with WWW-Authenticate: Bearer)
        ValidationError         → 400
        RequestValidationError  → 400 (body is not a JSON object)
        StoreError              → 500
        ServiceNestError (base) → 500
        Exception (fallback)    → 500

    Internal details (driver errors, stack traces) are logged, never returned.
    """

    @app.exception_handler(UnauthorizedError)
    async def handle_unauthorized(request: Request, exc: UnauthorizedError):
        return JSONResponse(
            status_code=401,
            content={"message": exc.message},
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(status_code=400, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Invalid request body: %s", rid, exc.errors())
        return JSONResponse(status_code=400, content={"message": "Invalid request body"})

    @app.exception_handler(StoreError)
    async def handle_store_error(request: Request, exc: StoreError):
        rid = request_id_var.get("")
        logger.error("[%s] Store error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(status_code=500, content={"message": exc.message})

    @app.exception_handler(ServiceNestError)
    async def handle_app_error(request: Request, exc: ServiceNestError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(status_code=500, content={"message": exc.message})

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("Unexpected error: %s", str(exc), exc_info=True)
        return JSONResponse(status_code=500, content={"message": "Internal server error"})


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    store: Optional[DocumentStore] = None,
    verifier: Optional[IdentityVerifier] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration; defaults to the environment-loaded singleton.
        store:    Document store to use instead of connecting at startup.
        verifier: Identity verifier to use instead of initializing Firebase.

    Returns: Fully configured FastAPI instance. Nothing is connected until
             the lifespan runs.
    """
    config = settings or default_settings

    app = FastAPI(
        title="ServiceNest API",
        description=(
            "Services marketplace backend: providers publish services, customers "
            "book them, visitors send messages. Writes are authenticated with "
            "Firebase ID tokens."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.store = store
    app.state.verifier = verifier

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → GZip → CORS → routes
    origins = config.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(services.router)
    app.include_router(bookings.router)
    app.include_router(messages.router)
    app.include_router(health.router)

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app on the configured host and port."""
    uvicorn.run(
        "servicenest.main:app",
        host=default_settings.host,
        port=default_settings.port,
        log_level=default_settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
