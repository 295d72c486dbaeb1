"""Apoio backend: FastAPI application entry point."""

import signal
import uuid
from contextlib import asynccontextmanager

# Logging is configured before the remaining imports bind their loggers.
from apoio.core.config import get_settings
from apoio.core.logging import configure_structlog

_boot_settings = get_settings()
configure_structlog(
    log_level="DEBUG" if _boot_settings.debug else _boot_settings.log_level,
    json_logs=not _boot_settings.debug,
)

import structlog

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from apoio.api.routes import api_router
from apoio.core.config import Settings
from apoio.db import close_db, init_db
from apoio.middleware.correlation import get_correlation_id, setup_correlation_middleware

logger = structlog.get_logger(__name__)


def missing_required_settings(settings: Settings) -> list[str]:
    """Names of secrets the service cannot run without. Empty in debug mode."""
    if settings.debug:
        return []
    required = {
        "STRIPE_SECRET_KEY": settings.stripe_secret_key,
        "STRIPE_WEBHOOK_SECRET": settings.stripe_webhook_secret,
        "AUTH_SECRET": settings.auth_secret,
    }
    return [name for name, value in required.items() if not value]


@asynccontextmanager
async def lifespan(app: FastAPI):
    # /api/health answers 503 once SIGTERM arrives so the balancer drains us
    app.state.shutting_down = False

    def _on_sigterm(signum, frame):
        app.state.shutting_down = True
        logger.info("sigterm_received", action="draining")

    signal.signal(signal.SIGTERM, _on_sigterm)

    settings = get_settings()
    missing = missing_required_settings(settings)
    if missing:
        raise RuntimeError(f"Missing required settings: {', '.join(missing)}")

    await init_db()
    logger.info("startup_complete", app_name=settings.app_name, debug=settings.debug)

    yield

    await close_db()
    logger.info("shutdown_complete")


def _error_response(request: Request, status_code: int, detail, event: str, **log_context) -> JSONResponse:
    """Log the failure under a fresh debug_id and return only that id and ``detail``."""
    debug_id = str(uuid.uuid4())
    logger.error(
        event,
        status_code=status_code,
        debug_id=debug_id,
        correlation_id=get_correlation_id(),
        path=request.url.path,
        method=request.method,
        user_id=getattr(request.state, "user_id", None),
        **log_context,
    )
    return JSONResponse(status_code=status_code, content={"detail": detail, "debug_id": debug_id})


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return _error_response(request, exc.status_code, exc.detail, "http_exception", detail=exc.detail)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Unhandled errors become a bare 500; the traceback stays in the logs."""
    return _error_response(
        request,
        500,
        "Internal server error",
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        exc_info=exc,
    )


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Donations for creators, paid out through Stripe Connect",
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=sorted({settings.frontend_url, settings.host_url}),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # Added last so it wraps CORS and tags every request first
    setup_correlation_middleware(app)

    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.include_router(api_router, prefix="/api")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("apoio.main:app", host="0.0.0.0", port=8000, reload=_boot_settings.debug)
