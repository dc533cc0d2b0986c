"""
FastAPI application entry point.

This module sets up the FastAPI application with middleware, routers,
error handlers and startup schema creation.
"""
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware
from routers import auth, checkins, research, public, stats
from core.config import settings
from core.auth import get_request_context, set_flash
from core.database import check_db_connection, init_db
from core.logging import setup_logging
from core.exceptions import AppException, NotFoundError
from core.security_headers import SecurityHeadersMiddleware
from core.templating import redirect, render_page
from services.research_entries import ALL_USERS
import logging
import time
import uvicorn

# Setup logging first
setup_logging()
logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    """Create the schema and seed users at startup."""
    init_db()
    logger.info(f"Research Check-In started ({settings.ENVIRONMENT})")
    yield


app = FastAPI(
    title="Research Check-In",
    description="Daily check-ins and market research notes for a two-person team",
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url=None,
    lifespan=lifespan,
)

# Security headers middleware
app.add_middleware(SecurityHeadersMiddleware)

# Signed cookie session (user + pending flash)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SESSION_SECRET,
    session_cookie=settings.SESSION_COOKIE_NAME,
    max_age=settings.session_max_age_seconds,
    same_site="lax",
    https_only=settings.ENVIRONMENT == "production",
)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests with timing information."""
    start_time = time.time()

    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(
            f"Request failed: {request.method} {request.url.path}",
            exc_info=True,
            extra={
                "extra_fields": {
                    "method": request.method,
                    "path": request.url.path,
                    "error": str(e),
                }
            }
        )
        raise

    process_time = time.time() - start_time
    logger.info(
        f"{request.method} {request.url.path} - {response.status_code}",
        extra={
            "extra_fields": {
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "process_time_ms": round(process_time * 1000, 2),
            }
        }
    )
    response.headers["X-Process-Time"] = str(process_time)
    return response


def render_not_found(request: Request, message: str, status_code: int = status.HTTP_404_NOT_FOUND):
    """The public page, empty, with an error banner and a 404 status."""
    return render_page(
        request,
        get_request_context(request),
        "public.html",
        title="Not found",
        status_code=status_code,
        stats=[],
        feed=[],
        users=[],
        filter_user=ALL_USERS,
        range_days=30,
        range_choices=(),
        error=message,
    )


@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    """Validation and authorization failures: flash + redirect. Not-found: 404 page."""
    if isinstance(exc, NotFoundError):
        return render_not_found(request, exc.public_message, status_code=exc.status_code)

    logger.info(
        f"{exc.error_code}: {exc.message}",
        extra={"extra_fields": {"path": request.url.path, "error_code": exc.error_code}},
    )
    set_flash(request, exc.flash_type, exc.message)
    return redirect(exc.redirect_to or "/dashboard", status_code=exc.status_code)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return render_not_found(request, "Page not found")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Unhandled errors, including storage constraint violations."""
    logger.error(
        f"Unhandled exception: {exc}",
        exc_info=True,
        extra={
            "extra_fields": {
                "method": request.method,
                "path": request.url.path,
            }
        }
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


@app.get("/health")
async def health():
    """
    Simple health check for uptime monitors.

    Returns:
        - 200: Database reachable
        - 503: Database unavailable
    """
    if not check_db_connection():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "database": "unavailable"},
        )
    return {"status": "healthy", "timestamp": time.time()}


app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

# Include routers
app.include_router(public.router)
app.include_router(auth.router)
app.include_router(checkins.router)
app.include_router(research.router)
app.include_router(stats.router)


def run():
    """Run the server with uvicorn."""
    uvicorn.run("main:app", host=settings.API_HOST, port=settings.API_PORT, reload=settings.DEBUG)


if __name__ == "__main__":
    run()
