"""
FastAPI application entry point.

This module configures the FastAPI application with:
- CORS middleware
- Security headers middleware
- Workspace error handling
- Health check endpoints
- API routers
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from aspect_workspace import __version__
from aspect_workspace.config import get_settings
from aspect_workspace.exceptions import WorkspaceError
from aspect_workspace.routers import models, package

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        # Only add HSTS in production
        if get_settings().env == "production":
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    settings.workspace_dir.mkdir(parents=True, exist_ok=True)
    if settings.scratch_dir is not None:
        settings.scratch_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Serving workspace %s (%s store)", settings.workspace_dir, settings.model_store)

    yield


def create_application() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Aspect Model Workspace",
        description=(
            "Workspace service for Aspect Models: model storage, ZIP package "
            "import and export, workspace migration and backups."
        ),
        version=__version__,
        docs_url="/api/docs" if settings.env != "production" else None,
        redoc_url="/api/redoc" if settings.env != "production" else None,
        openapi_url="/api/openapi.json" if settings.env != "production" else None,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )

    # Security headers
    app.add_middleware(SecurityHeadersMiddleware)

    # Include routers
    app.include_router(models.router)
    app.include_router(package.router)

    # Health check endpoints
    @app.get("/health", tags=["health"])
    async def health_check():
        """Basic health check."""
        return {"status": "healthy", "version": __version__}

    @app.get("/health/liveness", tags=["health"])
    async def liveness_check():
        """Kubernetes liveness probe."""
        return {"status": "alive"}

    @app.get("/health/readiness", tags=["health"])
    async def readiness_check():
        """Kubernetes readiness probe."""
        # Check if the workspace is accessible
        if not get_settings().workspace_dir.is_dir():
            return JSONResponse(
                status_code=503,
                content={"status": "not ready", "reason": "Workspace directory unavailable"},
            )
        return {"status": "ready"}

    @app.exception_handler(WorkspaceError)
    async def workspace_exception_handler(request: Request, exc: WorkspaceError):
        """Render domain errors with their status code."""
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "type": type(exc).__name__},
        )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions."""
        if settings.debug:
            return JSONResponse(
                status_code=500,
                content={"detail": str(exc), "type": type(exc).__name__},
            )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "aspect_workspace.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.env == "development",
        workers=1 if settings.env == "development" else settings.workers,
        log_level=settings.log_level,
    )
