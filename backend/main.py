"""FastAPI main application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from backend.core.config import settings
from backend.core.exceptions import PermissionsPlatformError, DependencyInUseError
from backend.core.middleware import setup_middleware
from backend.services.cache_service import build_permission_cache

from backend.api.roles import router as roles_router
from backend.api.actions import router as actions_router
from backend.api.plans import router as plans_router
from backend.api.modules import router as modules_router
from backend.api.permissions import router as permissions_router
from backend.api.navigation import router as navigation_router

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("saas_permissions")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("🚀 Starting %s", settings.APP_NAME)
    cache = getattr(app.state, "permission_cache", None)
    if cache is None:
        cache = build_permission_cache(settings)
        app.state.permission_cache = cache
    cache.start()
    logger.info("✅ Permission cache ready (%s)", cache.stats().get("backend"))

    yield

    cache.stop()
    logger.info("🔻 Shutting down %s", settings.APP_NAME)


app = FastAPI(
    title="SaaS Permissions API",
    description="Plan and role based action entitlements",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Middleware
setup_middleware(app)


@app.exception_handler(PermissionsPlatformError)
async def platform_exception_handler(request: Request, exc: PermissionsPlatformError):
    content = {"detail": exc.message}
    if isinstance(exc, DependencyInUseError):
        content["dependents"] = exc.dependents
    return JSONResponse(status_code=exc.status_code, content=content)


# Register routers
app.include_router(roles_router, prefix="/api")
app.include_router(actions_router, prefix="/api")
app.include_router(plans_router, prefix="/api")
app.include_router(modules_router, prefix="/api")
app.include_router(permissions_router, prefix="/api")
app.include_router(navigation_router, prefix="/api")


@app.get("/")
async def root():
    return {
        "name": settings.APP_NAME,
        "version": "0.1.0",
        "docs": "/docs",
    }


@app.get("/api/health")
async def health():
    """Quick health check endpoint."""
    return {"status": "ok"}
