"""
FastAPI Application Entry Point

Quán Nem Local Data API - the data layer behind the restaurant website.
Static baseline JSON merged with a locally stored overlay, new records
announced on Discord, and a small demo admin area.

Endpoints:
    - GET  /api/{resource}: Merged baseline + local records
    - POST /api/{resource}: Save a new record (any fields)
    - POST /admin/login, /admin/logout: Demo admin session
    - GET  /admin/session: Session state
    - GET  /admin/{resource}: Latest-first view (admin only)
    - GET  /admin/export/{resource}: JSON / Excel download (admin only)
    - GET  /health: System health check

Resources: reservations, reviews

Author: Your Name
Version: 1.0.0
"""

import logging
from datetime import datetime
from typing import Any, Optional
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Depends, Query, Request, Body, Cookie
from fastapi.responses import JSONResponse, Response

from quannem.core.config import get_settings, setup_logging
from quannem.schemas import (
    ErrorResponse,
    ExportFormat,
    HealthResponse,
    LoginRequest,
    Resource,
    SessionResponse,
    WriteConfirmation,
)
from quannem.services import (
    get_baseline_loader,
    get_data_store,
    get_dispatcher,
    get_session_registry,
)
from quannem.services.admin import AdminAuthService, SessionRegistry
from quannem.services.data_store import LocalDataStore
from quannem.services.export import MEDIA_TYPES, export_records, filename_for
from quannem.services.notifications import NotificationDispatcher

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    # Startup
    logger.info("=" * 60)
    logger.info(f"🚀 Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    store = get_data_store()
    logger.info(f"✅ Storage: {store.storage.backend_name}")
    logger.info(f"✅ Notifications: {store.dispatcher.sink.provider_name}")
    logger.info(f"✅ Baseline source: {store.baseline.source}")

    if settings.use_real_services:
        missing = settings.validate_production_config()
        if missing:
            logger.warning(f"⚠️ Missing production config: {missing}")

    logger.info("✅ Application ready!")

    yield  # Application runs

    # Shutdown
    logger.info("Shutting down...")
    await store.drain()
    await store.dispatcher.sink.aclose()
    await get_baseline_loader().aclose()
    logger.info("✅ Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description=(
        "Reservations and reviews for the Quán Nem website: static baseline data "
        "merged with locally stored submissions."
    ),
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def resolve_resource(resource: str) -> Resource:
    """Map a path segment to a known resource or 404."""
    try:
        return Resource(resource)
    except ValueError:
        raise HTTPException(
            status_code=404,
            detail=f"Unknown resource '{resource}'. Options: {[r.value for r in Resource]}"
        )


def require_admin(
    session_id: Optional[str] = Cookie(None, alias=settings.session_cookie_name),
    registry: SessionRegistry = Depends(get_session_registry),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> AdminAuthService:
    """Dependency: the current admin session, or 401."""
    storage = registry.get(session_id)
    if storage is None:
        raise HTTPException(status_code=401, detail="Admin login required")

    auth = AdminAuthService(
        storage,
        dispatcher,
        username=settings.admin_username,
        password=settings.admin_password,
    )
    if not auth.is_authenticated():
        raise HTTPException(status_code=401, detail="Admin login required")
    return auth


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/", tags=["Root"])
async def root() -> dict[str, Any]:
    """API root with navigation links."""
    return {
        "message": f"🍜 Welcome to {settings.restaurant_name}",
        "version": settings.app_version,
        "environment": settings.env_mode.value,
        "resources": [r.value for r in Resource],
        "documentation": "/docs",
        "health": "/health",
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(
    store: LocalDataStore = Depends(get_data_store),
) -> HealthResponse:
    """Report the wired backends."""
    return HealthResponse(
        status="operational",
        environment=settings.env_mode.value,
        storage=store.storage.backend_name,
        notifications=store.dispatcher.sink.provider_name,
        baseline_source=store.baseline.source,
        timestamp=datetime.now(),
    )


# =============================================================================
# DATA ENDPOINTS
# =============================================================================

@app.get(
    "/api/{resource}",
    response_model=list[dict[str, Any]],
    responses={404: {"model": ErrorResponse}},
    tags=["Data"],
    summary="Read Records",
)
async def read_records(
    resource: str,
    latest_first: bool = Query(False, description="Reverse the merged order"),
    store: LocalDataStore = Depends(get_data_store),
) -> list[dict[str, Any]]:
    """Merged baseline + local records, baseline first, unique by id."""
    res = resolve_resource(resource)
    records = await store.read(res.value)
    if latest_first:
        records.reverse()
    return records


@app.post(
    "/api/{resource}",
    response_model=WriteConfirmation,
    responses={404: {"model": ErrorResponse}},
    tags=["Data"],
    summary="Save Record",
)
async def write_record(
    resource: str,
    fields: dict[str, Any] = Body(...),
    store: LocalDataStore = Depends(get_data_store),
) -> WriteConfirmation:
    """
    Save a submitted form.

    Any fields are accepted as-is; id and timestamp are added.
    """
    res = resolve_resource(resource)
    logger.info(f"New {res.value} submission: {sorted(fields)}")
    return await store.write(res.value, fields)


# =============================================================================
# ADMIN ENDPOINTS
# =============================================================================

@app.post(
    "/admin/login",
    response_model=SessionResponse,
    responses={401: {"model": ErrorResponse}},
    tags=["Admin"],
)
async def admin_login(
    credentials: LoginRequest,
    response: Response,
    session_id: Optional[str] = Cookie(None, alias=settings.session_cookie_name),
    registry: SessionRegistry = Depends(get_session_registry),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> SessionResponse:
    """Check the demo credentials and open an admin session."""
    existing = registry.get(session_id) is not None
    session_id, storage = registry.get_or_create(session_id)

    auth = AdminAuthService(
        storage,
        dispatcher,
        username=settings.admin_username,
        password=settings.admin_password,
    )
    if not auth.login(credentials.username, credentials.password):
        if not existing:
            registry.discard(session_id)
        raise HTTPException(status_code=401, detail="Invalid credentials!")

    response.set_cookie(settings.session_cookie_name, session_id, httponly=True, samesite="lax")
    return SessionResponse(authenticated=True, message="Logged in")


@app.post("/admin/logout", response_model=SessionResponse, tags=["Admin"])
async def admin_logout(
    response: Response,
    session_id: Optional[str] = Cookie(None, alias=settings.session_cookie_name),
    registry: SessionRegistry = Depends(get_session_registry),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> SessionResponse:
    """Clear the session flag."""
    storage = registry.get(session_id)
    if storage is not None:
        AdminAuthService(storage, dispatcher).logout()
        registry.discard(session_id)

    response.delete_cookie(settings.session_cookie_name)
    return SessionResponse(authenticated=False, message="Logged out")


@app.get("/admin/session", response_model=SessionResponse, tags=["Admin"])
async def admin_session(
    session_id: Optional[str] = Cookie(None, alias=settings.session_cookie_name),
    registry: SessionRegistry = Depends(get_session_registry),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> SessionResponse:
    """Which view should the admin page render?"""
    storage = registry.get(session_id)
    if storage is None:
        return SessionResponse(authenticated=False)
    return SessionResponse(authenticated=AdminAuthService(storage, dispatcher).is_authenticated())


@app.get(
    "/admin/export/{resource}",
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    tags=["Admin"],
    summary="Export Records",
)
async def admin_export(
    resource: str,
    format: ExportFormat = Query(ExportFormat.JSON),
    auth: AdminAuthService = Depends(require_admin),
    store: LocalDataStore = Depends(get_data_store),
) -> Response:
    """Download the merged view, e.g. to replace the baseline file."""
    res = resolve_resource(resource)
    records = await store.read(res.value)
    content = export_records(records, res.value, format)

    filename = filename_for(res.value, format)
    logger.info(f"Exporting {len(records)} {res.value} as {filename}")
    return Response(
        content=content,
        media_type=MEDIA_TYPES[format],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.get(
    "/admin/{resource}",
    response_model=list[dict[str, Any]],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    tags=["Admin"],
)
async def admin_records(
    resource: str,
    auth: AdminAuthService = Depends(require_admin),
    store: LocalDataStore = Depends(get_data_store),
) -> list[dict[str, Any]]:
    """All records, latest first."""
    res = resolve_resource(resource)
    records = await store.read(res.value)
    records.reverse()
    return records


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal Server Error",
            "detail": str(exc) if settings.debug else "An unexpected error occurred",
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("quannem.main:app", host=settings.api_host, port=settings.api_port)
