# type: ignore
# pyright: reportGeneralTypeIssues=false
# pyright: reportOptionalMemberAccess=false
"""
Rotation Service
================
Assigns recurring visits to the members of a rotating group, one member per
weekly period, and keeps each assignee's Google Calendar in sync:
round-robin selection with skip weeks, batch scheduling, swaps,
cancellations and member removal.

Port: 8005
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rotation_scheduler.controllers import (
    group_controller,
    rotation_controller,
    system_controller,
    user_controller,
)
from rotation_scheduler.core.config import settings
from rotation_scheduler.core.dependencies import get_state_repo
from rotation_scheduler.core.errors import RotationError
from rotation_scheduler.core.logging import get_logger
from rotation_scheduler.metrics.prometheus import ACTIVE_GROUPS
from rotation_scheduler.middleware import MetricsMiddleware, RequestIDMiddleware
from rotation_scheduler.schemas.rotation import ErrorResponse

logger = get_logger(settings.SERVICE_NAME)


# ── Lifespan ──────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(application: FastAPI):
    """Load the state snapshot on startup, flush it on shutdown."""
    state_repo = get_state_repo()
    state_repo.load()
    ACTIVE_GROUPS.set(state_repo.count_groups())
    logger.info(
        "Rotation service starting — persistence=%s",
        settings.DATA_FILE or "memory",
    )
    yield
    state_repo.save()
    logger.info("Rotation service shutting down")


# ── FastAPI App ───────────────────────────────────────────────────────────
app = FastAPI(
    title="Rotation Service",
    description="Round-robin visit rotations with calendar synchronization.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
    responses={
        422: {"model": ErrorResponse, "description": "Validation error"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestIDMiddleware)


# ── Exception handlers ────────────────────────────────────────────────────
@app.exception_handler(RotationError)
async def rotation_error_handler(request: Request, exc: RotationError):
    req_id = getattr(request.state, "request_id", None)
    logger.info(
        "Request failed: %s %s -> %s: %s",
        request.method, request.url.path, exc.kind, exc.message,
        extra={"request_id": req_id},
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={**exc.to_dict(), "request_id": req_id},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    req_id = getattr(request.state, "request_id", None)
    logger.exception("Unhandled exception", extra={"request_id": req_id})
    return JSONResponse(
        status_code=500,
        content={"error": "internal_server_error", "detail": str(exc), "request_id": req_id},
    )


# ── Routers ───────────────────────────────────────────────────────────────
app.include_router(system_controller.router)
app.include_router(user_controller.router)
app.include_router(group_controller.router)
app.include_router(rotation_controller.router)


# ── Entrypoint ────────────────────────────────────────────────────────────
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.SERVICE_PORT, log_level="info")
