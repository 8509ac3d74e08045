from __future__ import annotations
import uuid
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from cpboard.config import settings
from cpboard.db import create_tables
from cpboard.errors import register_error_handlers
from cpboard.logging_setup import configure_logging
from cpboard.routes.system import router as system_router
from cpboard.routes.leaderboard import router as leaderboard_router
import structlog

configure_logging()
log = structlog.get_logger()

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    log.info("startup", env=settings.environment, version=settings.app_version, git_sha=settings.git_sha)
    if settings.auto_create_tables:
        await create_tables()
        log.info("tables_created")
    yield
    # Shutdown
    log.info("shutdown")

app = FastAPI(
    title=f"{settings.app_display_name} API",
    version=settings.app_version,
    lifespan=lifespan,
    description="Leaderboard and activity heatmap for LeetCode, Codeforces and CodeChef users",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.environment == "dev" else settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Include routers
app.include_router(system_router)
app.include_router(leaderboard_router)

@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = rid
    structlog.contextvars.bind_contextvars(request_id=rid, method=request.method, path=request.url.path)
    try:
        response: Response = await call_next(request)
    finally:
        structlog.contextvars.unbind_contextvars("request_id", "method", "path")
    response.headers["X-Request-ID"] = rid
    return response
