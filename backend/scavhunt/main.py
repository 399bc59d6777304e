from __future__ import annotations
import uuid
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from scavhunt.config import settings
from scavhunt.errors import HuntError
from scavhunt.logging_setup import configure_logging
from scavhunt.routes.system import router as system_router
from scavhunt.routes.hunts import router as hunts_router
from scavhunt.routes.teams import router as teams_router, admin as teams_admin_router
from scavhunt.routes.play import router as play_router
import structlog

configure_logging(settings.log_level)
log = structlog.get_logger()

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    log.info("startup", env=settings.environment, version=settings.app_version, git_sha=settings.git_sha)
    yield
    # Shutdown
    log.info("shutdown")

app = FastAPI(
    title=f"{settings.app_display_name} API",
    version=settings.app_version,
    lifespan=lifespan,
    description=f"{settings.app_display_name} API for team scavenger hunts"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.environment == "dev" else settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(system_router)
app.include_router(hunts_router)
app.include_router(teams_admin_router)
app.include_router(teams_router)
app.include_router(play_router)

@app.exception_handler(HuntError)
async def hunt_error_handler(request: Request, exc: HuntError):
    log.warning("hunt_error", kind=type(exc).__name__, detail=exc.message, path=request.url.path)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "kind": type(exc).__name__, "retryable": exc.retryable},
    )

@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = rid
    structlog.contextvars.bind_contextvars(request_id=rid)
    response: Response = await call_next(request)
    response.headers["X-Request-ID"] = rid
    structlog.contextvars.clear_contextvars()
    return response
