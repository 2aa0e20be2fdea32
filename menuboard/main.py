"""
Menu Board — FastAPI application entrypoint
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator

from menuboard.api import archive, auth, catalog, health, layouts, live, menu, orders, sync
from menuboard.api import settings as settings_api
from menuboard.core.config import get_settings
from menuboard.core.errors import MenuBoardError
from menuboard.core.redis_client import close_redis
from menuboard.db.database import Base, engine
from menuboard.middleware.auth import AdminAuthMiddleware
from menuboard.middleware.rate_limiter import SlidingWindowRateLimiter

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("%s %s started", settings.SERVICE_NAME, settings.SERVICE_VERSION)
    yield
    # Shutdown
    await close_redis()
    await engine.dispose()


app = FastAPI(
    title="Menu Board",
    description="Digital menu board: menu with change history, live viewer updates, "
                "spreadsheet reconciliation, daily snapshots and session carts.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url=None,
)


@app.exception_handler(MenuBoardError)
async def menuboard_error_handler(request: Request, exc: MenuBoardError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# ── CORS ──────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production via env var
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Admin auth + login rate limiting ──────────────────────────────────────────
app.add_middleware(AdminAuthMiddleware)
app.add_middleware(SlidingWindowRateLimiter)

# ── Prometheus Metrics ────────────────────────────────────────────────────────
if settings.METRICS_ENABLED:
    Instrumentator().instrument(app).expose(app, endpoint="/metrics")

# ── Routers ───────────────────────────────────────────────────────────────────
app.include_router(health.router)
app.include_router(auth.router)
for module in (menu, layouts, orders, catalog, settings_api, sync, live):
    app.include_router(module.router)
for module in (menu, archive, layouts, orders, catalog, settings_api, sync, live):
    app.include_router(module.admin_router)


@app.get("/")
async def root():
    return {"service": settings.SERVICE_NAME, "version": settings.SERVICE_VERSION}
