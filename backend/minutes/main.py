# minutes/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from minutes.config import settings
from minutes.core.db import init_db, close_db
from minutes.core.bootstrap import ensure_default_admin, ensure_upload_dir
from minutes.core.logging import configure_logging
from minutes.core.rate_limit import build_rate_limiter

from minutes.api.v1.routers import auth, upload, meetings, process, projects, tags, stats
from minutes.api.v1.routers import settings as settings_router

configure_logging()
logger = logging.getLogger("uvicorn.error")

app = FastAPI(title=settings.APP_NAME)

# Rate limiter capability, handed to handlers via get_rate_limiter
app.state.rate_limiter = build_rate_limiter(settings.rate_limit_backend, settings.redis_url)

# CORS (with Cookie)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.on_event("startup")
async def on_startup():
    upload_dir = ensure_upload_dir()
    logger.info("[storage] audio files in %s", upload_dir)
    logger.info("[rate-limit] backend=%s", settings.rate_limit_backend)
    await init_db()
    # Ensure there's a default admin account on first run
    await ensure_default_admin()

@app.on_event("shutdown")
async def on_shutdown():
    await app.state.rate_limiter.close()
    await close_db()

# REST
app.include_router(auth.router, prefix="/api/v1")
app.include_router(upload.router, prefix="/api/v1")
app.include_router(meetings.router, prefix="/api/v1")
app.include_router(process.router, prefix="/api/v1")
app.include_router(projects.router, prefix="/api/v1")
app.include_router(tags.router, prefix="/api/v1")
app.include_router(settings_router.router, prefix="/api/v1")
app.include_router(stats.router, prefix="/api/v1")

@app.get("/healthz")
def healthz():
    return {"ok": True}
