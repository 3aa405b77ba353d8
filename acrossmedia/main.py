import asyncio
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from acrossmedia.config import get_settings
from acrossmedia.core.redis import close_redis
from acrossmedia.errors import register_exception_handlers
from acrossmedia.middleware.security_headers import SecurityHeadersMiddleware
from acrossmedia.routers import admin_auth, approval, dashboard, projects, settings as settings_router, users, videos, youtube
from acrossmedia.services.security_store import memory_store, security_state_janitor

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    task = asyncio.create_task(
        security_state_janitor(memory_store(), settings.security_cleanup_interval_seconds)
    )
    logger.info("AcrossMedia API started")
    try:
        yield
    finally:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        await close_redis()


app = FastAPI(title="AcrossMedia API", version="1.0.0", lifespan=lifespan)

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

register_exception_handlers(app)

app.include_router(admin_auth.router)
app.include_router(approval.router)
app.include_router(users.router)
app.include_router(videos.router)
app.include_router(projects.router)
app.include_router(settings_router.router)
app.include_router(dashboard.router)
app.include_router(youtube.router)


@app.get("/api/health")
def health():
    return {"status": "OK", "message": "Server is running"}
