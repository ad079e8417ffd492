from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import os

from trading_road.api.api import api_router
from trading_road.core.config import settings
from trading_road.core.errors import register_error_handlers
from trading_road.core.logging_config import setup_logging, get_logger
from trading_road.db.init_db import ensure_tables_exist, seed_first_admin
from trading_road.db.session import engine
from trading_road.services.audit import audit_log_middleware
from trading_road.services.scheduler import init_scheduler, shutdown_scheduler

log_level = os.getenv("LOG_LEVEL", "INFO")
setup_logging(log_level, log_to_file=os.getenv("LOG_TO_FILE", "true").lower() == "true")
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Starting Siargao Trading Road API...")

    await ensure_tables_exist()
    logger.info("📊 Database tables ready")

    if await seed_first_admin():
        logger.info(f"👤 First admin created: {settings.FIRST_ADMIN_EMAIL}")

    init_scheduler()
    yield

    logger.info("🛑 Shutting down...")
    shutdown_scheduler()
    await engine.dispose()


app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    description="Supplier and store trading platform API",
    lifespan=lifespan
)

register_error_handlers(app)

app.middleware("http")(audit_log_middleware)

if settings.BACKEND_CORS_ORIGINS:
    logger.info(f"CORS allowed origins: {settings.BACKEND_CORS_ORIGINS}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(api_router, prefix=settings.API_PREFIX)


@app.get("/")
async def root():
    return {"message": settings.PROJECT_NAME}


@app.get("/health")
async def health():
    return {"status": "ok"}
