"""
Tailor shop back-office service
Customers, orders, measurements and payments behind one JSON API
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import subprocess
import os

from tailorshop.core import ServiceHealth, setup_logging, RequestLoggingMiddleware, get_logger
from tailorshop.core_settings import get_settings
from tailorshop.infrastructure import db
from tailorshop.api import customers, measurements, orders, payments, stats
from tailorshop.api.errors import register_exception_handlers

settings = get_settings()

SERVICE_NAME = settings.SERVICE_NAME
SERVICE_VERSION = settings.SERVICE_VERSION
SERVICE_DESCRIPTION = "Tailor shop back-office API"

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

setup_logging(
    service_name=SERVICE_NAME,
    level=settings.LOG_LEVEL,
    environment=settings.ENVIRONMENT,
    version=SERVICE_VERSION,
)

logger = get_logger(__name__)


def run_migrations() -> None:
    logger.info("Running database migrations")
    result = subprocess.run(
        ["alembic", "upgrade", "head"],
        cwd=PROJECT_ROOT,
        capture_output=True,
        text=True,
        check=False,
    )
    if result.returncode != 0:
        logger.warning(f"Migration output: {result.stderr}")
    else:
        logger.info("Database migrations completed")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {SERVICE_NAME} version {SERVICE_VERSION}")

    if settings.RUN_MIGRATIONS:
        try:
            run_migrations()
        except OSError as e:
            logger.error(f"Migration error: {e}")

    try:
        db.init_models()
        logger.info("Database models initialized")
    except Exception as e:
        logger.error(f"Failed to initialize database models: {e}")
        raise

    logger.info(f"{SERVICE_NAME} started successfully")

    yield

    logger.info(f"Shutting down {SERVICE_NAME}")


app = FastAPI(
    title=SERVICE_NAME,
    description=SERVICE_DESCRIPTION,
    version=SERVICE_VERSION,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

register_exception_handlers(app)

# The readiness probe always looks up the current engine, so tests can swap it
health_service = ServiceHealth(SERVICE_NAME, SERVICE_VERSION, engine_factory=lambda: db.engine)
app.include_router(health_service.create_health_router())

for module in (customers, orders, measurements, payments, stats):
    app.include_router(module.router, prefix="/api")


@app.get("/")
async def root():
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "status": "running",
        "docs": "/api/docs",
    }


@app.get("/info")
async def info():
    """Service information endpoint"""
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "description": SERVICE_DESCRIPTION,
        "environment": settings.ENVIRONMENT,
        "endpoints": {
            "health": "/health",
            "readiness": "/health/ready",
            "liveness": "/health/live",
            "metrics": "/metrics",
            "docs": "/api/docs",
            "customers": "/api/customers",
            "orders": "/api/orders",
            "measurements": "/api/measurements",
            "payments": "/api/payments",
            "stats": "/api/stats",
        },
    }
