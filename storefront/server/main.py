"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware
(CORS, request tracing), registers exception handlers, mounts the uploaded
images and includes all API routers.
"""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from storefront.core.database import init_db
from storefront.core.logging_config import get_logger, setup_logging
from storefront.core.monitoring import initialize_logfire

from .api.v1 import categories, health, orders, products, uploads, users
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import LogfireMiddleware
from .services.deps import get_esewa_client

setup_logging(log_level=settings.log_level, log_format=settings.log_format, enable_file=settings.enable_file_logging)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Creates missing tables on startup and closes the shared eSewa client on
    shutdown.
    """
    try:
        logger.info("Starting up Storefront API...")
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    logger.info("Shutting down Storefront API...")
    await get_esewa_client().aclose()


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    Storefront API

    Backend for a small e-commerce store: accounts and cookie-based sessions,
    the product catalog with categories and reviews, image uploads, orders and
    eSewa payments, and the admin dashboard aggregates.
    """,
    version=constant.API_VERSION,
    openapi_url=f"{constant.API_PREFIX}/openapi.json",
    docs_url=f"{constant.API_PREFIX}/docs",
    redoc_url=f"{constant.API_PREFIX}/redoc",
    lifespan=lifespan,
)

initialize_logfire(app)
setup_exception_handlers(app)

app.add_middleware(LogfireMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins,
    allow_credentials=settings.cors.allow_credentials,
    allow_methods=settings.cors.allow_methods,
    allow_headers=settings.cors.allow_headers,
)

app.include_router(health.router, tags=["health"])
app.include_router(users.router, prefix=f"{constant.API_PREFIX}/users", tags=["users"])
app.include_router(categories.router, prefix=f"{constant.API_PREFIX}/category", tags=["categories"])
app.include_router(products.router, prefix=f"{constant.API_PREFIX}/products", tags=["products"])
app.include_router(uploads.router, prefix=f"{constant.API_PREFIX}/upload", tags=["uploads"])
app.include_router(orders.router, prefix=f"{constant.API_PREFIX}/orders", tags=["orders"])

Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
app.mount(uploads.UPLOAD_URL_PREFIX, StaticFiles(directory=settings.upload_dir), name="uploads")
