"""
FastAPI Application Entry Point - QR Order Service
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from qr_order.config import settings
from qr_order.database import init_db
from qr_order.logging_config import configure_logging
from qr_order.middleware import AdminGateMiddleware
from qr_order.api import admin, health, orders, pages, public
from qr_order.api.errors import register_exception_handlers

configure_logging()
logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title="QR Order Service",
    description="Restaurant order taking API with admin dashboard support",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Admin gate runs inside CORS so redirects still carry CORS headers
app.add_middleware(AdminGateMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "Idempotency-Key"],
    max_age=600,
)

register_exception_handlers(app)

# Include routers
app.include_router(health.router)
app.include_router(public.router)
app.include_router(orders.router)
app.include_router(admin.router)
app.include_router(pages.router)

# Prometheus metrics
Instrumentator().instrument(app).expose(app)


@app.on_event("startup")
def startup_event():
    """Initialize database on startup"""
    logger.info("Starting %s...", settings.SERVICE_NAME)
    init_db()
    logger.info("Database initialized")
    logger.info("CORS origins: %s", ", ".join(settings.cors_origins))
    logger.info("Order number format: %s", settings.ORDER_NO_FORMAT)
    if not settings.ADMIN_PASSWORD:
        logger.warning("ADMIN_PASSWORD is not set; admin login is disabled")
    logger.info("%s is running on port %s", settings.SERVICE_NAME, settings.SERVICE_PORT)


@app.on_event("shutdown")
def shutdown_event():
    """Cleanup on shutdown"""
    logger.info("Shutting down %s...", settings.SERVICE_NAME)
