from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from ledger.config import settings
from ledger.api.deps import DB
from ledger.api.v1.router import api_router
from ledger.core.exceptions import LedgerError
from ledger.database import init_db
from ledger.jobs.scheduler import start_scheduler, shutdown_scheduler
from ledger.services.notification_service import NotificationDispatcher, build_notifier

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
    - Configure logging
    - Create ledger tables
    - Start the reconciliation scheduler

    Shutdown:
    - Wait for in-flight notifications
    - Stop the scheduler
    """
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    await init_db()

    if settings.RECONCILE_ENABLED:
        start_scheduler(settings.RECONCILE_INTERVAL_MINUTES)

    yield

    # Shutdown
    await app.state.dispatcher.drain()
    shutdown_scheduler()
    logger.info("Shutting down...")


API_DESCRIPTION = """
## Seller Commission Ledger

Tracks commission earned by marketplace sellers, confirms cash on delivery
revenue, and controls withdrawals so a seller can never withdraw more than
their confirmed, unreserved balance.

### Error Codes

| Code | Description |
|------|-------------|
| 400 | Invalid amount |
| 404 | Seller, order or withdrawal not found |
| 409 | Insufficient balance or invalid state transition |
"""

# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=API_DESCRIPTION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.state.dispatcher = NotificationDispatcher(
    build_notifier(settings.NOTIFY_WEBHOOK_URL, timeout=settings.NOTIFY_TIMEOUT_SECONDS)
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API router
app.include_router(api_router)


@app.exception_handler(LedgerError)
async def ledger_exception_handler(request: Request, exc: LedgerError):
    """Map ledger business-rule errors to 4xx JSON responses."""
    logger.info(f"{request.method} {request.url.path} -> {type(exc).__name__}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.message,
            "type": type(exc).__name__,
            "details": exc.details,
        },
    )


@app.get("/health", tags=["Health"])
async def health_check(db: DB):
    """Health check endpoint with database validation."""
    from datetime import datetime, timezone

    health_status = {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": {
            "database": "unknown"
        }
    }

    try:
        result = await db.execute(text("SELECT 1"))
        result.scalar()
        health_status["checks"]["database"] = "connected"
    except Exception as e:
        health_status["status"] = "unhealthy"
        health_status["checks"]["database"] = f"error: {str(e)}"

    if health_status["status"] == "unhealthy":
        return JSONResponse(status_code=503, content=health_status)

    return health_status


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint."""
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
