"""
FastAPI Application Entry Point

Integrates:
  - WhatsApp bridge routes (send, client events, pairing status)
  - Retry queue lifecycle (bootstrap on startup, cancel timers on shutdown)
  - Health checks
  - Middleware for logging & error handling

Run: uvicorn main:app --host 0.0.0.0 --port 3000
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config import Config
from infra import BridgeBootstrap
from transport.whatsapp.webhook import router as whatsapp_router

# Setup logging
logging.basicConfig(
    level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan: startup and shutdown handlers.
    """
    # Startup
    bridge = BridgeBootstrap.get_instance()
    logger.info("=" * 60)
    logger.info("WhatsApp Bridge starting up...")
    logger.info(f"Webhook: {bridge.config.webhook_url}")
    logger.info(f"Client backend: {bridge.config.client_backend}")
    logger.info(f"Retry delay: {bridge.config.retry_delay}s")
    logger.info(f"Environment: {Config.ENVIRONMENT}")
    logger.info("=" * 60)

    yield

    # Shutdown
    logger.info("WhatsApp Bridge shutting down...")
    await bridge.shutdown()
    BridgeBootstrap.reset()


# Create FastAPI app
app = FastAPI(
    title="WhatsApp Relay Bridge",
    description="Relays WhatsApp events to a webhook consumer with retry",
    version="1.0.0",
    lifespan=lifespan,
)


# Middleware for logging
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests."""
    logger.debug(f"{request.method} {request.url.path}")
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"Request error: {str(e)}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )


# Include routers
app.include_router(whatsapp_router)


# Health check endpoints
@app.get("/health/live")
async def health_live():
    """Live health check (Kubernetes liveness probe)."""
    return {"status": "alive"}


@app.get("/health/ready")
async def health_ready():
    """Readiness health check (Kubernetes readiness probe)."""
    if not Config.validate():
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "reason": "missing configuration"},
        )
    return {"status": "ready"}


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "WhatsApp Relay Bridge",
        "version": "1.0.0",
        "status": "running",
        "endpoints": {
            "send_message": "POST /send-message",
            "client_events": "POST /client/events",
            "qr_code": "GET /qr-code",
            "relay_status": "GET /relay/status",
            "health_live": "GET /health/live",
            "health_ready": "GET /health/ready",
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=Config.BRIDGE_PORT,
    )
