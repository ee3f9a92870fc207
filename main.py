"""
FastAPI Application Entry Point

Integrates:
  - AI proxy endpoint (/api/gemini)
  - Health checks
  - Middleware for logging & error handling

Run: uvicorn main:app --reload --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from advisor.health import HealthChecker
from config import Config
from inference import ModelBackend
from infra import bootstrap_infrastructure, get_model_backend
from transport.proxy import method_not_allowed_handler
from transport.proxy import router as proxy_router

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

health_checker = HealthChecker()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan: startup and shutdown handlers.
    """
    # Startup
    infra = bootstrap_infrastructure()
    logger.info("=" * 60)
    logger.info("EcoFarm AI proxy starting up...")
    logger.info(f"Environment: {Config.ENVIRONMENT}")
    logger.info(f"LLM Backend: {infra.config.llm_backend} ({infra.llm_backend.model_name})")
    missing = Config.missing()
    if missing:
        logger.error(f"Missing required environment variables: {', '.join(missing)}")
        logger.error("/api/gemini will answer 500 until they are set")
    else:
        logger.info("Upstream credential: ✓ configured")
    logger.info("=" * 60)

    yield

    # Shutdown
    logger.info("EcoFarm AI proxy shutting down...")


# Create FastAPI app
app = FastAPI(
    title="EcoFarm AI Proxy",
    description="Agricultural question answering backed by a generative-AI service",
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
            content={"error": "Internal server error", "status": 500},
        )


# Include routers
app.include_router(proxy_router)
app.add_exception_handler(StarletteHTTPException, method_not_allowed_handler)


# Health check endpoints
@app.get("/health/live")
async def health_live(backend: ModelBackend = Depends(get_model_backend)):
    """Live health check (Kubernetes liveness probe)."""
    return health_checker.to_dict(health_checker.check_live(backend))


@app.get("/health/ready")
async def health_ready(backend: ModelBackend = Depends(get_model_backend)):
    """Readiness health check (Kubernetes readiness probe)."""
    status = health_checker.check_ready(backend)
    return JSONResponse(
        content=health_checker.to_dict(status),
        status_code=200 if status.ready else 503,
    )


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "EcoFarm AI Proxy",
        "version": "1.0.0",
        "status": "running",
        "endpoints": {
            "ask": "POST /api/gemini",
            "health_live": "GET /health/live",
            "health_ready": "GET /health/ready",
            "config_info": "GET /config/info",
        },
    }


@app.get("/config/info")
async def config_info(backend: ModelBackend = Depends(get_model_backend)):
    """Get non-sensitive configuration info."""
    return {
        "environment": Config.ENVIRONMENT,
        "llm_backend": bootstrap_infrastructure().config.llm_backend,
        "model": backend.model_name,
        "credential_configured": backend.configured,
        "agent_port": Config.AGENT_PORT,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=Config.AGENT_PORT,
        reload=Config.ENVIRONMENT == "development",
    )
