"""
FastAPI Application Entry Point

Integrates:
  - Gemini dispatch endpoint (/api/gemini)
  - Health checks
  - Middleware for logging & error handling

Run: uvicorn main:app --reload --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from api import router as gemini_router
from config import Config
from dispatcher import Dispatcher

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
    logger.info("=" * 60)
    logger.info("Integration Finder API starting up...")
    logger.info(f"Environment: {Config.ENVIRONMENT}")
    logger.info(f"LLM Backend: {Config.LLM_BACKEND} ({Config.GEMINI_MODEL})")

    if not Config.validate():
        logger.warning("Starting without credentials; /health/ready will report not_ready")

    if getattr(app.state, "dispatcher", None) is None:
        from infra import bootstrap_infrastructure

        app.state.dispatcher = bootstrap_infrastructure().get_dispatcher()

    logger.info(f"Credential pool: {len(app.state.dispatcher.pool)} key(s)")
    logger.info("=" * 60)

    yield

    # Shutdown
    logger.info("Integration Finder API shutting down...")


def create_app(dispatcher: Optional[Dispatcher] = None) -> FastAPI:
    """
    Create FastAPI application.

    Args:
        dispatcher: Pre-built dispatcher (tests inject fake pools here).
            When omitted it is bootstrapped from the environment on startup.
    """
    app = FastAPI(
        title="Integration Finder API",
        description="Course integration finder backed by Gemini with multi-key failover",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.dispatcher = dispatcher

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Restrict this in production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
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
                content={"error": "Internal server error"},
            )

    # Include routers
    app.include_router(gemini_router)

    # Health check endpoints
    @app.get("/health/live")
    async def health_live():
        """Live health check (Kubernetes liveness probe)."""
        return {"status": "alive"}

    @app.get("/health/ready")
    async def health_ready(request: Request):
        """Readiness health check: ready once at least one API key is loaded."""
        current: Optional[Dispatcher] = getattr(request.app.state, "dispatcher", None)
        if current is None or current.pool.is_empty:
            return JSONResponse(
                status_code=503,
                content={"status": "not_ready", "reason": "No API keys configured (GOOGLE_API_KEYS)"},
            )
        return {"status": "ready", "keys": len(current.pool)}

    @app.get("/")
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Integration Finder API",
            "version": "1.0.0",
            "status": "running",
            "endpoints": {
                "generate": "POST /api/gemini",
                "health_live": "GET /health/live",
                "health_ready": "GET /health/ready",
            },
        }

    return app


# Create FastAPI app
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=Config.AGENT_PORT,
        reload=Config.ENVIRONMENT == "development",
    )
