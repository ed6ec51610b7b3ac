"""
FastAPI Application Entry Point

This module initializes and configures the FastAPI application for the
multilingual sentiment analysis service. It sets up CORS, exception
handlers and registers all API routes.

Lifecycle Management:
    STARTUP:
    1. Configure logging
    2. Build the persistence gateway (local store, optional remote store)
    3. Build the analysis pipeline (extractors, classifier, generator)
    4. Register both with the API dependencies

    SHUTDOWN:
    - Nothing to flush: the local store writes through on every change
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sentiment_service import __version__
from sentiment_service.api import dependencies
from sentiment_service.api.routes import analysis, records
from sentiment_service.config.settings import configure_logging, settings
from sentiment_service.exceptions import SentimentServiceError
from sentiment_service.models.schemas import HealthCheckResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build services at startup; fail fast if that is impossible."""
    configure_logging()

    logger.info("=" * 60)
    logger.info("Sentiment Analysis Service - Starting up...")
    logger.info("=" * 60)

    try:
        logger.info("1/2 Initializing persistence gateway...")
        gateway = dependencies.build_gateway(settings)
        logger.info(
            f"  ✓ Persistence ready (remote={'on' if gateway.remote_enabled else 'off'}, "
            f"pending sync={gateway.pending_sync_count()})"
        )

        logger.info("2/2 Initializing analysis pipeline...")
        orchestrator = dependencies.build_orchestrator(settings, gateway)
        logger.info(
            f"  ✓ Pipeline ready (classifier={orchestrator.classifier.health_check()}, "
            f"generator={orchestrator.summarizer.client.health_check()['status']})"
        )

        dependencies.set_services(orchestrator, gateway)

        logger.info("=" * 60)
        logger.info("✓ Sentiment Analysis Service - Startup complete!")
        logger.info("=" * 60)

    except Exception as e:
        logger.error(f"✗ STARTUP FAILED: {str(e)}")
        raise

    yield

    logger.info("Sentiment Analysis Service - Shutting down...")
    dependencies.set_services(None, None)
    logger.info("✓ Shutdown complete")


app = FastAPI(
    title="Multilingual Sentiment Analyzer",
    description="Sentiment analysis for text, files and web pages with AI insights",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Exception handlers
# ============================================================================

@app.exception_handler(SentimentServiceError)
async def service_error_handler(request: Request, exc: SentimentServiceError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.error} {exc.details or ''}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.error}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', []))}: {err.get('msg')}"
        for err in exc.errors()
    )
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "details": details}
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"error": "An error occurred during analysis", "details": str(exc)}
    )


# ============================================================================
# Health
# ============================================================================

@app.get("/")
async def root():
    """Root endpoint - API health check"""
    return {
        "status": "healthy",
        "service": "Multilingual Sentiment Analyzer",
        "version": __version__
    }


@app.get("/health", response_model=HealthCheckResponse)
def health_check():
    """
    Collaborator reachability.

    Classifier and generator report whether their API keys are configured;
    the remote store whether it is configured; pendingSync counts records
    waiting in local storage.
    """
    orchestrator = dependencies._orchestrator
    gateway = dependencies._gateway
    ready = orchestrator is not None and gateway is not None

    services = {
        "api": "up",
        "classifier": orchestrator.classifier.health_check() if orchestrator else "unknown",
        "generator": (
            orchestrator.summarizer.client.health_check()["status"] if orchestrator else "unknown"
        ),
        "remote_store": (
            ("configured" if gateway.remote_enabled else "disabled") if gateway else "unknown"
        ),
        "pipeline": "up" if ready else "down",
    }
    return HealthCheckResponse(
        status="healthy" if ready else "degraded",
        services=services,
        pending_sync=gateway.pending_sync_count() if gateway else 0
    )


app.include_router(analysis.router, prefix="/api", tags=["analysis"])
app.include_router(records.router, prefix="/api", tags=["records"])
