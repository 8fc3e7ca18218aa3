"""
Main FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import Dict

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logfire

from config import settings
from database import check_db_connection, get_db_info, init_db
from observability.logfire_config import LogfireConfig
from api.routes import sequences_router, tov_configs_router, prospects_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    # Initialize Logfire first so we can use structured logging
    LogfireConfig.initialize(token=settings.logfire_token)

    logfire.info(
        "Starting Outreach Sequencer API Server",
        environment=settings.environment,
        debug=settings.debug,
        llm_provider=settings.llm_provider,
        primary_model=settings.active_primary_model,
        fallback_model=settings.active_fallback_model,
    )

    if settings.auto_create_tables:
        init_db()

    db_info = get_db_info()
    if db_info['status'] == 'connected':
        logfire.info(
            "Database connection successful",
            url=db_info['url'],
            status=db_info['status'],
        )
    else:
        logfire.error(
            "Database connection failed",
            url=db_info['url'],
            status=db_info['status'],
        )

    if not settings.is_self_hosted and not settings.openai_api_key:
        logfire.warning(
            "OPENAI_API_KEY is not set",
            hint="Set OPENAI_API_KEY, or LLM_PROVIDER=ollama for a self-hosted model",
        )

    logfire.info("Outreach Sequencer API Server startup complete")

    yield

    logfire.info("Shutting down Outreach Sequencer API Server")


app = FastAPI(
    title="Outreach Sequencer API",
    description="Generates personalized multi-step outreach sequences with a two-pass LLM pipeline",
    version="1.0.0",
    lifespan=lifespan,
    debug=settings.debug,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Health Check Endpoints
# ============================================================================

@app.get("/health", tags=["Health"])
async def health_check() -> Dict[str, str]:
    """
    Health check endpoint for load balancers and monitoring.

    Returns:
        dict: Health status of the application and database
    """
    db_connected = check_db_connection()

    return {
        "status": "healthy" if db_connected else "degraded",
        "service": "outreach-sequencer",
        "version": "1.0.0",
        "database": "connected" if db_connected else "disconnected",
        "environment": settings.environment,
    }


@app.get("/", tags=["Root"])
async def root() -> Dict[str, str]:
    """
    Root endpoint - API information.
    """
    return {
        "name": "Outreach Sequencer API",
        "version": "1.0.0",
        "description": "Personalized outreach sequence generation",
        "docs": "/docs",
        "health": "/health",
    }


# ============================================================================
# API Routers
# ============================================================================

app.include_router(sequences_router)
app.include_router(tov_configs_router)
app.include_router(prospects_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
    )
