"""
FastAPI application for the interview completion relay

This module creates and configures the FastAPI application with:
- CORS middleware for the dashboard frontend
- Interview completion routes
- Health check endpoint
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from interview_chat.api.models import HealthResponse
from interview_chat.api.routes import interview
from interview_chat.config.settings import settings
from interview_chat.services.backend import BackendClient
from interview_chat.utils.logger import setup_logger


setup_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan events

    - Startup: open the shared backend client
    - Shutdown: close it
    """
    logger.info("🚀 Completion relay starting...")
    logger.info(f"🔗 Backend API: {settings.backend_api_url}")

    app.state.backend = BackendClient()

    yield

    logger.info("🛑 Completion relay shutting down...")
    try:
        await app.state.backend.aclose()
        logger.info("✅ Backend client closed")
    except Exception as e:
        logger.warning(f"Error closing backend client: {e}")


# Create FastAPI application
app = FastAPI(
    title="Interview Chat Relay API",
    description="""
    Relay endpoints for agent-driven interviews.

    Use `/api/complete-interview` once an interview reached its exchange
    threshold. The relay marks the interview complete on the backend and
    triggers document processing and knowledge-base training.
    """,
    version=settings.service_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(interview.router)


@app.get("/", tags=["root"])
async def root():
    """
    Root endpoint - API information
    """
    return {
        "service": settings.service_name,
        "version": settings.service_version,
        "status": "running",
        "docs": "/docs",
        "endpoints": {
            "health": "/health",
            "complete_interview": "/api/complete-interview"
        }
    }


@app.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check():
    """
    Health check endpoint

    Returns:
        HealthResponse with service status
    """
    return HealthResponse(
        status="healthy",
        service=settings.service_name,
        version=settings.service_version
    )
