"""FastAPI application entry point."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from scopegen.api.intakes import router as intakes_router
from scopegen.api.scopes import router as scopes_router
from scopegen.config import settings
from scopegen.db import create_tables
from scopegen.generation.backend import AnthropicBackend

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup (no migrations yet) and report generation config."""
    logger.info("Starting Scopegen API...")
    await create_tables()
    logger.info("Database tables created")
    if not AnthropicBackend().is_available():
        logger.warning("ANTHROPIC_API_KEY is not set; scope generation will return 503")
    yield
    logger.info("Shutting down Scopegen API...")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    lifespan=lifespan,
)

# CORS middleware - allow frontend to make requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    logger.info(f"→ {request.method} {request.url.path}")
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        f"← {request.method} {request.url.path} {response.status_code} ({elapsed_ms:.0f}ms)"
    )
    return response


app.include_router(intakes_router, prefix="/api/v1")
app.include_router(scopes_router, prefix="/api/v1")


@app.get("/health")
async def health():
    """Liveness plus whether scope generation can run."""
    backend = AnthropicBackend()
    return {
        "status": "healthy",
        "version": settings.app_version,
        "generation": {
            "model": backend.model,
            "configured": backend.is_available(),
        },
    }
