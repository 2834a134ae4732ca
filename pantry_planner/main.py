"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pantry_planner.api import auth, pantries, planner, profile, recipes, vision, websocket
from pantry_planner.config import get_settings

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    logger.info(f"Starting Pantry Planner API ({settings.environment})")
    if not settings.ai_configured:
        logger.warning("ANTHROPIC_API_KEY is not set; AI endpoints will be unavailable")
    yield


app = FastAPI(
    title="Pantry Planner API",
    description="Pantry stock tracking with AI recipes, meal plans and receipt scanning",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware for development
if settings.is_development:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",
            "http://localhost:5173",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Register routers
app.include_router(auth.router)
app.include_router(pantries.router)
app.include_router(recipes.router)
app.include_router(planner.router)
app.include_router(vision.router)
app.include_router(profile.router)
app.include_router(websocket.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "environment": settings.environment}
