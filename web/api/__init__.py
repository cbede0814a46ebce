"""FastAPI backend for the Leekha web UI."""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from web.api.routes import games
from web.api.session_manager import session_manager

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - stop running games on shutdown."""
    yield
    logger.info("Shutting down, closing game sessions")
    await session_manager.shutdown()


app = FastAPI(
    title="Leekha Game API",
    description="API for playing Leekha against heuristic bot partnerships",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS for frontend
cors_origins = [
    "http://localhost:5173",
    "http://localhost:3000",
]

# Add production frontend URL if set
prod_url = os.environ.get("FRONTEND_URL")
if prod_url:
    cors_origins.append(prod_url)

logger.info(f"CORS origins configured: {cors_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(games.router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
