"""
FastAPI application - REST adapter for the wellness agents.

Usage:
    python run_api.py

Or directly:
    uvicorn adapters.rest.app:app --host 0.0.0.0 --port 8000 --reload
"""

from __future__ import annotations

import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Ensure src/ is on sys.path when invoked via uvicorn directly
_src_dir = Path(__file__).resolve().parent.parent.parent
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

from infrastructure.config import Settings
from factory import ServiceFactory
from adapters.rest.dependencies import set_factory
from adapters.rest.routers import agents, insights, journal, metrics, mood, recommendations, users

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize ServiceFactory on startup."""
    factory = ServiceFactory(Settings.from_env())
    await factory.initialize()
    set_factory(factory)
    yield
    # No teardown needed: aiosqlite connections are per-operation


app = FastAPI(
    title="Wellness Agents",
    version=VERSION,
    description="Five cooperating wellness agents: mood, nutrition, fitness, mental wellness and insights.",
    lifespan=lifespan,
)

# CORS: permissive for development; tighten allowed_origins in production
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(mood.router, prefix="/api")
app.include_router(journal.router, prefix="/api")
app.include_router(agents.router, prefix="/api")
app.include_router(recommendations.router, prefix="/api")
app.include_router(insights.router, prefix="/api")
app.include_router(metrics.router, prefix="/api")
app.include_router(users.router, prefix="/api")


@app.get("/health", tags=["health"])
async def health():
    return {
        "status": "healthy",
        "version": VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
