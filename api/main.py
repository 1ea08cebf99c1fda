"""FastAPI application entry point with lifespan management."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from elicit.config import AppConfig
from elicit.handler import build_handler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle.

    Startup:
        1. Initialize AppConfig singleton (API key, paths, model identifiers).
        2. Build the session handler and store it on app.state.

    Shutdown:
        Stop the final-synthesis thread pool.
    """
    logger.info("Starting elicitation API...")

    config = AppConfig.get()
    logger.info("Config loaded: data_dir=%s", config.paths.data_dir)

    # A handler placed on app.state before startup (tests, embedding) is kept.
    if getattr(app.state, "handler", None) is None:
        app.state.handler = build_handler(config)
    app.state.config = config

    logger.info("Startup complete: db=%s", config.paths.db_path)

    yield

    app.state.handler.final.shutdown()
    logger.info("Shutting down elicitation API.")


app = FastAPI(
    title="Elicitation API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

from api.routes.sessions import router as sessions_router

app.include_router(sessions_router)


@app.get("/api/v1/health")
async def health():
    """Liveness check."""
    return {"status": "ok"}
