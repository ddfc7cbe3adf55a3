"""Inpicker — FastAPI application entry point."""
from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routers import brands, custom_pencils, inventory, match
from .services.catalog import load_builtin_catalog
from .services.color_matcher import ColorMatcher
from .services.pencil_store import PencilStore

CORS_ORIGINS = os.environ.get(
    "CORS_ORIGINS",
    "http://localhost:5173,http://localhost:3000,http://127.0.0.1:5173",
).split(",")

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Built-in catalog is loaded once and shared read-only by every request
    built_in = load_builtin_catalog()
    app.state.matcher = ColorMatcher(built_in)
    app.state.store = PencilStore(built_in)
    logger.info(f"Pencil catalog ready: {len(built_in)} built-in entries")

    yield


app = FastAPI(
    title="Inpicker",
    description="Colored-pencil collection tracker and color matcher",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS — allow the Vite dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in CORS_ORIGINS if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes
app.include_router(match.router)
app.include_router(custom_pencils.router)
app.include_router(inventory.router)
app.include_router(brands.router)


@app.get("/health")
async def health() -> dict:
    matcher = getattr(app.state, "matcher", None)
    return {
        "status": "ok",
        "catalog_size": len(matcher.built_in) if matcher else 0,
    }


@app.get("/")
async def root() -> dict:
    return {"message": "Inpicker API", "docs": "/docs"}
