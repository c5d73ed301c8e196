"""REST API module for the marketplace.

This module provides HTTP endpoints for:
- Creating, tokenizing and browsing assets
- Buying assets and querying sales history
- Searching assets by text, price and status
- Deploying the collection contract
- Marketplace health and gas prices
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings_conf
from database import MarketplaceStore, init_db, close as db_close
from chain import ChainGateway, create_gateway
from .errors import register_exception_handlers

logger = logging.getLogger(__name__)

API_TITLE = "Tokenized Asset Marketplace API"
API_VERSION = "1.0.0"

# Lifecycle management
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events."""
    # Startup
    logger.info("Initializing API...")
    if app.state.store is None:
        app.state.store = init_db(app.state.settings)
    if app.state.gateway is None:
        app.state.gateway = create_gateway(app.state.settings)

    yield

    # Shutdown
    logger.info("Shutting down API...")
    await db_close(app.state.store)

def create_app(
    store: Optional[MarketplaceStore] = None,
    gateway: Optional[ChainGateway] = None,
    settings: Optional[Dict[str, Any]] = None
) -> FastAPI:
    """Build the application.

    Args:
        store: Optional store. If not provided, one is loaded from settings at startup.
        gateway: Optional chain gateway. If not provided, one is built from settings at startup.
        settings: Optional settings dict. If not provided, uses settings.conf.
    """
    app = FastAPI(
        title=API_TITLE,
        description="Register assets, mint them on a test network and track simulated sales",
        version=API_VERSION,
        lifespan=lifespan
    )
    app.state.store = store
    app.state.gateway = gateway
    app.state.settings = settings if settings is not None else settings_conf

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    @app.get("/")
    async def root():
        return {
            "name": API_TITLE,
            "version": API_VERSION,
            "status": "running"
        }

    # Import and include all routers
    from .assets import router as assets_router
    from .sales import router as sales_router
    from .system import router as system_router

    app.include_router(assets_router)
    app.include_router(sales_router)
    app.include_router(system_router)

    return app

app = create_app()

__all__ = ['app', 'create_app']
