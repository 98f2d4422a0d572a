"""
HRM MCP service - Unified API

Exposes the HRM tool catalog, guarded SQL and report tools over HTTP.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from . import __version__
from .di import get_dispatcher
from .modules.mcp.tools import all_tools
from .routers import mcp, monitoring


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle manager."""
    logger.info("=== Starting HRM MCP service ===")

    mcp.dispatcher = get_dispatcher()

    if mcp.dispatcher.executor.store.ping():
        tables = mcp.dispatcher.introspector.table_names()
        logger.info(f"Database connected: {len(tables)} tables visible")
    else:
        logger.warning("Database not reachable at startup; tools will report errors")

    logger.info(f"=== {len(all_tools())} tools ready ===")

    yield

    # Shutdown
    logger.info("=== Shutting down ===")
    mcp.dispatcher = None


def create_app(use_lifespan: bool = True) -> FastAPI:
    application = FastAPI(
        title="HRM MCP Service",
        description="Guarded SQL execution and MCP tool dispatch for the HRM platform",
        version=__version__,
        lifespan=lifespan if use_lifespan else None,
    )

    # CORS middleware
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(monitoring.router)
    application.include_router(mcp.router)

    @application.get("/")
    async def root():
        return {
            "message": "HRM MCP Service API",
            "docs": "/docs",
            "modules": {"mcp": "/api/mcp", "health": "/api/health"},
        }

    return application


app = create_app()
