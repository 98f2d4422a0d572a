"""Health endpoint."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..modules.mcp.tools import all_tools
from . import mcp as mcp_router

router = APIRouter(prefix="/api", tags=["monitoring"])


@router.get("/health")
def health_check() -> JSONResponse:
    """
    Health check endpoint.

    Returns 503 when the dispatcher is not initialised or the database is
    unreachable.
    """
    tool_dispatcher = mcp_router.dispatcher
    if tool_dispatcher is None:
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "error": "Tool dispatcher not initialized"},
        )

    database_ok = tool_dispatcher.executor.store.ping()
    return JSONResponse(
        status_code=200 if database_ok else 503,
        content={
            "status": "healthy" if database_ok else "unhealthy",
            "service": "hrm-mcp",
            "components": {
                "api": "operational",
                "database": "operational" if database_ok else "unreachable",
            },
            "tools": len(all_tools()),
        },
    )
