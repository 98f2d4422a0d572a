"""HRM relational model used by the MCP tools."""

from .db import Base, build_engine, build_session_factory, init_db, session_scope

__all__ = ["Base", "build_engine", "build_session_factory", "init_db", "session_scope"]
