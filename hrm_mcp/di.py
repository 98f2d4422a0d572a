"""
Dependency wiring for the MCP tool service.

Builds, once per process:
- SQLAlchemy engine and session factory
- guarded SQL executor and schema introspector
- HRM handlers and HYPER insights
- report generators per AI provider
- the tool dispatcher shared by HTTP, stdio and CLI
"""

from functools import lru_cache

from loguru import logger
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from .modules.hrm.db import build_engine, build_session_factory
from .modules.mcp.config import Settings, settings
from .modules.mcp.dispatcher import ToolDispatcher
from .modules.mcp.executor import BoundedExecutor
from .modules.mcp.handlers import HRMHandlers
from .modules.mcp.insights import HyperInsights
from .modules.mcp.introspector import SchemaIntrospector
from .modules.mcp.llm_client import ClaudeClient, GeminiClient
from .modules.mcp.reports import ClaudeReportGenerator, GeminiReportGenerator, ReportGenerator
from .modules.mcp.store import SqlStore


def build_report_generators(config: Settings) -> dict[str, ReportGenerator]:
    claude = ClaudeClient(
        api_key=config.claude_api_key,
        model=config.claude_model,
        api_base=config.claude_api_base,
        request_timeout=config.llm_request_timeout,
        max_attempts=config.llm_max_attempts,
    )
    gemini = GeminiClient(
        api_key=config.gemini_api_key,
        model=config.gemini_model,
        api_base=config.gemini_api_base,
        request_timeout=config.llm_request_timeout,
        max_attempts=config.llm_max_attempts,
    )
    if not config.claude_api_key and not config.gemini_api_key:
        logger.warning("[DI] No AI provider key configured; report tools will fail")
    return {"claude": ClaudeReportGenerator(claude), "gemini": GeminiReportGenerator(gemini)}


def build_dispatcher(
    engine: Engine,
    config: Settings = settings,
    session_factory: sessionmaker | None = None,
    report_generators: dict[str, ReportGenerator] | None = None,
) -> ToolDispatcher:
    """Wire a dispatcher over ``engine``; tests pass their own engine and fakes."""
    factory = session_factory or build_session_factory(engine)
    introspector = SchemaIntrospector(engine, schema=config.db_schema)
    executor = BoundedExecutor(SqlStore(engine), introspector)

    dispatcher = ToolDispatcher(
        executor=executor,
        introspector=introspector,
        handlers=HRMHandlers(factory),
        insights=HyperInsights(factory),
        report_generators=report_generators or build_report_generators(config),
        default_provider=config.default_ai_provider,
    )
    logger.info(f"[DI] Tool dispatcher ready (default provider: {config.default_ai_provider})")
    return dispatcher


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    logger.info("[DI] Creating database engine")
    return build_engine(settings.database_url, pool_size=settings.db_pool_size)


@lru_cache(maxsize=1)
def get_dispatcher() -> ToolDispatcher:
    return build_dispatcher(get_engine(), settings)
