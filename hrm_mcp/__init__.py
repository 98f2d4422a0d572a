"""HRM MCP service: guarded SQL execution and tool dispatch for LLM clients."""

__version__ = "1.0.0"
