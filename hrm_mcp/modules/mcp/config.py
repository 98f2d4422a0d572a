"""Configuration for the MCP tool service."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings, read from HRM_MCP_* environment variables or .env."""

    # API Settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    log_level: str = "INFO"

    # Database Settings
    database_url: str = "postgresql+psycopg2://hrm_readonly@localhost:5432/hrm"
    db_schema: str = "public"
    db_pool_size: int = 5

    # AI provider Settings
    default_ai_provider: str = "claude"
    claude_api_key: str = ""
    claude_api_base: str = "https://api.anthropic.com/v1"
    claude_model: str = "claude-3-5-sonnet-20241022"
    gemini_api_key: str = ""
    gemini_api_base: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_model: str = "gemini-2.0-flash"
    llm_request_timeout: int = 45
    llm_max_attempts: int = 4

    # Tool catalog behaviour
    tool_selection_enabled: bool = True
    tool_description_limit: int = 140

    model_config = SettingsConfigDict(
        env_prefix="HRM_MCP_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()

SUPPORTED_AI_PROVIDERS = ("claude", "gemini")
