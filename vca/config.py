"""Configuration loaded from environment (.env) and defaults."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Locate the project root .env file regardless of CWD
_THIS_DIR = Path(__file__).resolve().parent          # vca/
_PROJECT_ROOT = _THIS_DIR.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # LLM provider: openai | anthropic
    vca_llm_provider: str = "openai"

    # OpenAI
    openai_api_key: str | None = None
    vca_openai_model: str = "gpt-5.2"

    # Anthropic
    anthropic_api_key: str | None = None
    vca_anthropic_model: str = "claude-3-5-sonnet-20241022"

    # CORS origins (comma-separated). Defaults to localhost dev.
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    cors_origin_regex: str | None = None

    port: int = 8000
    log_level: str = "INFO"

    # Per-IP limit on POST/DELETE routes
    rate_limit_window_seconds: int = 60
    rate_limit_max_requests: int = 30

    # Background jobs
    job_retention_seconds: int = 30 * 60
    job_sweep_interval_seconds: int = 5 * 60
    max_concurrent_jobs: int = 4

    # Channel analytics aggregation
    analytics_cache_ttl_seconds: int = 15 * 60
    analytics_cache_sweep_seconds: int = 30 * 60
    analytics_chunk_size: int = 200
    discovery_page_size: int = 50
    discovery_max_pages: int = 400
    discovery_max_items: int = 10_000

    # Client-side polling defaults
    poll_interval_seconds: float = 2.0
    poll_timeout_seconds: float = 10 * 60

    # Remote video catalog (GitHub Gist)
    github_gist_token: str | None = None
    github_gist_id: str | None = None
    github_gist_filename: str = "youtube-videos-cache.json"

    @property
    def cors_origin_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


def get_settings() -> Settings:
    return Settings()
