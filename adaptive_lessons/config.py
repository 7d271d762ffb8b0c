import logging
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

_PLACEHOLDER_API_KEY = "your-openai-api-key-here"


class Settings(BaseSettings):
    api_key: str = _PLACEHOLDER_API_KEY
    model_name: str = "gpt-4o"
    # AI provider: "openai" or "anthropic"
    ai_provider: str = "openai"
    # Anthropic API key (optional, only needed if ai_provider=anthropic)
    anthropic_api_key: str = ""
    # Model override for lesson generation (empty = use default model_name)
    lesson_model: str = "gpt-4o-mini"
    ai_temperature: float = 0.7
    ai_max_tokens: int = 4096
    # Attempts per model call; 1 means a failed call surfaces immediately
    ai_max_attempts: int = 1
    # Database path - can be overridden via DATABASE_PATH env var for Docker
    database_path: str = "adaptive_lessons.db"
    # Storage key and size cap of the persisted lesson-result log
    performance_log_key: str = "english-learning-performance"
    performance_log_limit: int = 100
    # Pacing between consecutive generation calls in a sequence
    best_effort_delay_ms: int = 500
    strict_delay_ms: int = 1000
    # Environment: "dev" (default) or "prod"
    env: str = "dev"
    # CORS origins for prod (comma-separated)
    cors_origins: str = ""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def has_api_key(self) -> bool:
        if self.ai_provider.lower() == "anthropic" or self.lesson_model.lower().startswith("claude-"):
            return bool(self.anthropic_api_key)
        return bool(self.api_key) and self.api_key != _PLACEHOLDER_API_KEY


def _load_settings() -> Settings:
    """Load settings, warning about missing credentials instead of failing.

    The analytics half of the pipeline works without any API key; only the
    HTTP server insists on one (see server.lifespan).
    """
    s = Settings()

    if not s.has_api_key:
        logger.warning(
            "API_KEY is not set; lesson generation calls will fail until it is configured"
        )

    if s.performance_log_limit < 1:
        logger.warning("PERFORMANCE_LOG_LIMIT=%d is invalid, using 100", s.performance_log_limit)
        s.performance_log_limit = 100

    return s


settings = _load_settings()
