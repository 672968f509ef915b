from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MODELS: tuple[str, ...] = (
    "openai/gpt-4-turbo",  # factual accuracy
    "anthropic/claude-3-opus",  # nuanced sentiment
    "google/gemini-2.5-flash",  # competitive rankings
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # OpenRouter
    openrouter_api_key: str = ""  # leave empty to run on mock responses
    openrouter_api_url: str = "https://openrouter.ai/api/v1/chat/completions"
    openrouter_referer: str = "http://localhost"
    openrouter_app_title: str = "LLM Business Fingerprinting"

    # Models & sampling
    llm_models: list[str] = list(DEFAULT_MODELS)
    llm_max_tokens: int = 2000
    llm_request_timeout: float = 60.0  # seconds, per attempt

    # Dispatcher
    dispatch_batch_size: int = 5
    dispatch_batch_cooldown: float = 0.1  # seconds between batches

    # Retries (exponential backoff: base * 2^attempt)
    retry_max_attempts: int = 3
    retry_base_delay: float = 1.0
    retry_max_delay: float = 30.0

    # Development response cache (in-memory only)
    cache_enabled: bool | None = None  # None → enabled outside production
    cache_ttl_seconds: int = 24 * 60 * 60

    # Mock fallback responses
    mock_vary_output: bool = True  # False → same prompt always yields the same mock text
    mock_seed: int | None = None

    # App
    app_env: str = "development"

    # Logging
    log_level: str = "INFO"
    log_json: bool = False  # set True in production for structured JSON logs

    @property
    def caching_enabled(self) -> bool:
        if self.cache_enabled is None:
            return self.app_env != "production"
        return self.cache_enabled


settings = Settings()


def validate_settings(config: Settings | None = None) -> None:
    """Validate dispatcher and retry settings. Called by entry points before the first run."""
    config = config or settings
    errors: list[str] = []

    if not config.llm_models:
        errors.append("LLM_MODELS must list at least one model")

    if config.dispatch_batch_size < 1:
        errors.append("DISPATCH_BATCH_SIZE must be at least 1")

    if config.dispatch_batch_cooldown < 0:
        errors.append("DISPATCH_BATCH_COOLDOWN must not be negative")

    if config.retry_max_attempts < 1:
        errors.append("RETRY_MAX_ATTEMPTS must be at least 1")

    if config.retry_base_delay < 0 or config.retry_max_delay < config.retry_base_delay:
        errors.append("RETRY_BASE_DELAY must be >= 0 and not exceed RETRY_MAX_DELAY")

    if config.cache_ttl_seconds <= 0:
        errors.append("CACHE_TTL_SECONDS must be positive")

    if errors:
        raise SystemExit("Configuration errors:\n  - " + "\n  - ".join(errors))
