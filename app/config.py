"""Configuration settings for Novel Forge backend."""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import model_validator, field_validator


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Service settings
    app_name: str = "Novel Forge Backend"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8080

    # Supabase settings
    supabase_url: str
    supabase_service_role_key: str | None = None
    # Support alternative name from .env (SUPABASE_SERVICE_KEY)
    supabase_service_key: str | None = None

    # Upstream LLM API settings (OpenAI-compatible chat completions endpoint)
    llm_api_url: str
    llm_api_key: str
    llm_model: str
    llm_timeout: int = 60
    llm_stream_timeout: int = 300

    # Streaming chat settings
    stream_idle_timeout: float = 60.0
    max_concurrent_streams: int = 32

    # CORS settings
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from comma-separated string or JSON list."""
        if isinstance(v, str):
            # Try JSON first
            try:
                import json
                return json.loads(v)
            except (json.JSONDecodeError, ValueError):
                # If not JSON, treat as comma-separated string
                return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_config(self):
        """Validate all required configuration."""
        errors = []

        # Validate Supabase
        if not self.supabase_url:
            errors.append("SUPABASE_URL is required")
        elif not self.supabase_url.startswith("http"):
            errors.append("SUPABASE_URL must be a valid HTTP/HTTPS URL")

        if not self.supabase_service_role_key and not self.supabase_service_key:
            errors.append("Either SUPABASE_SERVICE_ROLE_KEY or SUPABASE_SERVICE_KEY must be set")

        # Validate upstream LLM API
        if not self.llm_api_url:
            errors.append("LLM_API_URL is required")
        elif not self.llm_api_url.startswith("http"):
            errors.append("LLM_API_URL must be a valid HTTP/HTTPS URL")

        if not self.llm_api_key:
            errors.append("LLM_API_KEY is required")

        if not self.llm_model:
            errors.append("LLM_MODEL is required")

        if self.max_concurrent_streams < 1:
            errors.append("MAX_CONCURRENT_STREAMS must be at least 1")

        if errors:
            raise ValueError(f"Configuration errors: {', '.join(errors)}")

        return self

    @property
    def supabase_key(self) -> str:
        """Get Supabase service key (prefer service_role_key)."""
        return self.supabase_service_role_key or self.supabase_service_key or ""


settings = Settings()
