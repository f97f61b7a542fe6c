from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration read from environment variables."""

    app_name: str = Field(default="Intake API")
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="%(asctime)s %(levelname)s %(name)s %(message)s")
    # Comma separated ``logger=LEVEL`` overrides, e.g. "intake.extraction=DEBUG"
    log_levels: str | None = Field(default=None)

    # Static role tokens
    admin_token: str = Field(default="admin-token")
    engineer_token: str = Field(default="engineer-token")

    # Completion service configuration
    anthropic_api_key: str | None = Field(default=None)
    anthropic_base_url: str = Field(default="https://api.anthropic.com")
    anthropic_model: str = Field(default="claude-sonnet-4-20250514")
    anthropic_version: str = Field(default="2023-06-01")
    completion_max_tokens: int = Field(default=4000)
    completion_timeout: float = Field(default=60.0)

    # Branding
    vendor_name: str = Field(default="Laplace")
    response_language: str = Field(default="Japanese")
    export_prefix: str = Field(default="laplace")

    # Observability configuration
    otel_enabled: bool = Field(default=False)
    otel_service_name: str = Field(default="intake-api")
    otel_exporter_otlp_endpoint: str | None = Field(default=None)
    otel_exporter_otlp_headers: str | None = Field(default=None)

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache
def get_settings() -> Settings:
    """Return a cached instance of the application settings."""

    return Settings()
