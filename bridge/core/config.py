"""
Application configuration.

Loads settings from environment variables and .env file.
All configuration is centralized here and passed explicitly into the
components that need it.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

DEVELOPMENT = "development"


class Settings(BaseSettings):
    """Application settings loaded from environment.

    Attributes:
        project_name: Display name for the API.
        version: Current API version string.
        environment: Deployment mode. Only ``"development"`` exposes
            tracebacks in error responses.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        rate_limit_enabled: Whether the default rate limit is enforced.
        rate_limit_default: Default rate limit for all endpoints.
        sanitize_max_depth: Deepest nesting accepted in request payloads.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    project_name: str = "API Bridge"
    version: str = "0.1.0"
    environment: str = "production"
    log_level: str = "INFO"
    rate_limit_enabled: bool = True
    rate_limit_default: str = "60/minute"
    sanitize_max_depth: int = 32

    @property
    def include_error_stack(self) -> bool:
        """Whether error responses may carry a traceback."""
        return self.environment.lower() == DEVELOPMENT


settings = Settings()
