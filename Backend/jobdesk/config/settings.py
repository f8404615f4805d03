# =============================================================================
# Application Settings
# =============================================================================
"""
Pydantic Settings configuration for the JobDesk backend.

Loads configuration from environment variables with validation and type safety.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    The .env file is automatically loaded if present.

    Attributes:
        app_name: Name of the application.
        app_env: Current environment (development, staging, production).
        debug: Enable debug mode for verbose logging.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        api_host: Host address for the API server.
        api_port: Port number for the API server.
        allowed_origins: Comma-separated list of CORS origins allowed in production.
        anthropic_api_key: API key for Anthropic Claude API.
        claude_model: Claude model used for cover letter drafting.
        completion_timeout_seconds: Timeout for a single completion call.
        completion_max_tokens: Maximum output tokens for a completion.
        research_timeout_seconds: Timeout for a company research completion.
        research_max_tokens: Maximum output tokens for a company research report.
        max_input_chars: Maximum length of résumé and job description inputs.
        jd_fetch_timeout_seconds: Total time budget for importing a job posting URL.
        jd_max_response_bytes: Byte ceiling for a fetched job posting page.
        jd_max_redirects: Maximum redirects followed when importing a URL.
        jd_min_text_chars: Minimum extracted text length for a usable import.
        jd_user_agent: User-Agent header sent when importing a URL.
        upload_max_bytes: Maximum résumé upload size.
        posthog_ingestion_host: PostHog host for event capture.
        posthog_api_host: PostHog host for HogQL queries.
        posthog_dev_project_key: Ingestion key used outside production.
        posthog_prod_project_key: Ingestion key used in production.
        posthog_dev_project_id: Project id for queries outside production.
        posthog_prod_project_id: Project id for queries in production.
        posthog_dev_personal_api_key: Personal API key for queries outside production.
        posthog_prod_personal_api_key: Personal API key for queries in production.
        stats_cache_seconds: How long the usage counter result is cached.
    """

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------
    app_name: str = Field(
        default="jobdesk",
        description="Name of the application"
    )
    app_env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level"
    )

    # -------------------------------------------------------------------------
    # API Settings
    # -------------------------------------------------------------------------
    api_host: str = Field(
        default="0.0.0.0",
        description="Host address for the API server"
    )
    api_port: int = Field(
        default=8787,
        description="Port number for the API server"
    )
    allowed_origins: str = Field(
        default="",
        description="Comma-separated list of CORS origins allowed in production"
    )

    # -------------------------------------------------------------------------
    # Anthropic API Settings
    # -------------------------------------------------------------------------
    anthropic_api_key: str = Field(
        default="",
        description="API key for Anthropic Claude API"
    )
    claude_model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Claude model used for cover letter drafting"
    )
    completion_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout in seconds for a single completion call"
    )
    completion_max_tokens: int = Field(
        default=700,
        gt=0,
        description="Maximum output tokens for a completion"
    )
    research_timeout_seconds: float = Field(
        default=90.0,
        gt=0,
        description="Timeout in seconds for a company research completion"
    )
    research_max_tokens: int = Field(
        default=4096,
        gt=0,
        description="Maximum output tokens for a company research report"
    )
    max_input_chars: int = Field(
        default=10_000,
        gt=0,
        description="Maximum length of résumé and job description inputs"
    )

    # -------------------------------------------------------------------------
    # Job Description Import Settings
    # -------------------------------------------------------------------------
    jd_fetch_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Total time budget in seconds for importing a job posting URL"
    )
    jd_max_response_bytes: int = Field(
        default=3 * 1024 * 1024,
        gt=0,
        description="Byte ceiling for a fetched job posting page"
    )
    jd_max_redirects: int = Field(
        default=5,
        ge=0,
        description="Maximum redirects followed when importing a URL"
    )
    jd_min_text_chars: int = Field(
        default=50,
        ge=0,
        description="Minimum extracted text length for a usable import"
    )
    jd_user_agent: str = Field(
        default="JobDeskBot/0.1 (job description import; single page fetch)",
        description="User-Agent header sent when importing a URL"
    )

    # -------------------------------------------------------------------------
    # Upload Settings
    # -------------------------------------------------------------------------
    upload_max_bytes: int = Field(
        default=5 * 1024 * 1024,
        gt=0,
        description="Maximum résumé upload size in bytes"
    )

    # -------------------------------------------------------------------------
    # PostHog Analytics Settings
    # -------------------------------------------------------------------------
    posthog_ingestion_host: str = Field(
        default="https://us.i.posthog.com",
        description="PostHog host for event capture"
    )
    posthog_api_host: str = Field(
        default="https://app.posthog.com",
        description="PostHog host for HogQL queries"
    )
    posthog_dev_project_key: str = Field(default="", description="Ingestion key outside production")
    posthog_prod_project_key: str = Field(default="", description="Ingestion key in production")
    posthog_dev_project_id: str = Field(default="", description="Project id outside production")
    posthog_prod_project_id: str = Field(default="", description="Project id in production")
    posthog_dev_personal_api_key: str = Field(default="", description="Query key outside production")
    posthog_prod_personal_api_key: str = Field(default="", description="Query key in production")
    stats_cache_seconds: float = Field(
        default=60.0,
        ge=0,
        description="How long the usage counter result is cached"
    )

    # -------------------------------------------------------------------------
    # Model Configuration
    # -------------------------------------------------------------------------
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------
    @property
    def is_production(self) -> bool:
        """Whether the app runs with production settings."""
        return self.app_env == "production"

    @property
    def allowed_origins_list(self) -> list[str]:
        """
        Parse allowed origins string into a list.

        Returns:
            List of allowed origin strings, empty entries removed.
        """
        return [
            origin.strip()
            for origin in self.allowed_origins.split(",")
            if origin.strip()
        ]

    @property
    def posthog_project_key(self) -> str:
        """Ingestion key for the current environment."""
        if self.is_production:
            return self.posthog_prod_project_key
        return self.posthog_dev_project_key

    @property
    def posthog_project_id(self) -> str:
        """Query project id for the current environment."""
        if self.is_production:
            return self.posthog_prod_project_id
        return self.posthog_dev_project_id

    @property
    def posthog_personal_api_key(self) -> str:
        """Personal API key for the current environment."""
        if self.is_production:
            return self.posthog_prod_personal_api_key
        return self.posthog_dev_personal_api_key

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("posthog_ingestion_host", "posthog_api_host")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """
        Normalize PostHog hosts so paths can be appended directly.

        Args:
            v: The configured host URL.

        Returns:
            The host without a trailing slash.
        """
        return v.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings instance.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings instance with loaded configuration.
    """
    return Settings()
