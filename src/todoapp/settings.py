"""Application settings and configuration."""

from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Endpoints and secrets are always supplied through the environment
    (``TODOAPP_*``) or a ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TODOAPP_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    env: str = "development"

    # GraphQL data service
    graphql_url: str | None = Field(
        default=None,
        description="GraphQL endpoint, e.g. https://<project>.hasura.app/v1/graphql",
    )
    graphql_admin_secret: SecretStr | None = Field(
        default=None,
        description="Shared secret sent as x-hasura-admin-secret on every request",
    )

    # Identity provider
    firebase_api_key: SecretStr | None = Field(
        default=None,
        description="Firebase Web API key used for email/password sign-in",
    )
    identity_base_url: str = Field(
        default="https://identitytoolkit.googleapis.com/v1",
        description="Base URL of the Firebase Auth REST API",
    )

    # HTTP Client
    request_timeout: float | None = Field(
        default=None,
        description="Timeout for remote calls in seconds (None waits indefinitely)",
    )

    # Local storage
    data_dir: Path = Field(
        default=Path.home() / ".todoapp",
        description="Directory for local state",
    )
    session_database_url: str | None = Field(
        default=None,
        description="Session store URL (defaults to a SQLite file in data_dir)",
    )

    # Response cache
    cache_max_entries: int = Field(
        default=128,
        ge=1,
        description="Maximum number of cached query responses",
    )

    # Sharing
    share_url_template: str = Field(
        default="whatsapp://send?text={text}",
        description="Message composition link; {text} receives the url-encoded message",
    )
    share_message_template: str = Field(
        default=(
            "Welcome to miniture.in! We are giving you some amazing offers "
            "with this referral code: {code}"
        ),
        description="Message shared together with a referral code",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging level",
    )
    log_format: Literal["console", "json"] = Field(
        default="console",
        description="Log output format",
    )

    @property
    def resolved_session_database_url(self) -> str:
        """Session store URL, falling back to a file in data_dir."""
        if self.session_database_url:
            return self.session_database_url
        self.data_dir.mkdir(parents=True, exist_ok=True)
        return f"sqlite:///{self.data_dir / 'session.db'}"


# Global settings instance
settings = Settings()
