"""Application configuration loaded from environment variables.

Settings for the draft store, verification transport, auto-save windows,
and the HTTP surface. Uses pydantic-settings for validation and .env file
support.
"""

from typing import Literal

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Known insecure default password that must not be used in production
# Security: Runtime check in check_configuration() prevents use in production
_INSECURE_DEFAULT_PASSWORD = "profile_engine_dev_password"  # nosec B105

# One-time codes are digit strings; anything outside this range is a typo.
_MIN_CODE_LENGTH = 4
_MAX_CODE_LENGTH = 10


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    environment: str = "development"
    log_level: str = "INFO"

    # Database (only used when draft_store == "sql")
    database_host: str = "localhost"
    database_port: int = 5432
    database_name: str = "profile_engine"
    database_user: str = "profile_engine_user"
    database_password: str = _INSECURE_DEFAULT_PASSWORD

    # CORS (Security)
    # Default allows localhost:3000 for the web front-end in development
    allowed_origins: list[str] = ["http://localhost:3000"]

    # Draft persistence
    # memory: process-local dict, lost on restart (local-first default)
    # sql: profile_drafts table via SQLAlchemy async
    draft_store: Literal["memory", "sql"] = "memory"
    autosave_delay_seconds: float = 3.0
    long_form_autosave_delay_seconds: float = 30.0
    draft_max_age_days: int = 7
    autosave_skip_empty: bool = True

    # Contact verification
    verification_transport: Literal["demo", "http"] = "demo"
    verification_code_length: int = 6
    verification_max_attempts: int | None = None
    verification_code_ttl_minutes: int = 10
    demo_verification_codes: list[str] = ["123456", "000000", "111111"]
    verification_service_url: str = ""
    verification_service_api_key: SecretStr = SecretStr("")
    verification_timeout_seconds: float = 10.0

    # Editing sessions held by the HTTP surface
    session_ttl_minutes: int = 120

    @property
    def database_url(self) -> str:
        """Async database URL for SQLAlchemy."""
        return (
            f"postgresql+asyncpg://{self.database_user}:{self.database_password}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}"
        )

    @property
    def database_url_sync(self) -> str:
        """Sync database URL for tooling."""
        return (
            f"postgresql://{self.database_user}:{self.database_password}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}"
        )

    @model_validator(mode="after")
    def check_configuration(self) -> "Settings":
        """Validate configuration invariants.

        Checks:
        - Auto-save windows must be positive (all environments)
        - Verification code length must be within 4..10 digits
        - Attempt cap, when set, must allow at least one attempt
        - CORS must not use wildcard origin
        - HTTP verification transport needs a service URL
        - Production must not use the default database password
        - Production must not accept demo verification codes
        """
        if self.autosave_delay_seconds <= 0 or self.long_form_autosave_delay_seconds <= 0:
            msg = (
                "AUTOSAVE_DELAY_SECONDS and LONG_FORM_AUTOSAVE_DELAY_SECONDS "
                "must be positive."
            )
            raise ValueError(msg)

        if not _MIN_CODE_LENGTH <= self.verification_code_length <= _MAX_CODE_LENGTH:
            msg = (
                f"VERIFICATION_CODE_LENGTH must be between {_MIN_CODE_LENGTH} and "
                f"{_MAX_CODE_LENGTH}. Got: {self.verification_code_length}"
            )
            raise ValueError(msg)

        if self.verification_max_attempts is not None and self.verification_max_attempts < 1:
            msg = (
                "VERIFICATION_MAX_ATTEMPTS must be at least 1 when set. "
                f"Got: {self.verification_max_attempts}"
            )
            raise ValueError(msg)

        if self.draft_max_age_days < 0 or self.verification_code_ttl_minutes < 0:
            msg = "DRAFT_MAX_AGE_DAYS and VERIFICATION_CODE_TTL_MINUTES cannot be negative."
            raise ValueError(msg)

        if "*" in self.allowed_origins:
            msg = (
                "ALLOWED_ORIGINS must not contain '*' (wildcard). "
                "List the front-end origins explicitly."
            )
            raise ValueError(msg)

        if self.verification_transport == "http" and not self.verification_service_url:
            msg = (
                "VERIFICATION_SERVICE_URL must be set when "
                "VERIFICATION_TRANSPORT=http."
            )
            raise ValueError(msg)

        if self.environment == "production":
            if self.database_password == _INSECURE_DEFAULT_PASSWORD:
                msg = (
                    "Cannot use default database password in production. "
                    "Set DATABASE_PASSWORD environment variable to a secure value."
                )
                raise ValueError(msg)
            if self.verification_transport == "demo":
                msg = (
                    "VERIFICATION_TRANSPORT=demo accepts fixed codes and cannot be "
                    "used in production."
                )
                raise ValueError(msg)

        return self


settings = Settings()
