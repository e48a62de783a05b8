import os
from pathlib import Path

from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_database_url() -> str:
    """Get database URL, using absolute path for SQLite to avoid path resolution issues.

    ⚠️ WARNING: SQLite is for local development and tests only.
    - Concurrent writers from several hosts need a real server database
    - Use PostgreSQL by setting DATABASE_URL environment variable
    """
    db_url = os.getenv("DATABASE_URL", "")
    if db_url:
        logger.info(f"Using DATABASE_URL from environment: {db_url}")
        return db_url

    # Use absolute path for SQLite (LOCAL DEVELOPMENT ONLY)
    db_path = Path(__file__).parent.parent.parent / "prompt_ledger.db"
    abs_path = db_path.resolve()
    db_url = f"sqlite:///{abs_path}"
    logger.warning(
        f"⚠️ Using SQLite database (LOCAL DEV ONLY): {db_url}\n"
        "⚠️ Set DATABASE_URL environment variable to use PostgreSQL in production."
    )
    return db_url


class Settings(BaseSettings):
    database_url: str = Field(
        default_factory=get_database_url,
        validation_alias="DATABASE_URL",
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: str | None = Field(default=None, validation_alias="LOG_FILE", description="Ledger log file; console only when unset")
    log_rotation: str = Field(default="10 MB", validation_alias="LOG_ROTATION")
    log_retention: str = Field(default="7 days", validation_alias="LOG_RETENTION")
    default_workspace: str = Field(default="invoicer", validation_alias="LEDGER_DEFAULT_WORKSPACE")
    default_model_identifier: str = Field(
        default="gemini-2.5-flash-preview-04-17",
        validation_alias="LEDGER_DEFAULT_MODEL",
        description="Model label recorded on versions saved without an explicit model",
    )
    history_limit: int = Field(
        default=500,
        validation_alias="LEDGER_HISTORY_LIMIT",
        description="Maximum number of entries returned by a history listing",
    )
    allocation_max_attempts: int = Field(
        default=5,
        validation_alias="LEDGER_ALLOCATION_MAX_ATTEMPTS",
        description="Save attempts before giving up on a contended version number",
    )
    allocation_backoff_seconds: float = Field(default=0.05, validation_alias="LEDGER_ALLOCATION_BACKOFF_SECONDS")
    allocation_backoff_max_seconds: float = Field(default=1.0, validation_alias="LEDGER_ALLOCATION_BACKOFF_MAX_SECONDS")
    sample_prompt_path: str = Field(default="invoicing_prompt.md", validation_alias="LEDGER_SAMPLE_PROMPT_PATH")
    system_author_id: str = Field(default="SYSTEM", validation_alias="LEDGER_SYSTEM_AUTHOR_ID")
    system_author_email: str = Field(default="admin@retta.fi", validation_alias="LEDGER_SYSTEM_AUTHOR_EMAIL")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            logger.warning(f"Invalid LOG_LEVEL '{value}'. Valid levels are: {', '.join(valid_levels)}. Defaulting to INFO.")
            return "INFO"
        return upper_value

    @field_validator("history_limit", "allocation_max_attempts")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError(f"must be a positive integer, got {value}")
        return value

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
