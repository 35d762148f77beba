"""Runtime settings loaded from `.env` and environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from scrapebind.exceptions import SettingsError
from scrapebind.typing.enums import StringListPolicy

_LOG_LEVELS = frozenset({"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"})


class Settings(BaseSettings):
    """Package settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    project_name: str = "scrapebind"
    app_env: str = Field(
        default="dev",
        validation_alias="APP_ENV",
        description="Application environment, e.g. 'dev', 'prod'.",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level, e.g. 'INFO', 'DEBUG'.",
    )
    log_json: bool = Field(
        default=True,
        validation_alias="LOG_JSON",
        description="Enable JSON formatted logs.",
    )
    log_file: str | None = Field(
        default=None,
        validation_alias="LOG_FILE",
        description="File path for log output.",
    )

    string_list_policy: StringListPolicy = Field(
        default=StringListPolicy.ERROR,
        validation_alias="STRING_LIST_POLICY",
        description="Handling of list matches that cannot produce a string: 'error' or 'drop'.",
    )

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        """Normalize and validate the logging level name.

        Args:
            value (str): Raw logging level.

        Raises:
            ValueError: If the level is not a stdlib logging level name.

        Returns:
            str: Upper-cased level name.
        """
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unsupported log level '{value}'")  # noqa: TRY003
        return level

    @field_validator("string_list_policy", mode="before")
    @classmethod
    def _parse_string_list_policy(cls, value: object) -> object:
        """Accept policy names regardless of case.

        Args:
            value (object): Raw policy value.

        Returns:
            object: Parsed policy when given a string, else the raw value.
        """
        if isinstance(value, str):
            return StringListPolicy.from_str(value)
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance.

    Raises:
        SettingsError: If settings cannot be loaded or validated.

    Returns:
        Settings: The loaded settings instance.
    """
    try:
        return Settings()
    except Exception as exc:
        raise SettingsError(exc=exc) from exc
