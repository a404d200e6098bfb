"""Configuration management for Library Desk.

Settings are read from the environment (``LIBRARY_DESK_*``) or a local
``.env`` file and validated with Pydantic v2:
1. Storage - where the SQLite save file lives
2. Ledger - how issue record identifiers are formed
3. Diagnostics - debug flag and logging level
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LibraryConfig(BaseSettings):
    """Application configuration.

    Every field can be overridden with an environment variable carrying the
    ``LIBRARY_DESK_`` prefix, e.g. ``LIBRARY_DESK_DATABASE_PATH``.
    """

    model_config = SettingsConfigDict(
        env_prefix="LIBRARY_DESK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Storage ===

    database_path: Path = Field(
        default=Path("data/library.db"),
        description="SQLite file holding the saved books, members and issue records",
    )

    # === Ledger ===

    issue_id_prefix: str = Field(
        default="I-",
        description="Prefix for generated issue record identifiers",
        min_length=1,
        max_length=10,
    )

    # === Diagnostics ===

    debug: bool = Field(
        default=False,
        description="Enable debug logging",
    )

    log_level: str = Field(
        default="WARNING",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR)$",
    )

    @field_validator("database_path")
    @classmethod
    def validate_database_path(cls, v: Path) -> Path:
        """Make the save file path absolute and ensure its directory exists."""
        abs_path = v.absolute()
        abs_path.parent.mkdir(parents=True, exist_ok=True)

        if not abs_path.parent.is_dir():
            raise ValueError(f"Database directory {abs_path.parent} is not accessible")

        return abs_path

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v

    @property
    def effective_log_level(self) -> str:
        """Logging level after applying the debug flag."""
        return "DEBUG" if self.debug else self.log_level


class _ConfigStore:
    """Internal storage for configuration singleton."""

    _instance: LibraryConfig | None = None


def get_config() -> LibraryConfig:
    """Get or create the global configuration instance."""
    if _ConfigStore._instance is None:  # type: ignore[reportPrivateUsage]
        _ConfigStore._instance = LibraryConfig()  # type: ignore[reportPrivateUsage]
    return _ConfigStore._instance  # type: ignore[reportPrivateUsage]


def reset_config() -> None:
    """Reset configuration (useful for testing)."""
    _ConfigStore._instance = None  # type: ignore[reportPrivateUsage]
