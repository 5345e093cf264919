"""Configuration module for recap."""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from the project root .env file.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

# User-level config lives alongside the default database
_USER_ENV = Path.home() / ".recap" / ".env"
load_dotenv(_USER_ENV)


logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class RecapConfig(BaseModel):
    """Configuration for the recap store and command line."""

    # Base directory that relative paths are resolved against
    base_dir: Path = Field(
        default_factory=lambda: Path(os.getenv("RECAP_BASE_DIR", "."))
    )
    # Database configuration
    database_path: Path = Field(
        default_factory=lambda: Path(
            os.getenv("RECAP_DATABASE_PATH", "data/recap.db")
        )
    )
    # Echo every SQL statement through the sqlalchemy.engine logger
    sql_echo: bool = Field(default_factory=lambda: _env_flag("RECAP_SQL_ECHO"))
    # Logging configuration
    log_level: str = Field(
        default_factory=lambda: os.getenv("RECAP_LOG_LEVEL", "WARNING"),
        validate_default=True,
    )
    log_dir: Optional[Path] = Field(
        default_factory=lambda: (
            Path(os.getenv("RECAP_LOG_DIR"))
            if os.getenv("RECAP_LOG_DIR")
            else None
        )
    )

    model_config = {"validate_assignment": True}

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalise the log level name and reject unknown levels."""
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {', '.join(_LOG_LEVELS)}, got {v!r}"
            )
        return level

    def get_absolute_path(self, path: Path) -> Path:
        """Convert a relative path to an absolute path based on base_dir."""
        if path.is_absolute():
            return path
        return self.base_dir / path

    def get_db_url(self) -> str:
        """Get the database URL for SQLite."""
        db_path = self.get_absolute_path(self.database_path)
        db_path.parent.mkdir(parents=True, exist_ok=True)
        return f"sqlite:///{db_path}"


# Create a global config instance
config = RecapConfig()
