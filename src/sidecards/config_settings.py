"""Settings model for sidecards (split from config.py)."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DEFAULT_FLASHCARD_FOLDER, TOKEN_ID_LENGTH
from .error_codes import ErrorCode
from .exceptions import ConfigurationError
from .utils.path_validator import validate_flashcard_folder, validate_vault_path


class Config(BaseSettings):
    """Service configuration using pydantic-settings."""

    model_config = SettingsConfigDict(
        env_prefix="SIDECARDS_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
        validate_assignment=True,
    )

    # Vault layout
    vault_path: Path | str = Field(default="", description="Path to Obsidian vault")
    flashcard_folder: str = Field(
        default=DEFAULT_FLASHCARD_FOLDER,
        description="Vault-relative folder holding one JSON file per flashcard",
    )

    # Data storage directory for logs (kept outside the vault)
    data_dir: Path = Field(
        default=Path(),
        description="Directory for log files. Keeps vault clean of tool artifacts.",
    )

    @field_validator("vault_path", mode="before")
    @classmethod
    def parse_vault_path(cls, v: Any) -> Path:
        """Convert string to Path for vault_path."""
        if isinstance(v, str):
            if not v:
                return Path()
            return Path(v).expanduser().resolve()
        if isinstance(v, Path):
            return v.expanduser().resolve()
        if v is None:
            return Path()
        msg = f"vault_path must be string or Path, got {type(v).__name__}"
        raise ValueError(msg)

    @field_validator("data_dir", "project_log_dir", mode="before")
    @classmethod
    def parse_path(cls, v: Any) -> Path:
        """Convert string to Path."""
        if isinstance(v, str):
            return Path(v).expanduser()
        if isinstance(v, Path):
            return v
        if v is None:
            return Path()
        msg = f"Path field must be string or Path, got {type(v).__name__}"
        raise ValueError(msg)

    # Logging (relative to data_dir)
    log_level: str = Field(default="INFO", description="Log level")
    project_log_dir: Path = Field(
        default=Path("logs"),
        description="Directory for log files (relative to data_dir)",
    )

    # Identifier allocation
    allocator_max_attempts: int = Field(
        default=32,
        ge=1,
        description="Collisions tolerated before identifier allocation gives up",
    )

    # Token scanning
    scan_cache_size: int = Field(
        default=256,
        ge=0,
        description="Number of scanned documents kept in the content-hash cache",
    )
    scan_margin: int = Field(
        default=16,
        description="Lookaround margin (characters) for incremental rescans",
    )

    # Panel behaviour
    refresh_settle_delay: float = Field(
        default=0.1,
        ge=0.0,
        description="Seconds to wait before a panel refresh runs",
    )
    dedupe_sorted_view: bool = Field(
        default=False,
        description="Collapse repeated tokens for one record into a single sorted entry",
    )

    strict_mode: bool = Field(
        default=True,
        description="Treat validation problems as errors instead of warnings",
    )

    def validate_config(self) -> Config:
        """Validate configuration values after initialization."""
        vault_path = self.vault_path
        if isinstance(vault_path, str) or vault_path == Path():
            msg = "vault_path is required"
            raise ConfigurationError(
                msg,
                suggestion="Set SIDECARDS_VAULT_PATH or vault_path in config.yaml",
                error_code=ErrorCode.CFG_INVALID_VALUE.value,
            )

        validated_vault = validate_vault_path(Path(vault_path))
        folder = validate_flashcard_folder(self.flashcard_folder)

        # The incremental scanner keeps occurrences that start before the
        # margin; a full token plus its boundary characters must fit inside it.
        min_margin = TOKEN_ID_LENGTH + 2
        if self.scan_margin < min_margin:
            msg = f"scan_margin must be >= {min_margin}: {self.scan_margin}"
            raise ConfigurationError(
                msg,
                suggestion=f"Set scan_margin to at least {min_margin}",
                error_code=ErrorCode.CFG_INVALID_VALUE.value,
            )

        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "WARN", "ERROR", "CRITICAL"):
            msg = f"Invalid log_level: {self.log_level}"
            raise ConfigurationError(
                msg,
                suggestion="Set log_level to DEBUG, INFO, WARNING, ERROR or CRITICAL",
                error_code=ErrorCode.CFG_INVALID_VALUE.value,
            )

        if validated_vault != self.vault_path:
            object.__setattr__(self, "vault_path", validated_vault)
        if folder != self.flashcard_folder:
            object.__setattr__(self, "flashcard_folder", folder)

        return self

    def get_data_path(self, relative_path: Path | str | None = None) -> Path:
        """Get absolute path within data_dir."""
        data_dir = self.data_dir
        if not data_dir.is_absolute():
            data_dir = Path.cwd() / data_dir
        data_dir = data_dir.resolve()

        if relative_path is None:
            return data_dir
        return data_dir / relative_path

    def get_log_dir(self) -> Path:
        """Get absolute path to log directory."""
        return self.get_data_path(self.project_log_dir)


__all__ = ["Config"]
