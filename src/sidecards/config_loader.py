"""Config loader utilities (split from config.py)."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

from .config_settings import Config
from .error_codes import ErrorCode
from .exceptions import ConfigurationError
from .utils.logging import get_logger


def _candidate_paths(config_path: Path | None) -> list[Path]:
    if config_path:
        return [config_path.expanduser()]
    candidates: list[Path] = []
    env_path = os.getenv("SIDECARDS_CONFIG")
    if env_path:
        candidates.append(Path(env_path).expanduser())
    candidates.append(Path.cwd() / "config.yaml")
    return candidates


def load_config(
    config_path: Path | None = None, *, strict_config: bool = True
) -> Config:
    """Load configuration from config.yaml, environment and .env.

    Values from the YAML file are passed as init arguments, so they take
    precedence over environment variables.
    """
    logger = get_logger(__name__)

    candidate_paths = _candidate_paths(config_path)
    resolved_config_path: Path | None = None
    for candidate in candidate_paths:
        if candidate.exists():
            resolved_config_path = candidate
            logger.debug("config_file_found", config_path=str(candidate))
            break

    if not resolved_config_path:
        logger.debug(
            "config_file_not_found", searched_paths=[str(p) for p in candidate_paths]
        )

    yaml_data: dict[str, Any] = {}
    if resolved_config_path:
        try:
            with open(resolved_config_path, encoding="utf-8") as f:
                yaml_data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error(
                "config_yaml_load_error",
                config_path=str(resolved_config_path),
                error=str(e),
                error_type=type(e).__name__,
            )
            if strict_config:
                msg = f"Failed to parse config file: {resolved_config_path}"
                raise ConfigurationError(
                    msg,
                    suggestion=(
                        "Check YAML syntax (indentation, colons, quotes) and that "
                        f"the file is UTF-8. Original error: {e}"
                    ),
                    error_code=ErrorCode.CFG_LOAD_FAILED.value,
                ) from e
        if not isinstance(yaml_data, dict):
            msg = f"Config file must contain a mapping: {resolved_config_path}"
            raise ConfigurationError(msg, error_code=ErrorCode.CFG_LOAD_FAILED.value)

    known_fields = set(Config.model_fields)
    config_kwargs = {k: v for k, v in yaml_data.items() if k in known_fields}
    unknown = sorted(set(yaml_data) - known_fields)
    if unknown:
        logger.warning("config_warning", unknown_keys=unknown)

    try:
        config = Config(**config_kwargs)
    except ValueError as e:
        logger.error(
            "config_validation_error",
            error=str(e),
            error_type=type(e).__name__,
            config_path=str(resolved_config_path) if resolved_config_path else None,
        )
        raise ConfigurationError(
            "Invalid configuration values",
            suggestion=str(e),
            error_code=ErrorCode.CFG_INVALID_VALUE.value,
        ) from e

    try:
        config.validate_config()
    except ConfigurationError as e:
        if strict_config and config.strict_mode:
            logger.error("config_validation_failed", **e.to_dict())
            raise
        logger.warning("config_warning", **e.to_dict())

    logger.debug(
        "config_loaded",
        vault_path=str(config.vault_path),
        flashcard_folder=config.flashcard_folder,
    )
    return config


__all__ = ["Config", "load_config"]
