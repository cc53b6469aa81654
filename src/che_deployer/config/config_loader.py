"""Installation configuration loading with environment substitution."""

import os
import re
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from loguru import logger
from pydantic import ValidationError

from che_deployer.config.config_data import InstallationConfig

_ENV_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")


def substitute_env_vars(content: str) -> str:
    """Replace ``${VAR}`` and ``${VAR:-default}`` with environment values.

    Raises:
        ValueError: If a variable without a default is not set
    """

    def _replace(match: re.Match[str]) -> str:
        name, default = match.group(1), match.group(2)
        value = os.environ.get(name)
        if value is not None:
            return value
        if default is not None:
            return default
        raise ValueError(f"Required environment variable '{name}' is not set")

    return _ENV_PATTERN.sub(_replace, content)


def load_config(
    file_path: Path | None = None, *, env_file: Path | None = Path(".env")
) -> InstallationConfig:
    """Load installation options from a YAML file.

    The YAML file must have a top-level ``config:`` key. Variables from
    ``env_file`` are loaded first without overriding the process environment.

    Args:
        file_path: YAML file to read; defaults are returned when None
        env_file: Optional dotenv file consulted before substitution

    Raises:
        ValueError: If the YAML is invalid, a variable is missing or validation fails
        FileNotFoundError: If file_path doesn't exist
    """
    if env_file is not None and env_file.exists():
        load_dotenv(env_file, override=False)
        logger.debug(f"Loaded environment from {env_file}")

    if file_path is None:
        return InstallationConfig()

    content = substitute_env_vars(file_path.read_text(encoding="utf-8"))

    try:
        loaded: Any = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e

    if not isinstance(loaded, dict) or "config" not in loaded:
        raise ValueError("Invalid YAML structure: missing 'config' key")

    logger.info(f"Loaded installation configuration from {file_path}")
    return _validate(loaded["config"] or {})


def merge_overrides(
    config: InstallationConfig, overrides: dict[str, Any]
) -> InstallationConfig:
    """Return a new config with the non-None overrides applied.

    Raises:
        ValueError: If the merged options fail validation
    """
    applied = {key: value for key, value in overrides.items() if value is not None}
    if not applied:
        return config
    logger.debug(f"Applying overrides: {sorted(applied)}")
    return _validate({**config.model_dump(), **applied})


def _validate(data: dict[str, Any]) -> InstallationConfig:
    try:
        return InstallationConfig(**data)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e
