"""Configuration loading with environment variable substitution."""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal, overload

import yaml
from dotenv import load_dotenv
from loguru import logger
from pydantic import ValidationError

from wpstack.config.config_data import StackConfig
from wpstack.config.config_utils import substitute_env_vars
from wpstack.utils.paths import get_project_root

CONFIG_ENV_VAR = "WPSTACK_CONFIG"
CONFIG_FILENAME = "config.yaml"


def default_config_path() -> Path:
    """Return the config file location.

    ``WPSTACK_CONFIG`` wins (containers point it at /etc/wpstack), otherwise
    config.yaml in the project root.
    """
    override = os.getenv(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return get_project_root() / CONFIG_FILENAME


@overload
def load_config(
    file_path: Path | None = ..., *, processed: Literal[False]
) -> dict[str, Any]: ...


@overload
def load_config(
    file_path: Path | None = ..., processed: Literal[True] = ...
) -> StackConfig: ...


def load_config(
    file_path: Path | None = None, processed: bool = True
) -> StackConfig | dict[str, Any]:
    """
    Load a YAML file with environment variable substitution.

    Args:
        file_path: Path to the YAML file (default: see default_config_path)
        processed: Whether to substitute environment variables and validate.
                  - True (default): substitute env vars and validate as StackConfig
                  - False: return the raw dict without validation or substitution

    Returns:
        StackConfig if processed, raw dict otherwise

    Raises:
        ValueError: If a required environment variable is missing, validation
                    fails, or the YAML has no top-level 'config' key

    A missing file is not an error: the stack defaults are returned, which is
    what the in-container entrypoints rely on.
    """
    path = file_path or default_config_path()

    if path.exists():
        # Pick up DOMAIN_NAME / DATA_PATH / STACK_LOGIN from a sibling .env
        load_dotenv(path.parent / ".env", override=False)
        content = path.read_text()
    else:
        logger.debug(f"No configuration file at {path}; using defaults")
        content = "config: {}\n"

    if processed:
        content = substitute_env_vars(content)

    try:
        loaded: dict[str, Any] = yaml.safe_load(content) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e

    if not processed:
        return loaded

    if "config" not in loaded:
        raise ValueError("Invalid YAML structure: missing 'config' key")

    try:
        config = StackConfig(**(loaded["config"] or {}))
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    logger.debug(f"Loaded configuration for domain {config.domain_name}")
    return config


@lru_cache(maxsize=1)
def get_config() -> StackConfig:
    """Return the process-wide configuration, loaded once."""
    return load_config()
