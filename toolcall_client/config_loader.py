"""
Configuration loader for toolcall-client.

Loads configuration from a YAML file with support for environment variable
interpolation. Anything the file does not set keeps the environment-derived
default from ``config.get_config()``.

Example::

    client:
      base_url: ${OPENAI_BASE_URL:-http://localhost:8000}
      api_key: ${OPENAI_API_KEY}
      model: gpt-4o-mini
      max_iterations: 8
    logging:
      level: DEBUG
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Optional

import yaml

from .config import ClientConfig, Config, LangfuseConfig, get_config

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "TOOLCALL_CLIENT_CONFIG"

# ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


def resolve_env_vars(value: str) -> str:
    """
    Resolve environment variable references in a string.

    Supports ${VAR} and ${VAR:-default} syntax.
    """

    def replace_match(match: re.Match) -> str:
        default_value = match.group(2) if match.group(2) is not None else ""
        return os.environ.get(match.group(1), default_value)

    return ENV_VAR_PATTERN.sub(replace_match, value)


def _substitute_env_vars_recursive(data: Any) -> Any:
    if isinstance(data, dict):
        return {k: _substitute_env_vars_recursive(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_substitute_env_vars_recursive(item) for item in data]
    elif isinstance(data, str):
        return resolve_env_vars(data)
    return data


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.lower() == "true"
    return bool(value)


def _parse_client_config(data: dict, defaults: ClientConfig) -> ClientConfig:
    """Parse the ``client`` section."""
    return ClientConfig(
        base_url=data.get("base_url") or defaults.base_url,
        api_key=data.get("api_key") or defaults.api_key,
        model=data.get("model") or defaults.model,
        embedding_model=data.get("embedding_model") or defaults.embedding_model,
        max_iterations=int(data.get("max_iterations", defaults.max_iterations)),
        timeout=float(data.get("timeout", defaults.timeout)),
    )


def _parse_langfuse_config(data: dict, defaults: LangfuseConfig) -> LangfuseConfig:
    """Parse the ``langfuse`` section."""
    return LangfuseConfig(
        public_key=data.get("public_key") or defaults.public_key,
        secret_key=data.get("secret_key") or defaults.secret_key,
        host=data.get("host") or defaults.host,
        debug=_as_bool(data.get("debug", defaults.debug)),
    )


def load_config(path: Optional[str] = None) -> Config:
    """
    Load configuration from a YAML file.

    Args:
        path: Path to the YAML file. If None, uses the TOOLCALL_CLIENT_CONFIG
              env var; without either, the environment-only config is returned.

    Returns:
        Config with file values layered over environment defaults

    Raises:
        FileNotFoundError: If an explicitly configured file doesn't exist
        ValueError: If the file is not a YAML mapping or a value is invalid
    """
    defaults = get_config()

    if path is None:
        path = os.environ.get(CONFIG_PATH_ENV)
    if not path:
        return defaults

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found at {config_path}")

    logger.info("Loading configuration from %s", config_path)
    with open(config_path, "r") as f:
        raw_config = yaml.safe_load(f)

    if raw_config is None:
        return defaults
    if not isinstance(raw_config, dict):
        raise ValueError(f"Configuration file {config_path} must contain a mapping")

    raw_config = _substitute_env_vars_recursive(raw_config)

    try:
        return Config(
            client=_parse_client_config(raw_config.get("client") or {}, defaults.client),
            langfuse=_parse_langfuse_config(
                raw_config.get("langfuse") or {}, defaults.langfuse
            ),
            log_level=(raw_config.get("logging") or {}).get("level", defaults.log_level),
        )
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid configuration in {config_path}: {e}") from e
