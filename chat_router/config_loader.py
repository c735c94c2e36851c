"""
Configuration loader for the chat router.

Reads config/config.yaml, expands ``${VAR}`` / ``${VAR:-default}``
references from the environment and coerces each section into its
dataclass. Every key is optional; absent keys keep the dataclass default.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Optional

import yaml

from .models import (
    ModelConfig,
    ToolsConfig,
    ServerConfig,
    LoggingConfig,
    LangfuseConfig,
    AppConfig,
)

logger = logging.getLogger(__name__)

# <repo>/config/config.yaml, next to the package
DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "config.yaml"

_ENV_REFERENCE = re.compile(r"\$\{(?P<name>[^}:]+)(?::-(?P<default>[^}]*))?\}")

_cached: Optional[AppConfig] = None


def resolve_env_vars(value: str) -> str:
    """
    Expand environment references in one string.

    ``${NAME}`` becomes the variable's value (empty when unset) and
    ``${NAME:-fallback}`` uses ``fallback`` when the variable is unset.
    """
    return _ENV_REFERENCE.sub(
        lambda m: os.environ.get(m.group("name"), m.group("default") or ""),
        value,
    )


def _expand(node: Any) -> Any:
    """Expand environment references anywhere in a parsed YAML tree."""
    if isinstance(node, str):
        return resolve_env_vars(node)
    if isinstance(node, list):
        return list(map(_expand, node))
    if isinstance(node, dict):
        return {key: _expand(value) for key, value in node.items()}
    return node


def _as_bool(value: Any, default: bool) -> bool:
    """Interpret YAML or env-interpolated values as a boolean."""
    if value is None or value == "":
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _pick(section: dict, key: str, default: Any, cast=None) -> Any:
    """Read ``key`` from a section; blank values count as missing."""
    value = section.get(key)
    if value is None or value == "":
        return default
    return cast(value) if cast else value


def _model_section(section: dict) -> ModelConfig:
    d = ModelConfig()
    return ModelConfig(
        base_url=_pick(section, "base_url", d.base_url, str),
        api_key=_pick(section, "api_key", d.api_key, str),
        model=_pick(section, "model", d.model, str),
        temperature=_pick(section, "temperature", d.temperature, float),
        max_tokens=_pick(section, "max_tokens", d.max_tokens, int),
        timeout=_pick(section, "timeout", d.timeout, float),
        max_iterations=_pick(section, "max_iterations", d.max_iterations, int),
    )


def _tools_section(section: dict) -> ToolsConfig:
    d = ToolsConfig()
    return ToolsConfig(
        weather_url=_pick(section, "weather_url", d.weather_url, str),
        search_url=_pick(section, "search_url", d.search_url, str),
        timeout=_pick(section, "timeout", d.timeout, float),
    )


def _server_section(section: dict) -> ServerConfig:
    d = ServerConfig()
    return ServerConfig(
        host=_pick(section, "host", d.host, str),
        port=_pick(section, "port", d.port, int),
        workers=_pick(section, "workers", d.workers, int),
        reload=_as_bool(section.get("reload"), d.reload),
    )


def _logging_section(section: dict) -> LoggingConfig:
    return LoggingConfig(level=_pick(section, "level", LoggingConfig().level, str))


def _langfuse_section(section: dict) -> LangfuseConfig:
    return LangfuseConfig(
        public_key=_pick(section, "public_key", "", str),
        secret_key=_pick(section, "secret_key", "", str),
        host=_pick(section, "host", "", str),
        debug=_as_bool(section.get("debug"), False),
    )


def _read_yaml(config_path: Path) -> dict:
    if not config_path.exists():
        logger.warning(f"Configuration file not found at {config_path}, using defaults")
        return {}
    logger.info(f"Loading configuration from {config_path}")
    with config_path.open("r") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {config_path} must contain a mapping")
    return data


def load_app_config(path: Optional[str] = None, reload: bool = False) -> AppConfig:
    """
    Load application configuration.

    The first successful load is cached and returned by later calls
    unless ``reload`` is set. A missing file is not an error: every
    setting then comes from its default.

    Args:
        path: YAML file to read. Defaults to $CONFIG_PATH, then
              config/config.yaml.
        reload: Ignore the cached configuration.

    Returns:
        The loaded AppConfig.

    Raises:
        ValueError: If the file exists but is not a YAML mapping
    """
    global _cached

    if _cached is not None and not reload:
        return _cached

    config_path = Path(path or os.environ.get("CONFIG_PATH") or DEFAULT_CONFIG_PATH)
    raw = _expand(_read_yaml(config_path))

    def section(name: str) -> dict:
        value = raw.get(name)
        return value if isinstance(value, dict) else {}

    _cached = AppConfig(
        version=str(raw.get("version", "1.0")),
        model=_model_section(section("model")),
        tools=_tools_section(section("tools")),
        server=_server_section(section("server")),
        logging=_logging_section(section("logging")),
        langfuse=_langfuse_section(section("langfuse")),
    )
    logger.debug(
        f"Configuration loaded: model={_cached.model.model}, "
        f"base_url={_cached.model.base_url}"
    )
    return _cached


def reset_config_cache() -> None:
    """Forget the cached configuration so the next load rereads the file."""
    global _cached
    _cached = None
