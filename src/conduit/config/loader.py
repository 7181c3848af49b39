"""Layered configuration for the bridge.

Layers, lowest priority first:
    1. Model defaults (``ConduitConfig()``)
    2. ``$XDG_CONFIG_HOME/conduit/config.toml`` (``~/.config`` fallback)
    3. ``./conduit.toml``
    4. The file named by ``$CONDUIT_CONFIG``
    5. An explicit ``path`` argument
    6. Environment variables named by ``graphql.url_env``,
       ``graphql.token_env`` and ``server.port_env``
    7. ``overrides`` (CLI flags)

Empty environment variables count as unset.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from conduit.core.errors import ConfigError

from .schema import ConduitConfig

CONFIG_ENV = "CONDUIT_CONFIG"
PROJECT_FILE = "conduit.toml"

# (section, key, env-name key, default env name)
_ENV_BINDINGS: tuple[tuple[str, str, str, str], ...] = (
    ("graphql", "url", "url_env", "GRAPHQL_API_URL"),
    ("graphql", "token", "token_env", "API_AUTH_TOKEN"),
    ("server", "port", "port_env", "PORT"),
)


def _config_home() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    return Path(xdg) if xdg else Path.home() / ".config"


def _candidate_files(explicit: str | Path | None) -> list[Path]:
    """Existing config files, lowest priority first.

    Implicit locations are skipped when absent; a missing ``$CONDUIT_CONFIG``
    target or explicit *path* is an error.
    """
    found = [
        candidate
        for candidate in (_config_home() / "conduit" / "config.toml", Path.cwd() / PROJECT_FILE)
        if candidate.is_file()
    ]

    from_env = os.environ.get(CONFIG_ENV)
    if from_env:
        if not Path(from_env).is_file():
            msg = f"{CONFIG_ENV} points to non-existent file: {from_env}"
            raise ConfigError(msg)
        found.append(Path(from_env))

    if explicit is not None:
        if not Path(explicit).is_file():
            msg = f"Config file not found: {explicit}"
            raise ConfigError(msg)
        found.append(Path(explicit))

    return found


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {path}: {e}"
        raise ConfigError(msg) from e
    except OSError as e:
        msg = f"Cannot read config file {path}: {e}"
        raise ConfigError(msg) from e


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return *base* updated with *override*, recursing into nested tables."""
    result = dict(base)
    for key, value in override.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = _deep_merge(current, value)
        else:
            result[key] = value
    return result


def _env_layer(data: dict[str, Any]) -> dict[str, Any]:
    """Values taken from the environment.

    Variable names are read from *data* first, so a config file can rename
    them (``graphql.url_env = "MY_BACKEND"``).
    """
    layer: dict[str, Any] = {}
    for section, key, name_key, default_name in _ENV_BINDINGS:
        env_name = data.get(section, {}).get(name_key, default_name)
        value = os.environ.get(env_name) if env_name else None
        if value:
            layer.setdefault(section, {})[key] = value
    return layer


def load_config(
    path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> ConduitConfig:
    """Resolve every layer into a validated :class:`ConduitConfig`.

    Raises:
        ConfigError: A config file is missing or not valid TOML, or the
            merged result fails validation.
    """
    data: dict[str, Any] = {}
    for config_file in _candidate_files(path):
        data = _deep_merge(data, _load_toml(config_file))

    data = _deep_merge(data, _env_layer(data))
    if overrides:
        data = _deep_merge(data, overrides)

    try:
        return ConduitConfig.model_validate(data)
    except ValueError as e:
        msg = f"Configuration validation failed: {e}"
        raise ConfigError(msg) from e


def require_endpoint(config: ConduitConfig) -> str:
    """Return the configured backend URL.

    Raises:
        ConfigError: If no URL is configured (fatal at startup).
    """
    url = config.graphql.url
    if not url:
        msg = (
            f"{config.graphql.url_env} is required: set it in the environment "
            f"or as graphql.url in {PROJECT_FILE}"
        )
        raise ConfigError(msg)
    return url
