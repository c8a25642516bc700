"""
Configuration Loader (``adoption_config.loader``).

Responsibility
--------------
Reads a settings YAML file, applies environment-variable overrides and
builds an ``AdoptionSettings``.  Runtime callers go through
``adoption_config.get_settings()``; tests call ``load_settings`` with an
explicit path and environment.

Invariants enforced
-------------------
* Precedence: environment variable > YAML file > dataclass default.
* Every malformed value raises ``ValueError`` naming the offending key;
  there are no silent fallbacks for values that are present but wrong.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Bad value  -> ``ValueError``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from adoption_config.schema import AdoptionSettings

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"

ENV_DATABASE_URL = "ADOPTION_DATABASE_URL"
ENV_DATABASE_URL_FALLBACK = "DATABASE_URL"
ENV_LOG_LEVEL = "ADOPTION_LOG_LEVEL"
ENV_TRANSACTION_TIMEOUT = "ADOPTION_TRANSACTION_TIMEOUT"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping, got {type(data).__name__}")
    return data


def _as_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false", "1", "0", "yes", "no"):
        return value.lower() in ("true", "1", "yes")
    raise ValueError(f"{key} must be a boolean, got {value!r}")


def _as_int(key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{key} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{key} must be an integer, got {value!r}") from None


def _as_float(key: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError(f"{key} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{key} must be a number, got {value!r}") from None


def parse_settings(data: Mapping[str, Any]) -> AdoptionSettings:
    """
    Build ``AdoptionSettings`` from the parsed YAML structure.

    Expected layout::

        database: {url, echo_sql, pool_size, max_overflow,
                   pool_timeout_seconds, transaction_timeout_seconds}
        logging:  {level}

    Raises:
        ValueError: on a missing url or any malformed value.
    """
    database = data.get("database") or {}
    logging_section = data.get("logging") or {}
    if not isinstance(database, Mapping) or not isinstance(logging_section, Mapping):
        raise ValueError("'database' and 'logging' must be mappings")

    url = database.get("url")
    if not url:
        raise ValueError("database.url is required")

    kwargs: dict[str, Any] = {"database_url": str(url)}
    if "echo_sql" in database:
        kwargs["echo_sql"] = _as_bool("database.echo_sql", database["echo_sql"])
    if "pool_size" in database:
        kwargs["pool_size"] = _as_int("database.pool_size", database["pool_size"])
    if "max_overflow" in database:
        kwargs["max_overflow"] = _as_int("database.max_overflow", database["max_overflow"])
    if "pool_timeout_seconds" in database:
        kwargs["pool_timeout_seconds"] = _as_int(
            "database.pool_timeout_seconds", database["pool_timeout_seconds"],
        )
    if "transaction_timeout_seconds" in database:
        kwargs["transaction_timeout_seconds"] = _as_float(
            "database.transaction_timeout_seconds",
            database["transaction_timeout_seconds"],
        )
    if "level" in logging_section:
        kwargs["log_level"] = str(logging_section["level"]).upper()

    return AdoptionSettings(**kwargs)


def apply_env_overrides(
    data: Mapping[str, Any],
    environ: Mapping[str, str],
) -> dict[str, Any]:
    """Return a copy of ``data`` with environment overrides applied."""
    database = dict(data.get("database") or {})
    logging_section = dict(data.get("logging") or {})

    url = environ.get(ENV_DATABASE_URL) or environ.get(ENV_DATABASE_URL_FALLBACK)
    if url:
        database["url"] = url
    if environ.get(ENV_TRANSACTION_TIMEOUT):
        database["transaction_timeout_seconds"] = environ[ENV_TRANSACTION_TIMEOUT]
    if environ.get(ENV_LOG_LEVEL):
        logging_section["level"] = environ[ENV_LOG_LEVEL]

    merged = dict(data)
    merged["database"] = database
    merged["logging"] = logging_section
    return merged


def load_settings(
    path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> AdoptionSettings:
    """
    Load settings from ``path`` (default: packaged defaults.yaml).

    Args:
        path: YAML settings file.
        environ: Environment mapping; ``os.environ`` when omitted.
    """
    if environ is None:
        environ = os.environ
    data = load_yaml_file(Path(path) if path is not None else DEFAULTS_PATH)
    return parse_settings(apply_env_overrides(data, environ))
