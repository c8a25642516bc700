"""
adoption_config -- single public entrypoint for runtime settings.

Responsibility:
    ``get_settings()`` is the only way the running application obtains its
    configuration.  Settings come from a YAML file (the packaged
    ``defaults.yaml`` unless ``ADOPTION_CONFIG_FILE`` names another one),
    then environment overrides.

Architecture position:
    Configuration -- sits beside ``adoption_kernel``.  The kernel never
    imports this package; ``init_engine_from_settings`` accepts the settings
    object the application passes in.

Failure modes:
    - ``FileNotFoundError`` -- the configured YAML file does not exist.
    - ``ValueError`` -- a value is missing or malformed.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache

from adoption_config.loader import load_settings
from adoption_config.schema import AdoptionSettings

_logger = logging.getLogger("adoption_kernel.config")

ENV_CONFIG_FILE = "ADOPTION_CONFIG_FILE"


@lru_cache(maxsize=1)
def get_settings() -> AdoptionSettings:
    """The ONLY public configuration entrypoint.  Cached for the process.

    Tests call ``get_settings.cache_clear()`` after changing the environment.
    """
    settings = load_settings(os.environ.get(ENV_CONFIG_FILE))
    _logger.info(
        "settings_loaded",
        extra={
            "dialect": settings.database_url.split(":", 1)[0],
            "pool_size": settings.pool_size,
            "transaction_timeout_seconds": settings.transaction_timeout_seconds,
            "log_level": settings.log_level,
        },
    )
    return settings


__all__ = ["AdoptionSettings", "get_settings", "load_settings"]
