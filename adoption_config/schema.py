"""
Configuration Schema (``adoption_config.schema``).

Responsibility
--------------
Frozen dataclass describing every runtime setting of the adoption kernel.
Constructed only by ``adoption_config.loader``; consumed by
``adoption_kernel.db.engine.init_engine_from_settings``.

Invariants enforced
-------------------
* Instances are immutable and validated on construction: an
  ``AdoptionSettings`` that exists is usable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclass(frozen=True)
class AdoptionSettings:
    """Runtime settings: database connection, pool, timeouts, log level."""

    database_url: str
    echo_sql: bool = False
    pool_size: int = 20
    max_overflow: int = 10
    pool_timeout_seconds: int = 30
    transaction_timeout_seconds: float = 5.0
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if not self.database_url:
            raise ValueError("database_url is required")
        if not self.database_url.startswith(("postgresql", "sqlite")):
            raise ValueError(
                f"database_url must be a postgresql:// or sqlite:// URL, "
                f"got {self.database_url.split(':', 1)[0]!r}"
            )
        if self.pool_size < 1:
            raise ValueError(f"pool_size must be >= 1, got {self.pool_size}")
        if self.max_overflow < 0:
            raise ValueError(f"max_overflow must be >= 0, got {self.max_overflow}")
        if self.pool_timeout_seconds <= 0:
            raise ValueError(
                f"pool_timeout_seconds must be positive, got {self.pool_timeout_seconds}"
            )
        if self.transaction_timeout_seconds <= 0:
            raise ValueError(
                "transaction_timeout_seconds must be positive, "
                f"got {self.transaction_timeout_seconds}"
            )
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {sorted(_LOG_LEVELS)}, got {self.log_level!r}"
            )

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level.upper())
