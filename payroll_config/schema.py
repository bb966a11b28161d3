"""
Configuration schema (``payroll_config.schema``).

Frozen dataclasses describing the service settings.  Instances are built by
``payroll_config.loader`` and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True)
class DatabaseSettings:
    url: str
    echo: bool = False
    pool_size: int = 20
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 1800

    def engine_options(self) -> dict:
        """Keyword arguments for ``LedgerDatabase.from_url``."""
        return {
            "echo": self.echo,
            "pool_size": self.pool_size,
            "max_overflow": self.max_overflow,
            "pool_timeout": self.pool_timeout,
            "pool_recycle": self.pool_recycle,
        }


@dataclass(frozen=True)
class ServerSettings:
    host: str = "0.0.0.0"
    port: int = 8080


@dataclass(frozen=True)
class ServiceSettings:
    """Complete settings for one service process."""

    database: DatabaseSettings
    server: ServerSettings = field(default_factory=ServerSettings)
    log_level: str = "INFO"
    opening_balance: Decimal = Decimal("0")
