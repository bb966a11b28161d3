"""
payroll_config -- single public entrypoint for service configuration.

``load_settings()`` is the only way processes obtain their settings.  The
kernel never imports this package; the API layer and scripts read settings
here and pass plain values (a database URL, engine options) down.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from payroll_config.loader import load_settings_from
from payroll_config.schema import DatabaseSettings, ServerSettings, ServiceSettings

_logger = logging.getLogger("payroll_kernel.config")

__all__ = [
    "DatabaseSettings",
    "ServerSettings",
    "ServiceSettings",
    "load_settings",
]


def load_settings(
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> ServiceSettings:
    """
    Load service settings.

    Args:
        path: Optional YAML file overriding the packaged defaults.  Falls
            back to the ``PAYROLL_CONFIG`` environment variable.
        environ: Environment mapping (defaults to ``os.environ``).
    """
    env = os.environ if environ is None else environ
    if path is None and env.get("PAYROLL_CONFIG"):
        path = env["PAYROLL_CONFIG"]
    settings = load_settings_from(Path(path) if path else None, env)
    _logger.info(
        "settings_loaded",
        extra={
            "config_path": str(path) if path else None,
            "database_dialect": settings.database.url.split(":", 1)[0],
            "port": settings.server.port,
        },
    )
    return settings
