"""
Configuration Loader (``payroll_config.loader``).

Responsibility
--------------
Loads YAML settings files, merges them over the packaged defaults, applies
environment overrides and parses the result into ``ServiceSettings``.

Precedence (lowest to highest)
------------------------------
1. ``payroll_config/defaults.yaml``
2. The YAML file given explicitly or through ``PAYROLL_CONFIG``
3. Environment variables:

   ===================== ==========================
   Variable              Setting
   ===================== ==========================
   ``DATABASE_URL``      ``database.url``
   ``PAYROLL_HOST``      ``server.host``
   ``PAYROLL_PORT``      ``server.port``
   ``PAYROLL_LOG_LEVEL`` ``logging.level``
   ===================== ==========================

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown section or key  -> ``ValueError``.
* Non-numeric port / pool sizes / opening balance  -> ``ValueError``.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from payroll_config.schema import DatabaseSettings, ServerSettings, ServiceSettings

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"

_ALLOWED_KEYS: dict[str, frozenset[str]] = {
    "database": frozenset(
        {"url", "echo", "pool_size", "max_overflow", "pool_timeout", "pool_recycle"}
    ),
    "server": frozenset({"host", "port"}),
    "logging": frozenset({"level"}),
    "company": frozenset({"opening_balance"}),
}

_ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "DATABASE_URL": ("database", "url"),
    "PAYROLL_HOST": ("server", "host"),
    "PAYROLL_PORT": ("server", "port"),
    "PAYROLL_LOG_LEVEL": ("logging", "level"),
}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _check_keys(data: Mapping[str, Any], source: str) -> None:
    for section, values in data.items():
        if section not in _ALLOWED_KEYS:
            raise ValueError(f"{source}: unknown configuration section {section!r}")
        if not isinstance(values, Mapping):
            raise ValueError(f"{source}: section {section!r} must be a mapping")
        unknown = set(values) - _ALLOWED_KEYS[section]
        if unknown:
            raise ValueError(
                f"{source}: unknown keys in {section!r}: {', '.join(sorted(unknown))}"
            )


def merge_settings(
    base: Mapping[str, Any], override: Mapping[str, Any]
) -> dict[str, Any]:
    """Merge ``override`` into a copy of ``base`` one section deep."""
    merged = copy.deepcopy(dict(base))
    for section, values in override.items():
        merged.setdefault(section, {}).update(values)
    return merged


def apply_env_overrides(
    data: Mapping[str, Any], environ: Mapping[str, str]
) -> dict[str, Any]:
    """Return ``data`` with any set override variables applied."""
    overrides: dict[str, dict[str, Any]] = {}
    for var, (section, key) in _ENV_OVERRIDES.items():
        value = environ.get(var)
        if value:
            overrides.setdefault(section, {})[key] = value
    return merge_settings(data, overrides)


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def parse_decimal(value: Any, name: str) -> Decimal:
    try:
        result = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"{name} must be a decimal number, got {value!r}") from None
    if not result.is_finite():
        raise ValueError(f"{name} must be finite, got {value!r}")
    return result


def parse_settings(data: Mapping[str, Any]) -> ServiceSettings:
    """
    Parse a merged settings mapping into ``ServiceSettings``.

    Raises:
        KeyError: if ``database.url`` is missing.
        ValueError: if a numeric field cannot be parsed.
    """
    db = data.get("database", {})
    server = data.get("server", {})
    log = data.get("logging", {})
    company = data.get("company", {})

    return ServiceSettings(
        database=DatabaseSettings(
            url=db["url"],
            echo=_parse_bool(db.get("echo", False)),
            pool_size=int(db.get("pool_size", 20)),
            max_overflow=int(db.get("max_overflow", 10)),
            pool_timeout=int(db.get("pool_timeout", 30)),
            pool_recycle=int(db.get("pool_recycle", 1800)),
        ),
        server=ServerSettings(
            host=str(server.get("host", "0.0.0.0")),
            port=int(server.get("port", 8080)),
        ),
        log_level=str(log.get("level", "INFO")).upper(),
        opening_balance=parse_decimal(
            company.get("opening_balance", "0"), "company.opening_balance"
        ),
    )


def load_settings_from(
    path: Path | None, environ: Mapping[str, str]
) -> ServiceSettings:
    """Defaults, then ``path`` (if any), then ``environ`` overrides."""
    data = load_yaml_file(DEFAULTS_PATH)
    _check_keys(data, str(DEFAULTS_PATH))
    if path is not None:
        override = load_yaml_file(path)
        _check_keys(override, str(path))
        data = merge_settings(data, override)
    return parse_settings(apply_env_overrides(data, environ))
