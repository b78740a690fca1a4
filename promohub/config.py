"""Loading of the YAML settings file and the database connection string."""

from __future__ import annotations

import os
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

import yaml

DEFAULT_CONFIG_FILE = "env.yaml"

_DSN_TEMPLATE = (
    "host={host} user={user} password={pass} dbname={name} port={port} "
    "sslmode=disable TimeZone=Asia/Jakarta"
)
_DSN_SETTINGS = ("host", "user", "pass", "name", "port")


def _to_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple, set, Mapping)):
        return ""
    return str(value)


def _flatten(data: Mapping[Any, Any], prefix: str = "") -> dict[str, str]:
    flat: dict[str, str] = {}
    for key, value in data.items():
        name = f"{prefix}{str(key).lower()}"
        if isinstance(value, Mapping):
            flat.update(_flatten(value, f"{name}."))
        else:
            flat[name] = _to_string(value)
    return flat


def load_config(
    path: str | os.PathLike[str] = DEFAULT_CONFIG_FILE,
    environ: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Read a YAML settings file into flat, lower-case, dotted keys.

    A non-empty environment variable named after a key in upper case, such as
    ``DATABASE.USER``, takes precedence over the file. Raises OSError when the
    file cannot be read and ValueError when it is not a YAML mapping.
    """
    if environ is None:
        environ = os.environ
    with open(path, encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle)
        except yaml.YAMLError as exc:
            raise ValueError(f"invalid configuration file {os.fspath(path)!r}: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise ValueError(f"configuration file {os.fspath(path)!r} must hold a mapping")
    config = _flatten(data)
    for name, value in environ.items():
        if value and "." in name and name == name.upper():
            config[name.lower()] = value
    for key in config:
        override = environ.get(key.upper())
        if override:
            config[key] = override
    return config


def build_dsn(config: Mapping[str, Any]) -> str:
    """Return the PostgreSQL connection string for the ``database.*`` settings."""
    settings = {str(key).lower(): value for key, value in config.items()}
    values = {name: _to_string(settings.get(f"database.{name}")) for name in _DSN_SETTINGS}
    return _DSN_TEMPLATE.format(**values)