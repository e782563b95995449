# config/__init__.py
"""Expose configuration as stable module-level constants.

This package provides a facade over the underlying Pydantic settings model defined in
[`config.settings`](config/settings.py:1). The primary API is the `settings` singleton
plus a set of module-level constants mirroring its fields.

Configuration precedence and lifecycle:
- On initial import, configuration is loaded by importing [`config.settings`](config/settings.py:1),
  which constructs the `settings` singleton.
- Values come from the process environment and may be sourced from a `.env` file.
- [`reload()`](config/__init__.py:85) re-reads `.env` with override enabled, then replaces
  this module's exported values (see [`config.loader.reload_settings()`](config/loader.py:27)).

Notes:
    Call sites read `config.HTTPX_TIMEOUT` and friends at call time so tests can
    monkeypatch them. New code may also use the `settings` object directly.
"""

from typing import Any

from .settings import (
    rich_formatter as rich_formatter,
)
from .settings import (
    settings as settings,
)
from .settings import (
    simple_formatter as simple_formatter,
)

SUPABASE_URL = settings.SUPABASE_URL
SUPABASE_API_KEY = settings.SUPABASE_API_KEY
SUPABASE_SCHEMA = settings.SUPABASE_SCHEMA
CHARACTERS_TABLE = settings.CHARACTERS_TABLE
PACKAGES_TABLE = settings.PACKAGES_TABLE
HTTPX_TIMEOUT = settings.HTTPX_TIMEOUT
HTTP_RETRY_ATTEMPTS = settings.HTTP_RETRY_ATTEMPTS
HTTP_RETRY_DELAY_SECONDS = settings.HTTP_RETRY_DELAY_SECONDS
MAX_CONCURRENT_REQUESTS = settings.MAX_CONCURRENT_REQUESTS
ENABLE_SECTION_ALIASES = settings.ENABLE_SECTION_ALIASES
BASE_OUTPUT_DIR = settings.BASE_OUTPUT_DIR
LOG_LEVEL_STR = settings.LOG_LEVEL_STR
LOG_DATE_FORMAT = settings.LOG_DATE_FORMAT
LOG_FILE = settings.LOG_FILE
ENABLE_RICH_PROGRESS = settings.ENABLE_RICH_PROGRESS
SIMPLE_LOGGING_MODE = settings.SIMPLE_LOGGING_MODE


def get(key: str) -> Any:
    """Return the value of a configuration attribute from `settings`.

    Args:
        key: Attribute name on the `settings` singleton.

    Returns:
        The current value of the named attribute.

    Raises:
        AttributeError: If `key` is not a valid attribute on `settings`.
    """
    return getattr(settings, key)


def set(key: str, value: Any) -> None:
    """Set a configuration attribute on `settings` at runtime.

    This mutates the in-memory settings instance and the matching module constant.
    It does not persist to `.env`.

    Args:
        key: Attribute name on the `settings` singleton.
        value: Value to assign.

    Raises:
        AttributeError: If `key` is not a valid attribute on `settings`.
    """
    if key not in type(settings).model_fields:
        raise AttributeError(f"Unknown configuration key: {key}")
    setattr(settings, key, value)
    globals()[key] = value


def reload() -> bool:
    """Reload configuration and refresh this package's exported constants.

    Returns:
        The status reported by [`config.loader.reload_settings()`](config/loader.py:27).
    """
    from .loader import reload_settings

    return reload_settings()
