# config/loader.py
"""
Configuration reload utilities.

The main public function is ``reload_settings()`` which:
1. Reloads environment variables from ``.env`` (via ``dotenv.load_dotenv``).
2. Re‑creates the ``MysterySettings`` instance so that any changed values are applied.
3. Updates the symbols exported by ``config`` (the module‑level constants) to
   reflect the new values.

Optionally ``reload_settings()`` is hooked to ``SIGHUP`` so that an operator can
trigger a live configuration reload without restarting the process.
"""

from __future__ import annotations

import importlib
import os
import signal
from typing import Any

import structlog
from dotenv import load_dotenv

logger = structlog.get_logger(__name__)


def _import_settings_module():
    # ``config.settings`` as an attribute is the settings instance, not the module.
    return importlib.import_module("config.settings")


def reload_settings() -> bool:
    """
    Reload configuration from the environment and refresh the ``config`` package.

    Returns ``True`` on success, ``False`` on failure.
    """
    import config as config_pkg

    settings_mod = _import_settings_module()

    try:
        load_dotenv(override=True)

        fresh = settings_mod.MysterySettings()
    except Exception as exc:
        logger.error("Configuration reload failed", error=str(exc), exc_info=True)
        return False

    settings_mod.settings = fresh
    config_pkg.settings = fresh
    for field_name in type(fresh).model_fields:
        value = getattr(fresh, field_name)
        setattr(settings_mod, field_name, value)
        setattr(config_pkg, field_name, value)

    logger.info("Configuration reloaded")
    return True


def _handle_sighup(signum: int, frame: Any) -> None:  # pragma: no cover
    """Signal handler that invokes ``reload_settings``."""
    reload_settings()


# Skip registration when CONFIG_DISABLE_SIGHUP is set, or where SIGHUP doesn't exist.
if not os.getenv("CONFIG_DISABLE_SIGHUP") and hasattr(signal, "SIGHUP"):
    signal.signal(signal.SIGHUP, _handle_sighup)
