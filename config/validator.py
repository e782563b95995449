# config/validator.py
"""
Configuration validation utilities.

This module provides a single public function `validate_all()` that:
1. Reads the current `settings` object (already validated field-by-field by Pydantic).
2. Performs cross‑field sanity checks that cannot be expressed purely with
   Pydantic field validators.
3. Returns a structured health report dictionary.

The report layout:

{
    "overall_health": "healthy" | "warning" | "error",
    "issues": {
        "errors":   [{ "field": "<field>", "message": "<msg>" }, ...],
        "warnings": [{ "field": "<field>", "message": "<msg>" }, ...],
        "info":     [{ "field": "<field>", "message": "<msg>" }, ...],
    }
}
"""

from __future__ import annotations

import importlib
from urllib.parse import urlparse


def _add_issue(
    issues: dict[str, list[dict[str, str]]],
    severity: str,
    field: str,
    message: str,
) -> None:
    """Utility to append an issue entry to the report."""
    issues.setdefault(severity, []).append({"field": field, "message": message})


def validate_all() -> dict:
    """
    Validate the current configuration state.

    Returns a health‑report dict with overall status and detailed issue lists.
    """
    issues: dict[str, list[dict[str, str]]] = {"errors": [], "warnings": [], "info": []}
    # Looked up at call time so a reload is picked up.
    current_settings = importlib.import_module("config.settings").settings

    if current_settings is None:
        _add_issue(issues, "errors", "settings", "Configuration object not initialized.")
        return {
            "overall_health": "error",
            "issues": issues,
        }

    parsed = urlparse(current_settings.SUPABASE_URL)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        _add_issue(
            issues,
            "errors",
            "SUPABASE_URL",
            f"SUPABASE_URL ({current_settings.SUPABASE_URL!r}) must be an http(s) URL.",
        )

    if not current_settings.SUPABASE_API_KEY:
        _add_issue(
            issues,
            "info",
            "SUPABASE_API_KEY",
            "SUPABASE_API_KEY is empty; requests will be sent without credentials.",
        )

    for name in ("CHARACTERS_TABLE", "PACKAGES_TABLE", "SUPABASE_SCHEMA"):
        if not getattr(current_settings, name).strip():
            _add_issue(issues, "errors", name, f"{name} must not be empty.")

    if current_settings.HTTP_RETRY_ATTEMPTS < 1:
        _add_issue(
            issues,
            "errors",
            "HTTP_RETRY_ATTEMPTS",
            f"HTTP_RETRY_ATTEMPTS must be >= 1; got {current_settings.HTTP_RETRY_ATTEMPTS}.",
        )
    elif current_settings.HTTP_RETRY_ATTEMPTS > 10:
        _add_issue(
            issues,
            "warnings",
            "HTTP_RETRY_ATTEMPTS",
            f"HTTP_RETRY_ATTEMPTS is very large ({current_settings.HTTP_RETRY_ATTEMPTS}).",
        )

    if current_settings.HTTP_RETRY_DELAY_SECONDS < 0:
        _add_issue(
            issues,
            "errors",
            "HTTP_RETRY_DELAY_SECONDS",
            "HTTP_RETRY_DELAY_SECONDS must not be negative.",
        )

    if current_settings.HTTPX_TIMEOUT <= 0:
        _add_issue(issues, "errors", "HTTPX_TIMEOUT", "HTTPX_TIMEOUT must be positive.")

    if current_settings.MAX_CONCURRENT_REQUESTS < 1:
        _add_issue(
            issues,
            "errors",
            "MAX_CONCURRENT_REQUESTS",
            f"MAX_CONCURRENT_REQUESTS must be >= 1; got {current_settings.MAX_CONCURRENT_REQUESTS}.",
        )

    overall = "healthy"
    if issues["errors"]:
        overall = "error"
    elif issues["warnings"]:
        overall = "warning"

    return {
        "overall_health": overall,
        "issues": issues,
    }
