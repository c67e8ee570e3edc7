"""
Runtime settings for the template form engine.

Everything is read from environment variables (a `.env` file is loaded by the
HTTP app at startup). Settings are an immutable snapshot; call
`get_settings.cache_clear()` after changing the environment in tests.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache


def _env_bool(name: str, default: bool = False) -> bool:
    v = (os.getenv(name) or "").strip().lower()
    if not v:
        return default
    return v in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_str(name: str, default: str) -> str:
    return (os.getenv(name) or "").strip() or default


@dataclass(frozen=True)
class Settings:
    # Template intake
    max_template_chars: int = field(default_factory=lambda: _env_int("TEMPLATE_FORMS_MAX_TEMPLATE_CHARS", 200_000))
    required_by_default: bool = field(default_factory=lambda: _env_bool("TEMPLATE_FORMS_REQUIRED_BY_DEFAULT", True))

    # Derived totals
    derived_array: str = field(default_factory=lambda: _env_str("TEMPLATE_FORMS_DERIVED_ARRAY", "items"))
    row_total_field: str = field(default_factory=lambda: _env_str("TEMPLATE_FORMS_ROW_TOTAL_FIELD", "total"))
    grand_total_field: str = field(default_factory=lambda: _env_str("TEMPLATE_FORMS_GRAND_TOTAL_FIELD", "grand_total"))

    # HTTP service
    session_ttl_sec: int = field(default_factory=lambda: _env_int("TEMPLATE_FORMS_SESSION_TTL_SEC", 3600))
    submissions_table: str = field(default_factory=lambda: _env_str("TEMPLATE_FORMS_SUBMISSIONS_TABLE", "form_submissions"))
    log_level: str = field(default_factory=lambda: _env_str("TEMPLATE_FORMS_LOG_LEVEL", "INFO").upper())


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings"]
