"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

_POSITIVE_INT_SETTINGS: dict[str, int] = {
    "IMPORT_MAX_FILE_BYTES": 5 * 1024 * 1024,
    "IMPORT_MAX_ROW_BYTES": 64 * 1024,
    "IMPORT_PROGRESS_BATCH_SIZE": 1,
    "IMPORT_RATE_LIMIT_MAX_ATTEMPTS": 5,
    "IMPORT_RATE_LIMIT_WINDOW_SECONDS": 60,
    "RATE_LIMIT_SWEEP_MINUTES": 5,
    "EXPORT_MAX_ROWS": 10_000,
}


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class ImportSettings:
    """
    Runtime settings for CSV imports.
    """

    max_file_bytes: int = 5 * 1024 * 1024
    max_row_bytes: int = 64 * 1024
    progress_batch_size: int = 1
    log_row_errors: bool = True


@dataclass(frozen=True)
class RateLimitSettings:
    """
    Fixed-window limits applied to import requests, per owner.
    """

    max_attempts: int = 5
    window_seconds: int = 60
    sweep_minutes: int = 5


@dataclass(frozen=True)
class ExportSettings:
    max_rows: int = 10_000


@lru_cache(maxsize=1)
def get_import_settings() -> ImportSettings:
    """
    Return cached import settings from environment variables.
    """

    return ImportSettings(
        max_file_bytes=max(1, _get_int_env("IMPORT_MAX_FILE_BYTES", 5 * 1024 * 1024)),
        max_row_bytes=max(1, _get_int_env("IMPORT_MAX_ROW_BYTES", 64 * 1024)),
        progress_batch_size=max(1, _get_int_env("IMPORT_PROGRESS_BATCH_SIZE", 1)),
        log_row_errors=_get_bool_env("IMPORT_LOG_ROW_ERRORS", True),
    )


@lru_cache(maxsize=1)
def get_rate_limit_settings() -> RateLimitSettings:
    """
    Return cached import rate-limit settings from environment variables.
    """

    return RateLimitSettings(
        max_attempts=max(1, _get_int_env("IMPORT_RATE_LIMIT_MAX_ATTEMPTS", 5)),
        window_seconds=max(1, _get_int_env("IMPORT_RATE_LIMIT_WINDOW_SECONDS", 60)),
        sweep_minutes=max(1, _get_int_env("RATE_LIMIT_SWEEP_MINUTES", 5)),
    )


@lru_cache(maxsize=1)
def get_export_settings() -> ExportSettings:
    return ExportSettings(max_rows=max(1, _get_int_env("EXPORT_MAX_ROWS", 10_000)))


def get_log_level() -> int:
    return getattr(logging, _get_str_env("LOG_LEVEL", "INFO").upper(), logging.INFO)


def collect_settings_errors() -> list[str]:
    """
    Check every pipeline setting present in the environment.

    Returns one message per problem; an empty list means the environment is
    usable. The typed getters above fall back to defaults silently, so this
    is where malformed values are surfaced.
    """

    _load_env_once()
    errors: list[str] = []

    for name in _POSITIVE_INT_SETTINGS:
        raw_value = os.getenv(name)
        if raw_value is None:
            continue
        try:
            value = int(raw_value.strip())
        except ValueError:
            errors.append(f"{name}='{raw_value}' is not an integer.")
            continue
        if value < 1:
            errors.append(f"{name}={value} must be a positive integer.")

    log_level = os.getenv("LOG_LEVEL")
    if log_level is not None and log_level.strip().upper() not in _LOG_LEVELS:
        errors.append(
            f"LOG_LEVEL='{log_level.strip()}' is not valid. "
            f"Allowed values: {sorted(_LOG_LEVELS)}."
        )

    return errors


def clear_settings_cache() -> None:
    get_import_settings.cache_clear()
    get_rate_limit_settings.cache_clear()
    get_export_settings.cache_clear()
