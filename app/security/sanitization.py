"""
app/security/sanitization.py

Sanitization of untrusted text and nested JSON-like data.

Every string leaf is cleaned before it reaches validation or storage:
angle brackets, ``javascript:`` schemes and inline event-handler patterns are
removed, repeatedly, until the text stops changing. Sanitizing twice gives
the same result as sanitizing once.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any

from app.domain.errors import PayloadTooLargeError

_ANGLE_BRACKETS = re.compile(r"[<>]")
_JAVASCRIPT_SCHEME = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"on\w+\s*=", re.IGNORECASE)
_UNSAFE_FILE_NAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]")
_REPEATED_DOTS = re.compile(r"\.{2,}")

_MAX_FILE_NAME_LENGTH = 255


def _clean_text_once(value: str) -> str:
    cleaned = _ANGLE_BRACKETS.sub("", value)
    cleaned = _JAVASCRIPT_SCHEME.sub("", cleaned)
    cleaned = _EVENT_HANDLER.sub("", cleaned)
    return cleaned.strip()


def sanitize_text(value: str) -> str:
    """
    Clean one plain-text value down to a fixed point.
    """

    current = value
    while True:
        cleaned = _clean_text_once(current)
        if cleaned == current:
            return cleaned
        current = cleaned


def sanitize_value(value: Any) -> Any:
    """
    Recursively sanitize strings inside lists, tuples and mappings.

    Mapping keys follow the same rule as values. Numbers, booleans and None
    are returned unchanged.
    """

    if isinstance(value, str):
        return sanitize_text(value)
    if isinstance(value, Mapping):
        return {
            (sanitize_text(key) if isinstance(key, str) else key): sanitize_value(item)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [sanitize_value(item) for item in value]
    if isinstance(value, tuple):
        return tuple(sanitize_value(item) for item in value)
    return value


def serialized_size(value: Any) -> int:
    """
    UTF-8 byte length of the compact JSON form of ``value``.
    """

    encoded = json.dumps(value, default=str, ensure_ascii=False, separators=(",", ":"))
    return len(encoded.encode("utf-8"))


def sanitize_bounded(value: Any, max_bytes: int) -> Any:
    """
    Sanitize ``value`` and raise PayloadTooLargeError when the sanitized
    form serializes to more than ``max_bytes``.
    """

    cleaned = sanitize_value(value)
    size = serialized_size(cleaned)
    if size > max_bytes:
        raise PayloadTooLargeError(size_bytes=size, max_bytes=max_bytes)
    return cleaned


def sanitize_file_name(file_name: str) -> str:
    """
    Reduce an uploaded file name to a safe, path-free form.
    """

    base_name = file_name.replace("\\", "/").rsplit("/", 1)[-1]
    cleaned = _UNSAFE_FILE_NAME_CHARS.sub("_", base_name)
    cleaned = _REPEATED_DOTS.sub(".", cleaned)
    cleaned = cleaned.lstrip(".")
    return cleaned[:_MAX_FILE_NAME_LENGTH] or "upload.csv"
