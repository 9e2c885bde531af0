"""
Structured logging helpers shared by services and the audit sink.
"""

from __future__ import annotations

import json
import logging
from typing import Any

_SEVERITY_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


def severity_to_level(severity: str) -> int:
    """
    Map an audit severity name onto a logging level (unknown names → INFO).
    """

    return _SEVERITY_LEVELS.get(severity.strip().lower(), logging.INFO)


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.
    """

    if not logger.isEnabledFor(level):
        return
    payload = {"event": event, **fields}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))
