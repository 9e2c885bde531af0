"""
app/security package marker.
"""

from app.security.rate_limiter import RateLimitCache
from app.security.sanitization import (
    sanitize_bounded,
    sanitize_file_name,
    sanitize_text,
    sanitize_value,
)

__all__ = [
    "RateLimitCache",
    "sanitize_bounded",
    "sanitize_file_name",
    "sanitize_text",
    "sanitize_value",
]
