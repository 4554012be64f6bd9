"""
Shared field validators
"""

from typing import Optional
from urllib.parse import urlparse


def blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def validate_url(value: Optional[str]) -> Optional[str]:
    """Accept an absolute http(s) URL; an empty string means no URL"""
    value = blank_to_none(value)
    if value is None:
        return None

    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("Must be a valid URL")
    return value
