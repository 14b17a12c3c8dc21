"""URL validation utilities."""

from __future__ import annotations

from urllib.parse import urlsplit

from backend_trustscan.core.exceptions import InvalidURLError

ALLOWED_SCHEMES = ("http", "https")
MAX_URL_LENGTH = 2048


def is_valid_url(value: object) -> bool:
    """Return True if value is a well-formed absolute http(s) URL with a host."""
    try:
        validate_url(value)
        return True
    except InvalidURLError:
        return False


def validate_url(value: object) -> str:
    """
    Return the stripped URL, or raise InvalidURLError.

    The returned string is the cache key: lookups match the exact URL string.
    """
    if not isinstance(value, str) or not value.strip():
        raise InvalidURLError("URL is required")
    url = value.strip()
    if len(url) > MAX_URL_LENGTH:
        raise InvalidURLError("URL is too long")
    if any(ch.isspace() for ch in url):
        raise InvalidURLError("URL must not contain whitespace")
    try:
        parts = urlsplit(url)
        host = parts.hostname
        parts.port  # raises ValueError on a malformed port
    except ValueError as e:
        raise InvalidURLError("URL is malformed") from e
    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        raise InvalidURLError("URL must be an absolute http(s) URL")
    if not host or "." not in host.strip("."):
        raise InvalidURLError("URL must include a valid host")
    return url


def domain_of(url: str) -> str:
    """Lowercased hostname without port or trailing dot."""
    host = urlsplit(url).hostname or ""
    return host.rstrip(".").lower()
