"""Input validation for submitted media-page URLs."""

from typing import Optional
from urllib.parse import urlparse

from ..errors import InputError


ALLOWED_SCHEMES = ("http", "https")


def is_absolute_url(url: Optional[str]) -> bool:
    """Return True if ``url`` has an http(s) scheme and a host."""
    if not url or not isinstance(url, str):
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme.lower() in ALLOWED_SCHEMES and bool(parsed.netloc) and bool(parsed.hostname)


def validate_url(raw_url: Optional[str]) -> str:
    """
    Check that a submitted URL is present and well formed.

    Args:
        raw_url: The URL string as received from the caller

    Returns:
        The URL with surrounding whitespace removed

    Raises:
        InputError: If the URL is missing or cannot be parsed as an
            absolute http(s) URL
    """
    if raw_url is None or not str(raw_url).strip():
        raise InputError("URL is required")

    url = str(raw_url).strip()

    if not is_absolute_url(url):
        raise InputError("Invalid URL format")

    # Reject ports that do not parse (e.g. "http://host:abc/")
    try:
        urlparse(url).port
    except ValueError:
        raise InputError("Invalid URL format")

    return url
