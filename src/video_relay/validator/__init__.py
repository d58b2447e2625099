"""Validator module for checking submitted URLs."""

from .url_validator import (
    ALLOWED_SCHEMES,
    is_absolute_url,
    validate_url,
)

__all__ = [
    "ALLOWED_SCHEMES",
    "is_absolute_url",
    "validate_url",
]
