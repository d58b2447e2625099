"""Small helpers shared across modules."""

from .formatting import download_filename, format_duration, human_readable_size, slugify_title
from .log import configure_logging

__all__ = [
    "download_filename",
    "format_duration",
    "human_readable_size",
    "slugify_title",
    "configure_logging",
]
