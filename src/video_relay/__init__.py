"""Video Relay - extract media metadata from pages and relay the media."""

__version__ = "0.1.0"

from .errors import (
    VideoRelayError,
    InputError,
    ExtractionError,
    LocatorNotFoundError,
    RelayError,
)
from .pipeline import ExtractionPipeline, DownloadPlan

__all__ = [
    "VideoRelayError",
    "InputError",
    "ExtractionError",
    "LocatorNotFoundError",
    "RelayError",
    "ExtractionPipeline",
    "DownloadPlan",
]
