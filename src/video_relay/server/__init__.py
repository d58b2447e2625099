"""HTTP API for extraction and download."""

from .app import create_app, run_server, VideoInfoResponse, RelayResponse

__all__ = [
    "create_app",
    "run_server",
    "VideoInfoResponse",
    "RelayResponse",
]
