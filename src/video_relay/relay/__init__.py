"""Relay module for streaming media from an origin to a destination."""

from .session import RelaySession, relay, DEFAULT_CHUNK_SIZE
from .sinks import RelaySink, FileSink
from .storage import TempStorage

__all__ = [
    "RelaySession",
    "relay",
    "DEFAULT_CHUNK_SIZE",
    "RelaySink",
    "FileSink",
    "TempStorage",
]
