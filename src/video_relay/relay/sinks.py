"""Destination sinks for relayed media bytes."""

import logging
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO, Optional

from .storage import TempStorage


logger = logging.getLogger(__name__)


class RelaySink(ABC):
    """Where relayed chunks go."""

    # Temporary file owned by the relay session, if any
    artifact: Optional[Path] = None

    @abstractmethod
    async def write(self, chunk: bytes) -> None:
        """Accept one chunk. The relay awaits this before reading more."""
        pass

    @abstractmethod
    async def finalize(self) -> None:
        """Called once after the upstream ended cleanly."""
        pass

    @abstractmethod
    async def abort(self, reason: BaseException) -> None:
        """Called once when the relay fails or is cancelled."""
        pass

    def cleanup(self) -> None:
        """Delete the temporary artifact if it is still on disk."""
        if self.artifact is None:
            return
        try:
            self.artifact.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not delete temp artifact %s: %s", self.artifact, e)


class FileSink(RelaySink):
    """
    Writes into a ``.part`` artifact and moves it into place on success.

    A failed or cancelled relay leaves nothing at ``destination``; the
    partial artifact is removed by the relay's cleanup.
    """

    def __init__(self, destination: Path, storage: TempStorage, title: str = "video"):
        self.destination = Path(destination)
        self.artifact = storage.artifact_path(title)
        self.bytes_written = 0
        self.aborted = False
        self._file: Optional[BinaryIO] = None

    async def write(self, chunk: bytes) -> None:
        if self._file is None:
            self._file = open(self.artifact, 'wb')
        self._file.write(chunk)
        self.bytes_written += len(chunk)

    async def finalize(self) -> None:
        self._close_file()
        self.destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(self.artifact), str(self.destination))
        logger.info("Saved %s", self.destination)

    async def abort(self, reason: BaseException) -> None:
        self.aborted = True
        self._close_file()
        logger.warning("Aborted write to %s: %s", self.destination, reason)

    def _close_file(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None
