"""Transient artifact area used by relay sinks."""

import itertools
import logging
import threading
import time
from pathlib import Path

from ..utils.formatting import slugify_title


logger = logging.getLogger(__name__)


class TempStorage:
    """
    Directory holding per-session temporary artifacts.

    ``ensure()`` is called once at startup; artifact names combine a
    monotonic timestamp, a per-instance counter and the sanitized title so
    concurrent sessions never collide.
    """

    def __init__(self, root: Path):
        self.root = Path(root)
        self._ready = False
        self._counter = itertools.count()
        self._lock = threading.Lock()

    def ensure(self) -> Path:
        """Create the directory if it is missing."""
        if not self._ready:
            self.root.mkdir(parents=True, exist_ok=True)
            self._ready = True
            logger.info("Temp storage ready at %s", self.root)
        return self.root

    @property
    def ready(self) -> bool:
        return self._ready

    def artifact_path(self, title: str = "video", suffix: str = ".part") -> Path:
        """
        Reserve a unique artifact path.

        Args:
            title: Title used to make the name recognizable
            suffix: File suffix

        Returns:
            Path inside the storage root; the file is not created
        """
        if not self._ready:
            raise RuntimeError("TempStorage.ensure() must be called before use")
        with self._lock:
            sequence = next(self._counter)
        return self.root / f"{time.monotonic_ns()}_{sequence}_{slugify_title(title, 60)}{suffix}"

    def list_artifacts(self) -> list[Path]:
        """Artifacts currently on disk."""
        if not self.root.exists():
            return []
        return sorted(p for p in self.root.iterdir() if p.is_file())
