"""
Scratch space for eval output files.

One TempWorkspace is owned by the engine for the lifetime of the process.
Each use allocates its own sub-directory; cleanup() removes everything once
at shutdown.
"""
import logging
import os
import shutil
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


class TempDir:
    """A single allocated sub-directory. Usable as a context manager."""

    def __init__(self, path: str):
        self.path = path

    def dispose(self):
        shutil.rmtree(self.path, ignore_errors=True)

    def __enter__(self) -> "TempDir":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.dispose()


class TempWorkspace:
    def __init__(self, prefix: str = "cuebolt-"):
        self.prefix = prefix
        self.root = tempfile.mkdtemp(prefix=prefix)
        logger.debug("created temp workspace %s", self.root)

    def allocate(self, prefix: str = "") -> TempDir:
        """Create a fresh sub-directory: <root>/<prefix><random>."""
        if not os.path.isdir(self.root):
            # Something (tmp reaper, a previous cleanup) removed it
            os.makedirs(self.root, exist_ok=True)
        return TempDir(tempfile.mkdtemp(prefix=prefix, dir=self.root))

    def cleanup(self):
        if Path(self.root).exists():
            shutil.rmtree(self.root, ignore_errors=True)
            logger.debug("removed temp workspace %s", self.root)

    def __enter__(self) -> "TempWorkspace":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.cleanup()
