import logging
import time
from pathlib import Path
from typing import Callable
from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler

logger = logging.getLogger(__name__)

class CueSaveHandler(FileSystemEventHandler):
    """
    Listens for saves of a specific .cue file and triggers a callback.
    """
    def __init__(self, target_file: str, callback: Callable[[str], None]):
        self.target_file = str(Path(target_file).resolve())
        self.callback = callback
        self.last_triggered = 0
        self.debounce_seconds = 0.5 # Prevent double-triggers from some editors

    def _maybe_trigger(self, path: str):
        if str(Path(path).resolve()) != self.target_file:
            return
        now = time.time()
        if now - self.last_triggered > self.debounce_seconds:
            logger.debug("save detected: %s", self.target_file)
            self.callback(self.target_file)
            self.last_triggered = now

    def on_modified(self, event):
        if event.is_directory:
            return
        self._maybe_trigger(event.src_path)

    def on_moved(self, event):
        # Editors that save via rename-over land here
        if event.is_directory:
            return
        self._maybe_trigger(event.dest_path)

class FileWatcher:
    """
    Manages the watchdog observer thread.
    """
    def __init__(self):
        self.observer = Observer()
        self.watch = None

    def start_watching(self, file_path: str, callback: Callable[[str], None]):
        """
        Starts a background thread watching the directory of the file_path.
        """
        path = Path(file_path).resolve()
        if not path.exists():
            raise FileNotFoundError(f"Cannot watch non-existent file: {file_path}")

        handler = CueSaveHandler(str(path), callback)
        # Watch the parent directory
        self.watch = self.observer.schedule(handler, str(path.parent), recursive=False)
        self.observer.start()
        logger.info("watching %s", path)

    def stop_watching(self):
        if self.observer.is_alive():
            self.observer.stop()
            self.observer.join()
