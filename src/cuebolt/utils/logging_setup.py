import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level_name: str = "INFO", log_file: Optional[Path] = None, console: bool = False):
    """
    Configures the root logger.
    The log file plays the role of an editor's debug output channel; the
    rich console handler is only attached for --verbose runs so it never
    draws over the TUI.
    """
    level = getattr(logging, level_name.upper(), logging.INFO)
    handlers = []

    if console:
        handlers.append(RichHandler(
            console=Console(stderr=True),
            show_time=True,
            show_level=True,
            show_path=False,
        ))

    if log_file:
        try:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            handlers.append(file_handler)
        except OSError as e:
            Console(stderr=True).print(f"[yellow]Warning: Could not log to {log_file}: {e}[/yellow]")

    if not handlers:
        handlers.append(logging.NullHandler())

    logging.basicConfig(level=level, format="%(message)s", handlers=handlers, force=True)

    # watchdog is chatty at DEBUG
    logging.getLogger("watchdog").setLevel(logging.WARNING)
