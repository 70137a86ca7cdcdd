"""
Exception types shared across CueBolt.
The core (parsing, module-root resolution, the driver) raises these and never
catches them; the engine turns them into user-facing messages.
"""
from typing import List, Optional


class CueBoltError(Exception):
    """Base class for every CueBolt error."""


class CueNotFoundError(CueBoltError):
    """The `cue` binary could not be found or spawned."""


class CueCommandError(CueBoltError):
    def __init__(self, args: List[str], stderr: str, returncode: int):
        self.command = list(args)
        self.stderr = stderr
        self.returncode = returncode
        super().__init__(
            f'run command "cue {" ".join(args)}" failed, stderr: {stderr}'
        )


class ModuleRootNotFoundError(CueBoltError):
    """No `cue.mod` marker between the file's directory and the workspace root."""

    def __init__(self, workspace_root: str, start_dir: Optional[str] = None):
        self.workspace_root = workspace_root
        self.start_dir = start_dir
        super().__init__(f"No cue.mod in entire root: {workspace_root}")


class DirectoryReadError(CueBoltError):
    """An ancestor directory could not be listed during module-root resolution."""

    def __init__(self, path: str, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"Cannot read directory {path}: {cause}")


class InvalidOutTypeError(CueBoltError, ValueError):
    pass
