"""
Module-root discovery: finds the directory `cue` should run in.

A CUE module is marked by a `cue.mod` entry. Files may live deep inside a
module, so the nearest ancestor holding the marker wins. The walk never goes
above the workspace root.
"""
import logging
import os
from typing import Callable, Iterable, Optional

from ..errors import DirectoryReadError, ModuleRootNotFoundError
from ..utils.config import ConfigManager, expand_variables

logger = logging.getLogger(__name__)

MODULE_MARKER = "cue.mod"

ListEntries = Callable[[str], Iterable[str]]


def _has_marker(entries: Iterable[str]) -> bool:
    return any(name.endswith(MODULE_MARKER) for name in entries)


def resolve_module_root(
    workspace_root: str,
    candidate_dir: str,
    list_entries: ListEntries = os.listdir,
    canonicalize: bool = True,
) -> str:
    """
    Walks upward from candidate_dir (inclusive) to workspace_root (inclusive)
    and returns the first directory containing a `cue.mod` entry.

    Both paths are canonicalized once before the walk so a symlinked
    workspace still meets its boundary. Pass canonicalize=False to compare
    raw strings (e.g. with an injected fake lister).

    Raises DirectoryReadError if a directory cannot be listed, and
    ModuleRootNotFoundError if the boundary (or the filesystem root) is
    reached without finding the marker.
    """
    if canonicalize:
        workspace_root = os.path.realpath(workspace_root)
        candidate_dir = os.path.realpath(candidate_dir)

    start_dir = candidate_dir
    current = candidate_dir
    while True:
        try:
            entries = list(list_entries(current))
        except Exception as e:
            # any listing failure, not only OSError from os.listdir
            raise DirectoryReadError(current, e) from e

        if _has_marker(entries):
            logger.debug("module root for %s is %s", start_dir, current)
            return current

        if current == workspace_root:
            raise ModuleRootNotFoundError(workspace_root, start_dir)

        parent = os.path.dirname(current)
        if parent == current:
            # workspace_root was never an ancestor of candidate_dir
            logger.warning(
                "reached filesystem root from %s without meeting workspace root %s",
                start_dir, workspace_root,
            )
            raise ModuleRootNotFoundError(workspace_root, start_dir)
        current = parent


def get_config_module_root(
    config: ConfigManager,
    file_path: Optional[str] = None,
    workspace_folder: Optional[str] = None,
    list_entries: ListEntries = os.listdir,
) -> str:
    """
    Expands the configured `module_root` template and, when a file is given,
    resolves the nearest module root above it using the template as the
    boundary.
    """
    template = config.get("module_root") or "${workspaceFolder}"
    module_root = expand_variables(template, workspace_folder)

    if not module_root:
        module_root = os.getcwd()

    if file_path:
        module_root = resolve_module_root(
            module_root, os.path.dirname(os.path.abspath(file_path)), list_entries
        )

    return module_root
