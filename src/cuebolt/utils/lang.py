"""
File-type and output-type helpers.
This module is the single source of truth for which files CueBolt accepts
and which formats `cue eval` may emit.
"""
from pathlib import Path
from enum import Enum
from typing import Union


class OutType(str, Enum):
    YAML = "yaml"
    JSON = "json"
    TEXT = "text"
    CUE = "cue"


OUT_TYPE_VALUES = tuple(t.value for t in OutType)

# Only `text` differs from its own name
_EXT_MAP = {
    OutType.TEXT: "txt",
}

SUPPORTED_EXTENSIONS = {".cue"}


def out_type_extension(out_type: Union[OutType, str]) -> str:
    """Return the file extension used when writing eval output of this type."""
    t = OutType(out_type)
    return _EXT_MAP.get(t, t.value)


def next_out_type(out_type: Union[OutType, str]) -> OutType:
    """Cycle yaml -> json -> text -> cue -> yaml (used by the TUI)."""
    members = list(OutType)
    idx = members.index(OutType(out_type))
    return members[(idx + 1) % len(members)]


def is_cue_file(file_path: str) -> bool:
    """Return True if the file extension is supported."""
    return Path(file_path).suffix in SUPPORTED_EXTENSIONS
