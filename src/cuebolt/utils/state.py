import os
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional
from ..parsing.diagnostics import Diagnostic


class DiagnosticCollection:
    """
    Published diagnostics keyed by file. A new parse replaces the previous
    set for that file (last parse wins).
    """

    def __init__(self):
        self._entries: Dict[str, List[Diagnostic]] = {}

    @staticmethod
    def _key(file_path: str) -> str:
        return os.path.realpath(file_path)

    def set(self, file_path: str, diagnostics: List[Diagnostic]):
        self._entries[self._key(file_path)] = list(diagnostics)

    def get(self, file_path: str) -> List[Diagnostic]:
        return list(self._entries.get(self._key(file_path), []))

    def delete(self, file_path: str):
        self._entries.pop(self._key(file_path), None)

    def clear(self):
        self._entries.clear()

    def __contains__(self, file_path: str) -> bool:
        return self._key(file_path) in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class CueBoltState:
    """
    The single source of truth for the application's data.
    """
    source_path: str = ""
    source_code: str = ""
    module_root: str = ""

    # Lint Data
    compiler_output: str = ""
    lint_flags: List[str] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    # Eval Data
    eval_output: str = ""
    eval_out_type: str = "cue"
    eval_file: Optional[str] = None

    status_message: str = ""
    # Set when the last command failed; cleared when the next one starts
    last_error: str = ""
    last_update: float = 0.0

    @property
    def has_errors(self) -> bool:
        """Returns True if any diagnostic is marked as an error."""
        return any(d.severity == "error" for d in self.diagnostics)

    @property
    def source_lines(self) -> List[str]:
        return self.source_code.splitlines()

    def update_lint(self, stderr: str, diagnostics: List[Diagnostic]):
        self.compiler_output = stderr
        self.diagnostics = diagnostics

    def update_eval(self, output: str, out_type: str, eval_file: Optional[str]):
        self.eval_output = output
        self.eval_out_type = out_type
        self.eval_file = eval_file
