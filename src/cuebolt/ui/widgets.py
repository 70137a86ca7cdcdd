"""
Custom Widgets
==============
Exposes: DiagnosticsView, EvalView, StatusBar

The user edits their .cue file in their own editor; Watchdog detects saves
and these panes update live.
"""

from __future__ import annotations

from typing import List, Optional

from rich.text import Text
from textual.widgets import Static

C_ERROR = "#a80000"
C_MUTED = "#9FBFC5"


def render_diagnostics(diagnostics: List, source_lines: Optional[List[str]] = None) -> Text:
    """One block per diagnostic: location, message, offending source line."""
    if not diagnostics:
        return Text("✔ No problems", style="bold green")
    source_lines = source_lines or []
    out = Text()
    for i, d in enumerate(diagnostics):
        if i:
            out.append("\n")
        # Diagnostic.line is 0-based; show it 1-based like cue does
        out.append(f"{d.file_path}:{d.line + 1}:{d.column}", style=f"bold {C_MUTED}")
        out.append("  ")
        out.append(d.message or "(no message)", style=C_ERROR)
        if 0 <= d.line < len(source_lines):
            out.append("\n    ")
            out.append(source_lines[d.line].rstrip(), style="dim")
    return out


class DiagnosticsView(Static):
    """
    Main pane: the current file's lint diagnostics.
    ID: #diagnostics-view
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(id="diagnostics-view", **kwargs)

    def set_diagnostics(self, diagnostics: List, source_lines: Optional[List[str]] = None) -> None:
        self.update(render_diagnostics(diagnostics, source_lines))


class EvalView(Static):
    """
    Secondary pane: the last `cue eval` output.
    ID: #eval-view
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(id="eval-view", **kwargs)

    def set_output(self, output: str, out_type: str) -> None:
        text = Text(f"── eval ({out_type}) ──\n", style=f"bold {C_MUTED}")
        text.append(output)
        self.update(text)


class StatusBar(Static):
    """
    Bottom bar: current file, module root, flags, status, error count.
    ID: #status-bar
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(id="status-bar", **kwargs)
        self._file: str = ""
        self._root: str = ""
        self._flags: str = ""
        self._status: str = "idle"
        self._errors: int = 0

    def set_status(
        self,
        *,
        file: str | None = None,
        root: str | None = None,
        flags: str | None = None,
        status: str | None = None,
        errors: int | None = None,
    ) -> None:
        if file is not None:
            self._file = file
        if root is not None:
            self._root = root
        if flags is not None:
            self._flags = flags
        if status is not None:
            self._status = status
        if errors is not None:
            self._errors = errors
        self._render_bar()

    def render_text(self) -> str:
        parts = []
        if self._file:
            parts.append(f"📄 {self._file}")
        if self._root:
            parts.append(f"📦 {self._root}")
        if self._flags:
            parts.append(f"⚙  {self._flags}")
        parts.append(f"● {self._status}")
        if self._errors:
            parts.append(f"❌ {self._errors} error(s)")
        return "  │  ".join(parts)

    def _render_bar(self) -> None:
        self.update(self.render_text())
