import os
from typing import Optional
from textual.app import App, ComposeResult
from textual.widgets import Footer
from textual.containers import VerticalScroll, Vertical
from textual.binding import Binding
from textual.message import Message
from ..engine import CueEngine
from ..errors import CueNotFoundError
from ..utils.state import CueBoltState
from ..utils.lang import next_out_type
from .prompt_popup import PromptPopup
from .widgets import DiagnosticsView, EvalView, StatusBar

# User Palette
C_BG = "#EBEEEE"
C_TEXT = "#191A1A"
C_ACCENT1 = "#45d3ee" # Cyan
C_ACCENT2 = "#9FBFC5" # Muted Blue
C_ACCENT4 = "#fecd91" # Orange


class CueBoltApp(App):
    """Live CUE lint / eval companion."""

    CSS = f"""
    Screen {{
        background: {C_BG};
        color: {C_TEXT};
        layers: base popups;
        align: center middle;
    }}

    #main-layout {{
        height: 1fr;
        width: 100%;
        layer: base;
    }}

    #diagnostics-container {{
        height: 1fr;
        border: solid {C_ACCENT2};
        margin: 1 1 0 1;
    }}

    #eval-container {{
        height: 1fr;
        border: solid {C_ACCENT1};
        margin: 0 1;
        display: none;
    }}

    #status-bar {{ height: 1; margin: 0 1; color: {C_TEXT}; }}

    PromptPopup {{
        display: none;
        layer: popups;
        margin: 1 1;
        width: 60;
    }}

    Footer {{ background: {C_TEXT}; color: {C_ACCENT1}; }}
    """

    BINDINGS = [
        Binding("q", "quit", "Quit", show=True),
        Binding("r", "relint", "Lint", show=True),
        Binding("e", "eval", "Eval", show=True),
        Binding("x", "eval_expression", "Eval expr", show=True),
        Binding("t", "cycle_out_type", "Out type", show=True),
        Binding("f", "format", "Format", show=True),
        Binding("o", "edit_flags", "Flags", show=True),
        Binding("s", "toggle_lint_on_save", "Lint on save", show=True),
    ]

    class StateUpdated(Message):
        def __init__(self, state: CueBoltState) -> None:
            super().__init__()
            self.state = state

    def __init__(self, source_file: str, workspace_folder: Optional[str] = None):
        super().__init__()
        self.engine = CueEngine(source_file, workspace_folder=workspace_folder)
        self.engine.on_update_callback = lambda state: self.post_message(self.StateUpdated(state))

    def compose(self) -> ComposeResult:
        with Vertical(id="main-layout"):
            with VerticalScroll(id="diagnostics-container"):
                yield DiagnosticsView()
            with VerticalScroll(id="eval-container"):
                yield EvalView()
            yield StatusBar()
        yield PromptPopup(id="prompt")
        yield Footer()

    def _run_engine(self, action, *args) -> None:
        try:
            action(*args)
        except CueNotFoundError as e:
            self.query_one(StatusBar).set_status(status=str(e))

    def on_mount(self) -> None:
        self.query_one(StatusBar).set_status(
            file=os.path.basename(self.engine.state.source_path),
            flags=" ".join(self.engine.lint_flags),
        )
        self._run_engine(self.engine.start)

    def action_relint(self) -> None:
        self._run_engine(self.engine.lint)

    def action_eval(self) -> None:
        self._run_engine(self.engine.evaluate)

    def action_format(self) -> None:
        self._run_engine(self.engine.format)

    def action_cycle_out_type(self) -> None:
        out_type = next_out_type(self.engine.state.eval_out_type).value
        self.engine.set_out_type(out_type)
        self.query_one(StatusBar).set_status(status=f"eval output: {out_type}")

    def action_toggle_lint_on_save(self) -> None:
        self.engine.set_lint_on_save(not self.engine.lint_on_save)

    def action_eval_expression(self) -> None:
        self.query_one("#prompt", PromptPopup).show(
            "expression",
            "Expressions to evaluate",
            placeholder='space separated, e.g. "a[0] b[0]"',
        )

    def action_edit_flags(self) -> None:
        self.query_one("#prompt", PromptPopup).show(
            "flags",
            "cue vet flags",
            current=" ".join(self.engine.lint_flags),
            placeholder="-t env=prod ...",
        )

    def on_prompt_popup_submitted(self, message: PromptPopup.Submitted) -> None:
        if message.purpose == "flags":
            self.query_one(StatusBar).set_status(flags=message.value)
            self._run_engine(self.engine.set_flags, message.value.split())
        elif message.purpose == "expression":
            expressions = message.value.split()
            if not expressions:
                self.query_one(StatusBar).set_status(status="No expression entered")
                return
            self._run_engine(self.engine.evaluate, expressions)

    def on_cue_bolt_app_state_updated(self, message: StateUpdated) -> None:
        state = message.state
        self.query_one(DiagnosticsView).set_diagnostics(state.diagnostics, state.source_lines)

        eval_container = self.query_one("#eval-container", VerticalScroll)
        if state.eval_file:
            eval_container.display = True
            self.query_one(EvalView).set_output(state.eval_output, state.eval_out_type)

        self.query_one(StatusBar).set_status(
            root=state.module_root,
            status=state.status_message or "idle",
            errors=len(state.diagnostics),
        )

    def on_unmount(self) -> None: self.engine.stop()

def run_tui(source_file: str, workspace_folder: Optional[str] = None):
    app = CueBoltApp(source_file, workspace_folder=workspace_folder)
    app.run()
