from textual.widgets import Static, Input
from textual.message import Message

class PromptPopup(Static):
    """A centered command palette for entering lint flags or eval expressions."""

    DEFAULT_CSS = """
    PromptPopup {
        display: none;
        width: 60;
        height: auto;
        background: #EBEEEE;
        border: solid #45d3ee;
        padding: 1 2;
        align: center middle;
    }

    PromptPopup .title {
        color: #191A1A;
        text-style: bold;
        margin-bottom: 1;
    }

    PromptPopup Input {
        background: #FFFFFF;
        color: #191A1A;
        border: solid #94bfc1;
    }
    """

    class Submitted(Message):
        def __init__(self, purpose: str, value: str) -> None:
            super().__init__()
            self.purpose = purpose
            self.value = value

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.purpose = ""

    def compose(self):
        yield Static("", classes="title", id="prompt-title")
        yield Input(id="prompt-input")

    def on_input_submitted(self, event: Input.Submitted):
        event.stop()
        self.post_message(self.Submitted(self.purpose, event.value))
        self.display = False

    def on_key(self, event):
        if event.key == "escape":
            self.display = False

    def show(self, purpose: str, title: str, current: str = "", placeholder: str = ""):
        self.purpose = purpose
        self.display = True
        self.query_one("#prompt-title", Static).update(title)
        input_widget = self.query_one("#prompt-input", Input)
        input_widget.placeholder = placeholder
        input_widget.value = current
        input_widget.focus()
