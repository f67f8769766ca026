"""Modal screens for the TUI.

This module hides the design decisions about:
- How failures that lost a message are presented (blocking dialog)
- Dialog appearance and keyboard shortcuts

Transient notices (usage hints, role switches) stay toasts; anything the
participant must acknowledge goes through here.
"""

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Static


class ErrorScreen(ModalScreen[None]):
    """Blocking error dialog; the conversation is inert until it is dismissed."""

    CSS = """
    ErrorScreen {
        align: center middle;
        background: $background 70%;
    }

    #error-dialog {
        width: 64;
        height: auto;
        max-height: 20;
        border: tall $error;
        background: $surface;
        padding: 1 2;
    }

    #error-title {
        width: 100%;
        text-align: center;
        text-style: bold;
        color: $error;
        padding: 0 0 1 0;
        border-bottom: solid $border;
        margin-bottom: 1;
    }

    #error-detail {
        width: 100%;
        height: auto;
        padding: 1 2;
        background: $panel;
        border: round $border;
        color: $foreground;
    }

    #error-buttons {
        width: 100%;
        height: 3;
        align: center middle;
        margin-top: 1;
    }
    """

    BINDINGS = [
        Binding("enter", "dismiss_error", "OK", show=False),
        Binding("escape", "dismiss_error", "OK", show=False),
    ]

    def __init__(self, title: str, detail: str) -> None:
        super().__init__()
        self._title = title
        self._detail = detail

    @property
    def title_text(self) -> str:
        return self._title

    @property
    def detail_text(self) -> str:
        return self._detail

    def compose(self) -> ComposeResult:
        with Vertical(id="error-dialog"):
            yield Static(self._title, id="error-title", markup=False)
            yield Static(self._detail, id="error-detail", markup=False)
            with Horizontal(id="error-buttons"):
                yield Button("OK", id="error-ok", variant="error")

    def on_mount(self) -> None:
        self.query_one("#error-ok", Button).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "error-ok":
            self.dismiss(None)

    def action_dismiss_error(self) -> None:
        self.dismiss(None)
