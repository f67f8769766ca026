"""Main Textual TUI application.

Orchestrates the UI components and routes user interaction to a
ConversationSession. The session owns all conversation state; this app
only re-renders when the session reports a change.
"""

import asyncio
import logging
from pathlib import Path

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Button, Footer, Header, Input, Select, Static

from ..blobs import BlobStoreError
from ..config import SUPPORTED_LANGUAGES
from ..conversation import ConversationSession
from ..messages import MessageStoreError, Role
from .screens import ErrorScreen
from .styles import APP_CSS
from .themes import CLINIC_DARK
from .widgets import ChatInputBar, ConversationView, SummaryPanel

logger = logging.getLogger(__name__)

AUDIO_COMMAND = "/audio"


class ConsultationApp(App):
    """Textual TUI for one participant of a consultation."""

    CSS = APP_CSS
    TITLE = "Medlingo"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("ctrl+s", "summarize", "Summary"),
        Binding("ctrl+t", "switch_role", "Switch Role"),
        Binding("ctrl+f", "focus_search", "Search"),
        Binding("ctrl+g", "toggle_summary", "Hide Summary"),
    ]

    def __init__(self, session: ConversationSession) -> None:
        super().__init__()
        self._session = session
        self._remove_listener = None
        self._refresh_scheduled = False

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)

        with Horizontal(id="toolbar"):
            yield Static("", id="role-label")
            yield Input(placeholder="Search messages...", id="search-input")
            yield Select(
                [(f"{name} ({code})", code) for code, name in SUPPORTED_LANGUAGES.items()],
                value=self._session.state.target_language,
                allow_blank=False,
                id="language-select",
            )
            yield Button("Summary", id="summary-btn", variant="warning")

        yield ConversationView(id="conversation")
        yield SummaryPanel(id="summary-panel")
        yield ChatInputBar(id="chat-input-bar")
        yield Footer()

    def on_mount(self) -> None:
        self.register_theme(CLINIC_DARK)
        self.theme = "clinic-dark"

        self._remove_listener = self._session.add_listener(self._schedule_refresh)
        self._update_role()
        self._refresh_view()
        self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    def on_unmount(self) -> None:
        if self._remove_listener is not None:
            self._remove_listener()
            self._remove_listener = None

    # Rendering

    def _schedule_refresh(self) -> None:
        """Session listener. Coalesces bursts of changes into one render."""
        if self._refresh_scheduled:
            return
        self._refresh_scheduled = True
        self.call_later(self._refresh_view)

    def _refresh_view(self) -> None:
        self._refresh_scheduled = False
        state = self._session.state
        view = self.query_one("#conversation", ConversationView)
        view.show_entries(self._session.entries(), filtered=bool(state.search_term.strip()))

    def _update_role(self) -> None:
        state = self._session.state
        label = self.query_one("#role-label", Static)
        label.update(f"Speaking as: {state.role.value.upper()}")
        label.set_classes(state.role.value)
        self.sub_title = f"{state.role.value} | reading {SUPPORTED_LANGUAGES[state.target_language]}"

    # Toolbar events

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "search-input":
            self._session.set_search_term(event.value)

    def on_select_changed(self, event: Select.Changed) -> None:
        if event.select.id == "language-select" and event.value is not Select.BLANK:
            self._session.set_target_language(str(event.value))
            self._update_role()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "summary-btn":
            self.action_summarize()

    # Sending

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        value = event.value
        if value == AUDIO_COMMAND or value.startswith(AUDIO_COMMAND + " "):
            path = value[len(AUDIO_COMMAND):].strip()
            if not path:
                self.notify("Usage: /audio <file>", severity="warning", timeout=3)
                return
            self._send_audio(Path(path).expanduser())
        else:
            self._send_text(value)

    @work(group="send")
    async def _send_text(self, text: str) -> None:
        try:
            await self._session.send(text)
        except MessageStoreError as e:
            logger.error("Sending message failed: %s", e)
            self.show_error("Failed to send message", str(e))

    @work(group="send")
    async def _send_audio(self, path: Path) -> None:
        try:
            data = await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            self.show_error("Cannot read recording", f"{path}: {e.strerror}")
            return

        try:
            await self._session.send_audio(data)
        except BlobStoreError as e:
            logger.error("Audio upload failed: %s", e)
            self.show_error("Failed to upload audio", str(e))
        except MessageStoreError as e:
            logger.error("Sending audio message failed: %s", e)
            self.show_error("Failed to send audio message", str(e))

    def show_error(self, title: str, detail: str) -> None:
        """Block the conversation with an error dialog until acknowledged."""
        self.push_screen(ErrorScreen(title, detail))

    # Actions

    def action_summarize(self) -> None:
        """Generate a summary of the conversation."""
        self._summarize()

    @work(exclusive=True, group="summary")
    async def _summarize(self) -> None:
        button = self.query_one("#summary-btn", Button)
        button.disabled = True
        button.label = "Summarizing..."
        try:
            summary = await self._session.summarize()
            self.query_one("#summary-panel", SummaryPanel).show_summary(summary)
        finally:
            button.disabled = False
            button.label = "Summary"

    def action_toggle_summary(self) -> None:
        panel = self.query_one("#summary-panel", SummaryPanel)
        panel.toggle()

    def action_switch_role(self) -> None:
        """Swap between doctor and patient. The reading language stays."""
        state = self._session.state
        role = Role.PATIENT if state.role == Role.DOCTOR else Role.DOCTOR
        self._session.set_role(role)
        self._update_role()
        self.notify(f"Now speaking as {role.value}", timeout=2)

    def action_focus_search(self) -> None:
        self.query_one("#search-input", Input).focus()


async def run_textual_tui(session: ConversationSession) -> None:
    """Run the Textual TUI on an already started session.

    Args:
        session: Started conversation session; the caller closes it
    """
    app = ConsultationApp(session)
    try:
        await app.run_async()
    except (KeyboardInterrupt, asyncio.CancelledError):
        logger.info("TUI interrupted")
