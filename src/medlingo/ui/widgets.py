"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Input history management
- Message bubble rendering (original, translation, audio link)
- Conversation scrolling
"""

from rich.text import Text
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.events import Click
from textual.message import Message
from textual.widgets import Button, Input, Markdown, Static

from ..conversation import MessageEntry


class MessageBubble(Vertical):
    """One conversation entry. Clicking it copies the translation."""

    def __init__(self, entry: MessageEntry, *args, **kwargs) -> None:
        classes = f"chat-message {entry.role.value}-message"
        if entry.is_own:
            classes += " own-message"
        super().__init__(*args, classes=classes, **kwargs)
        self.entry = entry

    def compose(self):
        entry = self.entry
        timestamp = entry.created_at.astimezone().strftime("%H:%M")
        who = "You" if entry.is_own else entry.role.value.capitalize()
        yield Static(f"{who} [{timestamp}]", classes="message-header", markup=False)
        yield Static(Text(entry.text_original), classes="message-original")

        if entry.audio_url:
            yield Static(Text(f"Audio: {entry.audio_url}"), classes="message-audio")

        if entry.display_translation is not None:
            translation_classes = "message-translation"
            if entry.is_pending:
                translation_classes += " pending"
            yield Static(Text(entry.display_translation), classes=translation_classes)

    def on_click(self, event: Click) -> None:
        """Copy the translation (or the original) to the clipboard."""
        event.stop()
        text = self.entry.display_translation
        if not text or self.entry.is_pending:
            text = self.entry.text_original
        self.app.copy_to_clipboard(text)
        self.app.notify("Copied to clipboard", timeout=2)


class ConversationView(VerticalScroll):
    """Scrollable conversation, re-rendered from projected entries."""

    BORDER_TITLE = "Consultation"
    BORDER_SUBTITLE = "No messages"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._shown: list[MessageEntry] = []

    def show_entries(self, entries: list[MessageEntry], filtered: bool = False) -> None:
        """Replace the rendered bubbles if the entries changed."""
        if entries == self._shown:
            return

        at_bottom = self.scroll_y >= self.max_scroll_y
        grew = len(entries) > len(self._shown)
        self._shown = list(entries)

        self.remove_children()
        if entries:
            self.mount_all([MessageBubble(entry) for entry in entries])
        else:
            hint = "No messages match your search." if filtered else "Start the conversation."
            self.mount(Static(hint, id="empty-state"))

        pending = sum(1 for entry in entries if entry.is_pending)
        subtitle = f"{len(entries)} messages"
        if pending:
            subtitle += f" | {pending} translating"
        self.border_subtitle = subtitle

        if grew and at_bottom:
            self.call_after_refresh(self.scroll_end, animate=False)


class SummaryPanel(VerticalScroll):
    """Markdown panel holding the latest conversation summary. Hidden until used."""

    BORDER_TITLE = "Conversation Summary"

    def compose(self):
        yield Markdown("", id="summary-markdown")

    def on_mount(self) -> None:
        self.display = False

    def show_summary(self, summary: str) -> None:
        self.query_one("#summary-markdown", Markdown).update(summary)
        self.display = True

    def toggle(self) -> bool:
        """Toggle visibility. Returns new state."""
        self.display = not self.display
        return self.display


class HistoryInput(Input):
    """Input widget with command history support.

    Use Up/Down arrow keys to navigate through history.
    Multi-line pastes are converted to single line (newlines become spaces).
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._history: list[str] = []
        self._history_index: int = -1
        self._current_input: str = ""

    def _on_paste(self, event) -> None:
        from textual.events import Paste

        if isinstance(event, Paste) and event.text:
            self.insert_text_at_cursor(" ".join(event.text.split()))
            event.prevent_default()
            event.stop()

    def _on_key(self, event) -> None:
        if event.key == "up":
            if self._history:
                if self._history_index == -1:
                    self._current_input = self.value
                    self._history_index = len(self._history) - 1
                elif self._history_index > 0:
                    self._history_index -= 1
                self.value = self._history[self._history_index]
                self.cursor_position = len(self.value)
            event.prevent_default()
            event.stop()
        elif event.key == "down":
            if self._history_index != -1:
                if self._history_index < len(self._history) - 1:
                    self._history_index += 1
                    self.value = self._history[self._history_index]
                else:
                    self._history_index = -1
                    self.value = self._current_input
                self.cursor_position = len(self.value)
            event.prevent_default()
            event.stop()

    def add_to_history(self, command: str) -> None:
        """Add a command to history."""
        if command and (not self._history or self._history[-1] != command):
            self._history.append(command)
        self._history_index = -1
        self._current_input = ""


class ChatInputBar(Horizontal):
    """Message input with a Send button. Enter submits."""

    class Submitted(Message):
        """Message sent when user submits input."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    def compose(self):
        yield HistoryInput(
            placeholder="Type a message, or /audio <file> to send a recording",
            id="chat-input",
        )
        yield Button("Send", id="send-btn", variant="success").with_tooltip(
            "Send message (Enter)"
        )

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "chat-input":
            event.stop()
            self._submit()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-btn":
            event.stop()
            self._submit()

    def _submit(self) -> None:
        text_input = self.query_one("#chat-input", HistoryInput)
        value = text_input.value.strip()
        if value:
            text_input.add_to_history(value)
            text_input.value = ""
            self.post_message(self.Submitted(value))

    def focus_input(self) -> None:
        """Focus the text input."""
        self.query_one("#chat-input", HistoryInput).focus()
