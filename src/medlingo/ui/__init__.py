"""Terminal UI module for medlingo.

Provides a Textual-based TUI for one participant of a consultation.

Module structure (each module hides a design decision):
- widgets.py: Custom widgets (message bubbles, conversation, input history)
- styles.py: CSS styling (layout decisions)
- themes.py: Color palettes and theme configuration
- screens.py: Modal dialogs (blocking error notices)
- app.py: Application orchestration (user interaction flow)
"""

from .app import ConsultationApp, run_textual_tui
from .screens import ErrorScreen
from .widgets import ChatInputBar, ConversationView, MessageBubble, SummaryPanel

__all__ = [
    "ChatInputBar",
    "ConsultationApp",
    "ConversationView",
    "ErrorScreen",
    "MessageBubble",
    "SummaryPanel",
    "run_textual_tui",
]
