"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic.
Uses Textual CSS features: nesting, pseudo-classes, variables.
"""

APP_CSS = """
/* ============================================
   Main Screen Layout
   ============================================ */
Screen {
    layout: vertical;
    background: $background;
}

/* ============================================
   Toolbar - Role, Search, Language, Summary
   ============================================ */
#toolbar {
    height: 3;
    padding: 0 1;
    background: $panel;
    border-bottom: solid $border;
}

#role-label {
    width: auto;
    min-width: 22;
    height: 3;
    content-align: left middle;
    text-style: bold;

    &.doctor {
        color: $primary;
    }

    &.patient {
        color: $secondary;
    }
}

#search-input {
    width: 1fr;
    border: tall $border;

    &:focus {
        border: tall $primary;
    }
}

#language-select {
    width: 20;
    margin: 0 1;
}

#summary-btn {
    width: 14;
    min-width: 10;
}

/* ============================================
   Conversation Panel
   ============================================ */
#conversation {
    height: 1fr;
    background: $panel;
    border: round $primary 60%;
    border-title-color: $primary;
    border-title-style: bold;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;

    &:focus-within {
        border: round $primary;
    }
}

#empty-state {
    width: 100%;
    height: auto;
    padding: 2;
    color: $text-muted;
    content-align: center middle;
}

/* ============================================
   Message Bubbles
   ============================================ */
.chat-message {
    width: 100%;
    height: auto;
    margin: 0 0 1 0;
    padding: 0 2;
    background: transparent;
}

.doctor-message {
    border-left: tall $primary;
    background: $primary 8%;

    & .message-header {
        color: $primary;
    }
}

.patient-message {
    border-left: tall $secondary;
    background: $secondary 8%;

    & .message-header {
        color: $secondary;
    }
}

.own-message {
    margin-left: 8;
}

.message-header {
    height: auto;
    text-style: bold;
}

.message-original {
    height: auto;
    color: $foreground;
}

.message-translation {
    height: auto;
    color: $text-muted;
    text-style: italic;
    border-top: dashed $border;

    &.pending {
        color: $warning;
    }
}

.message-audio {
    height: auto;
    color: $accent;
}

/* ============================================
   Summary Panel
   ============================================ */
#summary-panel {
    height: auto;
    max-height: 16;
    background: $panel;
    border: round $accent 60%;
    border-title-color: $accent;
    border-title-style: bold;
    padding: 0 1;
    overflow-y: auto;
}

/* ============================================
   Chat Input Bar - Text Entry + Send
   ============================================ */
ChatInputBar {
    height: 3;
    background: $panel;
}

#chat-input {
    width: 1fr;
    border: tall $primary 60%;

    &:focus {
        border: tall $primary;
    }
}

#send-btn {
    width: 10;
    min-width: 8;
    margin: 0 0 0 1;
    text-style: bold;
}

/* ============================================
   Notification Toasts
   ============================================ */
Toast {
    background: $surface;
    border: tall $border;
    padding: 0 1;

    &.-error {
        border: tall $error;
        background: $error 12%;
    }

    &.-warning {
        border: tall $warning;
        background: $warning 12%;
    }
}

Header {
    background: $panel;
    color: $foreground;
}

Footer {
    background: $panel;
}
"""
