"""Theme definitions for the TUI.

This module hides the design decisions about:
- Color palettes for the two roles
- Theme variables (borders, scrollbars, footer)

To add a new theme, define it here and register in the app.
"""

from textual.theme import Theme

# Clinical dark theme: blue marks the doctor, green marks the patient
CLINIC_DARK = Theme(
    name="clinic-dark",
    primary="#60a5fa",      # Blue - doctor
    secondary="#34d399",    # Emerald - patient
    accent="#fbbf24",       # Amber - summary and highlights
    foreground="#e2e8f0",
    background="#0f172a",
    success="#4ade80",
    warning="#fb923c",
    error="#f87171",
    surface="#1e293b",
    panel="#111827",
    dark=True,
    variables={
        "input-cursor-background": "#e2e8f0",
        "input-cursor-foreground": "#0f172a",
        "input-selection-background": "#60a5fa 30%",

        "border": "#334155",
        "border-blurred": "#1e293b",

        "scrollbar": "#1e293b",
        "scrollbar-hover": "#334155",
        "scrollbar-active": "#60a5fa",
        "scrollbar-background": "#111827",
        "scrollbar-corner-color": "#111827",

        "footer-foreground": "#cbd5e1",
        "footer-background": "#0f172a",
        "footer-key-foreground": "#fbbf24",
        "footer-key-background": "#1e293b",
        "footer-description-foreground": "#94a3b8",

        "text-muted": "#64748b",
        "text-disabled": "#334155",
    },
)
