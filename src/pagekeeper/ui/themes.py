"""Textual CSS themes for pagekeeper."""

APP_CSS = """
/* ── Global ────────────────────────────────── */
Screen {
    background: $surface;
}

/* ── History Screen ────────────────────────── */
#history-header {
    dock: top;
    height: 3;
    padding: 1 2;
    background: $primary;
    color: $text;
    text-style: bold;
}

#history-table {
    height: 1fr;
}

/* ── Reader Screen ─────────────────────────── */
#reader-header {
    dock: top;
    height: 1;
    background: $primary;
    color: $text;
    padding: 0 2;
    text-style: bold;
}

#reader-header.hidden {
    display: none;
}

#page-view {
    height: 1fr;
    padding: 1 4;
    overflow: hidden;
    background: $panel;
}

#page-view.clear-background {
    background: transparent;
}

Footer.hidden {
    display: none;
}

Footer.dimmed {
    opacity: 10%;
}

.empty-page {
    color: $text-muted;
    text-style: italic;
}
"""
