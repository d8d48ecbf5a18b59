from __future__ import annotations

import textwrap
import unicodedata
from typing import TYPE_CHECKING

from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen, Screen
from textual.widgets import Button, Footer, Input, Label, Static

from pagekeeper.history.models import document_name
from pagekeeper.settings import (
    BACKGROUND_CLEAR,
    BACKGROUND_KEY,
    BACKGROUND_WHITE,
    DIM_MENU_ICONS_KEY,
    HIDDEN_HOME_BAR_KEY,
    HIDDEN_STATUS_BAR_KEY,
    Settings,
)
from pagekeeper.viewer.base import DisplayMode

if TYPE_CHECKING:
    from pagekeeper.app import PageKeeperApp

MODE_LABELS = {
    DisplayMode.SINGLE_PAGE: "Single",
    DisplayMode.SINGLE_PAGE_CONTINUOUS: "Continuous",
    DisplayMode.TWO_UP: "Two-up",
    DisplayMode.TWO_UP_CONTINUOUS: "Two-up continuous",
}

SCROLL_LINES = 3


def _cell_width(ch: str) -> int:
    return 2 if unicodedata.east_asian_width(ch) in ("F", "W") else 1


def _wrap_line(text: str, width: int) -> list[str]:
    """Wrap one line of page text to a display width, CJK aware."""
    if not text.strip():
        return [""]
    if text.isascii():
        return textwrap.wrap(text, width=width) or [""]
    lines: list[str] = []
    current: list[str] = []
    current_w = 0
    for ch in text:
        cw = _cell_width(ch)
        if current_w + cw > width and current:
            lines.append("".join(current))
            current, current_w = [], 0
            if ch == " ":
                continue
        current.append(ch)
        current_w += cw
    if current:
        lines.append("".join(current))
    return lines


def _pad(text: str, width: int) -> str:
    return text + " " * max(0, width - sum(_cell_width(ch) for ch in text))


class PageJumpScreen(ModalScreen[int | None]):
    """Prompt for a 1-based page number; dismisses with a page index."""

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    DEFAULT_CSS = """
    PageJumpScreen {
        align: center middle;
    }
    #page-jump-dialog {
        width: 50;
        height: 12;
        background: $surface;
        border: solid $primary;
        padding: 1 2;
    }
    #page-jump-title {
        text-align: center;
        text-style: bold;
    }
    #page-jump-buttons {
        align: center middle;
        height: 3;
    }
    #page-jump-buttons Button {
        margin: 0 2;
    }
    """

    def __init__(self, title: str, current_index: int, page_count: int) -> None:
        super().__init__()
        self._title = title
        self._current = current_index
        self._count = max(1, page_count)

    def compose(self) -> ComposeResult:
        with Vertical(id="page-jump-dialog"):
            yield Label(self._title, id="page-jump-title")
            yield Label(f"Page (1-{self._count})", id="page-jump-range")
            yield Input(
                value=str(self._current + 1), type="integer", id="page-jump-input"
            )
            with Horizontal(id="page-jump-buttons"):
                yield Button("Go", variant="primary", id="pj-go")
                yield Button("Cancel [Esc]", variant="default", id="pj-cancel")

    def on_mount(self) -> None:
        self.query_one("#page-jump-input", Input).focus()

    @on(Input.Submitted, "#page-jump-input")
    def on_page_submitted(self, event: Input.Submitted) -> None:
        self._submit(event.value)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "pj-go":
            self._submit(self.query_one("#page-jump-input", Input).value)
        else:
            self.dismiss(None)

    def _submit(self, value: str) -> None:
        try:
            page = int(value)
        except ValueError:
            page = 0
        if not 1 <= page <= self._count:
            self.notify(f"Enter a page between 1 and {self._count}", severity="error")
            return
        self.dismiss(page - 1)

    def action_cancel(self) -> None:
        self.dismiss(None)


class ReaderScreen(Screen):
    BINDINGS = [
        Binding("left", "prev_page", "←"),
        Binding("right", "next_page", "→"),
        Binding("space", "next_page", "Next", show=False),
        Binding("down", "scroll_down", "↓", show=False),
        Binding("up", "scroll_up", "↑", show=False),
        Binding("=", "zoom_in", "Zoom+"),
        Binding("minus", "zoom_out", "Zoom-"),
        Binding("a", "toggle_auto_scale", "Fit"),
        Binding("m", "cycle_mode", "Mode"),
        Binding("g", "jump_to_page", "Page"),
        Binding("o", "open_file", "Open"),
        Binding("h", "show_history", "History"),
        Binding("S", "toggle_status_bar", "Status", show=False),
        Binding("F", "toggle_footer", "Footer", show=False),
        Binding("I", "toggle_dim_icons", "Dim", show=False),
        Binding("b", "toggle_background", "Bg", show=False),
        Binding("R", "reset_history", "Reset"),
        Binding("q", "quit_app", "Quit"),
    ]

    def __init__(self, open_file: str | None = None) -> None:
        super().__init__()
        self._open_file = open_file
        self._settings = Settings()

    @property
    def pk(self) -> PageKeeperApp:
        return self.app  # type: ignore[return-value]

    def compose(self) -> ComposeResult:
        yield Static("", id="reader-header")
        yield Static(
            "No document. Press o to open a PDF.", id="page-view", markup=False
        )
        yield Footer()

    def on_mount(self) -> None:
        self._sync_viewport()
        self.apply_settings(self.pk.session.activate())
        if self._open_file:
            self.open_path(self._open_file)
        else:
            self.pk.session.resume()
        self.set_interval(self.pk.config.poll_interval, self._poll)
        self._render_page()

    def _poll(self) -> None:
        self.pk.session.poll()

    # ── Settings ───────────────────────────────────

    def apply_settings(self, settings: Settings) -> None:
        self._settings = settings
        self.query_one("#reader-header", Static).set_class(
            settings.hidden_status_bar, "hidden"
        )
        footer = self.query_one(Footer)
        footer.set_class(settings.hidden_home_bar, "hidden")
        footer.set_class(settings.dim_menu_icons, "dimmed")
        self.query_one("#page-view", Static).set_class(
            settings.clear_background, "clear-background"
        )

    def _toggle_setting(self, key: str, current: bool) -> None:
        self.pk.session.update_setting(key, not current)
        self.apply_settings(self.pk.session.activate())

    def action_toggle_status_bar(self) -> None:
        self._toggle_setting(HIDDEN_STATUS_BAR_KEY, self._settings.hidden_status_bar)

    def action_toggle_footer(self) -> None:
        self._toggle_setting(HIDDEN_HOME_BAR_KEY, self._settings.hidden_home_bar)

    def action_toggle_dim_icons(self) -> None:
        self._toggle_setting(DIM_MENU_ICONS_KEY, self._settings.dim_menu_icons)

    def action_toggle_background(self) -> None:
        value = BACKGROUND_WHITE if self._settings.clear_background else BACKGROUND_CLEAR
        self.pk.session.update_setting(BACKGROUND_KEY, value)
        self.apply_settings(self.pk.session.activate())

    def action_reset_history(self) -> None:
        from pagekeeper.ui.screens.history_screen import ConfirmResetScreen

        history = self.pk.session.history
        latest = history.lookup_latest()
        self.app.push_screen(
            ConfirmResetScreen(
                len(history.collection), latest.display_name if latest else None
            ),
            callback=self._on_reset_confirmed,
        )

    def _on_reset_confirmed(self, confirmed: bool | None) -> None:
        if not confirmed:
            return
        self.pk.session.request_reset()
        self.apply_settings(self.pk.session.activate())
        self.notify("History and settings reset")

    # ── Documents ──────────────────────────────────

    def open_path(self, path: str) -> None:
        try:
            position = self.pk.session.open_document(path)
        except Exception as e:
            self.notify(f"Error opening: {e}", severity="error")
            return
        if position is not None:
            self.notify(f"Resumed at page {position.page_index + 1}")
        self._render_page()

    def action_open_file(self) -> None:
        from pagekeeper.ui.screens.history_screen import FilePickerScreen

        self.app.push_screen(
            FilePickerScreen(self.pk.viewer.document_source_locator),
            callback=self._on_file_picked,
        )

    def _on_file_picked(self, result: str | None) -> None:
        if result:
            self.open_path(result)

    def action_show_history(self) -> None:
        from pagekeeper.ui.screens.history_screen import HistoryScreen

        self.app.push_screen(HistoryScreen(), callback=self._on_history_picked)

    def _on_history_picked(self, locator: str | None) -> None:
        if locator:
            self.open_path(locator)

    # ── Rendering ──────────────────────────────────

    def _sync_viewport(self) -> None:
        view = self.query_one("#page-view", Static)
        cols, rows = view.content_size.width, view.content_size.height
        if cols < 10 or rows < 3:
            cols, rows = 72, 20
        cfg = self.pk.config
        self.pk.viewer.resize(cols * cfg.cell_width, rows * cfg.cell_height)

    def _page_lines(self, index: int, width: int) -> list[str]:
        lines: list[str] = []
        for raw in self.pk.viewer.page_text(index).splitlines():
            lines.extend(_wrap_line(raw, width))
        return lines or ["(no text on this page)"]

    def _visible_lines(self, index: int, width: int, height: int) -> list[str]:
        viewer = self.pk.viewer
        lines = self._page_lines(index, width)
        bounds = viewer.viewport_bounds
        _, page_h = viewer.page_size(index)
        start = 0
        if bounds is not None and page_h > 0:
            start = int(bounds.y / page_h * len(lines))
        window = lines[start : start + height]
        return window + [""] * max(0, height - len(window))

    def _render_page(self) -> None:
        viewer = self.pk.viewer
        view = self.query_one("#page-view", Static)
        index = viewer.current_page_index
        if index is None:
            view.update("No document. Press o to open a PDF, h for history.")
            view.add_class("empty-page")
            self._update_header()
            return
        view.remove_class("empty-page")

        width = max(20, view.content_size.width or 72)
        height = max(3, view.content_size.height or 20)
        if DisplayMode.coerce(viewer.display_mode).is_two_up:
            col = max(20, (width - 3) // 2)
            left = self._visible_lines(index, col, height)
            right = (
                self._visible_lines(index + 1, col, height)
                if index + 1 < viewer.page_count
                else [""] * height
            )
            view.update(
                "\n".join(f"{_pad(a, col)} │ {b}" for a, b in zip(left, right))
            )
        else:
            view.update("\n".join(self._visible_lines(index, width, height)))
        self._update_header()

    def _update_header(self) -> None:
        viewer = self.pk.viewer
        header = self.query_one("#reader-header", Static)
        index = viewer.current_page_index
        locator = viewer.document_source_locator
        if index is None or locator is None:
            header.update(" pagekeeper")
            return

        count = viewer.page_count
        if viewer.page_step == 2 and index + 1 < count:
            pages = f"{index + 1}-{index + 2}/{count}"
        else:
            pages = f"{index + 1}/{count}"
        scale = f"{viewer.scale_factor:.0%}" + (" fit" if viewer.auto_scale else "")
        parts = [
            f" {document_name(locator)}",
            f"P {pages}",
            scale,
            MODE_LABELS[DisplayMode.coerce(viewer.display_mode)],
        ]
        header.update("  │  ".join(parts))

    # ── Navigation ─────────────────────────────────

    def action_next_page(self) -> None:
        if self.pk.viewer.next_page():
            self._render_page()

    def action_prev_page(self) -> None:
        if self.pk.viewer.prev_page():
            self._render_page()

    def _scroll_step(self) -> float:
        return SCROLL_LINES * self.pk.config.cell_height / self.pk.viewer.scale_factor

    def action_scroll_down(self) -> None:
        self.pk.viewer.scroll(0, self._scroll_step())
        self._render_page()

    def action_scroll_up(self) -> None:
        self.pk.viewer.scroll(0, -self._scroll_step())
        self._render_page()

    def action_zoom_in(self) -> None:
        self.pk.viewer.zoom_in()
        self._render_page()

    def action_zoom_out(self) -> None:
        self.pk.viewer.zoom_out()
        self._render_page()

    def action_toggle_auto_scale(self) -> None:
        viewer = self.pk.viewer
        viewer.set_auto_scale(not viewer.auto_scale)
        self._render_page()

    def action_cycle_mode(self) -> None:
        mode = self.pk.viewer.cycle_display_mode()
        self.notify(f"Display: {MODE_LABELS[mode]}")
        self._render_page()

    def action_jump_to_page(self) -> None:
        viewer = self.pk.viewer
        index = viewer.current_page_index
        if index is None:
            return
        identity = self.pk.session.current_identity or ""
        saved = self.pk.session.history.lookup_by_identity(identity)
        title = saved.display_name if saved else "Go to page"
        count = saved.page_count if saved and saved.page_count else viewer.page_count
        self.app.push_screen(
            PageJumpScreen(title, index, count), callback=self._on_page_picked
        )

    def _on_page_picked(self, index: int | None) -> None:
        if index is not None:
            self.pk.viewer.jump_to_page_index(index)
            self._render_page()

    async def action_quit_app(self) -> None:
        await self.pk.action_quit()

    def on_resize(self) -> None:
        self._sync_viewport()
        self._render_page()
