from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Iterable

from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen, Screen
from textual.widgets import (
    DataTable,
    DirectoryTree,
    Footer,
    Label,
    Static,
)

from pagekeeper.viewer.base import DisplayMode

if TYPE_CHECKING:
    from pagekeeper.app import PageKeeperApp

DOCUMENT_EXTENSIONS = {".pdf"}


def pdf_entries(paths: Iterable[Path]) -> list[Path]:
    """Directories first, then PDFs, both by name; hidden entries dropped."""
    dirs, docs = [], []
    for p in paths:
        if p.name.startswith("."):
            continue
        if p.is_dir():
            dirs.append(p)
        elif p.suffix.lower() in DOCUMENT_EXTENSIONS:
            docs.append(p)
    dirs.sort(key=lambda p: p.name.lower())
    docs.sort(key=lambda p: p.name.lower())
    return dirs + docs


def picker_start(locator: str | None) -> Path:
    start = Path(locator or "~").expanduser()
    if not start.is_dir():
        start = start.parent if start.parent.is_dir() else Path.home()
    return start.resolve()


def reset_summary(document_count: int, latest_name: str | None = None) -> str:
    noun = "document" if document_count == 1 else "documents"
    lines = [f"• saved positions of {document_count} {noun}"]
    if latest_name:
        lines.append(f"• last read: {latest_name}")
    lines.append("• background, status bar, footer and icon settings")
    return "\n".join(lines)


class PdfDirectoryTree(DirectoryTree):
    def filter_paths(self, paths: Iterable[Path]) -> Iterable[Path]:
        return pdf_entries(paths)


class FilePickerScreen(ModalScreen[str | None]):
    """Browse for a PDF, starting beside the document currently open."""

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    DEFAULT_CSS = """
    FilePickerScreen {
        align: center middle;
    }
    #open-dialog {
        width: 90%;
        height: 85%;
        background: $surface;
        border: round $accent;
        border-title-align: left;
        padding: 0 1;
    }
    #open-location {
        color: $text-muted;
        height: 1;
    }
    #open-tree {
        height: 1fr;
    }
    #open-hint {
        color: $text-muted;
        text-align: right;
        height: 1;
    }
    """

    def __init__(self, start_path: str | None = None) -> None:
        super().__init__()
        self._start = picker_start(start_path)

    def compose(self) -> ComposeResult:
        with Vertical(id="open-dialog"):
            yield Static(str(self._start), id="open-location", markup=False)
            yield PdfDirectoryTree(self._start, id="open-tree")
            yield Static("enter open  ·  esc cancel", id="open-hint")

    def on_mount(self) -> None:
        self.query_one("#open-dialog").border_title = "Open PDF"
        self.query_one("#open-tree", PdfDirectoryTree).focus()

    @on(DirectoryTree.DirectorySelected)
    def on_directory_selected(self, event: DirectoryTree.DirectorySelected) -> None:
        self.query_one("#open-location", Static).update(str(event.path))

    @on(DirectoryTree.FileSelected)
    def on_file_selected(self, event: DirectoryTree.FileSelected) -> None:
        self.dismiss(str(event.path))

    def action_cancel(self) -> None:
        self.dismiss(None)


class ConfirmResetScreen(ModalScreen[bool]):
    """Spell out what a reset forgets before raising the reset flag."""

    BINDINGS = [
        Binding("escape", "keep", "Keep"),
        Binding("n", "keep", "Keep"),
        Binding("y", "reset", "Reset"),
    ]

    DEFAULT_CSS = """
    ConfirmResetScreen {
        align: center middle;
    }
    #reset-dialog {
        width: 64;
        height: auto;
        background: $surface;
        border: heavy $warning;
        padding: 1 2;
    }
    #reset-title {
        text-style: bold;
        color: $warning;
    }
    #reset-details {
        margin: 1 0;
    }
    #reset-hint {
        color: $text-muted;
    }
    """

    def __init__(self, document_count: int, latest_name: str | None = None) -> None:
        super().__init__()
        self._document_count = document_count
        self._latest_name = latest_name

    def compose(self) -> ComposeResult:
        with Vertical(id="reset-dialog"):
            yield Label("Reset reading history", id="reset-title")
            yield Static(
                reset_summary(self._document_count, self._latest_name),
                id="reset-details",
                markup=False,
            )
            yield Static("y reset  ·  n / esc keep everything", id="reset-hint")

    def action_reset(self) -> None:
        self.dismiss(True)

    def action_keep(self) -> None:
        self.dismiss(False)


class HistoryScreen(Screen[str | None]):
    """Every remembered document; selecting one dismisses with its locator."""

    BINDINGS = [
        Binding("escape", "go_back", "Back"),
    ]

    @property
    def pk(self) -> PageKeeperApp:
        return self.app  # type: ignore[return-value]

    def compose(self) -> ComposeResult:
        yield Static("", id="history-header")
        yield DataTable(id="history-table")
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#history-table", DataTable)
        table.cursor_type = "row"
        table.add_columns("", "Document", "Page", "Zoom", "Mode", "Location")
        self._refresh_history()
        table.focus()

    def _refresh_history(self) -> None:
        history = self.pk.session.history
        collection = history.load()
        table = self.query_one("#history-table", DataTable)
        table.clear()

        for position in collection.positions:
            marker = "▸" if position.identity == collection.latest else ""
            zoom = "fit" if position.auto_scale else f"{position.scale_factor:.0%}"
            table.add_row(
                marker,
                position.display_name,
                f"{position.page_index + 1}/{position.page_count}",
                zoom,
                DisplayMode.coerce(position.display_mode).name.replace("_", " ").lower(),
                position.source_locator or "",
                key=position.identity,
            )

        self.query_one("#history-header", Static).update(
            f" Reading history  ({len(collection)} documents)"
        )

    @on(DataTable.RowSelected, "#history-table")
    def on_row_selected(self, event: DataTable.RowSelected) -> None:
        position = self.pk.session.history.lookup_by_identity(str(event.row_key.value))
        if position is None or not position.source_locator:
            return
        if not Path(position.source_locator).exists():
            self.notify(f"File not found: {position.source_locator}", severity="error")
            return
        self.dismiss(position.source_locator)

    def action_go_back(self) -> None:
        self.dismiss(None)
