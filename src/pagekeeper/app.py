"""pagekeeper - a terminal PDF reader that remembers where you stopped."""

from __future__ import annotations

import logging
import sys

from textual.app import App

from pagekeeper.config import AppConfig, load_config
from pagekeeper.history.storage import SqliteStore
from pagekeeper.history.store import HistoryStore
from pagekeeper.session import ReaderSession
from pagekeeper.settings import RESET_KEY
from pagekeeper.ui.screens.reader_screen import ReaderScreen
from pagekeeper.ui.themes import APP_CSS
from pagekeeper.viewer.pdf_viewer import PdfViewer


class PageKeeperApp(App):
    """A PDF reader that resumes each document at its last position."""

    TITLE = "pagekeeper"
    CSS = APP_CSS

    def __init__(
        self, config: AppConfig | None = None, open_file: str | None = None
    ) -> None:
        super().__init__()
        self.config = config or load_config()
        self.storage = SqliteStore(self.config.db_path)
        self.viewer = PdfViewer()
        self.session = ReaderSession(
            HistoryStore(self.storage),
            self.storage,
            self.viewer,
            default_display_mode=self.config.default_display_mode,
        )
        self._open_file = open_file

    def on_mount(self) -> None:
        self.push_screen(ReaderScreen(self._open_file))

    def on_app_focus(self) -> None:
        if isinstance(self.screen, ReaderScreen):
            self.screen.apply_settings(self.session.activate())

    async def action_quit(self) -> None:
        self.session.save_current()
        self.viewer.close()
        self.storage.close()
        self.exit()


def _setup_logging(config: AppConfig) -> None:
    handler = logging.FileHandler(config.log_path, encoding="utf-8")
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    root = logging.getLogger("pagekeeper")
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)


def main() -> None:
    config = load_config()
    _setup_logging(config)

    args = sys.argv[1:]
    if "--reset" in args:
        args.remove("--reset")
        store = SqliteStore(config.db_path)
        store.set_bool(RESET_KEY, True)
        store.close()

    open_file: str | None = args[0] if args else None

    app = PageKeeperApp(config=config, open_file=open_file)
    app.run()


if __name__ == "__main__":
    main()
