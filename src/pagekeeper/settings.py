"""Viewer settings kept beside the history in the key-value store."""

from __future__ import annotations

from dataclasses import dataclass

from pagekeeper.history.storage import KeyValueStore

RESET_KEY = "reset"
BACKGROUND_KEY = "background"
HIDDEN_HOME_BAR_KEY = "hiddenHomeBar"
HIDDEN_STATUS_BAR_KEY = "hiddenStatusBar"
DIM_MENU_ICONS_KEY = "dimMenuIcons"

BACKGROUND_WHITE = ".white"
BACKGROUND_CLEAR = ".clear"

BOOL_KEYS = (RESET_KEY, HIDDEN_HOME_BAR_KEY, HIDDEN_STATUS_BAR_KEY, DIM_MENU_ICONS_KEY)


@dataclass
class Settings:
    reset: bool = False
    background: str = BACKGROUND_WHITE
    hidden_home_bar: bool = False
    hidden_status_bar: bool = False
    dim_menu_icons: bool = False

    @property
    def clear_background(self) -> bool:
        return self.background == BACKGROUND_CLEAR


def load_settings(storage: KeyValueStore) -> Settings:
    background = storage.get(BACKGROUND_KEY) or BACKGROUND_WHITE
    if background not in (BACKGROUND_WHITE, BACKGROUND_CLEAR):
        background = BACKGROUND_WHITE
    return Settings(
        reset=storage.get_bool(RESET_KEY),
        background=background,
        hidden_home_bar=storage.get_bool(HIDDEN_HOME_BAR_KEY),
        hidden_status_bar=storage.get_bool(HIDDEN_STATUS_BAR_KEY),
        dim_menu_icons=storage.get_bool(DIM_MENU_ICONS_KEY),
    )


def consume_reset(storage: KeyValueStore) -> bool:
    """Restore default settings if the reset flag is raised.

    Clears the flag so the reset fires once. Returns True when it fired.
    """
    if not storage.get_bool(RESET_KEY):
        return False
    storage.set_bool(RESET_KEY, False)
    storage.set(BACKGROUND_KEY, BACKGROUND_WHITE)
    storage.set_bool(HIDDEN_HOME_BAR_KEY, False)
    storage.set_bool(HIDDEN_STATUS_BAR_KEY, False)
    storage.set_bool(DIM_MENU_ICONS_KEY, False)
    return True
