"""Configuration management via .env file."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def _xdg_data_home() -> Path:
    return Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))


def _xdg_config_home() -> Path:
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


@dataclass
class AppConfig:
    # Paths
    data_dir: Path = field(default_factory=lambda: _xdg_data_home() / "pagekeeper")
    config_dir: Path = field(default_factory=lambda: _xdg_config_home() / "pagekeeper")
    db_path: Path = field(init=False)

    # History
    poll_interval: float = 1.0  # seconds between viewport checks

    # Viewer
    default_display_mode: int = 0  # 0=single, 1=continuous, 2=two-up, 3=two-up continuous
    cell_width: float = 8.0  # points per terminal column
    cell_height: float = 16.0  # points per terminal row

    log_path: Path = field(init=False)

    def __post_init__(self) -> None:
        self.db_path = self.data_dir / "pagekeeper.db"
        self.log_path = self.data_dir / "pagekeeper.log"
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.config_dir.mkdir(parents=True, exist_ok=True)


def _env_float(name: str, default: float, minimum: float) -> float:
    try:
        value = float(os.getenv(name, default))
    except ValueError:
        return default
    return value if value >= minimum else default


def _env_int(name: str, default: int, allowed: range) -> int:
    try:
        value = int(os.getenv(name, default))
    except ValueError:
        return default
    return value if value in allowed else default


def load_config(env_path: Optional[Path] = None) -> AppConfig:
    """Load config from .env file. Searches CWD then config dir."""
    search_paths = [
        env_path,
        Path.cwd() / ".env",
        _xdg_config_home() / "pagekeeper" / ".env",
        Path.home() / ".env",
    ]
    for p in search_paths:
        if p and p.exists():
            load_dotenv(p)
            break

    defaults = AppConfig()
    return AppConfig(
        poll_interval=_env_float(
            "PAGEKEEPER_POLL_INTERVAL", defaults.poll_interval, 0.1
        ),
        default_display_mode=_env_int(
            "PAGEKEEPER_DISPLAY_MODE", defaults.default_display_mode, range(4)
        ),
        cell_width=_env_float("PAGEKEEPER_CELL_WIDTH", defaults.cell_width, 1.0),
        cell_height=_env_float("PAGEKEEPER_CELL_HEIGHT", defaults.cell_height, 1.0),
    )
