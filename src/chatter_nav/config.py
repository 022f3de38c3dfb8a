"""Configuration management for chatter-nav."""
from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any, Dict

import tomllib
from filelock import FileLock

APP_DIR = Path(os.environ.get("CHATTER_NAV_HOME", Path.home() / ".chatter-nav"))
CONFIG_FILE = APP_DIR / "config.toml"
LOCK_FILE = CONFIG_FILE.with_suffix(".lock")

TABS = ("messages", "tasks", "classes", "import", "wiki")
DEFAULT_TAB = "messages"
TAB_PERSISTENCE_KEY = "chatter_channel_tab_state"
GLOBAL_STATE_KEY = "chatter_global_navigation_state"
TAB_EXPIRY_DAYS = 30


class ConfigError(Exception):
    """Raised when the config file cannot be parsed."""


@dataclasses.dataclass
class StorageConfig:
    """Where the persisted navigation documents live."""
    path: str = ""
    tab_state_key: str = TAB_PERSISTENCE_KEY
    global_state_key: str = GLOBAL_STATE_KEY

    def resolved_path(self) -> Path:
        return Path(self.path) if self.path else APP_DIR / "storage.json"


@dataclasses.dataclass
class NavigationConfig:
    """Tab memory behaviour."""
    expiry_days: int = TAB_EXPIRY_DAYS
    default_tab: str = DEFAULT_TAB


@dataclasses.dataclass
class NavConfig:
    """Main configuration container."""
    storage: StorageConfig
    navigation: NavigationConfig

    @classmethod
    def load(cls) -> "NavConfig":
        """Load configuration from file or create defaults."""
        APP_DIR.mkdir(parents=True, exist_ok=True)
        data: Dict[str, Any] = {}
        if CONFIG_FILE.exists():
            try:
                data = tomllib.loads(CONFIG_FILE.read_text())
            except tomllib.TOMLDecodeError as exc:
                raise ConfigError(f"Invalid config file {CONFIG_FILE}: {exc}") from exc

        storage_tbl = data.get("storage", {})
        nav_tbl = data.get("navigation", {})

        try:
            expiry_days = int(nav_tbl.get("expiry_days", TAB_EXPIRY_DAYS))
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"navigation.expiry_days must be an integer: {exc}") from exc

        default_tab = str(nav_tbl.get("default_tab", DEFAULT_TAB))
        if default_tab not in TABS:
            default_tab = DEFAULT_TAB

        config = cls(
            storage=StorageConfig(
                path=str(storage_tbl.get("path", "")),
                tab_state_key=str(storage_tbl.get("tab_state_key", TAB_PERSISTENCE_KEY)),
                global_state_key=str(storage_tbl.get("global_state_key", GLOBAL_STATE_KEY)),
            ),
            navigation=NavigationConfig(
                expiry_days=expiry_days,
                default_tab=default_tab,
            ),
        )

        if not CONFIG_FILE.exists():
            config.save()

        return config

    def save(self) -> None:
        """Save configuration to file."""
        APP_DIR.mkdir(parents=True, exist_ok=True)
        lines = [
            "[storage]",
            f'path = "{self.storage.path}"',
            f'tab_state_key = "{self.storage.tab_state_key}"',
            f'global_state_key = "{self.storage.global_state_key}"',
            "",
            "[navigation]",
            f"expiry_days = {self.navigation.expiry_days}",
            f'default_tab = "{self.navigation.default_tab}"',
            "",
        ]
        doc = "\n".join(lines)
        with FileLock(str(LOCK_FILE)):
            CONFIG_FILE.write_text(doc)
