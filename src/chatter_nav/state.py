"""Per-channel tab memory plus the global "last messaging location" pointer.

Both documents are mirrored in memory and written through to a
``KeyValueStore`` after every change.  Store failures are logged and the
manager carries on with whatever it holds in memory; callers never see
them.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Optional

from .config import DEFAULT_TAB, GLOBAL_STATE_KEY, TAB_EXPIRY_DAYS, TAB_PERSISTENCE_KEY, TABS
from .logging import get_logger
from .storage import KeyValueStore, StoreError
from .utils import days_to_ms, now_ms

log = get_logger(__name__)

SCHEMA_VERSION = 1


def normalize_tab(tab: Optional[str], default: str = DEFAULT_TAB) -> str:
    if isinstance(tab, str) and tab.lower() in TABS:
        return tab.lower()
    return default


def _tab_id(tab: Any) -> Optional[str]:
    if isinstance(tab, str):
        return tab
    if isinstance(tab, dict):
        return tab.get("id")
    return getattr(tab, "id", None)


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


@dataclass
class ChannelTabState:
    channel_id: str
    tab: str = DEFAULT_TAB
    timestamp: int = 0
    sub_tabs: Dict[str, Optional[str]] = field(default_factory=dict)
    version: int = SCHEMA_VERSION

    @classmethod
    def from_raw(cls, channel_id: str, raw: object) -> "ChannelTabState":
        if not isinstance(raw, dict):
            return cls(channel_id=channel_id)
        sub_tabs = raw.get("subTabs")
        return cls(
            channel_id=channel_id,
            tab=normalize_tab(raw.get("tab")),
            timestamp=_as_int(raw.get("timestamp")),
            sub_tabs=dict(sub_tabs) if isinstance(sub_tabs, dict) else {},
            version=_as_int(raw.get("version", SCHEMA_VERSION)) or SCHEMA_VERSION,
        )

    def to_raw(self) -> Dict[str, Any]:
        return {
            "tab": self.tab,
            "timestamp": self.timestamp,
            "subTabs": dict(self.sub_tabs),
            "version": self.version,
        }


@dataclass
class MessagingState:
    channel_id: str
    tab: str
    sub_tab: Optional[str] = None
    timestamp: int = 0

    @classmethod
    def from_raw(cls, raw: object) -> Optional["MessagingState"]:
        if not isinstance(raw, dict) or not raw.get("channelId"):
            return None
        return cls(
            channel_id=str(raw["channelId"]),
            tab=normalize_tab(raw.get("tab")),
            sub_tab=raw.get("subTab"),
            timestamp=_as_int(raw.get("timestamp")),
        )

    def to_raw(self) -> Dict[str, Any]:
        return {
            "channelId": self.channel_id,
            "tab": self.tab,
            "subTab": self.sub_tab,
            "timestamp": self.timestamp,
        }


@dataclass
class GlobalNavigationState:
    last_messaging_state: Optional[MessagingState] = None
    timestamp: int = 0
    version: int = SCHEMA_VERSION

    @classmethod
    def from_raw(cls, raw: object) -> "GlobalNavigationState":
        if not isinstance(raw, dict):
            return cls()
        return cls(
            last_messaging_state=MessagingState.from_raw(raw.get("lastMessagingState")),
            timestamp=_as_int(raw.get("timestamp")),
            version=_as_int(raw.get("version", SCHEMA_VERSION)) or SCHEMA_VERSION,
        )

    def is_empty(self) -> bool:
        return self.last_messaging_state is None and not self.timestamp

    def to_raw(self) -> Dict[str, Any]:
        if self.is_empty():
            return {}
        data: Dict[str, Any] = {"timestamp": self.timestamp, "version": self.version}
        if self.last_messaging_state is not None:
            data["lastMessagingState"] = self.last_messaging_state.to_raw()
        return data


class TabStateManager:
    """Remembers the last tab and sub-tab per channel, with expiry."""

    def __init__(
        self,
        store: KeyValueStore,
        expiry_days: int = TAB_EXPIRY_DAYS,
        default_tab: str = DEFAULT_TAB,
        tab_state_key: str = TAB_PERSISTENCE_KEY,
        global_state_key: str = GLOBAL_STATE_KEY,
        now: Callable[[], int] = now_ms,
    ) -> None:
        self.store = store
        self.max_age_ms = days_to_ms(expiry_days)
        self.default_tab = normalize_tab(default_tab)
        self.tab_state_key = tab_state_key
        self.global_state_key = global_state_key
        self._now = now
        self._tab_state: Dict[str, ChannelTabState] = {}
        self._global_state = GlobalNavigationState()
        self.hydrate()

    # -- hydration -------------------------------------------------------

    def hydrate(self) -> None:
        """Reload both documents from the store, dropping expired entries."""
        self._tab_state = self._load_tab_state()
        self._global_state = self._load_global_state()

    def _read_json(self, key: str) -> Optional[Any]:
        try:
            raw = self.store.get(key)
        except StoreError as exc:
            log.error("Error loading %s: %s", key, exc)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError) as exc:
            log.error("Error parsing %s: %s", key, exc)
            return None

    def _load_tab_state(self) -> Dict[str, ChannelTabState]:
        parsed = self._read_json(self.tab_state_key)
        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            log.error("Ignoring %s: expected an object, got %s", self.tab_state_key, type(parsed).__name__)
            return {}

        now = self._now()
        valid: Dict[str, ChannelTabState] = {}
        for channel_id, raw in parsed.items():
            entry = ChannelTabState.from_raw(channel_id, raw)
            if now - entry.timestamp < self.max_age_ms:
                valid[channel_id] = entry

        dropped = len(parsed) - len(valid)
        if dropped:
            log.info("Pruned %d expired channel tab entries", dropped)
            self._tab_state = valid
            self._persist_tab_state()
        return valid

    def _load_global_state(self) -> GlobalNavigationState:
        parsed = self._read_json(self.global_state_key)
        if parsed is None:
            return GlobalNavigationState()
        if not isinstance(parsed, dict):
            log.error("Ignoring %s: expected an object, got %s", self.global_state_key, type(parsed).__name__)
            return GlobalNavigationState()

        state = GlobalNavigationState.from_raw(parsed)
        if self._now() - state.timestamp < self.max_age_ms:
            return state

        log.info("Discarding expired global navigation state")
        self._remove(self.global_state_key)
        return GlobalNavigationState()

    # -- persistence -----------------------------------------------------

    def _write(self, key: str, payload: Dict[str, Any]) -> None:
        try:
            self.store.set(key, json.dumps(payload))
        except (StoreError, TypeError, ValueError) as exc:
            log.error("Error saving %s: %s", key, exc)

    def _remove(self, key: str) -> None:
        try:
            self.store.remove(key)
        except StoreError as exc:
            log.error("Error clearing %s: %s", key, exc)

    def _persist_tab_state(self) -> None:
        self._write(self.tab_state_key, self.get_tab_state())

    def _persist_global_state(self) -> None:
        payload = self._global_state.to_raw()
        if payload:
            self._write(self.global_state_key, payload)

    # -- queries ---------------------------------------------------------

    def get_last_tab(self, channel_id: Optional[str], available_tabs: Iterable[Any] = ()) -> str:
        """Remembered tab for ``channel_id`` if it is still offered, else the default.

        ``available_tabs`` may hold tab ids or ``Tab``-like records; an empty
        catalog accepts any remembered tab.  A configured default that the
        catalog does not offer falls back to ``messages``.
        """
        allowed = [_tab_id(tab) for tab in available_tabs]
        entry = self._tab_state.get(channel_id) if channel_id else None
        if entry is not None and (not allowed or entry.tab in allowed):
            return entry.tab
        if not allowed or self.default_tab in allowed:
            return self.default_tab
        return DEFAULT_TAB

    def get_last_sub_tab(self, channel_id: Optional[str], tab: Optional[str]) -> Optional[str]:
        entry = self._tab_state.get(channel_id) if channel_id else None
        if entry is None or not tab:
            return None
        return entry.sub_tabs.get(tab) or None

    def get_last_messaging_state(self) -> Optional[MessagingState]:
        return self._global_state.last_messaging_state

    def get_tab_state(self) -> Dict[str, Dict[str, Any]]:
        return {channel_id: entry.to_raw() for channel_id, entry in self._tab_state.items()}

    def get_global_state(self) -> Dict[str, Any]:
        return self._global_state.to_raw()

    # -- mutations -------------------------------------------------------

    def save_tab(self, channel_id: Optional[str], tab: Optional[str]) -> None:
        if not channel_id or not tab:
            return
        entry = self._tab_state.get(channel_id) or ChannelTabState(channel_id=channel_id)
        entry.tab = normalize_tab(tab, self.default_tab)
        entry.timestamp = self._now()
        self._tab_state[channel_id] = entry
        log.debug("Saved tab %s for channel %s", entry.tab, channel_id)
        self._persist_tab_state()

    def save_sub_tab(self, channel_id: Optional[str], tab: Optional[str], sub_tab: Optional[str]) -> None:
        if not channel_id or not tab:
            return
        entry = self._tab_state.get(channel_id)
        if entry is None:
            entry = ChannelTabState(channel_id=channel_id, tab=normalize_tab(tab, self.default_tab))
        entry.sub_tabs[tab] = sub_tab
        entry.timestamp = self._now()
        self._tab_state[channel_id] = entry
        log.debug("Saved sub-tab %s/%s for channel %s", tab, sub_tab, channel_id)
        self._persist_tab_state()

    def save_messaging_state(self, channel_id: Optional[str], tab: Optional[str], sub_tab: Optional[str] = None) -> None:
        if not channel_id or not tab:
            return
        now = self._now()
        self._global_state = GlobalNavigationState(
            last_messaging_state=MessagingState(
                channel_id=channel_id,
                tab=normalize_tab(tab, self.default_tab),
                sub_tab=sub_tab,
                timestamp=now,
            ),
            timestamp=now,
        )
        self._persist_global_state()

    def clear_channel_tab_state(self, channel_id: Optional[str]) -> None:
        if not channel_id:
            return
        if self._tab_state.pop(channel_id, None) is not None:
            self._persist_tab_state()

    def clear_all_tab_state(self) -> None:
        self._tab_state = {}
        self._remove(self.tab_state_key)

    def clear_global_state(self) -> None:
        self._global_state = GlobalNavigationState()
        self._remove(self.global_state_key)
