"""Tab and channel switching on top of the remembered tab state."""
from __future__ import annotations

from typing import List, Optional, Protocol

from .channels import ChannelDirectory, Tab, tabs_for_channel
from .logging import get_logger
from .routes import RouteInfo, generate_channel_url, generate_section_url, resolve_route
from .state import TabStateManager, normalize_tab
from .storage import KeyValueStore, StoreError

log = get_logger(__name__)

LOCATION_KEY = "chatter_current_location"


class Router(Protocol):
    def navigate(self, path: str) -> None: ...


class HistoryRouter:
    """Records visited paths; optionally keeps the current location in a store."""

    def __init__(self, store: Optional[KeyValueStore] = None, key: str = LOCATION_KEY) -> None:
        self.history: List[str] = []
        self._store = store
        self._key = key
        self._location: Optional[str] = None
        if store is not None:
            try:
                self._location = store.get(key)
            except StoreError as exc:
                log.warning("Could not restore current location: %s", exc)

    @property
    def location(self) -> Optional[str]:
        return self.history[-1] if self.history else self._location

    def navigate(self, path: str) -> None:
        log.debug("navigate -> %s", path)
        self.history.append(path)
        if self._store is not None:
            try:
                self._store.set(self._key, path)
            except StoreError as exc:
                log.warning("Could not persist current location: %s", exc)


class TabNavigator:
    def __init__(
        self,
        manager: TabStateManager,
        directory: ChannelDirectory,
        router: Router,
        channel_id: Optional[str] = None,
    ) -> None:
        self.manager = manager
        self.directory = directory
        self.router = router
        self.channel_id = channel_id

    def tabs_for(self, channel_id: Optional[str]) -> List[Tab]:
        return tabs_for_channel(self.directory.get(channel_id))

    def _path_for(self, channel_id: str, tab: str) -> str:
        if tab == "classes":
            return generate_channel_url(channel_id, tab, self.manager.get_last_sub_tab(channel_id, "classes"))
        return generate_channel_url(channel_id, tab)

    def handle_tab_select(self, tab: str) -> Optional[str]:
        if not self.channel_id:
            return None
        tab = normalize_tab(tab)
        self.manager.save_tab(self.channel_id, tab)
        path = self._path_for(self.channel_id, tab)
        self.router.navigate(path)
        return path

    def handle_channel_select(self, channel_id: str) -> Optional[str]:
        """Switch channel, landing on its last tab if that tab still applies."""
        if not channel_id:
            return None
        available = self.tabs_for(channel_id)
        tab = normalize_tab(self.manager.get_last_tab(channel_id, available))
        self.channel_id = channel_id
        path = self._path_for(channel_id, tab)
        self.router.navigate(path)
        return path

    def handle_sub_tab_select(self, channel_id: Optional[str], tab: Optional[str], sub_tab: Optional[str]) -> None:
        if not channel_id or not tab or not sub_tab:
            return
        self.manager.save_sub_tab(channel_id, tab, sub_tab)

    def select_classes_sub_tab(self, sub_tab: str) -> Optional[str]:
        if not self.channel_id or not sub_tab:
            return None
        self.handle_sub_tab_select(self.channel_id, "classes", sub_tab)
        path = generate_channel_url(self.channel_id, "classes", sub_tab)
        self.router.navigate(path)
        return path

    def sync_route(self, path: str) -> RouteInfo:
        """Adopt the location in ``path`` and record it as the last messaging state."""
        info = resolve_route(path)
        if info.channel_id:
            self.channel_id = info.channel_id
            self.manager.save_messaging_state(info.channel_id, info.current_tab, info.sub_tab)
        return info

    def navigate_to_messaging(self) -> str:
        last = self.manager.get_last_messaging_state()
        if last is not None and last.channel_id:
            path = generate_section_url("messaging", last.channel_id, last.tab, last.sub_tab)
        else:
            path = generate_section_url("messaging")
        self.router.navigate(path)
        return path

    def navigate_to_section(self, section: str) -> str:
        if section == "messaging":
            return self.navigate_to_messaging()
        path = generate_section_url(section)
        self.router.navigate(path)
        return path
