from .channels import Channel, ChannelDirectory, Tab, tabs_for_channel
from .cli import app
from .navigator import HistoryRouter, Router, TabNavigator
from .routes import RouteInfo, generate_channel_url, generate_section_url, resolve_route
from .state import ChannelTabState, GlobalNavigationState, MessagingState, TabStateManager
from .storage import CorruptStoreError, FileStore, KeyValueStore, MemoryStore, StoreError

__all__ = [
    "app",
    "Channel",
    "CorruptStoreError",
    "ChannelDirectory",
    "ChannelTabState",
    "FileStore",
    "GlobalNavigationState",
    "HistoryRouter",
    "KeyValueStore",
    "MemoryStore",
    "MessagingState",
    "RouteInfo",
    "Router",
    "StoreError",
    "Tab",
    "TabNavigator",
    "TabStateManager",
    "generate_channel_url",
    "generate_section_url",
    "resolve_route",
    "tabs_for_channel",
]
