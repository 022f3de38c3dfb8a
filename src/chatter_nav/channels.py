from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Dict, List, Optional

from filelock import FileLock

from .config import APP_DIR
from .logging import get_logger

log = get_logger(__name__)

CHANNELS_FILE = APP_DIR / "channels.json"
CHANNELS_LOCK = CHANNELS_FILE.with_suffix(".lock")

GENERAL = "general"
CLASS = "class"
IMPORT = "import"
SOCIAL_MEDIA = "social-media"
MANAGEMENT = "management"
CUSTOMER_SUPPORT = "customer-support"
BOOKKEEPING = "bookkeeping"
# Legacy types, still found on older channels
TEAM = "team"
PROJECT = "project"
SOCIAL = "social"
SUPPORT = "support"
SALES = "sales"

CHANNEL_TYPE_METADATA: Dict[str, Dict[str, str]] = {
    GENERAL: {"label": "General Channels", "name": "General", "description": "General discussion and announcements"},
    CLASS: {"label": "Class Channels", "name": "Class", "description": "Educational content and class management"},
    IMPORT: {"label": "Student Import Channels", "name": "Import", "description": "Student data imports and enrollment management"},
    SOCIAL_MEDIA: {"label": "Social Media Channels", "name": "Social Media", "description": "Social media management and content"},
    MANAGEMENT: {"label": "Management Channels", "name": "Management", "description": "Administrative and management tasks"},
    CUSTOMER_SUPPORT: {"label": "Customer Support Channels", "name": "Customer Support", "description": "Customer service and support"},
    BOOKKEEPING: {"label": "Bookkeeping Channels", "name": "Bookkeeping", "description": "Financial records and accounting"},
    TEAM: {"label": "Team Channels", "name": "Team", "description": "Team collaboration and meetings"},
    PROJECT: {"label": "Project Channels", "name": "Project", "description": "Project-specific discussions"},
    SOCIAL: {"label": "Social Channels", "name": "Social", "description": "Casual conversations and social topics"},
    SUPPORT: {"label": "Support Channels", "name": "Support", "description": "Help and support discussions"},
    SALES: {"label": "Sales Channels", "name": "Sales", "description": "Sales and business discussions"},
}

CHANNEL_TYPE_PRIORITY: Dict[str, int] = {
    GENERAL: 0,
    CLASS: 1,
    MANAGEMENT: 2,
    SOCIAL_MEDIA: 3,
    CUSTOMER_SUPPORT: 4,
    BOOKKEEPING: 5,
    IMPORT: 6,
    TEAM: 7,
    PROJECT: 8,
    SOCIAL: 9,
    SUPPORT: 10,
    SALES: 11,
}


def get_channel_type_metadata(channel_type: Optional[str]) -> Dict[str, str]:
    return CHANNEL_TYPE_METADATA.get(channel_type or "", CHANNEL_TYPE_METADATA[GENERAL])


def get_channel_type_priority(channel_type: Optional[str]) -> int:
    return CHANNEL_TYPE_PRIORITY.get(channel_type or "", 999)


@dataclass(frozen=True)
class Tab:
    id: str
    label: str


@dataclass
class Channel:
    id: str
    type: str = GENERAL
    name: str = ""

    @classmethod
    def from_raw(cls, channel_id: str, raw: object) -> "Channel":
        if isinstance(raw, dict):
            return cls(id=channel_id, type=str(raw.get("type") or GENERAL), name=str(raw.get("name") or ""))
        if isinstance(raw, str):
            return cls(id=channel_id, type=raw)
        return cls(id=channel_id)

    def to_raw(self) -> Dict[str, str]:
        return {"type": self.type, "name": self.name}

    @property
    def display_name(self) -> str:
        return self.name or self.id


def tabs_for_channel(channel: Optional[Channel]) -> List[Tab]:
    """Tab catalog for a channel: messages/tasks/wiki, plus classes or import by type."""
    tabs = [
        Tab("messages", "Messages"),
        Tab("tasks", "Tasks"),
        Tab("wiki", "Wiki"),
    ]
    channel_type = channel.type if channel is not None else None
    if channel_type == CLASS:
        tabs.insert(1, Tab("classes", "Classes"))
    if channel_type == IMPORT:
        tabs.insert(1, Tab("import", "Import"))
    return tabs


@dataclass
class ChannelDirectory:
    channels: Dict[str, Channel]

    @classmethod
    def load(cls) -> "ChannelDirectory":
        if not CHANNELS_FILE.exists():
            return cls(channels={})
        try:
            with FileLock(str(CHANNELS_LOCK)):
                text = CHANNELS_FILE.read_text()
        except OSError as exc:
            log.error("Cannot read channel directory %s: %s", CHANNELS_FILE, exc)
            return cls(channels={})
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            log.error("Ignoring corrupt channel directory %s: %s", CHANNELS_FILE, exc)
            return cls(channels={})
        raw_channels = data.get("channels", {}) if isinstance(data, dict) else None
        if not isinstance(raw_channels, dict):
            log.error("Ignoring channel directory %s: \"channels\" is not an object", CHANNELS_FILE)
            return cls(channels={})
        return cls(channels={cid: Channel.from_raw(cid, raw) for cid, raw in raw_channels.items()})

    def save(self) -> None:
        CHANNELS_FILE.parent.mkdir(parents=True, exist_ok=True)
        payload = {"channels": {cid: ch.to_raw() for cid, ch in self.channels.items()}}
        with FileLock(str(CHANNELS_LOCK)):
            CHANNELS_FILE.write_text(json.dumps(payload, indent=2))

    def get(self, channel_id: Optional[str]) -> Optional[Channel]:
        if not channel_id:
            return None
        return self.channels.get(channel_id)

    def add(self, channel_id: str, channel_type: str = GENERAL, name: str = "") -> Channel:
        channel = Channel(id=channel_id, type=channel_type, name=name)
        self.channels[channel_id] = channel
        self.save()
        return channel

    def remove(self, channel_id: str, tab_state=None) -> bool:
        """Drop a channel; its remembered tabs go with it when ``tab_state`` is given."""
        if channel_id not in self.channels:
            return False
        del self.channels[channel_id]
        self.save()
        if tab_state is not None:
            tab_state.clear_channel_tab_state(channel_id)
        return True

    def sorted_channels(self) -> List[Channel]:
        return sorted(
            self.channels.values(),
            key=lambda ch: (get_channel_type_priority(ch.type), ch.display_name.lower()),
        )
