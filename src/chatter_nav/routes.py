"""Mapping between address-bar paths and navigation state."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from .config import DEFAULT_TAB
from .utils import split_path


@dataclass(frozen=True)
class RouteInfo:
    current_tab: str = DEFAULT_TAB
    content_type: Optional[str] = None
    content_id: Optional[str] = None
    sub_tab: Optional[str] = None
    channel_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def resolve_route(path: Optional[str], channel_id: Optional[str] = None) -> RouteInfo:
    """Derive the active tab and content identifiers from ``/channels/{id}/{tab}/...``.

    Never raises; anything unrecognised resolves to the messages tab.  When
    ``channel_id`` is not supplied it is read from the second path segment.
    """
    segments = split_path(path) if isinstance(path, str) else []
    if channel_id is None and len(segments) >= 2 and segments[0] == "channels":
        channel_id = segments[1]

    def segment(index: int) -> Optional[str]:
        return segments[index] if len(segments) > index else None

    if len(segments) < 3:
        return RouteInfo(channel_id=channel_id)

    tab = segments[2]
    if tab == "messages":
        if segment(3) == "thread" and segment(4):
            return RouteInfo("messages", "thread", segment(4), channel_id=channel_id)
        return RouteInfo("messages", channel_id=channel_id)
    if tab == "tasks":
        if segment(3):
            return RouteInfo("tasks", "task", segment(3), channel_id=channel_id)
        return RouteInfo("tasks", channel_id=channel_id)
    if tab == "classes":
        return RouteInfo("classes", sub_tab=segment(3), channel_id=channel_id)
    if tab == "import":
        return RouteInfo("import", channel_id=channel_id)
    if tab == "wiki":
        if segment(3):
            return RouteInfo("wiki", "page", segment(3), channel_id=channel_id)
        return RouteInfo("wiki", channel_id=channel_id)
    return RouteInfo(channel_id=channel_id)


def generate_channel_url(channel_id: str, tab: Optional[str] = DEFAULT_TAB, sub_tab: Optional[str] = None) -> str:
    tab = tab or DEFAULT_TAB
    url = f"/channels/{channel_id}/{tab}"
    if sub_tab and tab == "classes":
        url += f"/{sub_tab}"
    return url


def generate_section_url(
    section: str,
    channel_id: Optional[str] = None,
    tab: Optional[str] = None,
    sub_tab: Optional[str] = None,
) -> str:
    if section == "messaging":
        if channel_id:
            return generate_channel_url(channel_id, tab, sub_tab)
        return "/channels"
    if section == "crm":
        return "/crm"
    if section == "bookkeeping":
        return "/bookkeeping"
    return "/"
