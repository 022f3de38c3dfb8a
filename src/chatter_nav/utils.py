from __future__ import annotations

import re
import time
from typing import List

CHANNEL_PATH_PATTERN = re.compile(r"^/?channels(/|$)")


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def days_to_ms(days: int) -> int:
    return days * 24 * 60 * 60 * 1000


def split_path(path: str) -> List[str]:
    return [segment for segment in (path or "").split("/") if segment]


def is_channel_path(path: str) -> bool:
    return bool(CHANNEL_PATH_PATTERN.match(path or ""))
