import pytest

from chatter_nav import channels as channels_mod
from chatter_nav import config as config_mod
from chatter_nav.storage import MemoryStore

DAY_MS = 24 * 60 * 60 * 1000


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    home = tmp_path / "nav-home"
    home.mkdir()
    monkeypatch.setenv("CHATTER_NAV_HOME", str(home))

    monkeypatch.setattr(config_mod, "APP_DIR", home)
    monkeypatch.setattr(config_mod, "CONFIG_FILE", home / "config.toml")
    monkeypatch.setattr(config_mod, "LOCK_FILE", home / "config.lock")

    monkeypatch.setattr(channels_mod, "CHANNELS_FILE", home / "channels.json")
    monkeypatch.setattr(channels_mod, "CHANNELS_LOCK", home / "channels.lock")

    yield home


class Clock:
    def __init__(self, now: int = 1_700_000_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance_days(self, days: float) -> None:
        self.now += int(days * DAY_MS)


@pytest.fixture()
def clock():
    return Clock()


@pytest.fixture()
def store():
    return MemoryStore()
