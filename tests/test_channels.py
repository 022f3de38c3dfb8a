from chatter_nav import channels as channels_mod
from chatter_nav.channels import (
    Channel,
    ChannelDirectory,
    get_channel_type_metadata,
    get_channel_type_priority,
    tabs_for_channel,
)
from chatter_nav.state import TabStateManager
from chatter_nav.storage import MemoryStore


def _ids(tabs):
    return [tab.id for tab in tabs]


def test_tab_catalog_by_type():
    assert _ids(tabs_for_channel(None)) == ["messages", "tasks", "wiki"]
    assert _ids(tabs_for_channel(Channel("c", "general"))) == ["messages", "tasks", "wiki"]
    assert _ids(tabs_for_channel(Channel("c", "class"))) == ["messages", "classes", "tasks", "wiki"]
    assert _ids(tabs_for_channel(Channel("c", "import"))) == ["messages", "import", "tasks", "wiki"]


def test_type_metadata_fallbacks():
    assert get_channel_type_metadata("class")["name"] == "Class"
    assert get_channel_type_metadata("nope")["name"] == "General"
    assert get_channel_type_priority("general") == 0
    assert get_channel_type_priority("nope") == 999


def test_directory_persists_and_sorts():
    directory = ChannelDirectory.load()
    directory.add("z", "import", "Zeta import")
    directory.add("b", "general", "beta")
    directory.add("a", "class", "Alpha class")
    reloaded = ChannelDirectory.load()
    assert reloaded.get("a").type == "class"
    assert [ch.id for ch in reloaded.sorted_channels()] == ["b", "a", "z"]
    assert reloaded.get(None) is None


def test_remove_clears_tab_state():
    manager = TabStateManager(MemoryStore())
    manager.save_tab("a", "classes")
    directory = ChannelDirectory.load()
    directory.add("a", "class")
    assert directory.remove("a", tab_state=manager)
    assert manager.get_tab_state() == {}
    assert not directory.remove("a")


def test_corrupt_directory_loads_empty():
    channels_mod.CHANNELS_FILE.write_text("{oops")
    assert ChannelDirectory.load().channels == {}


def test_directory_with_non_object_channels_loads_empty(caplog):
    channels_mod.CHANNELS_FILE.write_text('{"channels": []}')
    assert ChannelDirectory.load().channels == {}
    assert "not an object" in caplog.text


def test_directory_without_channels_key_loads_empty(caplog):
    channels_mod.CHANNELS_FILE.write_text("{}")
    assert ChannelDirectory.load().channels == {}
    assert "not an object" not in caplog.text


def test_unreadable_directory_loads_empty():
    channels_mod.CHANNELS_FILE.mkdir()
    assert ChannelDirectory.load().channels == {}
