import json
import os
import shutil
import subprocess

import pytest

pytestmark = pytest.mark.integration


@pytest.fixture()
def cli(tmp_path):
    exe = shutil.which("chatter-nav")
    if exe is None:
        pytest.skip("chatter-nav console script not installed")
    env = dict(os.environ, CHATTER_NAV_HOME=str(tmp_path / "home"))

    def run(*args: str) -> subprocess.CompletedProcess:
        return subprocess.run([exe, *args], capture_output=True, text=True, env=env, check=False)

    return run


def test_tab_memory_survives_separate_processes(cli):
    assert cli("channels", "--add", "maths", "--type", "class").returncode == 0
    assert cli("tab", "maths", "classes").returncode == 0
    assert cli("subtab", "maths", "classes", "courses").returncode == 0
    assert cli("tab", "general", "tasks").returncode == 0

    opened = cli("open", "maths")
    assert opened.returncode == 0
    assert "/channels/maths/classes/courses" in opened.stdout

    state = json.loads(cli("state", "--json").stdout)
    assert state["channels"]["maths"]["subTabs"] == {"classes": "courses"}
    assert state["global"]["lastMessagingState"]["channelId"] == "maths"
