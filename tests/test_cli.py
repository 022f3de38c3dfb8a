import json

from typer.testing import CliRunner

from chatter_nav import app
from chatter_nav import config as config_mod

runner = CliRunner()


def test_resolve_command():
    result = runner.invoke(app, ["resolve", "/channels/abc/tasks/42"])
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["current_tab"] == "tasks"
    assert data["content_id"] == "42"


def test_channels_command():
    result = runner.invoke(app, ["channels", "--add", "c1", "--type", "class", "--name", "Maths"])
    assert result.exit_code == 0
    assert "Maths" in result.stdout
    assert "classes" in result.stdout
    result = runner.invoke(app, ["channels", "--remove", "nope"])
    assert result.exit_code == 1


def test_tab_and_open_restore_last_tab():
    runner.invoke(app, ["channels", "--add", "c1", "--type", "class"])
    assert runner.invoke(app, ["subtab", "c1", "classes", "info"]).exit_code == 0
    result = runner.invoke(app, ["tab", "c1", "classes"])
    assert result.exit_code == 0
    assert "/channels/c1/classes/info" in result.stdout
    runner.invoke(app, ["tab", "c2", "wiki"])

    result = runner.invoke(app, ["open", "c1"])
    assert result.exit_code == 0
    assert "/channels/c1/classes/info" in result.stdout


def test_section_round_trip():
    runner.invoke(app, ["tab", "c9", "tasks"])
    assert "/crm" in runner.invoke(app, ["section", "crm"]).stdout
    assert "/channels/c9/tasks" in runner.invoke(app, ["section", "messaging"]).stdout


def test_state_and_clear():
    runner.invoke(app, ["tab", "c1", "tasks"])
    data = json.loads(runner.invoke(app, ["state", "--json"]).stdout)
    assert data["channels"]["c1"]["tab"] == "tasks"
    assert data["global"]["lastMessagingState"]["channelId"] == "c1"

    assert runner.invoke(app, ["clear"]).exit_code == 0
    data = json.loads(runner.invoke(app, ["state", "--json"]).stdout)
    assert data == {"channels": {}, "global": {}}


def test_config_command():
    result = runner.invoke(app, ["config", "--set", "navigation.expiry_days=7"])
    assert result.exit_code == 0
    assert '"expiry_days": 7' in result.stdout
    assert runner.invoke(app, ["config", "--set", "bogus=1"]).exit_code == 1


def test_bad_config_exits_with_error():
    config_mod.CONFIG_FILE.write_text("[storage\n")
    result = runner.invoke(app, ["state"])
    assert result.exit_code == 1


def test_tab_choice_survives_corrupt_storage_file(isolated_home):
    (isolated_home / "storage.json").write_text("{corrupt")
    runner.invoke(app, ["channels", "--add", "c1", "--type", "class"])
    assert runner.invoke(app, ["tab", "c1", "tasks"]).exit_code == 0
    result = runner.invoke(app, ["open", "c1"])
    assert "/channels/c1/tasks" in result.stdout


def test_clear_repairs_corrupt_storage_file(isolated_home):
    storage = isolated_home / "storage.json"
    storage.write_text("{corrupt")
    assert runner.invoke(app, ["clear"]).exit_code == 0
    assert json.loads(storage.read_text()) == {}


def test_log_dir_option(tmp_path):
    log_dir = tmp_path / "custom-logs"
    result = runner.invoke(app, ["--log-dir", str(log_dir), "resolve", "/channels/a/wiki"])
    assert result.exit_code == 0
    assert (log_dir / "nav.log").exists()
