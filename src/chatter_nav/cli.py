from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .channels import ChannelDirectory, get_channel_type_metadata, tabs_for_channel
from .config import TABS, ConfigError, NavConfig
from .logging import get_logger, setup_logging
from .navigator import HistoryRouter, TabNavigator
from .routes import resolve_route
from .state import TabStateManager
from .storage import FileStore
from .utils import is_channel_path

app = typer.Typer(help="Chatter navigation state CLI")
console = Console()
log = get_logger(__name__)


def _load_config() -> NavConfig:
    try:
        return NavConfig.load()
    except ConfigError as exc:
        log.error("%s", exc)
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1)


def _manager(config: NavConfig) -> TabStateManager:
    return TabStateManager(
        FileStore(config.storage.resolved_path()),
        expiry_days=config.navigation.expiry_days,
        default_tab=config.navigation.default_tab,
        tab_state_key=config.storage.tab_state_key,
        global_state_key=config.storage.global_state_key,
    )


def _navigator() -> TabNavigator:
    config = _load_config()
    router = HistoryRouter(FileStore(config.storage.resolved_path()))
    current = resolve_route(router.location).channel_id if router.location else None
    return TabNavigator(_manager(config), ChannelDirectory.load(), router, channel_id=current)


def _follow(nav: TabNavigator, path: Optional[str]) -> None:
    if path is None:
        console.print("No channel selected")
        raise typer.Exit(1)
    nav.sync_route(path)
    console.print(path)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir", help="Directory for nav.log (default: <home>/logs)"),
):
    setup_logging(verbose, log_dir)


@app.command()
def resolve(path: str):
    """Show the tab and content a path points at."""
    typer.echo(json.dumps(resolve_route(path).to_dict(), indent=2))


@app.command()
def channels(
    add: Optional[str] = typer.Option(None, "--add", help="Channel id to add"),
    channel_type: str = typer.Option("general", "--type", help="Channel type for --add"),
    name: str = typer.Option("", "--name", help="Display name for --add"),
    remove: Optional[str] = typer.Option(None, "--remove", help="Channel id to remove"),
):
    directory = ChannelDirectory.load()
    if add:
        directory.add(add, channel_type, name)
        console.print(f"Added {add}")
    if remove:
        if not directory.remove(remove, tab_state=_manager(_load_config())):
            console.print(f"Unknown channel: {remove}")
            raise typer.Exit(1)
        console.print(f"Removed {remove}")
    table = Table(title="Channels")
    table.add_column("Channel")
    table.add_column("Type")
    table.add_column("Tabs")
    for channel in directory.sorted_channels():
        table.add_row(
            channel.display_name,
            get_channel_type_metadata(channel.type)["name"],
            ", ".join(tab.id for tab in tabs_for_channel(channel)),
        )
    console.print(table)


@app.command()
def tab(channel: str, tab_name: str = typer.Argument(..., metavar="TAB")):
    """Select a tab in a channel."""
    nav = _navigator()
    nav.channel_id = channel
    _follow(nav, nav.handle_tab_select(tab_name))


@app.command()
def subtab(channel: str, tab_name: str = typer.Argument(..., metavar="TAB"), sub_tab: str = typer.Argument(...)):
    """Record the sub-tab chosen within a tab."""
    nav = _navigator()
    nav.handle_sub_tab_select(channel, tab_name, sub_tab)
    console.print(f"Saved {tab_name}/{sub_tab} for {channel}")


@app.command("open")
def open_channel(channel: str):
    """Switch to a channel, restoring its last tab."""
    nav = _navigator()
    _follow(nav, nav.handle_channel_select(channel))


@app.command()
def section(name: str):
    """Go to messaging, crm or bookkeeping."""
    nav = _navigator()
    path = nav.navigate_to_section(name)
    if is_channel_path(path):
        nav.sync_route(path)
    console.print(path)


@app.command()
def state(json_output: bool = typer.Option(False, "--json")):
    manager = _manager(_load_config())
    tab_state = manager.get_tab_state()
    global_state = manager.get_global_state()
    if json_output:
        typer.echo(json.dumps({"channels": tab_state, "global": global_state}))
        return
    table = Table(title="Remembered Tabs")
    table.add_column("Channel")
    table.add_column("Tab")
    table.add_column("Sub-tabs")
    for channel_id, entry in tab_state.items():
        subs = ", ".join(f"{k}={v}" for k, v in entry["subTabs"].items() if v)
        table.add_row(channel_id, entry["tab"], subs)
    console.print(table)
    last = manager.get_last_messaging_state()
    if last is not None:
        console.print(f"Last messaging location: {last.channel_id}/{last.tab}" + (f"/{last.sub_tab}" if last.sub_tab else ""))


@app.command()
def clear(
    channel: Optional[str] = typer.Option(None, "--channel", help="Forget one channel"),
    global_state: bool = typer.Option(False, "--global", help="Forget the last messaging location"),
):
    """Forget remembered tabs (everything when no option is given)."""
    manager = _manager(_load_config())
    if channel:
        manager.clear_channel_tab_state(channel)
        console.print(f"Cleared {channel}")
        return
    if global_state:
        manager.clear_global_state()
        console.print("Cleared global navigation state")
        return
    manager.clear_all_tab_state()
    manager.clear_global_state()
    console.print("Cleared all navigation state")


@app.command("config")
def config_cmd(
    set_option: Optional[str] = typer.Option(None, "--set", help="key=value (storage.path/navigation.expiry_days/navigation.default_tab)"),
):
    config = _load_config()
    if set_option:
        if "=" not in set_option:
            console.print("Use key=value with --set")
            raise typer.Exit(1)
        key, value = set_option.split("=", 1)
        if key == "storage.path":
            config.storage.path = value
        elif key == "navigation.expiry_days":
            try:
                config.navigation.expiry_days = int(value)
            except ValueError:
                console.print(f"Not an integer: {value}")
                raise typer.Exit(1)
        elif key == "navigation.default_tab":
            if value not in TABS:
                console.print(f"Unknown tab: {value}")
                raise typer.Exit(1)
            config.navigation.default_tab = value
        else:
            console.print(f"Unknown key: {key}")
            raise typer.Exit(1)
        config.save()
    console.print(json.dumps({
        "storage": {
            "path": str(config.storage.resolved_path()),
            "tab_state_key": config.storage.tab_state_key,
            "global_state_key": config.storage.global_state_key,
        },
        "navigation": {
            "expiry_days": config.navigation.expiry_days,
            "default_tab": config.navigation.default_tab,
        },
    }, indent=2))
