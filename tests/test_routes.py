import pytest

from chatter_nav.routes import RouteInfo, generate_channel_url, generate_section_url, resolve_route


def test_task_route():
    info = resolve_route("/channels/abc/tasks/42")
    assert info == RouteInfo(current_tab="tasks", content_type="task", content_id="42", channel_id="abc")


def test_classes_route_with_sub_tab():
    info = resolve_route("/channels/abc/classes/courses")
    assert info == RouteInfo(current_tab="classes", sub_tab="courses", channel_id="abc")


def test_unknown_tab_falls_back_to_messages():
    assert resolve_route("/channels/abc/unknown-tab") == RouteInfo(current_tab="messages", channel_id="abc")


@pytest.mark.parametrize(
    "path, expected",
    [
        ("/channels/abc/messages/thread/t9", RouteInfo("messages", "thread", "t9", channel_id="abc")),
        ("/channels/abc/messages/thread", RouteInfo("messages", channel_id="abc")),
        ("/channels/abc/wiki/home", RouteInfo("wiki", "page", "home", channel_id="abc")),
        ("/channels/abc/import/anything", RouteInfo("import", channel_id="abc")),
        ("/channels/abc/classes", RouteInfo("classes", channel_id="abc")),
        ("/channels/abc", RouteInfo("messages", channel_id="abc")),
        ("/crm", RouteInfo("messages")),
        ("", RouteInfo("messages")),
    ],
)
def test_route_shapes(path, expected):
    assert resolve_route(path) == expected


def test_explicit_channel_param_wins():
    assert resolve_route("/channels/abc/tasks", channel_id="xyz").channel_id == "xyz"


def test_resolution_is_idempotent_and_total():
    path = "//channels//abc/tasks/7/"
    assert resolve_route(path) == resolve_route(path)
    assert resolve_route(path).content_id == "7"
    assert resolve_route(None) == RouteInfo()


def test_channel_urls():
    assert generate_channel_url("abc") == "/channels/abc/messages"
    assert generate_channel_url("abc", "classes", "info") == "/channels/abc/classes/info"
    assert generate_channel_url("abc", "tasks", "info") == "/channels/abc/tasks"


def test_section_urls():
    assert generate_section_url("messaging") == "/channels"
    assert generate_section_url("messaging", "abc", "classes", "courses") == "/channels/abc/classes/courses"
    assert generate_section_url("crm") == "/crm"
    assert generate_section_url("bookkeeping") == "/bookkeeping"
    assert generate_section_url("elsewhere") == "/"
