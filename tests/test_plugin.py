import pytest

from ddnsclient.plugin import (
    GENERIC_HTTP_REQUEST,
    PluginRegistry,
    Provider,
)


def _provider(name, **kwargs):
    return Provider(name=name, server_name="members.example.com",
                    server_url="/nic/update", **kwargs)


def test_register_sets_request_and_finds():
    reg = PluginRegistry()
    p = _provider("default@example.com")
    assert reg.register(p, GENERIC_HTTP_REQUEST) is True
    assert p.server_req == GENERIC_HTTP_REQUEST
    assert reg.find("default@example.com") is p
    assert len(reg) == 1


def test_register_duplicate_is_ignored_case_insensitive():
    reg = PluginRegistry()
    first = _provider("default@example.com")
    reg.register(first, "a")
    second = _provider("DEFAULT@example.com")
    assert reg.register(second, "b") is False
    assert len(reg) == 1
    assert reg.find("default@EXAMPLE.com") is first


def test_register_none_raises():
    with pytest.raises(ValueError):
        PluginRegistry().register(None, "x")


def test_register_v6_clones_provider():
    reg = PluginRegistry()
    p = _provider("default@example.com")
    reg.register(p, "v4")
    reg.register_v6(p, "v6")
    clone = reg.find("ipv6@example.com")
    assert clone is not None and clone is not p
    assert clone.cloned is True
    assert clone.server_req == "v6"
    assert p.server_req == "v4"
    assert clone.server_name == p.server_name


def test_unregister_removes_clone_too():
    reg = PluginRegistry()
    p = _provider("default@example.com")
    reg.register(p, "v4")
    reg.register_v6(p, "v6")
    reg.unregister(p)
    assert reg.find("default@example.com") is None
    assert reg.find("ipv6@example.com") is None
    assert len(reg) == 0


def test_unregister_missing_is_noop():
    reg = PluginRegistry()
    kept = _provider("default@example.com")
    reg.register(kept)
    reg.unregister(_provider("other@example.com"))
    assert list(reg) == [kept]


def test_find_strips_instance_suffix():
    reg = PluginRegistry()
    p = _provider("default@example.com")
    reg.register(p)
    assert reg.find("default@example.com:2") is p


def test_find_loose_substring():
    reg = PluginRegistry()
    p = _provider("default@example.com")
    reg.register(p)
    assert reg.find("example", False) is None
    assert reg.find("EXAMPLE", True) is p


def test_find_under_plugpath():
    reg = PluginRegistry("/usr/lib/plug/")
    p = _provider("/usr/lib/plug/custom.so")
    reg.register(p)
    assert reg.find("custom") is p
    assert reg.find("custom.so") is p
    assert reg.find("/custom") is None


def test_find_none_raises():
    with pytest.raises(ValueError):
        PluginRegistry().find(None)


def test_show_escapes_backslashes():
    reg = PluginRegistry()
    p = _provider("default@example.com", nousername=True)
    reg.register(p, "GET /\\x")
    text = reg.show("default@example.com")
    assert text.startswith("Name           : default@example.com\n")
    assert "nousername     : true\n" in text
    assert text.endswith("update REQ     : GET /\\\\x\n")


def test_show_falls_back_to_substring():
    reg = PluginRegistry()
    reg.register(_provider("default@example.com"))
    assert "default@example.com" in reg.show("example")


def test_show_unknown_raises():
    with pytest.raises(LookupError):
        PluginRegistry().show("nothing")


def test_format_list_has_header_and_rows():
    reg = PluginRegistry()
    reg.register(_provider("default@example.com"))
    reg.register(_provider("default@example.org"))
    lines = reg.format_list().splitlines()
    assert "PROVIDER" in lines[0]
    assert len(lines) == 1 + 2 * 2
    assert lines[1].startswith("default@example.com")
    assert "members.example.com" in lines[2]
    assert lines[2].endswith("/nic/update")