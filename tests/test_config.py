import json

from asearch.app import config
from asearch.server.adapters.files import DEFAULT_EXCLUDE_PATTERNS


def test_defaults_without_config_file():
    assert config.load_last_workspace() is None
    assert config.load_recent_workspaces() == []
    assert config.load_search_debounce_ms() == config.DEFAULT_DEBOUNCE_MS
    assert config.load_exclude_patterns() == list(DEFAULT_EXCLUDE_PATTERNS)
    assert config.load_dialog_geometry("search_panel") is None


def test_corrupt_config_is_treated_as_empty(isolated_config):
    isolated_config.write_text("{not json", encoding="utf-8")
    assert config.load_last_workspace() is None
    config.remember_workspace("/tmp/ws")
    assert config.load_last_workspace() == "/tmp/ws"


def test_remember_workspace_moves_to_front(tmp_path):
    config.remember_workspace(str(tmp_path / "a"))
    config.remember_workspace(str(tmp_path / "b"))
    config.remember_workspace(str(tmp_path / "a"))
    assert config.load_recent_workspaces() == [str(tmp_path / "a"), str(tmp_path / "b")]
    assert config.load_last_workspace() == str(tmp_path / "a")


def test_recent_workspaces_are_capped(tmp_path):
    for idx in range(config.MAX_RECENT_WORKSPACES + 3):
        config.remember_workspace(str(tmp_path / f"ws{idx}"))
    assert len(config.load_recent_workspaces()) == config.MAX_RECENT_WORKSPACES


def test_debounce_is_clamped(isolated_config):
    isolated_config.write_text(json.dumps({"search_debounce_ms": 10_000}), encoding="utf-8")
    assert config.load_search_debounce_ms() == config.MAX_DEBOUNCE_MS
    isolated_config.write_text(json.dumps({"search_debounce_ms": "fast"}), encoding="utf-8")
    assert config.load_search_debounce_ms() == config.DEFAULT_DEBOUNCE_MS


def test_dialog_geometry_round_trip():
    config.save_dialog_geometry("search_panel", "AAAA")
    config.save_dialog_geometry("other", "BBBB")
    assert config.load_dialog_geometry("search_panel") == "AAAA"
    assert config.load_dialog_geometry("other") == "BBBB"


def test_exclude_patterns_drop_blank_entries(isolated_config):
    isolated_config.write_text(json.dumps({"exclude_patterns": [".git", " ", 3, "build"]}), encoding="utf-8")
    assert config.load_exclude_patterns() == [".git", "build"]


def test_updates_preserve_unrelated_keys(isolated_config):
    isolated_config.write_text(json.dumps({"exclude_patterns": ["build"]}), encoding="utf-8")
    config.remember_workspace("/tmp/ws")
    config.save_dialog_geometry("search_panel", "AAAA")
    payload = json.loads(isolated_config.read_text(encoding="utf-8"))
    assert payload["exclude_patterns"] == ["build"]
    assert payload["last_workspace"] == "/tmp/ws"
    assert payload["dialog_geometry"] == {"search_panel": "AAAA"}


def test_port_from_environment(monkeypatch):
    monkeypatch.setenv("ASEARCH_PORT", "9000")
    assert config.load_port() == 9000
    monkeypatch.setenv("ASEARCH_PORT", "abc")
    assert config.load_port() == config.DEFAULT_PORT
    monkeypatch.delenv("ASEARCH_PORT")
    assert config.load_port() == config.DEFAULT_PORT
