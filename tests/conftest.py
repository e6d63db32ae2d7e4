import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from asearch.server import api
from asearch.server.state import workspace_state


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the global config at a throwaway file for every test."""
    config_path = tmp_path / "asearch_config.json"
    monkeypatch.setenv("ASEARCH_CONFIG", str(config_path))
    monkeypatch.delenv("ASEARCH_LOCAL_UI_TOKEN", raising=False)
    return config_path


@pytest.fixture(autouse=True)
def reset_server_state():
    workspace_state.reset()
    workspace_state.exclude_patterns = None
    api.set_local_ui_token(None)
    yield
    workspace_state.reset()
    api.set_local_ui_token(None)


@pytest.fixture
def workspace(tmp_path):
    root = tmp_path / "ws"
    (root / "p").mkdir(parents=True)
    (root / "q").mkdir()
    (root / ".git").mkdir()
    (root / "p" / "foo.txt").write_text("foo", encoding="utf-8")
    (root / "p" / "bar.txt").write_text("bar", encoding="utf-8")
    (root / "q" / "foobar.txt").write_text("foobar", encoding="utf-8")
    (root / "q" / "Report.PDF").write_text("pdf", encoding="utf-8")
    (root / ".git" / "config").write_text("[core]", encoding="utf-8")
    return root
