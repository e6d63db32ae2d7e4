import os

import pytest

from asearch.server.adapters.files import FileAccessError
from asearch.server.state import StateManager, WorkspaceNotSelected


def test_rebuild_requires_workspace():
    manager = StateManager()
    with pytest.raises(WorkspaceNotSelected):
        manager.rebuild()


def test_status_before_and_after_build(workspace):
    manager = StateManager()
    assert manager.status() == {"root": None, "indexed": False, "count": 0, "files": 0}
    manager.set_root(str(workspace))
    result = manager.rebuild()
    assert result.count == 4
    status = manager.status()
    assert status["indexed"] is True
    assert status["count"] == 4
    assert status["files"] == 4


def test_search_uses_current_index(workspace):
    manager = StateManager()
    assert manager.search("foo") == []
    manager.set_root(str(workspace))
    manager.rebuild()
    assert manager.search("foo") == [
        (workspace / "p" / "foo.txt").as_uri(),
        (workspace / "q" / "foobar.txt").as_uri(),
    ]


def test_failed_rebuild_keeps_previous_index(tmp_path):
    batches = [["/p/foo.txt", "/p/bar.txt"]]

    def enumerator(root):
        if not batches:
            raise FileAccessError("permission denied")
        return batches.pop(0)

    manager = StateManager(enumerator=enumerator)
    manager.set_root(str(tmp_path))
    manager.rebuild()
    before = manager.current_index()
    with pytest.raises(FileAccessError):
        manager.rebuild()
    assert manager.current_index() is before
    assert manager.search("bar") == ["/p/bar.txt"]


def test_rebuild_replaces_index_wholesale(tmp_path):
    batches = [["/p/foo.txt", "/p/bar.txt", "/q/foobar.txt"], ["/p/foo.txt"]]
    manager = StateManager(enumerator=lambda root: batches.pop(0))
    manager.set_root(str(tmp_path))
    manager.rebuild()
    assert manager.search("foo") == ["/p/foo.txt", "/q/foobar.txt"]
    manager.rebuild()
    assert manager.search("bar") == []
    assert manager.status()["count"] == 1


def test_switching_workspace_drops_index(tmp_path):
    first = tmp_path / "one"
    second = tmp_path / "two"
    first.mkdir()
    second.mkdir()
    manager = StateManager(enumerator=lambda root: [f"{root.as_uri()}/a.txt"])
    manager.set_root(str(first))
    manager.rebuild()
    manager.set_root(str(first))
    assert manager.status()["indexed"] is True
    manager.set_root(str(second))
    assert manager.status()["indexed"] is False


def test_set_root_rejects_missing_dir(tmp_path):
    manager = StateManager()
    with pytest.raises(FileAccessError):
        manager.set_root(str(tmp_path / "nope"))


def test_unreadable_subdirectory_keeps_previous_index(workspace, monkeypatch):
    manager = StateManager()
    manager.set_root(str(workspace))
    manager.rebuild()
    before = manager.current_index()
    (workspace / "p" / "new.txt").write_text("x", encoding="utf-8")

    real_scandir = os.scandir

    def scandir(path="."):
        if os.path.basename(os.fspath(path)) == "q":
            raise PermissionError(13, "Permission denied", os.fspath(path))
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", scandir)
    with pytest.raises(FileAccessError):
        manager.rebuild()
    assert manager.current_index() is before
    assert manager.status()["count"] == 4
    assert manager.search("new") == []
