from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import httpx
from PySide6.QtCore import QUrl
from PySide6.QtGui import QAction, QDesktopServices, QKeySequence
from PySide6.QtWidgets import QFileDialog, QLabel, QMainWindow

from asearch.app import config
from asearch.server.adapters.files import FileAccessError, location_to_path
from .search_panel import SearchPanel

logger = logging.getLogger(__name__)


def _error_detail(exc: httpx.HTTPError) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            detail = exc.response.json().get("detail")
        except ValueError:
            detail = None
        if detail:
            return str(detail)
        return f"HTTP {exc.response.status_code}"
    return str(exc) or exc.__class__.__name__


class MainWindow(QMainWindow):
    """Host shell: owns the API client, the search panel and the host actions."""

    def __init__(
        self,
        api_base: str = "",
        local_auth_token: Optional[str] = None,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        super().__init__()
        self.setWindowTitle("ASearch")
        self.api_base = api_base.rstrip("/")
        if http_client is None:
            headers = {"X-Local-UI-Token": local_auth_token} if local_auth_token else None
            http_client = httpx.Client(base_url=self.api_base, timeout=10.0, headers=headers)
        self.http = http_client
        self.workspace_root: Optional[Path] = None
        self.search_panel: Optional[SearchPanel] = None

        self.workspace_label = QLabel("No workspace")
        self.setCentralWidget(self.workspace_label)
        self._build_actions()
        self.statusBar().showMessage("Select a workspace to get started")

    def _build_actions(self) -> None:
        file_menu = self.menuBar().addMenu("&File")
        open_action = QAction("Open Workspace…", self)
        open_action.setShortcut(QKeySequence("Ctrl+O"))
        open_action.triggered.connect(self._choose_workspace)
        file_menu.addAction(open_action)

        self.reindex_action = QAction("Reindex Files", self)
        self.reindex_action.setShortcut(QKeySequence("Ctrl+Shift+R"))
        self.reindex_action.triggered.connect(self.reindex)
        file_menu.addAction(self.reindex_action)

        file_menu.addSeparator()
        quit_action = QAction("Quit", self)
        quit_action.setShortcut(QKeySequence.Quit)
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

        go_menu = self.menuBar().addMenu("&Go")
        self.search_action = QAction("Search Files", self)
        self.search_action.setShortcut(QKeySequence("Ctrl+P"))
        self.search_action.triggered.connect(self.show_search_panel)
        go_menu.addAction(self.search_action)

    # ----- host collaborators -----

    def notify(self, message: str, timeout: int = 4000) -> None:
        logger.info(message)
        self.statusBar().showMessage(message, timeout)

    def open_location(self, location: str) -> bool:
        try:
            path = location_to_path(location)
        except FileAccessError as exc:
            self.notify(f"Cannot open {location}: {exc}")
            return False
        if not path.is_file():
            self.notify(f"File no longer exists: {path}")
            return False
        if not QDesktopServices.openUrl(QUrl(location)):
            self.notify(f"No application available to open {path.name}")
            return False
        return True

    # ----- workspace -----

    def startup(self, workspace_hint: Optional[str] = None) -> bool:
        candidate = workspace_hint or config.load_last_workspace()
        if candidate and self.select_workspace(candidate):
            return True
        return self._choose_workspace()

    def _choose_workspace(self) -> bool:
        start_dir = str(self.workspace_root or Path.home())
        chosen = QFileDialog.getExistingDirectory(self, "Open Workspace", start_dir)
        if not chosen:
            return False
        return self.select_workspace(chosen)

    def select_workspace(self, path: str) -> bool:
        try:
            resp = self.http.post("/api/workspace/select", json={"path": path})
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            self.notify(f"Failed to open workspace: {_error_detail(exc)}")
            return False
        data = resp.json()
        self.workspace_root = Path(data["root"])
        config.remember_workspace(data["root"])
        self.workspace_label.setText(f"Workspace: {self.workspace_root}")
        if self.search_panel is not None:
            self.search_panel.set_workspace_root(self.workspace_root)
            self.search_panel.refresh()
        self.notify(data.get("message") or f"Indexed {data.get('count', 0)} files")
        return True

    def reindex(self) -> bool:
        try:
            resp = self.http.post("/api/workspace/reindex")
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            self.notify(f"Reindex failed: {_error_detail(exc)}")
            return False
        data = resp.json()
        self.notify(data.get("message") or f"Indexed {data.get('count', 0)} files")
        if self.search_panel is not None:
            self.search_panel.refresh()
        return True

    # ----- search panel -----

    def show_search_panel(self) -> SearchPanel:
        if self.search_panel is not None:
            self.search_panel.show()
            self.search_panel.raise_()
            self.search_panel.activateWindow()
            return self.search_panel
        panel = SearchPanel(self, post_message=self._post_panel_message, workspace_root=self.workspace_root)
        panel.finished.connect(self._on_panel_finished)
        self.search_panel = panel
        panel.show()
        return panel

    def _on_panel_finished(self, _result: int) -> None:
        panel = self.search_panel
        self.search_panel = None
        if panel is not None:
            panel.deleteLater()

    def _post_panel_message(self, message: dict) -> None:
        try:
            resp = self.http.post("/api/panel/message", json=message)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            self.notify(f"Search failed: {_error_detail(exc)}")
            return
        data = resp.json()
        for reply in data.get("replies") or []:
            if self.search_panel is not None:
                self.search_panel.receive_message(reply)
        target = data.get("open")
        if target:
            self.open_location(target)

    def closeEvent(self, event) -> None:  # type: ignore[override]
        if self.search_panel is not None:
            self.search_panel.close()
        super().closeEvent(event)
