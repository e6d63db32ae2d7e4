from __future__ import annotations

import html
import logging
import re
from pathlib import Path
from typing import Callable, Optional

from PySide6.QtCore import Qt, QByteArray, QEvent, QTimer, QSize
from PySide6.QtGui import QPainter, QTextDocument
from PySide6.QtWidgets import (
    QDialog,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QVBoxLayout,
    QStyledItemDelegate,
    QStyle,
)

from asearch.app import config
from asearch.core.navigation import QueryState
from .path_utils import location_label

logger = logging.getLogger(__name__)

PostMessage = Callable[[dict], None]


class HTMLDelegate(QStyledItemDelegate):
    """Custom delegate to render HTML in list items."""

    def _document(self, option, index) -> QTextDocument:
        doc = QTextDocument()
        doc.setDefaultFont(option.font)
        doc.setDocumentMargin(2)
        if option.state & QStyle.StateFlag.State_Selected:
            doc.setDefaultStyleSheet("body { color: white; }")
        doc.setHtml(index.data(Qt.DisplayRole) or "")
        return doc

    def paint(self, painter: QPainter, option, index):
        painter.save()
        doc = self._document(option, index)
        doc.setTextWidth(option.rect.width())
        if option.state & QStyle.StateFlag.State_Selected:
            painter.fillRect(option.rect, option.palette.highlight())
        painter.translate(option.rect.topLeft())
        doc.drawContents(painter)
        painter.restore()

    def sizeHint(self, option, index):
        doc = self._document(option, index)
        doc.setTextWidth(option.rect.width() if option.rect.width() > 0 else 400)
        size = doc.size()
        return QSize(int(size.width()), int(size.height()))


class SearchPanel(QDialog):
    """Quick-jump panel over the file name index.

    Talks to the index only through ``post_message``: typed text goes out as
    ``doSearch`` after a debounce, results come back through
    :meth:`receive_message` as ``filesFound``, and confirming a row posts
    ``open``.
    """

    def __init__(
        self,
        parent=None,
        post_message: Optional[PostMessage] = None,
        workspace_root: Optional[Path] = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("ASearch")
        self.setModal(False)
        self._post_message = post_message
        self._workspace_root = workspace_root
        self.state = QueryState()

        self.search_timer = QTimer(self)
        self.search_timer.setSingleShot(True)
        self.search_timer.setInterval(config.load_search_debounce_ms())
        self.search_timer.timeout.connect(self._dispatch_search)

        self.geometry_save_timer = QTimer(self)
        self.geometry_save_timer.setInterval(500)
        self.geometry_save_timer.setSingleShot(True)
        self.geometry_save_timer.timeout.connect(self._save_geometry)

        self.resize(640, 360)
        layout = QVBoxLayout()

        self.search = QLineEdit()
        self.search.setPlaceholderText("Search file name")
        self.search.textChanged.connect(self._on_text_changed)
        self.search.returnPressed.connect(self._activate_current)
        layout.addWidget(self.search)

        self.list_widget = QListWidget()
        self.list_widget.setItemDelegate(HTMLDelegate(self.list_widget))
        self.list_widget.currentRowChanged.connect(self._on_current_row_changed)
        self.list_widget.installEventFilter(self)
        self.list_widget.itemDoubleClicked.connect(self._on_item_double_clicked)
        layout.addWidget(self.list_widget, 1)

        self.status_label = QLabel("Empty Result")
        layout.addWidget(self.status_label)

        self.setLayout(layout)
        self._restore_geometry()
        self.search.setFocus()

    def set_workspace_root(self, root: Optional[Path]) -> None:
        self._workspace_root = root

    def selected_location(self) -> Optional[str]:
        return self.state.current()

    # ----- outgoing -----

    def _post(self, message: dict) -> None:
        if self._post_message is None:
            return
        self._post_message(message)

    def _on_text_changed(self, _text: str) -> None:
        self.status_label.setText("Loading...")
        self.search_timer.start()

    def _dispatch_search(self) -> None:
        query = self.search.text()
        if not self.state.should_dispatch(query):
            self.status_label.setText(self._count_text())
            return
        self.state.mark_dispatched(query)
        self._post({"command": "doSearch", "text": query})

    def refresh(self) -> None:
        """Re-run the current query, e.g. after the index was rebuilt."""
        self.search_timer.stop()
        self.state.last_query = None
        self._dispatch_search()

    def _activate_current(self) -> bool:
        location = self.state.confirm()
        if location is None:
            return False
        self._post({"command": "open", "path": location})
        return True

    # ----- incoming -----

    def receive_message(self, message: dict) -> None:
        if not isinstance(message, dict):
            return
        if message.get("command") != "filesFound":
            logger.debug("Panel ignoring message %r", message.get("command"))
            return
        found = message.get("filesFound") or []
        self.state.deliver([str(location) for location in found])
        self._render_results()
        self._post({"command": "ok"})

    def _render_results(self) -> None:
        self.list_widget.clear()
        for location in self.state.results:
            item = QListWidgetItem(self._highlight_search_term(location_label(location, self._workspace_root)))
            item.setData(Qt.UserRole, location)
            self.list_widget.addItem(item)
        if self.state.results:
            self.list_widget.setCurrentRow(0)
        self.status_label.setText(self._count_text())

    def _count_text(self) -> str:
        count = len(self.state.results)
        if count == 0:
            return "Empty Result"
        return f"{count} file" + ("" if count == 1 else "s")

    def _highlight_search_term(self, text: str) -> str:
        """Bold the (case-insensitive) query inside an escaped label."""
        escaped_text = html.escape(text)
        term = self.state.last_query or ""
        if not term:
            return escaped_text
        pattern = re.compile(f"({re.escape(html.escape(term))})", re.IGNORECASE)
        return pattern.sub(r'<span style="font-weight: bold;">\1</span>', escaped_text, count=1)

    # ----- keyboard / mouse -----

    def _sync_list_row(self) -> None:
        if self.state.cursor.has_selection:
            self.list_widget.setCurrentRow(self.state.cursor.position)

    def _handle_navigation_key(self, event) -> bool:
        key = event.key()
        shift = bool(event.modifiers() & Qt.ShiftModifier)
        if key == Qt.Key_Down or (key == Qt.Key_J and shift):
            self.state.move_down()
            self._sync_list_row()
            return True
        if key == Qt.Key_Up or (key == Qt.Key_K and shift):
            self.state.move_up()
            self._sync_list_row()
            return True
        if key in (Qt.Key_Return, Qt.Key_Enter):
            return self._activate_current()
        return False

    def keyPressEvent(self, event):  # type: ignore[override]
        if self._handle_navigation_key(event):
            return
        super().keyPressEvent(event)

    def eventFilter(self, watched, event):  # type: ignore[override]
        # The list keeps focus after a click; route its arrow keys through the
        # wrap-around cursor instead of QListWidget's own navigation.
        if watched is self.list_widget and event.type() == QEvent.KeyPress:
            if self._handle_navigation_key(event):
                return True
        return super().eventFilter(watched, event)

    def _on_current_row_changed(self, row: int) -> None:
        self.state.select(row)

    def _on_item_double_clicked(self, item: QListWidgetItem) -> None:
        if self.state.select(self.list_widget.row(item)):
            self._activate_current()

    # ----- geometry -----

    def _restore_geometry(self) -> None:
        saved_geometry = config.load_dialog_geometry("search_panel")
        if not saved_geometry:
            return
        try:
            self.restoreGeometry(QByteArray.fromBase64(saved_geometry.encode("ascii")))
        except (ValueError, UnicodeEncodeError) as exc:
            logger.warning("Failed to restore search panel geometry: %s", exc)

    def _save_geometry(self) -> None:
        geometry_b64 = self.saveGeometry().toBase64().data().decode("ascii")
        try:
            config.save_dialog_geometry("search_panel", geometry_b64)
        except OSError as exc:
            logger.warning("Failed to save search panel geometry: %s", exc)

    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self.geometry_save_timer.start()

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self.search_timer.stop()
        self.geometry_save_timer.stop()
        self._save_geometry()
        super().closeEvent(event)
