"""Qt dialogs for reviewing link suggestions."""

from __future__ import annotations

import html
import logging
import sys
from collections.abc import Sequence
from typing import Optional

from PyQt6.QtCore import Qt, QUrl
from PyQt6.QtGui import QDesktopServices
from PyQt6.QtWidgets import (
    QApplication,
    QDialog,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QMessageBox,
    QPushButton,
    QTextEdit,
    QVBoxLayout,
    QWidget,
)

from ..document.models import LinkCandidate
from ..services.suggestions import SuggestionOption


logger = logging.getLogger(__name__)


def ensure_application() -> QApplication:
    """Return the running :class:`QApplication`, creating one if needed."""

    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv or ["linkresolver"])
        app.setApplicationName("linkresolver")
    return app  # type: ignore[return-value]


def _option_text(option: SuggestionOption) -> str:
    if option.source == "model":
        prefix = f"AI {(option.confidence or 0.0) * 100:.0f}%"
    else:
        prefix = "search"
    title = f" - {option.title}" if option.title else ""
    return f"[{prefix}] {option.url}{title}"


class LinkReviewDialog(QDialog):
    """Show the suggestions for one link and turn button presses into commands.

    The dialog produces the same one-line commands as the terminal surface
    (``yN``, ``vN``, a URL or free text) in :attr:`command`. Closing it
    without choosing leaves :attr:`command` as ``None``.
    """

    def __init__(
        self,
        candidate: LinkCandidate,
        options: Sequence[SuggestionOption],
        *,
        messages: Sequence[str] = (),
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.command: str | None = None
        self._options = list(options)
        self.setWindowTitle(f"Resolve link: {candidate.label}")
        self.resize(760, 460)

        layout = QVBoxLayout(self)

        context = html.escape(candidate.sentence_context)
        markup = html.escape(candidate.original_markup)
        if markup in context:
            context = context.replace(markup, f"<b style='color:#2e7d32'>{markup}</b>", 1)
        self.context_label = QLabel(f"<b>Context:</b> {context}", self)
        self.context_label.setTextFormat(Qt.TextFormat.RichText)
        self.context_label.setWordWrap(True)
        layout.addWidget(self.context_label)

        reasoning = self._options[0].reasoning if self._options else ""
        self.reasoning_label = QLabel(reasoning, self)
        self.reasoning_label.setWordWrap(True)
        self.reasoning_label.setStyleSheet("color: #666666;")
        self.reasoning_label.setVisible(bool(reasoning))
        layout.addWidget(self.reasoning_label)

        self.options_list = QListWidget(self)
        for option in self._options:
            item = QListWidgetItem(_option_text(option))
            item.setToolTip(option.url)
            self.options_list.addItem(item)
        if self._options:
            self.options_list.setCurrentRow(0)
        self.options_list.itemDoubleClicked.connect(lambda _item: self.accept_selected())
        layout.addWidget(self.options_list, 1)

        self.messages_view = QTextEdit(self)
        self.messages_view.setReadOnly(True)
        self.messages_view.setPlainText("\n".join(messages))
        self.messages_view.setMaximumHeight(90)
        self.messages_view.setVisible(bool(messages))
        layout.addWidget(self.messages_view)

        self.input_edit = QLineEdit(self)
        self.input_edit.setPlaceholderText("Paste a URL to use it, or add context")
        self.input_edit.returnPressed.connect(self.submit_text)
        layout.addWidget(self.input_edit)

        buttons = QHBoxLayout()
        buttons.addStretch(1)
        self.view_button = QPushButton("View in browser", self)
        self.view_button.clicked.connect(self.view_selected)
        buttons.addWidget(self.view_button)
        self.submit_button = QPushButton("Submit", self)
        self.submit_button.clicked.connect(self.submit_text)
        buttons.addWidget(self.submit_button)
        self.accept_button = QPushButton("Accept", self)
        self.accept_button.setDefault(True)
        self.accept_button.clicked.connect(self.accept_selected)
        buttons.addWidget(self.accept_button)
        layout.addLayout(buttons)

    def _selected_index(self) -> int:
        return max(self.options_list.currentRow(), 0) + 1

    def accept_selected(self) -> None:
        self._finish(f"y{self._selected_index()}")

    def view_selected(self) -> None:
        self._finish(f"v{self._selected_index()}")

    def submit_text(self) -> None:
        text = self.input_edit.text().strip()
        if not text:
            return
        self._finish(text)

    def _finish(self, command: str) -> None:
        self.command = command
        self.accept()


class QtInteraction:
    """Interaction surface backed by modal Qt dialogs."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        ensure_application()
        self._parent = parent
        self._candidate: LinkCandidate | None = None
        self._options: list[SuggestionOption] = []
        self._messages: list[str] = []

    @property
    def messages(self) -> list[str]:
        return list(self._messages)

    def begin_link(self, candidate: LinkCandidate, position: int, total: int) -> None:
        self._candidate = candidate
        self._options = []
        self._messages = [f"Processing link {position} of {total}"]

    def show_status(self, message: str) -> None:
        logger.info(message)
        self._messages.append(message)

    def notify(self, message: str) -> None:
        self._messages.append(message)

    def present_options(
        self, candidate: LinkCandidate, options: Sequence[SuggestionOption]
    ) -> None:
        self._candidate = candidate
        self._options = list(options)

    def create_dialog(self, candidate: LinkCandidate) -> LinkReviewDialog:
        return LinkReviewDialog(
            candidate,
            self._options,
            messages=self._messages[-8:],
            parent=self._parent,
        )

    def read_command(self, candidate: LinkCandidate) -> str:
        dialog = self.create_dialog(candidate)
        dialog.exec()
        if dialog.command is None:
            raise EOFError("review dialog closed")
        return dialog.command

    def confirm_retry(self, candidate: LinkCandidate, error: Exception) -> bool:
        answer = QMessageBox.question(
            self._parent,
            "Request failed",
            f"{error}\n\nWould you like to retry?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
        )
        return answer == QMessageBox.StandardButton.Yes

    def open_url(self, url: str) -> None:
        if not QDesktopServices.openUrl(QUrl(url)):
            raise OSError(f"could not open {url}")

    def show_summary(self, candidates: Sequence[LinkCandidate]) -> None:
        lines = []
        for index, candidate in enumerate(candidates, start=1):
            marker = "✓" if candidate.is_settled else "✗"
            target = candidate.resolved_url or candidate.description
            lines.append(f"{marker} Link {index}: [{candidate.label}] → {target}")
        QMessageBox.information(self._parent, "Final summary", "\n".join(lines))


__all__ = ["LinkReviewDialog", "QtInteraction", "ensure_application"]
