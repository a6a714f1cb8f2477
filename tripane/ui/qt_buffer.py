"""
TextBuffer adapter over a Qt plain text editor.
"""

from __future__ import annotations

from PyQt6.QtGui import QTextCursor
from PyQt6.QtWidgets import QPlainTextEdit

from tripane.core.models import TextRange


class QtTextBuffer:
    """Exposes a QPlainTextEdit through the TextBuffer protocol."""

    def __init__(self, editor: QPlainTextEdit):
        self.editor = editor

    def full_text(self) -> str:
        return self.editor.toPlainText()

    def lines(self) -> list[str]:
        return self.full_text().split('\n')

    def line(self, index: int) -> str:
        block = self.editor.document().findBlockByNumber(index)
        if not block.isValid():
            return ""
        return block.text()

    def replace(self, text_range: TextRange, text: str) -> None:
        """Replace a range as one undoable edit."""
        cursor = QTextCursor(self.editor.document())
        cursor.beginEditBlock()
        cursor.setPosition(self._position(text_range.start_line, text_range.start_column))
        cursor.setPosition(
            self._position(text_range.end_line, text_range.end_column),
            QTextCursor.MoveMode.KeepAnchor
        )
        cursor.insertText(text)
        cursor.endEditBlock()

    def _position(self, line: int, column: int) -> int:
        document = self.editor.document()
        block = document.findBlockByNumber(max(0, line))
        if not block.isValid():
            # Past the last line: the end of the document
            return document.characterCount() - 1
        return block.position() + min(max(0, column), block.length() - 1)
