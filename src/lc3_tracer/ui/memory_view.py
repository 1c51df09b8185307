# src/lc3_tracer/ui/memory_view.py
"""
メモリの内容をワード単位の16進数とASCIIで表示するウィジェット。
"""
from typing import Optional

from PySide6.QtWidgets import QWidget, QVBoxLayout, QPlainTextEdit
from PySide6.QtGui import QTextCharFormat, QTextCursor, QColor, QTextOption

from lc3_tracer.transport.memory import Memory
from lc3_tracer.ui.fonts import get_monospace_font
from lc3_tracer.ui.formatting import format_memory_rows, WORDS_PER_ROW

# @intent:responsibility PC周辺のメモリをワードダンプで表示し、PCを含む行をハイライトします。
class MemoryView(QWidget):
    ROWS_BEFORE = 4
    ROWS = 32

    def __init__(self, parent=None):
        super().__init__(parent)
        self.layout = QVBoxLayout(self)
        self.layout.setContentsMargins(0, 0, 0, 0)
        self.editor = QPlainTextEdit(self)
        self.editor.setFont(get_monospace_font(10))
        self.editor.setReadOnly(True)
        self.editor.setWordWrapMode(QTextOption.NoWrap)
        self.editor.setStyleSheet("background-color: #101010; color: #BBBBBB;")
        self.layout.addWidget(self.editor)

    # @intent:responsibility PCの少し手前から一定行数を表示し、PCを含む行をハイライトします。
    def update_memory(self, memory: Memory, pc: int, highlight_address: Optional[int] = None):
        start = (pc - self.ROWS_BEFORE * WORDS_PER_ROW) & 0xFFFF
        self.editor.setPlainText("\n".join(format_memory_rows(memory, start, self.ROWS)))

        if highlight_address is None:
            return
        first_row = (start // WORDS_PER_ROW) * WORDS_PER_ROW
        line = ((highlight_address - first_row) & 0xFFFF) // WORDS_PER_ROW
        if 0 <= line < self.ROWS:
            cursor = self.editor.textCursor()
            cursor.movePosition(QTextCursor.Start)
            cursor.movePosition(QTextCursor.Down, QTextCursor.MoveAnchor, line)
            fmt = QTextCharFormat()
            fmt.setBackground(QColor("#404000"))
            cursor.select(QTextCursor.LineUnderCursor)
            cursor.mergeCharFormat(fmt)
            self.editor.setTextCursor(cursor)
            self.editor.ensureCursorVisible()
