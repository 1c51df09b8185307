# src/lc3_tracer/ui/console_view.py
"""
LC-3プログラムのコンソール入出力を表示するウィジェット。

トラップルーチンはデバッガスレッドから出力を書き込むため、
出力はシグナル経由でGUIスレッドに渡してから表示します。
"""
from PySide6.QtCore import QObject, Signal, Slot
from PySide6.QtWidgets import QWidget, QVBoxLayout, QPlainTextEdit, QLineEdit
from PySide6.QtGui import QTextCursor

from lc3_tracer.transport.console import ConsoleOutput, QueueConsoleInput
from lc3_tracer.ui.fonts import get_monospace_font

class _OutputBridge(QObject):
    text_written = Signal(str)

# @intent:responsibility ConsoleOutputへの書き込みを、スレッド間シグナルに変換します。
class SignalConsoleOutput(ConsoleOutput):
    def __init__(self):
        self.bridge = _OutputBridge()

    def write(self, text: str) -> None:
        self.bridge.text_written.emit(text)

# @intent:responsibility 出力表示欄と入力欄を持ち、入力された文字をキューに投入します。
class ConsoleView(QWidget):
    input_fed = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self.layout = QVBoxLayout(self)
        self.layout.setContentsMargins(0, 0, 0, 0)

        self.output_edit = QPlainTextEdit(self)
        self.output_edit.setReadOnly(True)
        self.output_edit.setFont(get_monospace_font(10))
        self.output_edit.setStyleSheet("background-color: #101010; color: #E0E0E0;")
        self.layout.addWidget(self.output_edit)

        self.input_edit = QLineEdit(self)
        self.input_edit.setFont(get_monospace_font(10))
        self.input_edit.setPlaceholderText("Type input for GETC / IN and press Enter")
        self.input_edit.returnPressed.connect(self._feed_input)
        self.layout.addWidget(self.input_edit)

        self.console_input = QueueConsoleInput()
        self.console_output = SignalConsoleOutput()
        self.console_output.bridge.text_written.connect(self.append_output)

    @Slot(str)
    def append_output(self, text: str):
        cursor = self.output_edit.textCursor()
        cursor.movePosition(QTextCursor.End)
        cursor.insertText(text)
        self.output_edit.setTextCursor(cursor)
        self.output_edit.ensureCursorVisible()

    # @intent:responsibility 入力欄の文字列（改行付き）をバイト列として入力キューに投入します。
    @Slot()
    def _feed_input(self):
        text = self.input_edit.text() + "\n"
        self.input_edit.clear()
        # 1文字1バイト。表現できない文字は'?'になる
        self.console_input.feed(text.encode("latin-1", errors="replace"))
        self.input_fed.emit()

    def clear(self):
        self.output_edit.clear()
