# src/lc3_tracer/ui/register_view.py
"""
レジスタファイル（R0-R7, PC, COND）を表示するウィジェット。
CPUのレイアウト情報からグループごとの表を組み立て、前回の表示から値が変化したレジスタを強調します。
"""
from typing import Dict, Optional
from PySide6.QtWidgets import QWidget, QVBoxLayout, QGridLayout, QLabel, QGroupBox
from PySide6.QtCore import Qt

from lc3_tracer.core.cpu import AbstractCpu
from lc3_tracer.ui.fonts import get_monospace_font_family
from lc3_tracer.ui.formatting import format_register, format_signed

CHANGED_COLOR = "#FF6060"
VALUE_COLOR = "#FFD700"

# @intent:responsibility レジスタ名・16進値・符号付き10進値を行として表示します。
class RegisterView(QWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setStyleSheet("background-color: #121212; color: #BBBBBB;")
        self._layout = QVBoxLayout(self)
        self._layout.setContentsMargins(5, 5, 5, 5)

        self._font_family = get_monospace_font_family()
        self._hex_labels: Dict[str, QLabel] = {}
        self._dec_labels: Dict[str, QLabel] = {}
        self._widths: Dict[str, int] = {}
        self._last_values: Dict[str, int] = {}
        self._cpu: Optional[AbstractCpu] = None

    def set_cpu(self, cpu: AbstractCpu) -> None:
        self._cpu = cpu
        self._last_values = {}
        self._build_groups()
        self.update_registers()

    def _value_label(self) -> QLabel:
        label = QLabel()
        label.setAlignment(Qt.AlignRight)
        label.setStyleSheet(f"font-family: '{self._font_family}', monospace; color: {VALUE_COLOR};")
        return label

    # @intent:responsibility レイアウト情報（グループ→レジスタ）から表を作り直します。
    def _build_groups(self):
        while self._layout.count():
            item = self._layout.takeAt(0)
            if item.widget():
                item.widget().deleteLater()
        self._hex_labels.clear()
        self._dec_labels.clear()
        self._widths.clear()

        for group in self._cpu.get_register_layout():
            box = QGroupBox(group.group_name)
            box.setStyleSheet("QGroupBox { font-weight: bold; border: 1px solid #222; margin-top: 18px; color: #00AAAA; }")
            grid = QGridLayout(box)
            grid.setHorizontalSpacing(12)
            for row, reg in enumerate(group.registers):
                self._widths[reg.name] = reg.width
                grid.addWidget(QLabel(reg.name), row, 0)
                self._hex_labels[reg.name] = self._value_label()
                grid.addWidget(self._hex_labels[reg.name], row, 1)
                # 10進表示は16ビットのレジスタのみ
                if reg.width == 16:
                    self._dec_labels[reg.name] = self._value_label()
                    grid.addWidget(self._dec_labels[reg.name], row, 2)
            self._layout.addWidget(box)
        self._layout.addStretch()

    # @intent:responsibility 現在のレジスタ値で表示を更新し、前回から変化した値を強調します。
    def update_registers(self):
        if not self._cpu:
            return
        values = self._cpu.get_register_map()
        for name, value in values.items():
            if name not in self._hex_labels:
                continue
            changed = name in self._last_values and self._last_values[name] != value
            color = CHANGED_COLOR if changed else VALUE_COLOR
            labels = [self._hex_labels[name]]
            self._hex_labels[name].setText(format_register(value, self._widths[name]))
            if name in self._dec_labels:
                self._dec_labels[name].setText(format_signed(value))
                labels.append(self._dec_labels[name])
            for label in labels:
                label.setStyleSheet(f"font-family: '{self._font_family}', monospace; color: {color};")
        self._last_values = dict(values)
