# src/lc3_tracer/ui/flag_view.py
"""
条件コード（COND）の表示。N/Z/Pのうち立っている1つだけを点灯させます。
"""
from typing import Dict, Optional
from PySide6.QtWidgets import QWidget, QHBoxLayout, QLabel
from PySide6.QtCore import Qt

from lc3_tracer.core.cpu import AbstractCpu

ON_STYLE = "background-color: #2A82DA; color: #000000; font-weight: bold; border-radius: 3px;"
OFF_STYLE = "background-color: #1E1E1E; color: #555555; border-radius: 3px;"

class FlagView(QWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        self._layout = QHBoxLayout(self)
        self._layout.setContentsMargins(10, 10, 10, 10)
        self._indicators: Dict[str, QLabel] = {}
        self._cpu: Optional[AbstractCpu] = None

    # @intent:responsibility CPUのフラグ名ごとにインジケータを作成します。
    def set_cpu(self, cpu: AbstractCpu) -> None:
        self._cpu = cpu
        if not self._indicators:
            for name in cpu.get_flag_state():
                indicator = QLabel(name)
                indicator.setAlignment(Qt.AlignCenter)
                indicator.setFixedSize(28, 22)
                self._layout.addWidget(indicator)
                self._indicators[name] = indicator
            self._layout.addStretch(1)
        self.update_flags()

    def update_flags(self):
        if not self._cpu:
            return
        for name, is_set in self._cpu.get_flag_state().items():
            self._indicators[name].setStyleSheet(ON_STYLE if is_set else OFF_STYLE)
