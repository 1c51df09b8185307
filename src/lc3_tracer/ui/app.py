# src/lc3_tracer/ui/app.py
"""
GUIアプリケーションのエントリポイント。
アプリケーションを初期化し、メインウィンドウを起動します。
"""
import sys
from typing import Optional

from PySide6.QtWidgets import QApplication
from .main_window import MainWindow

# @intent:responsibility アプリケーションを起動し、ウィンドウが閉じられたら終了コードを返します。
def main(config_path: Optional[str] = None) -> int:
    app = QApplication.instance() or QApplication(sys.argv)
    main_win = MainWindow(config_path)
    main_win.show()
    return app.exec()

if __name__ == '__main__':
    sys.exit(main())
