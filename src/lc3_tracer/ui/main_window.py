# src/lc3_tracer/ui/main_window.py
"""
メインウィンドウの実装。
アプリケーションの主要なUIコンポーネントを保持し、レイアウトを管理します。
"""
import logging
from typing import Optional

from PySide6.QtWidgets import (QMainWindow, QApplication, QDockWidget, QTabWidget, QToolBar, QLabel,
                               QFileDialog, QMessageBox)
from PySide6.QtGui import QPalette, QColor, QAction, QCloseEvent
from PySide6.QtCore import Qt, QThread, Signal, Slot

from lc3_tracer.config.loader import ConfigLoader
from lc3_tracer.config.builder import SystemBuilder
from lc3_tracer.config.models import SystemConfig, ProgramImage
from lc3_tracer.core.errors import ExecutionError, CpuHaltedError
from lc3_tracer.core.outcome import RunOutcome, RunStatus
from lc3_tracer.debugger.debugger import Debugger
from .register_view import RegisterView
from .flag_view import FlagView
from .memory_view import MemoryView
from .console_view import ConsoleView
from .fonts import get_monospace_font_family

logger = logging.getLogger(__name__)

# @intent:constant 入力待ちによる停止を表す理由文字列。Debugger.run()と一致させます。
WAITING_FOR_INPUT = "waiting for console input"

# @intent:responsibility デバッガのrunメソッドをバックグラウンドで実行します。
class DebuggerThread(QThread):
    """
    デバッガのrun()をノンブロッキングで実行するためのスレッド。
    """
    run_finished = Signal(object) # RunOutcome

    def __init__(self, debugger: Debugger):
        super().__init__()
        self.debugger = debugger

    def run(self):
        outcome = self.debugger.run()
        self.run_finished.emit(outcome)


# @intent:responsibility アプリケーションのメインウィンドウを定義し、UIの主要なコンポーネントを組み立てます。
class MainWindow(QMainWindow):
    def __init__(self, config_path: Optional[str] = None, parent=None):
        super(MainWindow, self).__init__(parent)
        self.setWindowTitle("LC-3 Tracer")
        self.setGeometry(100, 100, 1200, 800)
        self.setDockNestingEnabled(True)

        self.cpu = None
        self.memory = None
        self.debugger: Optional[Debugger] = None
        self.debugger_thread: Optional[DebuggerThread] = None
        self._config: Optional[SystemConfig] = None
        self._waiting_for_input = False

        self._set_dark_theme()
        self._create_toolbar()
        self._create_navigation_pane()
        self._create_status_inspector()
        self._create_menus()

        self.status_label = QLabel("Load an object file or a system config to begin.", self)
        self.status_label.setAlignment(Qt.AlignCenter)
        self.setCentralWidget(self.status_label)

        self.console_view.input_fed.connect(self._on_input_fed)

        if config_path:
            self._load_config_path(config_path)
        self._update_ui_state(False)

    # @intent:responsibility メニューバーを作成し、ファイル操作アクションを追加します。
    def _create_menus(self):
        file_menu = self.menuBar().addMenu("File")

        self.load_object_action = QAction("Load Object...", self)
        self.load_object_action.setShortcut("Ctrl+O")
        self.load_object_action.triggered.connect(self._load_object_file)
        file_menu.addAction(self.load_object_action)

        self.load_config_action = QAction("Load System Config...", self)
        self.load_config_action.triggered.connect(self._load_system_config)
        file_menu.addAction(self.load_config_action)

    # @intent:responsibility 実行制御用のツールバーを作成します。
    def _create_toolbar(self):
        toolbar = QToolBar("Main Toolbar")
        self.addToolBar(toolbar)

        self.run_action = QAction("Run", self)
        self.run_action.triggered.connect(self._run_debugger)
        toolbar.addAction(self.run_action)

        self.stop_action = QAction("Stop", self)
        self.stop_action.triggered.connect(self._stop_debugger)
        toolbar.addAction(self.stop_action)

        self.step_action = QAction("Step", self)
        self.step_action.triggered.connect(self._step_debugger)
        toolbar.addAction(self.step_action)

        self.step_back_action = QAction("Step Back", self)
        self.step_back_action.triggered.connect(self._step_back_debugger)
        toolbar.addAction(self.step_back_action)

        self.reset_action = QAction("Reset", self)
        self.reset_action.triggered.connect(self._reset_system)
        toolbar.addAction(self.reset_action)

    # @intent:responsibility 実行状態に応じてUIコンポーネントの有効/無効を切り替えます。
    def _update_ui_state(self, is_running: bool):
        loaded = self.debugger is not None
        halted = loaded and self.cpu.is_halted
        self.load_object_action.setEnabled(not is_running)
        self.load_config_action.setEnabled(not is_running)
        self.run_action.setEnabled(loaded and not is_running and not halted)
        self.step_action.setEnabled(loaded and not is_running and not halted)
        self.step_back_action.setEnabled(loaded and not is_running)
        self.reset_action.setEnabled(loaded and not is_running)
        self.stop_action.setEnabled(is_running)

    # @intent:responsibility 設定からシステムを構築し、デバッガとビューを接続し直します。
    def _build_from_config(self, config: SystemConfig):
        cpu, memory = SystemBuilder().build_system(
            config,
            console_input=self.console_view.console_input,
            console_output=self.console_view.console_output,
        )
        self._config = config
        self.cpu, self.memory = cpu, memory
        self.debugger = Debugger(self.cpu)
        self.debugger_thread = DebuggerThread(self.debugger)
        self.debugger_thread.run_finished.connect(self._on_run_finished)
        self._waiting_for_input = False

        self.register_view.set_cpu(self.cpu)
        self.flag_view.set_cpu(self.cpu)
        self.console_view.clear()
        self._refresh_views()
        self.status_label.setText(f"Ready at x{self.cpu.get_state().pc:04X}")

    # @intent:responsibility 現在のCPU状態に基づいて各ビューを更新します。
    def _refresh_views(self):
        if self.cpu is None:
            return
        pc = self.cpu.get_state().pc
        self.register_view.update_registers()
        self.flag_view.update_flags()
        self.memory_view.update_memory(self.memory, pc, highlight_address=pc)

    # @intent:responsibility デバッガの連続実行を開始します。
    @Slot()
    def _run_debugger(self):
        if self.debugger_thread is None or self.debugger_thread.isRunning():
            return
        self._waiting_for_input = False
        self._update_ui_state(True)
        self.status_label.setText("Running...")
        self.debugger_thread.start()

    @Slot()
    def _stop_debugger(self):
        self.status_label.setText("Stopping...")
        self.debugger.stop()

    # @intent:responsibility デバッガを1ステップ実行します。入力が必要な場合は実行せずに待機します。
    @Slot()
    def _step_debugger(self):
        if self.cpu.needs_input():
            self.status_label.setText("Waiting for console input")
            return
        try:
            snapshot = self.debugger.step_instruction()
        except ExecutionError as e:
            self.status_label.setText(f"Fatal: {e.describe()}")
        except CpuHaltedError:
            self.status_label.setText("Halted")
        else:
            self.status_label.setText(f"x{snapshot.operation.address:04X}: {snapshot.operation.text}")
        self._refresh_views()
        self._update_ui_state(False)

    @Slot()
    def _step_back_debugger(self):
        snapshot = self.debugger.step_back()
        if snapshot is None:
            self.status_label.setText("At initial state")
        else:
            self.status_label.setText(f"Back to x{snapshot.state.pc:04X}")
        self._refresh_views()
        self._update_ui_state(False)

    # @intent:responsibility 最後に読み込んだ設定から、システムを初期状態に戻します。
    @Slot()
    def _reset_system(self):
        if self._config is None:
            return
        try:
            self._build_from_config(self._config)
        except (OSError, ValueError) as e:
            QMessageBox.critical(self, "Error", f"Failed to reset: {e}")
        self._update_ui_state(False)

    # @intent:responsibility 連続実行の終了結果を表示します。入力待ちで止まった場合は入力後に再開します。
    @Slot(object)
    def _on_run_finished(self, outcome: RunOutcome):
        if outcome.status is RunStatus.HALTED:
            self.status_label.setText(f"Halted after {self.cpu.step_count} instructions")
        elif outcome.status is RunStatus.FATAL:
            self.status_label.setText(f"Fatal: {outcome.error.describe()}")
        else:
            self._waiting_for_input = outcome.reason == WAITING_FOR_INPUT
            self.status_label.setText(f"Stopped: {outcome.reason}")
        self._refresh_views()
        self._update_ui_state(False)

    @Slot()
    def _on_input_fed(self):
        if self._waiting_for_input:
            self._run_debugger()

    def _load_config_path(self, file_name: str):
        try:
            config = ConfigLoader().load_from_file(file_name)
            self._build_from_config(config)
        except (OSError, ValueError) as e:
            logger.error("Failed to load system config: %s", e)
            QMessageBox.critical(self, "Error", f"Failed to load system config: {e}")

    @Slot()
    def _load_object_file(self):
        file_name, _ = QFileDialog.getOpenFileName(
            self, "Open Object File", "", "LC-3 Images (*.obj *.hex);;All Files (*)")
        if not file_name:
            return
        try:
            self._build_from_config(SystemConfig(programs=[ProgramImage(path=file_name)]))
        except (OSError, ValueError) as e:
            QMessageBox.critical(self, "Error", f"Failed to load object file: {e}")
        self._update_ui_state(False)

    @Slot()
    def _load_system_config(self):
        file_name, _ = QFileDialog.getOpenFileName(
            self, "Open System Config", "", "YAML Files (*.yaml *.yml);;All Files (*)")
        if file_name:
            self._load_config_path(file_name)
            self._update_ui_state(False)

    # @intent:responsibility 左側のナビゲーションペイン（メモリとコンソール）を作成します。
    def _create_navigation_pane(self):
        nav_dock = QDockWidget("Navigation", self)
        nav_dock.setAllowedAreas(Qt.LeftDockWidgetArea)
        tab_widget = QTabWidget()
        self.memory_view = MemoryView()
        tab_widget.addTab(self.memory_view, "Memory")
        self.console_view = ConsoleView()
        tab_widget.addTab(self.console_view, "Console")
        nav_dock.setWidget(tab_widget)
        self.addDockWidget(Qt.LeftDockWidgetArea, nav_dock)

    # @intent:responsibility 右側のステータスインスペクタを作成します。
    def _create_status_inspector(self):
        status_dock = QDockWidget("Status Inspector", self)
        status_dock.setAllowedAreas(Qt.RightDockWidgetArea)
        tab_widget = QTabWidget()
        self.register_view = RegisterView()
        tab_widget.addTab(self.register_view, "Registers")
        self.flag_view = FlagView()
        tab_widget.addTab(self.flag_view, "Flags")
        status_dock.setWidget(tab_widget)
        self.addDockWidget(Qt.RightDockWidgetArea, status_dock)

    # @intent:responsibility アプリケーションにダークテーマのスタイルシートを適用します。
    def _set_dark_theme(self):
        dark_palette = QPalette()
        dark_palette.setColor(QPalette.Window, QColor(29, 29, 29))
        dark_palette.setColor(QPalette.WindowText, QColor(224, 224, 224))
        dark_palette.setColor(QPalette.Base, QColor(30, 30, 30))
        dark_palette.setColor(QPalette.AlternateBase, QColor(53, 53, 53))
        dark_palette.setColor(QPalette.Text, QColor(224, 224, 224))
        dark_palette.setColor(QPalette.Button, QColor(53, 53, 53))
        dark_palette.setColor(QPalette.ButtonText, QColor(224, 224, 224))
        dark_palette.setColor(QPalette.Highlight, QColor(42, 130, 218))
        dark_palette.setColor(QPalette.HighlightedText, QColor(0, 0, 0))
        QApplication.setPalette(dark_palette)

        font_family = get_monospace_font_family()
        self.setStyleSheet(f"""
            QWidget {{ font-family: '{font_family}', monospace; font-size: 10pt; }}
            QMainWindow, QToolBar {{ background-color: #1D1D1D; border: none; }}
            QDockWidget::title {{ text-align: left; background: #101010; padding: 4px; font-weight: bold; }}
            QTabWidget::pane {{ border-top: 2px solid #2A82DA; }}
            QTabBar::tab {{ background: #1E1E1E; padding: 8px 12px; min-width: 80px; }}
            QTabBar::tab:selected {{ background: #101010; border: 1px solid #2A82DA; border-bottom-color: #101010; }}
        """)

    # @intent:responsibility アプリケーション終了時に呼ばれ、バックグラウンドスレッドを安全に停止します。
    def closeEvent(self, event: QCloseEvent):
        if self.debugger_thread is not None and self.debugger_thread.isRunning():
            # 終了待ちの間にUI更新が走らないよう、シグナルを切断する
            self.debugger_thread.run_finished.disconnect(self._on_run_finished)
            self.debugger.stop()
            self.debugger_thread.wait()
        event.accept()
