# lc3_tracer/core/cpu.py
"""
Core Layer (抽象CPU)

このモジュールは、CPUの基本的な状態管理と命令サイクルの駆動に関する抽象化を提供します。
具体的な命令の振る舞いはInstruction Layerに移譲されます。
"""
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from lc3_tracer.transport.memory import Memory
from lc3_tracer.core.snapshot import Snapshot, Operation, Metadata
from lc3_tracer.core.state import CpuState
from lc3_tracer.core.errors import ExecutionError, CpuHaltedError
from lc3_tracer.core.outcome import RunOutcome
from lc3_tracer.common.types import SymbolMap, RegisterLayoutInfo

logger = logging.getLogger(__name__)

# @intent:responsibility 抽象CPUの基本機能とインターフェースを定義します。
class AbstractCpu(ABC):
    """
    全てのCPUエミュレーションの基底となる抽象クラス。
    Memoryとのインターフェース、基本的な状態管理、命令サイクルの抽象化を提供します。
    """
    # @intent:responsibility CPUの状態とメモリへの参照を初期化します。
    # @intent:pre-condition `memory`は有効なMemoryオブジェクトである必要があります。CPUはこれを所有せず借用します。
    def __init__(self, memory: Memory):
        self._memory = memory
        self._state: CpuState = self._create_initial_state()
        self._step_count: int = 0
        self._symbol_map: SymbolMap = {}
        self._reverse_symbol_map: Dict[int, str] = {}
        # @intent:rationale Stateオブジェクトの直接操作を避けるため、protectedな命名規則を採用。
        #                  外部からのアクセスは`get_state()`メソッドを介して行う。

    # @intent:responsibility シンボルマップを設定します。
    def set_symbol_map(self, symbol_map: SymbolMap) -> None:
        """
        シンボルマップ（名前とアドレスの対応表）を設定します。
        """
        self._symbol_map = symbol_map
        # 逆引きマップを作成して、アドレスからラベルを素早く引けるようにする
        self._reverse_symbol_map = {addr: name for name, addr in symbol_map.items()}

    def get_symbol_map(self) -> SymbolMap:
        return self._symbol_map

    # @intent:responsibility 初期状態のCpuStateオブジェクトを生成します。
    # @intent:rationale 各CPUアーキテクチャで初期状態が異なるため、抽象メソッドとして定義します。
    @abstractmethod
    def _create_initial_state(self) -> CpuState:
        pass

    # @intent:responsibility CPUをリセットし、初期状態に戻します。メモリの内容は変更しません。
    def reset(self) -> None:
        self._state = self._create_initial_state()
        self._step_count = 0

    # @intent:responsibility 現在のCPUの状態を返します。
    def get_state(self) -> CpuState:
        return self._state

    # @intent:responsibility 外部（デバッガのステップバック等）から渡された状態を復元します。
    def restore_state(self, state: CpuState) -> None:
        self._state = state.copy()

    def get_memory(self) -> Memory:
        return self._memory

    @property
    def is_halted(self) -> bool:
        return self._state.halted

    @property
    def step_count(self) -> int:
        return self._step_count

    # @intent:responsibility 次の命令が入力待ちでブロックするかどうかを返します。
    # @intent:rationale UIなど非ブロッキングのホストがステップを保留するためのフックです。既定はFalse。
    def needs_input(self) -> bool:
        return False

    # @intent:responsibility 現在のPCからメモリの次の命令語をフェッチします。
    @abstractmethod
    def _fetch(self) -> int:
        """
        現在のPCから命令語を読み出して返します。PCの更新は_update_pcで行います。
        """
        pass

    # @intent:responsibility フェッチした命令語を解析し、Operationオブジェクトに変換します。
    # @intent:post-condition 実行できない命令の場合、状態を変更せずにExecutionErrorを発生させます。
    @abstractmethod
    def _decode(self, instruction: int) -> Operation:
        pass

    # @intent:responsibility デコードされた命令を実行し、CPUの状態を更新します。
    @abstractmethod
    def _execute(self, operation: Operation) -> None:
        pass

    # @intent:responsibility CPUを1命令サイクル進め、その結果のスナップショットを返します。
    # @intent:rationale Template Methodパターンを採用し、共通の実行フロー（ログクリア→フェッチ→デコード→PC更新→実行→Snapshot生成）を定義します。
    def step(self) -> Snapshot:
        """
        CPUを1命令サイクル進め、その時点でのCPUとメモリアクセスの状態を含むSnapshotオブジェクトを返します。
        致命的エラーの場合はExecutionErrorを送出し、そのサイクルの開始時点の状態を保ちます。
        """
        if self._state.halted:
            raise CpuHaltedError(f"CPU is halted at PC x{self._state.pc:04X}.")

        # 1. 前処理: 前サイクルまでの残存ログを破棄
        self._memory.get_and_clear_activity_log()
        initial_pc = self._state.pc

        # 2. フェッチ
        instruction = self._fetch()

        # 3. デコード
        operation = self._decode(instruction)

        # 4. PC更新 (Hook)
        # 相対オフセットはインクリメント後のPCに加算されるため、実行前にPCを進める
        self._update_pc(operation)

        # 5. 実行
        try:
            self._execute(operation)
        except ExecutionError:
            # 実行関数は失敗し得る処理を全て状態変更の前に行う。残る変更はPC更新のみ。
            self._state.pc = initial_pc
            raise

        # 6. 後処理 & Snapshot生成
        return self._create_snapshot(initial_pc, operation)

    # @intent:responsibility 命令実行前にPCを更新します。
    def _update_pc(self, operation: Operation) -> None:
        self._state.pc = (self._state.pc + operation.length) & 0xFFFF

    # @intent:responsibility スナップショットを生成します。
    def _create_snapshot(self, initial_pc: int, operation: Operation) -> Snapshot:
        memory_activity = self._memory.get_and_clear_activity_log()
        self._step_count += 1

        symbol_label = self._reverse_symbol_map.get(initial_pc, "")
        symbol_info = f"{symbol_label}: " if symbol_label else ""
        symbol_info += operation.text
        logger.debug("x%04X: %s", initial_pc, symbol_info)

        return Snapshot(
            state=self._state.copy(), # 後続の実行で書き換わらないようにコピーを渡す
            operation=operation,
            metadata=Metadata(step_count=self._step_count, symbol_info=symbol_info),
            memory_activity=memory_activity
        )

    # @intent:responsibility HALTまたは致命的エラーまで命令サイクルを繰り返します。
    # @intent:rationale 単一のブロッキング呼び出しです。max_stepsを指定するとその命令数で中断します。
    def run(self, max_steps: Optional[int] = None) -> RunOutcome:
        """
        命令サイクルを実行し続け、結果をRunOutcomeとして返します。
        ExecutionErrorは呼び出し元へ送出せず、FATALの結果に変換します。
        """
        steps = 0
        while not self._state.halted:
            if max_steps is not None and steps >= max_steps:
                logger.info("Stopped after %d instructions (step limit)", steps)
                return RunOutcome.stopped(steps, f"step limit of {max_steps} reached")
            try:
                self.step()
            except ExecutionError as e:
                logger.error("Fatal: %s", e.describe())
                return RunOutcome.fatal(e, steps)
            steps += 1
        logger.info("Halted after %d instructions", steps)
        return RunOutcome.halted(steps)

    @abstractmethod
    def get_register_map(self) -> Dict[str, int]:
        """
        現在のレジスタ値を辞書形式で返す。
        UIがCPUの内部構造を知らなくても値を表示できるようにするために使用される。
        """
        pass

    @abstractmethod
    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        """
        レジスタをUI上でどのように配置・グループ化すべきかの定義を返す。
        """
        pass

    @abstractmethod
    def get_flag_state(self) -> Dict[str, bool]:
        """
        現在の条件フラグの各ビットの状態を辞書形式で返す。
        """
        pass
