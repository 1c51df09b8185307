# lc3_tracer/debugger/debugger.py
"""
デバッガモジュール。

コアエンジンの実行を1命令ずつ制御し、ユーザーが指定した条件（ブレークポイント）で
実行を中断させる責務を負います。命令サイクルを協調的に進められる形で提供するため、
ホスト側のタイムアウトや中断（stop()）もここで扱います。
"""
import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, Dict, List, Optional

from lc3_tracer.core.cpu import AbstractCpu
from lc3_tracer.core.errors import ExecutionError
from lc3_tracer.core.outcome import RunOutcome
from lc3_tracer.core.snapshot import Snapshot
from lc3_tracer.core.state import CpuState
from lc3_tracer.transport.memory import MemoryAccessType

logger = logging.getLogger(__name__)

# @intent:responsibility ブレークポイントの条件タイプを定義します。
class BreakpointConditionType(Enum):
    PC_MATCH = "PC_MATCH"               # プログラムカウンタが特定のアドレスに一致
    MEMORY_READ = "MEMORY_READ"         # 特定のアドレスが読み込まれた
    MEMORY_WRITE = "MEMORY_WRITE"       # 特定のアドレスに書き込まれた
    REGISTER_VALUE = "REGISTER_VALUE"   # 特定のレジスタが特定の値になった
    REGISTER_CHANGE = "REGISTER_CHANGE" # 特定のレジスタの値が変化した

# @intent:responsibility ブレークポイントをトリガーする条件を定義します。
@dataclass(frozen=True)
class BreakpointCondition:
    """
    ブレークポイントがヒットするための条件を定義するデータクラス。
    """
    condition_type: BreakpointConditionType
    value: Optional[int] = None           # PC_MATCH, REGISTER_VALUEで使用
    address: Optional[int] = None         # MEMORY_READ, MEMORY_WRITEで使用
    register_name: Optional[str] = None   # REGISTER_VALUE, REGISTER_CHANGEで使用（例: "R0", "PC"）
    enabled: bool = True                  # 有効/無効状態

    # @intent:rationale ブレークポイント条件は、一度設定したら変更されないため、不変にします（frozen=True）。

# @intent:responsibility コアエンジンの実行制御とブレークポイント管理を行います。
class Debugger:
    """
    CPUの実行を制御し、ブレークポイントの管理を行うクラス。
    """
    def __init__(self, cpu: AbstractCpu, history_limit: int = 10000):
        self._cpu = cpu
        self._breakpoints: List[BreakpointCondition] = []
        self._running: bool = False
        self._previous_registers: Dict[str, int] = self._cpu.get_register_map()
        self._last_snapshot: Optional[Snapshot] = None
        # @intent:responsibility 実行履歴を保持し、ステップバックをサポートします。上限を超えた古い履歴は破棄されます。
        self._history: Deque[Snapshot] = deque(maxlen=history_limit)
        # @intent:responsibility 履歴が尽きた時に戻る基準状態を保持します。履歴の上限で最古のスナップショットが破棄されると、その直後の状態に進みます。
        self._initial_state: CpuState = self._cpu.get_state().copy()

    def add_breakpoint(self, condition: BreakpointCondition) -> None:
        if condition not in self._breakpoints:
            self._breakpoints.append(condition)

    def update_breakpoint(self, old_condition: BreakpointCondition, new_condition: BreakpointCondition) -> None:
        if old_condition in self._breakpoints:
            idx = self._breakpoints.index(old_condition)
            self._breakpoints[idx] = new_condition

    def remove_breakpoint(self, condition: BreakpointCondition) -> None:
        if condition in self._breakpoints:
            self._breakpoints.remove(condition)

    def get_breakpoints(self) -> List[BreakpointCondition]:
        return list(self._breakpoints)

    def get_history(self) -> List[Snapshot]:
        return list(self._history)

    def get_last_snapshot(self) -> Optional[Snapshot]:
        return self._last_snapshot

    @property
    def is_running(self) -> bool:
        return self._running

    # @intent:responsibility 現在のPCに有効なPC_MATCHブレークポイントがあるか判定します。
    def _pc_breakpoint_hit(self, pc: int) -> bool:
        return any(bp.enabled and bp.condition_type == BreakpointConditionType.PC_MATCH and bp.value == pc
                   for bp in self._breakpoints)

    def _check_other_breakpoints(self, snapshot: Snapshot) -> bool:
        """
        Snapshotに基づいてPC_MATCH以外のブレークポイントをチェックします。
        """
        registers = self._cpu.get_register_map()

        for bp in self._breakpoints:
            if not bp.enabled:
                continue

            if bp.condition_type == BreakpointConditionType.MEMORY_READ:
                for access in snapshot.memory_activity:
                    if access.access_type == MemoryAccessType.READ and access.address == bp.address:
                        return True
            elif bp.condition_type == BreakpointConditionType.MEMORY_WRITE:
                for access in snapshot.memory_activity:
                    if access.access_type == MemoryAccessType.WRITE and access.address == bp.address:
                        return True
            elif bp.condition_type == BreakpointConditionType.REGISTER_VALUE:
                if bp.register_name in registers and registers[bp.register_name] == bp.value:
                    return True
            elif bp.condition_type == BreakpointConditionType.REGISTER_CHANGE:
                if bp.register_name in registers and bp.register_name in self._previous_registers:
                    if registers[bp.register_name] != self._previous_registers[bp.register_name]:
                        return True
        return False

    def step_instruction(self) -> Snapshot:
        """
        CPUを1命令分実行し、その結果のSnapshotを返します。
        ExecutionErrorはそのまま送出されます（CPUの状態はその命令の実行前のままです）。
        """
        self._previous_registers = self._cpu.get_register_map()
        snapshot = self._cpu.step()
        self._last_snapshot = snapshot
        if self._history and len(self._history) == self._history.maxlen:
            # 最古の履歴は取り消せなくなるため、その実行後の状態を基準にする
            self._initial_state = self._history[0].state.copy()
        self._history.append(snapshot)
        return snapshot

    def step_back(self) -> Optional[Snapshot]:
        """
        実行履歴を1つ戻り、CPUとメモリの状態を復元します。
        コンソールへの入出力は取り消されません。
        """
        if not self._history:
            return None

        # 1. 履歴から最新のスナップショットを取り出し、削除する
        snapshot_to_revert = self._history.pop()

        # 2. メモリ書き込みの取り消し (Undo)
        # アクセスログを逆順にスキャンし、書き込み操作があれば元の値をログなしで書き戻す
        memory = self._cpu.get_memory()
        for access in reversed(snapshot_to_revert.memory_activity):
            if access.access_type == MemoryAccessType.WRITE and access.previous_data is not None:
                memory.load(access.address, access.previous_data)

        # 3. CPU状態の復元
        if self._history:
            previous_snapshot = self._history[-1]
            self._cpu.restore_state(previous_snapshot.state)
            self._last_snapshot = previous_snapshot
            return previous_snapshot
        # 履歴が尽きた場合は基準状態に復元 (メモリは上の取り消しで同じ時点に戻っている)
        self._cpu.restore_state(self._initial_state)
        self._last_snapshot = None
        return None

    def run(self, max_steps: Optional[int] = None) -> RunOutcome:
        """
        CPUの実行を継続し、HALT・致命的エラー・ブレークポイント・stop()・入力待ち・ステップ上限のいずれかで戻ります。
        """
        self._running = True
        steps = 0
        first = True

        while self._running:
            if self._cpu.is_halted:
                self._running = False
                logger.info("Halted after %d instructions", steps)
                return RunOutcome.halted(steps)

            current_pc = self._cpu.get_state().pc
            # 再開直後は現在のPCのブレークポイントで止まらない
            if not first and self._pc_breakpoint_hit(current_pc):
                self._running = False
                logger.info("Breakpoint hit at PC: x%04X", current_pc)
                return RunOutcome.stopped(steps, f"breakpoint at x{current_pc:04X}")
            first = False

            if max_steps is not None and steps >= max_steps:
                self._running = False
                return RunOutcome.stopped(steps, f"step limit of {max_steps} reached")

            if self._cpu.needs_input():
                self._running = False
                return RunOutcome.stopped(steps, "waiting for console input")

            try:
                snapshot = self.step_instruction()
            except ExecutionError as e:
                self._running = False
                logger.error("Fatal: %s", e.describe())
                return RunOutcome.fatal(e, steps)
            steps += 1

            if self._check_other_breakpoints(snapshot):
                self._running = False
                logger.info("Breakpoint hit at PC: x%04X", snapshot.state.pc)
                return RunOutcome.stopped(steps, f"breakpoint after x{snapshot.operation.address:04X}")

        return RunOutcome.stopped(steps, "stopped")

    def stop(self) -> None:
        self._running = False
