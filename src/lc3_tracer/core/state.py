# lc3_tracer/core/state.py
"""
Core Layer (CPU状態)

このモジュールは、CPUの基本的な状態（レジスタファイルと実行状態）を保持するデータ構造を定義します。
"""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import ClassVar, List


# @intent:responsibility CPUの実行状態を表します。HALTEDは終端状態です。
class RunState(Enum):
    RUNNING = "RUNNING"
    HALTED = "HALTED"


# @intent:responsibility CPUのレジスタ状態を保持します。アーキテクチャ固有のレジスタはこれを拡張します。
@dataclass
class CpuState:
    """
    CPUのレジスタ状態を保持するデータクラス。
    レジスタは固定長のリスト1本で保持し、PCはそのうちの1スロットとして扱います。
    具体的なスロット数やPCの位置はアーキテクチャのサブクラスで定義されます。
    """
    REGISTER_COUNT: ClassVar[int] = 1
    PC_SLOT: ClassVar[int] = 0

    registers: List[int] = field(default_factory=list)
    run_state: RunState = RunState.RUNNING

    def __post_init__(self):
        if len(self.registers) > self.REGISTER_COUNT:
            raise ValueError(
                f"{type(self).__name__} holds {self.REGISTER_COUNT} registers, got {len(self.registers)}."
            )
        # 不足分は0で埋める
        self.registers = list(self.registers) + [0] * (self.REGISTER_COUNT - len(self.registers))

    @property
    def pc(self) -> int:
        return self.registers[self.PC_SLOT]

    @pc.setter
    def pc(self, value: int) -> None:
        self.registers[self.PC_SLOT] = value & 0xFFFF

    @property
    def halted(self) -> bool:
        return self.run_state is RunState.HALTED

    # @intent:responsibility レジスタリストを共有しない独立したコピーを返します。
    # @intent:rationale dataclasses.replaceだけではリストが共有されるため、Snapshotや履歴が後の実行で書き換わってしまいます。
    def copy(self) -> "CpuState":
        return replace(self, registers=list(self.registers))
