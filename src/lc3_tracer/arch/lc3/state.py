# src/lc3_tracer/arch/lc3/state.py
"""
LC-3 CPU固有の状態定義。
"""
from dataclasses import dataclass
from enum import IntEnum, IntFlag
from typing import ClassVar, Union

from lc3_tracer.core.state import CpuState
from lc3_tracer.arch.lc3.isa import PC_START

# @intent:responsibility レジスタファイルの10スロットを名前で識別します。
class Register(IntEnum):
    R0 = 0
    R1 = 1
    R2 = 2
    R3 = 3
    R4 = 4
    R5 = 5
    R6 = 6
    R7 = 7 # サブルーチンの戻りアドレス
    PC = 8
    COND = 9

# LC-3 条件フラグ ビットマスク
# @intent:constant CONDレジスタは常にこの3値のうちちょうど1つを保持します。
# @intent:rationale BRはnzpマスクとのビットANDで判定するため、数値コードではなく独立したビットとして定義します。
class ConditionFlag(IntFlag):
    POS = 0b001
    ZRO = 0b010
    NEG = 0b100

GENERAL_REGISTER_COUNT = 8

# @intent:responsibility LC-3 CPUのレジスタファイル（R0-R7, PC, COND）を保持します。
# @intent:rationale 固定長のリスト1本に対し、記号アクセス（Register.PC等）と数値アクセス（オペランドフィールド0-7）の2経路を提供します。
@dataclass
class Lc3CpuState(CpuState):
    """
    LC-3 CPUのレジスタ状態を保持するデータクラス。
    引数なしで生成した場合、アーキテクチャのリセット状態（PC=x3000, COND=Z）になります。
    """
    REGISTER_COUNT: ClassVar[int] = len(Register)
    PC_SLOT: ClassVar[int] = Register.PC

    def __post_init__(self):
        is_reset_state = not self.registers
        super().__post_init__()
        if is_reset_state:
            self.registers[Register.PC] = PC_START
            self.registers[Register.COND] = int(ConditionFlag.ZRO)

    # @intent:accessor 記号によるアクセス。Register列挙子（またはそのint値）でスロットを選択します。
    def __getitem__(self, register: Union[Register, int]) -> int:
        return self.registers[Register(register)]

    def __setitem__(self, register: Union[Register, int], value: int) -> None:
        self.registers[Register(register)] = int(value) & 0xFFFF

    # @intent:accessor 数値によるアクセス。命令のオペランドフィールドで選択される汎用レジスタ0-7のみを対象とします。
    def reg(self, index: int) -> int:
        if not 0 <= index < GENERAL_REGISTER_COUNT:
            raise IndexError(f"General register index {index} out of range.")
        return self.registers[index]

    def set_reg(self, index: int, value: int) -> None:
        if not 0 <= index < GENERAL_REGISTER_COUNT:
            raise IndexError(f"General register index {index} out of range.")
        self.registers[index] = value & 0xFFFF

    @property
    def cond(self) -> int:
        return self.registers[Register.COND]

    @cond.setter
    def cond(self, value: int) -> None:
        if value not in (ConditionFlag.POS, ConditionFlag.ZRO, ConditionFlag.NEG):
            raise ValueError(f"COND must hold exactly one of N, Z, P; got {value:#05b}.")
        self.registers[Register.COND] = int(value)

    # @intent:accessor 条件フラグの各ビットを読み取り専用プロパティとして提供します。
    # @intent:rationale フラグは導出値であり、個別に設定できないためsetterは持ちません。

    @property
    def flag_n(self) -> bool:
        return (self.cond & ConditionFlag.NEG) != 0

    @property
    def flag_z(self) -> bool:
        return (self.cond & ConditionFlag.ZRO) != 0

    @property
    def flag_p(self) -> bool:
        return (self.cond & ConditionFlag.POS) != 0
