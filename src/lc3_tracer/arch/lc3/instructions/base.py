# src/lc3_tracer/arch/lc3/instructions/base.py
"""
LC-3命令実装用の共通ユーティリティ。
"""
from lc3_tracer.arch.lc3.state import Lc3CpuState, ConditionFlag

# @intent:utility_function 命令語から[high:low]のビットフィールドを取り出します。
def bits(instruction: int, high: int, low: int) -> int:
    return (instruction >> low) & ((1 << (high - low + 1)) - 1)

# @intent:utility_function bit_count幅のフィールドを16ビットの2の補数へ符号拡張します。
# @intent:rationale 負の変位/即値を正しく扱うため、フィールド自身の最上位ビットを上位ビット全てに複製します。
def sign_extend(value: int, bit_count: int) -> int:
    """
    例: sign_extend(0b111111110, 9) == 0xFFFE (-2)
    """
    value &= (1 << bit_count) - 1
    if (value >> (bit_count - 1)) & 1:
        value |= (0xFFFF << bit_count)
    return value & 0xFFFF

# @intent:utility_function 16ビット値を符号付き整数として解釈します（表示用）。
def to_signed(value: int) -> int:
    return value - 0x10000 if value & 0x8000 else value

# @intent:utility_function 16ビットでの加算（アドレス計算とレジスタ演算で共通）。
def add16(a: int, b: int) -> int:
    return (a + b) & 0xFFFF

# @intent:utility_function 書き込まれたレジスタの値から条件フラグを導出します。
# @intent:post-condition CONDはN/Z/Pのうちちょうど1つを保持します。
def update_flags(state: Lc3CpuState, index: int) -> None:
    value = state.reg(index)
    if value == 0:
        state.cond = ConditionFlag.ZRO
    elif value >> 15:
        state.cond = ConditionFlag.NEG
    else:
        state.cond = ConditionFlag.POS

# --- オペランド表示 ---

def fmt_reg(index: int) -> str:
    return f"R{index}"

def fmt_imm(value: int) -> str:
    return f"#{to_signed(value)}"

def fmt_addr(address: int) -> str:
    return f"x{address:04X}"
