# src/lc3_tracer/arch/lc3/instructions/alu.py
"""
算術論理演算命令（ADD, AND, NOT）の実装。
"""
from lc3_tracer.core.snapshot import Operation
from lc3_tracer.transport.console import Console
from lc3_tracer.transport.memory import Memory
from lc3_tracer.arch.lc3.isa import Opcode
from lc3_tracer.arch.lc3.state import Lc3CpuState
from .base import bits, sign_extend, add16, update_flags, fmt_reg, fmt_imm

# @intent:utility_function ADD/ANDで共通のフィールド配置（DR, SR1, mode, SR2 または imm5）をデコードします。
def _decode_binary(instruction: int, address: int, opcode: Opcode) -> Operation:
    dr = bits(instruction, 11, 9)
    sr1 = bits(instruction, 8, 6)
    if bits(instruction, 5, 5):
        imm5 = sign_extend(bits(instruction, 4, 0), 5)
        return Operation(instruction, opcode, opcode.name, address,
                         [fmt_reg(dr), fmt_reg(sr1), fmt_imm(imm5)],
                         {"dr": dr, "sr1": sr1, "imm5": imm5})
    sr2 = bits(instruction, 2, 0)
    return Operation(instruction, opcode, opcode.name, address,
                     [fmt_reg(dr), fmt_reg(sr1), fmt_reg(sr2)],
                     {"dr": dr, "sr1": sr1, "sr2": sr2})

# @intent:utility_function 第2オペランド（レジスタSR2または符号拡張済みimm5）の値を返します。
def _second_operand(state: Lc3CpuState, op: Operation) -> int:
    if "imm5" in op.fields:
        return op.fields["imm5"]
    return state.reg(op.fields["sr2"])

# --- ADD ---
# @intent:responsibility ADD命令をデコードします。
def decode_add(instruction: int, address: int) -> Operation:
    return _decode_binary(instruction, address, Opcode.ADD)

# @intent:responsibility ADD命令を実行し、結果をDRに格納し、フラグを更新します。
def execute_add(state: Lc3CpuState, memory: Memory, op: Operation, console: Console) -> None:
    dr = op.fields["dr"]
    state.set_reg(dr, add16(state.reg(op.fields["sr1"]), _second_operand(state, op)))
    update_flags(state, dr)

# --- AND ---
# @intent:responsibility AND命令をデコードします。
def decode_and(instruction: int, address: int) -> Operation:
    return _decode_binary(instruction, address, Opcode.AND)

# @intent:responsibility AND命令を実行し、結果をDRに格納し、フラグを更新します。
def execute_and(state: Lc3CpuState, memory: Memory, op: Operation, console: Console) -> None:
    dr = op.fields["dr"]
    state.set_reg(dr, state.reg(op.fields["sr1"]) & _second_operand(state, op))
    update_flags(state, dr)

# --- NOT ---
# @intent:responsibility NOT命令をデコードします。下位6ビット（本来は全て1）は検査しません。
def decode_not(instruction: int, address: int) -> Operation:
    dr = bits(instruction, 11, 9)
    sr = bits(instruction, 8, 6)
    return Operation(instruction, Opcode.NOT, "NOT", address,
                     [fmt_reg(dr), fmt_reg(sr)], {"dr": dr, "sr": sr})

# @intent:responsibility NOT命令を実行し、SRのビット反転をDRに格納し、フラグを更新します。
def execute_not(state: Lc3CpuState, memory: Memory, op: Operation, console: Console) -> None:
    dr = op.fields["dr"]
    state.set_reg(dr, ~state.reg(op.fields["sr"]) & 0xFFFF)
    update_flags(state, dr)
