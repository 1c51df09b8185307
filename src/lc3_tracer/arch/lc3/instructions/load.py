# src/lc3_tracer/arch/lc3/instructions/load.py
"""
ロード/ストア命令（LD, LDI, LDR, LEA, ST, STI, STR）の実装。
"""
from lc3_tracer.core.snapshot import Operation
from lc3_tracer.transport.console import Console
from lc3_tracer.transport.memory import Memory
from lc3_tracer.arch.lc3.isa import Opcode
from lc3_tracer.arch.lc3.state import Lc3CpuState
from .base import bits, sign_extend, add16, update_flags, fmt_reg, fmt_imm, fmt_addr

# @intent:utility_function PC相対形式（レジスタ[11:9], PCoffset9[8:0]）をデコードします。
# @intent:rationale 表示用の実効アドレスはインクリメント後のPC（address + 1）を基準に計算します。
def _decode_pc_relative(instruction: int, address: int, opcode: Opcode, reg_field: str) -> Operation:
    reg = bits(instruction, 11, 9)
    offset = sign_extend(bits(instruction, 8, 0), 9)
    target = add16(add16(address, 1), offset)
    return Operation(instruction, opcode, opcode.name, address,
                     [fmt_reg(reg), fmt_addr(target)], {reg_field: reg, "offset9": offset})

# @intent:utility_function ベース+オフセット形式（レジスタ[11:9], BaseR[8:6], offset6[5:0]）をデコードします。
def _decode_base_offset(instruction: int, address: int, opcode: Opcode, reg_field: str) -> Operation:
    reg = bits(instruction, 11, 9)
    base_r = bits(instruction, 8, 6)
    offset = sign_extend(bits(instruction, 5, 0), 6)
    return Operation(instruction, opcode, opcode.name, address,
                     [fmt_reg(reg), fmt_reg(base_r), fmt_imm(offset)],
                     {reg_field: reg, "base_r": base_r, "offset6": offset})

# --- LD ---
def decode_ld(instruction: int, address: int) -> Operation:
    return _decode_pc_relative(instruction, address, Opcode.LD, "dr")

# @intent:responsibility LD命令を実行し、PC相対アドレスの内容をDRにロードします。
def execute_ld(state: Lc3CpuState, memory: Memory, op: Operation, console: Console) -> None:
    dr = op.fields["dr"]
    state.set_reg(dr, memory.read(add16(state.pc, op.fields["offset9"])))
    update_flags(state, dr)

# --- LDI ---
def decode_ldi(instruction: int, address: int) -> Operation:
    return _decode_pc_relative(instruction, address, Opcode.LDI, "dr")

# @intent:responsibility LDI命令を実行します。PC相対アドレスのセルをポインタとして、その指す先の値をDRにロードします。
def execute_ldi(state: Lc3CpuState, memory: Memory, op: Operation, console: Console) -> None:
    dr = op.fields["dr"]
    pointer = memory.read(add16(state.pc, op.fields["offset9"]))
    state.set_reg(dr, memory.read(pointer))
    update_flags(state, dr)

# --- LDR ---
def decode_ldr(instruction: int, address: int) -> Operation:
    return _decode_base_offset(instruction, address, Opcode.LDR, "dr")

# @intent:responsibility LDR命令を実行し、BaseR + offset6の内容をDRにロードします。
def execute_ldr(state: Lc3CpuState, memory: Memory, op: Operation, console: Console) -> None:
    dr = op.fields["dr"]
    state.set_reg(dr, memory.read(add16(state.reg(op.fields["base_r"]), op.fields["offset6"])))
    update_flags(state, dr)

# --- LEA ---
def decode_lea(instruction: int, address: int) -> Operation:
    return _decode_pc_relative(instruction, address, Opcode.LEA, "dr")

# @intent:responsibility LEA命令を実行し、実効アドレスそのものをDRに格納します（メモリは読みません）。
def execute_lea(state: Lc3CpuState, memory: Memory, op: Operation, console: Console) -> None:
    dr = op.fields["dr"]
    state.set_reg(dr, add16(state.pc, op.fields["offset9"]))
    update_flags(state, dr)

# --- ST ---
def decode_st(instruction: int, address: int) -> Operation:
    return _decode_pc_relative(instruction, address, Opcode.ST, "sr")

# @intent:responsibility ST命令を実行し、SRをPC相対アドレスに格納します。フラグは変化しません。
def execute_st(state: Lc3CpuState, memory: Memory, op: Operation, console: Console) -> None:
    memory.write(add16(state.pc, op.fields["offset9"]), state.reg(op.fields["sr"]))

# --- STI ---
def decode_sti(instruction: int, address: int) -> Operation:
    return _decode_pc_relative(instruction, address, Opcode.STI, "sr")

# @intent:responsibility STI命令を実行し、PC相対アドレスのセルが指す先にSRを格納します。
def execute_sti(state: Lc3CpuState, memory: Memory, op: Operation, console: Console) -> None:
    pointer = memory.read(add16(state.pc, op.fields["offset9"]))
    memory.write(pointer, state.reg(op.fields["sr"]))

# --- STR ---
def decode_str(instruction: int, address: int) -> Operation:
    return _decode_base_offset(instruction, address, Opcode.STR, "sr")

# @intent:responsibility STR命令を実行し、SRをBaseR + offset6に格納します。
def execute_str(state: Lc3CpuState, memory: Memory, op: Operation, console: Console) -> None:
    memory.write(add16(state.reg(op.fields["base_r"]), op.fields["offset6"]), state.reg(op.fields["sr"]))
