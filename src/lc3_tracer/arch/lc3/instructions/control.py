# src/lc3_tracer/arch/lc3/instructions/control.py
"""
制御命令（分岐、ジャンプ、サブルーチン）と不正オペコードの実装。
"""
from lc3_tracer.core.errors import IllegalOpcodeError
from lc3_tracer.core.snapshot import Operation
from lc3_tracer.transport.console import Console
from lc3_tracer.transport.memory import Memory
from lc3_tracer.arch.lc3.isa import Opcode
from lc3_tracer.arch.lc3.state import Lc3CpuState, Register
from .base import bits, sign_extend, add16, fmt_reg, fmt_addr

# --- BR ---
# @intent:responsibility BR命令をデコードします。ニーモニックにはnzpマスクを付加します（例: BRnz）。
def decode_br(instruction: int, address: int) -> Operation:
    mask = bits(instruction, 11, 9)
    offset = sign_extend(bits(instruction, 8, 0), 9)
    target = add16(add16(address, 1), offset)
    suffix = "".join(flag for flag, bit in (("n", 0b100), ("z", 0b010), ("p", 0b001)) if mask & bit)
    # nzp=000 の分岐は決して成立しない
    mnemonic = f"BR{suffix}" if mask else "NOP"
    return Operation(instruction, Opcode.BR, mnemonic, address,
                     [fmt_addr(target)], {"cond": mask, "offset9": offset})

# @intent:responsibility BR命令を実行します。nzpマスクとCONDのビットANDが非0のとき分岐します。
def execute_br(state: Lc3CpuState, memory: Memory, op: Operation, console: Console) -> None:
    if op.fields["cond"] & state.cond:
        state.pc = add16(state.pc, op.fields["offset9"])

# --- JMP / RET ---
def decode_jmp(instruction: int, address: int) -> Operation:
    base_r = bits(instruction, 8, 6)
    if base_r == Register.R7:
        return Operation(instruction, Opcode.JMP, "RET", address, [], {"base_r": base_r})
    return Operation(instruction, Opcode.JMP, "JMP", address, [fmt_reg(base_r)], {"base_r": base_r})

# @intent:responsibility JMP命令を実行し、PCにBaseRの値を設定します。RETはBaseR=R7の特殊形です。
def execute_jmp(state: Lc3CpuState, memory: Memory, op: Operation, console: Console) -> None:
    state.pc = state.reg(op.fields["base_r"])

# --- JSR / JSRR ---
def decode_jsr(instruction: int, address: int) -> Operation:
    if bits(instruction, 11, 11):
        offset = sign_extend(bits(instruction, 10, 0), 11)
        target = add16(add16(address, 1), offset)
        return Operation(instruction, Opcode.JSR, "JSR", address, [fmt_addr(target)], {"offset11": offset})
    base_r = bits(instruction, 8, 6)
    return Operation(instruction, Opcode.JSR, "JSRR", address, [fmt_reg(base_r)], {"base_r": base_r})

# @intent:responsibility JSR/JSRR命令を実行し、戻りアドレスをR7に保存してからジャンプします。
def execute_jsr(state: Lc3CpuState, memory: Memory, op: Operation, console: Console) -> None:
    # state.pcは既に次の命令を指している
    return_addr = state.pc
    if "offset11" in op.fields:
        target = add16(return_addr, op.fields["offset11"])
    else:
        # JSRR R7 の場合に備え、R7を書き換える前にBaseRを読む
        target = state.reg(op.fields["base_r"])
    state[Register.R7] = return_addr
    state.pc = target

# --- RTI / RES ---
# @intent:responsibility RTIはユーザーモードでは実行できないため、デコード時点で致命的エラーとします。
def decode_rti(instruction: int, address: int) -> Operation:
    raise IllegalOpcodeError("RTI is not permitted in user mode", instruction, address)

# @intent:responsibility 予約オペコードは未使用のため、デコード時点で致命的エラーとします。
def decode_res(instruction: int, address: int) -> Operation:
    raise IllegalOpcodeError("Reserved opcode", instruction, address)
