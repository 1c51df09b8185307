# src/lc3_tracer/arch/lc3/instructions/maps.py
"""
オペコードと命令実装のマッピング定義。
"""
from lc3_tracer.arch.lc3.isa import Opcode
from . import load
from . import alu
from . import control
from . import trap

# @intent:map オペコードからデコード関数へのマッピングテーブル。16個全てのオペコードを網羅します。
DECODE_MAP = {
    # Load/Store
    Opcode.LD: load.decode_ld,
    Opcode.LDI: load.decode_ldi,
    Opcode.LDR: load.decode_ldr,
    Opcode.LEA: load.decode_lea,
    Opcode.ST: load.decode_st,
    Opcode.STI: load.decode_sti,
    Opcode.STR: load.decode_str,

    # ALU
    Opcode.ADD: alu.decode_add,
    Opcode.AND: alu.decode_and,
    Opcode.NOT: alu.decode_not,

    # Control
    Opcode.BR: control.decode_br,
    Opcode.JMP: control.decode_jmp,
    Opcode.JSR: control.decode_jsr,
    Opcode.RTI: control.decode_rti,
    Opcode.RES: control.decode_res,

    # Trap
    Opcode.TRAP: trap.decode_trap,
}

# @intent:map オペコードから実行関数へのマッピングテーブル。
# @intent:rationale RTIとRESはデコードで必ず失敗するため、実行関数を持ちません。
EXECUTE_MAP = {
    # Load/Store
    Opcode.LD: load.execute_ld,
    Opcode.LDI: load.execute_ldi,
    Opcode.LDR: load.execute_ldr,
    Opcode.LEA: load.execute_lea,
    Opcode.ST: load.execute_st,
    Opcode.STI: load.execute_sti,
    Opcode.STR: load.execute_str,

    # ALU
    Opcode.ADD: alu.execute_add,
    Opcode.AND: alu.execute_and,
    Opcode.NOT: alu.execute_not,

    # Control
    Opcode.BR: control.execute_br,
    Opcode.JMP: control.execute_jmp,
    Opcode.JSR: control.execute_jsr,

    # Trap
    Opcode.TRAP: trap.execute_trap,
}
