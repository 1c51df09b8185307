# src/lc3_tracer/arch/lc3/isa.py
"""
LC-3 命令セットの定数定義（オペコードとトラップベクタ）。
"""
from enum import IntEnum

# @intent:constant ユーザープログラムの開始アドレス。リセット時のPCの値です。
PC_START = 0x3000

# @intent:responsibility 命令語の上位4ビットで選択される16個のオペコードを定義します。
class Opcode(IntEnum):
    BR = 0b0000
    ADD = 0b0001
    LD = 0b0010
    ST = 0b0011
    JSR = 0b0100
    AND = 0b0101
    LDR = 0b0110
    STR = 0b0111
    RTI = 0b1000
    NOT = 0b1001
    LDI = 0b1010
    STI = 0b1011
    JMP = 0b1100
    RES = 0b1101
    LEA = 0b1110
    TRAP = 0b1111

# @intent:responsibility TRAP命令の下位8ビットで選択されるサービスルーチンを定義します。
class TrapVector(IntEnum):
    GETC = 0x20
    OUT = 0x21
    PUTS = 0x22
    IN = 0x23
    PUTSP = 0x24
    HALT = 0x25

# @intent:utility_function 命令語からオペコードを取り出します。16ビットの全ての値について定義されています。
def opcode_of(instruction: int) -> Opcode:
    return Opcode((instruction >> 12) & 0xF)
