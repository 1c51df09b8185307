# src/lc3_tracer/arch/lc3/instructions/__init__.py
"""
LC-3命令セット実装パッケージ。
"""
from lc3_tracer.core.errors import IllegalOpcodeError
from lc3_tracer.core.snapshot import Operation
from lc3_tracer.transport.console import Console
from lc3_tracer.transport.memory import Memory
from lc3_tracer.arch.lc3.isa import Opcode, opcode_of
from lc3_tracer.arch.lc3.state import Lc3CpuState
from .maps import DECODE_MAP, EXECUTE_MAP

# @intent:responsibility LC-3の命令語をデコードします。
def decode_instruction(instruction: int, address: int) -> Operation:
    """
    命令語をデコードし、Operationオブジェクトを返します。
    addressは命令自身のアドレスで、PC相対の表示用アドレス計算に使用されます。
    """
    return DECODE_MAP[opcode_of(instruction)](instruction, address)

# @intent:responsibility デコードされたLC-3命令を実行します。
def execute_instruction(operation: Operation, state: Lc3CpuState, memory: Memory, console: Console) -> None:
    executor = EXECUTE_MAP.get(Opcode(operation.opcode))
    if executor is None:
        raise IllegalOpcodeError(f"No executor for {operation.mnemonic}", operation.instruction, operation.address)
    executor(state, memory, operation, console)
