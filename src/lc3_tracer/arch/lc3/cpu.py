# src/lc3_tracer/arch/lc3/cpu.py
"""
LC-3 CPUエミュレーションの中心モジュール。
"""
from typing import Dict, List, Optional

from lc3_tracer.core.snapshot import Operation
from lc3_tracer.common.types import RegisterLayoutInfo, RegisterInfo
from lc3_tracer.core.cpu import AbstractCpu
from lc3_tracer.transport.console import Console
from lc3_tracer.transport.memory import Memory
from lc3_tracer.arch.lc3.isa import Opcode, TrapVector, opcode_of
from lc3_tracer.arch.lc3.state import Lc3CpuState, Register
from lc3_tracer.arch.lc3.instructions import decode_instruction, execute_instruction

# @intent:responsibility LC-3 CPUの具体的なエミュレーションロジック（フェッチ、デコード、実行）を提供します。
class Lc3Cpu(AbstractCpu):
    """
    LC-3 CPUをエミュレートするクラス。
    トラップの入出力は注入されたConsoleを通して行われます。省略した場合は空の入力キューと
    バッファ出力が使われます。
    """
    # @intent:responsibility Lc3Cpuを初期化します。
    def __init__(self, memory: Memory, console: Optional[Console] = None):
        self._console = console if console is not None else Console()
        super().__init__(memory)

    # @intent:responsibility LC-3のリセット状態（PC=x3000, COND=Z）を生成します。
    def _create_initial_state(self) -> Lc3CpuState:
        return Lc3CpuState()

    def get_console(self) -> Console:
        return self._console

    # @intent:responsibility メモリから次の命令語をフェッチします。
    def _fetch(self) -> int:
        return self._memory.read(self._state.pc)

    # @intent:responsibility 命令語をデコードし、Operationオブジェクトを返します。
    def _decode(self, instruction: int) -> Operation:
        return decode_instruction(instruction, self._state.pc)

    # @intent:responsibility Operationを実行し、状態を更新します。
    def _execute(self, operation: Operation) -> None:
        execute_instruction(operation, self._state, self._memory, self._console)

    # @intent:responsibility 次の命令がGETC/INで、かつ入力が用意されていない場合にTrueを返します。
    def needs_input(self) -> bool:
        if self._state.halted:
            return False
        instruction = self._memory.peek(self._state.pc)
        if opcode_of(instruction) != Opcode.TRAP:
            return False
        if (instruction & 0xFF) not in (TrapVector.GETC, TrapVector.IN):
            return False
        return not self._console.input.has_pending()

    # @intent:responsibility UI表示用に、現在のレジスタ値を辞書形式で提供します。
    def get_register_map(self) -> Dict[str, int]:
        s = self._state
        return {register.name: s[register] for register in Register}

    # @intent:responsibility UIのレジスタ表示レイアウト（グループ化）を定義します。
    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        return [
            RegisterLayoutInfo("General", [
                RegisterInfo(f"R{i}", 16) for i in range(8)
            ]),
            RegisterLayoutInfo("Control", [
                RegisterInfo("PC", 16), RegisterInfo("COND", 3)
            ])
        ]

    # @intent:responsibility UI表示用に、現在のフラグ状態を辞書形式で提供します。
    def get_flag_state(self) -> Dict[str, bool]:
        s = self._state
        return {"N": s.flag_n, "Z": s.flag_z, "P": s.flag_p}
