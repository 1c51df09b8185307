import logging
import os
from typing import Optional, Tuple

from lc3_tracer.transport.memory import Memory
from lc3_tracer.transport.console import Console, ConsoleInput, ConsoleOutput
from lc3_tracer.arch.lc3.cpu import Lc3Cpu
from lc3_tracer.arch.lc3.state import Register
from lc3_tracer.loader.loader import load_image, SymbolFileLoader
from .models import SystemConfig

logger = logging.getLogger(__name__)

# @intent:responsibility システム構成（Config）に基づいて、Memory、Console、CPUを生成・接続し、初期状態を適用します。
class SystemBuilder:
    def build_system(self, config: SystemConfig,
                     console_input: Optional[ConsoleInput] = None,
                     console_output: Optional[ConsoleOutput] = None) -> Tuple[Lc3Cpu, Memory]:
        if config.architecture.upper().replace("-", "") != "LC3":
            raise ValueError(f"Unsupported architecture: {config.architecture}")

        memory = Memory()
        symbol_map = {}
        for program in config.programs:
            if program.path:
                load_image(self._resolve(config, program.path), memory)
            else:
                memory.load_block(program.words, program.origin)
                logger.info("Loaded %d inline words at x%04X", len(program.words), program.origin)
            if program.symbols:
                symbol_map.update(SymbolFileLoader().load_symbol_file(self._resolve(config, program.symbols)))

        console = Console(in_prompt=config.console.in_prompt, halt_message=config.console.halt_message)
        if console_input is not None:
            console.input = console_input
        if console_output is not None:
            console.output = console_output

        cpu = Lc3Cpu(memory, console)
        cpu.set_symbol_map(symbol_map)

        # 初期状態の適用
        state = cpu.get_state()
        state.pc = config.initial_state.pc
        for name, value in config.initial_state.registers.items():
            try:
                register = Register[name]
            except KeyError:
                raise ValueError(f"Unknown register in initial state: {name}") from None
            if register is Register.COND:
                state.cond = value
            else:
                state[register] = value

        return cpu, memory

    def _resolve(self, config: SystemConfig, path: str) -> str:
        if os.path.isabs(path) or not config.base_dir:
            return path
        return os.path.join(config.base_dir, path)
