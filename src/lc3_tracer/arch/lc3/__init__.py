# src/lc3_tracer/arch/lc3/__init__.py
"""
LC-3 アーキテクチャ実装と、ランのエントリポイント。
"""
from typing import Optional

from lc3_tracer.core.outcome import RunOutcome
from lc3_tracer.transport.console import (
    Console, ConsoleInput, ConsoleOutput, DEFAULT_IN_PROMPT, DEFAULT_HALT_MESSAGE,
)
from lc3_tracer.transport.memory import Memory
from .cpu import Lc3Cpu

# @intent:responsibility ロード済みのメモリに対してCPUを生成し、HALTまたは致命的エラーまで実行します。
# @intent:rationale ホストはメモリを所有したまま渡し、実行後にその内容を検査できます。
def run(memory: Memory,
        console_input: Optional[ConsoleInput] = None,
        console_output: Optional[ConsoleOutput] = None,
        max_steps: Optional[int] = None,
        in_prompt: str = DEFAULT_IN_PROMPT,
        halt_message: str = DEFAULT_HALT_MESSAGE) -> RunOutcome:
    console = Console(in_prompt=in_prompt, halt_message=halt_message)
    if console_input is not None:
        console.input = console_input
    if console_output is not None:
        console.output = console_output
    return Lc3Cpu(memory, console).run(max_steps)

__all__ = ["Lc3Cpu", "run"]
