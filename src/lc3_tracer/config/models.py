from dataclasses import dataclass, field
from typing import Dict, List, Optional

from lc3_tracer.transport.console import DEFAULT_IN_PROMPT, DEFAULT_HALT_MESSAGE
from lc3_tracer.arch.lc3.isa import PC_START

@dataclass
class ProgramImage:
    path: Optional[str] = None # .obj / .hex ファイル
    origin: Optional[int] = None # インラインワードの配置先
    words: List[int] = field(default_factory=list)
    symbols: Optional[str] = None # .sym ファイル

@dataclass
class CpuInitialState:
    pc: int = PC_START
    registers: Dict[str, int] = field(default_factory=dict) # 例: {"R6": 0xFE00}

@dataclass
class ConsoleConfig:
    in_prompt: str = DEFAULT_IN_PROMPT
    halt_message: str = DEFAULT_HALT_MESSAGE

@dataclass
class RunConfig:
    max_steps: Optional[int] = None

@dataclass
class SystemConfig:
    architecture: str = "LC3"
    programs: List[ProgramImage] = field(default_factory=list)
    initial_state: CpuInitialState = field(default_factory=CpuInitialState)
    console: ConsoleConfig = field(default_factory=ConsoleConfig)
    run: RunConfig = field(default_factory=RunConfig)
    base_dir: str = "" # 相対パスの解決基準（設定ファイルのディレクトリ）
