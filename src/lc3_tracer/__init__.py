"""
LC-3 Core Tracer

16ビット教育用アーキテクチャLC-3のエミュレータ。命令サイクル（フェッチ→デコード→実行）を
1命令ずつ観測できる形で提供します。
"""
from lc3_tracer.arch.lc3 import Lc3Cpu, run
from lc3_tracer.core.outcome import RunOutcome, RunStatus
from lc3_tracer.transport.memory import Memory

__version__ = "0.1.0"

__all__ = ["Lc3Cpu", "Memory", "RunOutcome", "RunStatus", "run"]
