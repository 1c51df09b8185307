# lc3_tracer/core/snapshot.py
"""
実行状態の不変スナップショット

このモジュールは、1命令サイクル後のCPUとメモリアクセスの状態を記録した不変のデータ構造を定義します。
UIへの情報提供と、デバッグ時の状態記録に用いる責務を負います。
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from lc3_tracer.core.state import CpuState
from lc3_tracer.transport.memory import MemoryAccess


# @intent:responsibility デコードされた命令の詳細を記録します。
@dataclass(frozen=True) # 不変データ構造
class Operation:
    """
    デコードされた命令（命令語、ニーモニック、オペランド、フィールド値）を記録するデータクラス。
    fieldsには符号拡張済みのオフセット/即値とレジスタ番号が格納され、実行関数はこれだけを参照します。
    """
    instruction: int # 16bit 命令語
    opcode: int # 上位4ビット
    mnemonic: str # 例: "ADD"
    address: int = 0 # 命令自身のアドレス
    operands: List[str] = field(default_factory=list) # 例: ["R0", "R0", "#5"]
    fields: Dict[str, int] = field(default_factory=dict) # 例: {"dr": 0, "sr1": 0, "imm5": 5}
    length: int = 1 # 命令のワード長

    # @intent:responsibility トレース表示用の1行表現を返します。
    @property
    def text(self) -> str:
        if self.operands:
            return f"{self.mnemonic} " + ", ".join(self.operands)
        return self.mnemonic

# @intent:responsibility 実行に関するメタデータを記録します。
@dataclass(frozen=True) # 不変データ構造
class Metadata:
    step_count: int
    symbol_info: Optional[str] = None # 例: "LOOP: ADD R0, R0, #1"

# @intent:responsibility ある一時点におけるCPUとメモリアクセスの状態を不変に記録します。
@dataclass(frozen=True) # 不変データ構造
class Snapshot:
    """
    1命令実行直後のCPU状態（コピー）と、そのサイクルで発生したメモリアクセスの記録。
    """
    state: CpuState
    operation: Operation
    metadata: Metadata
    memory_activity: List[MemoryAccess] = field(default_factory=list)
