# lc3_tracer/core/outcome.py
"""
ランの結果を表す値オブジェクト。
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from lc3_tracer.core.errors import ExecutionError


class RunStatus(Enum):
    HALTED = "HALTED"
    FATAL = "FATAL"
    STOPPED = "STOPPED" # ステップ上限・ブレークポイント・stop()による中断


# @intent:responsibility run()の結果を呼び出し元に返します。
# @intent:rationale 不正なオペコードやトラップはプロセスを落とさず、FATALの結果値として伝播させます。
@dataclass(frozen=True)
class RunOutcome:
    status: RunStatus
    steps: int = 0
    reason: Optional[str] = None
    error: Optional[ExecutionError] = None

    @classmethod
    def halted(cls, steps: int) -> "RunOutcome":
        return cls(RunStatus.HALTED, steps)

    @classmethod
    def fatal(cls, error: ExecutionError, steps: int) -> "RunOutcome":
        return cls(RunStatus.FATAL, steps, reason=error.describe(), error=error)

    @classmethod
    def stopped(cls, steps: int, reason: str) -> "RunOutcome":
        return cls(RunStatus.STOPPED, steps, reason=reason)

    @property
    def is_halted(self) -> bool:
        return self.status is RunStatus.HALTED

    @property
    def is_fatal(self) -> bool:
        return self.status is RunStatus.FATAL
