# lc3_tracer/core/errors.py
"""
Core Layer (実行エラー)

命令サイクル中に発生する致命的エラーの型階層を定義します。
いずれのエラーもそのランにとって終端であり、命令サイクル内での回復は行いません。
"""
from typing import Optional


# @intent:responsibility 命令実行を継続できない致命的エラーの基底クラスです。
# @intent:rationale 診断のため、問題の命令語とそのアドレスを保持します。
class ExecutionError(Exception):
    """
    命令サイクルを中断させる致命的エラー。
    """
    def __init__(self, message: str, instruction: Optional[int] = None, address: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.instruction = instruction
        self.address = address

    # @intent:responsibility 命令語とPCを含む診断メッセージを生成します。
    def describe(self) -> str:
        """
        ログやRunOutcomeに載せる診断文字列を返します。
        """
        if self.instruction is None or self.address is None:
            return self.message
        return f"{self.message} (instruction 0x{self.instruction:04X} at x{self.address:04X})"


class IllegalOpcodeError(ExecutionError):
    """RTI/予約オペコードなど、実行できないオペコード。"""


class UnknownTrapError(ExecutionError):
    """未定義のトラップベクタ。"""


# @intent:responsibility コンソール入出力の失敗（入力の枯渇、ストリームのOSError）を表します。
class ConsoleIOError(ExecutionError):
    """コンソール入出力境界での失敗。値の代用はせず、ホストに判断を委ねます。"""


# @intent:responsibility HALT済みのCPUを更に進めようとした場合のエラーです。
# @intent:rationale これはプログラム側の誤りではなくホスト側の誤用なので、ExecutionErrorとは区別します。
class CpuHaltedError(RuntimeError):
    pass
