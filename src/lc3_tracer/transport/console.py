# lc3_tracer/transport/console.py
"""
Transport Layer (コンソール入出力)

トラップのサービスルーチンが使用する、バイト入力元と文字出力先の抽象インターフェースを定義します。
コアは具体的な端末を知らず、注入されたConsoleを通してのみ入出力を行います。
"""
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from typing import BinaryIO, Deque, List, TextIO, Union

# @intent:constant INトラップのプロンプトとHALTトラップの通知メッセージの既定値。
DEFAULT_IN_PROMPT = "Enter a character: "
DEFAULT_HALT_MESSAGE = "HALT\n"

# @intent:responsibility 1バイト単位の入力元を定義します。
class ConsoleInput(ABC):
    """
    GETC/INトラップが読み込む生バイトの入力元。
    """
    # @intent:responsibility 1バイトを読み込みます。入力が尽きた場合はEOFErrorを発生させます。
    @abstractmethod
    def read_byte(self) -> int:
        pass

    # @intent:responsibility ブロックせずに読み込めるバイトがあるかどうかを返します。
    # @intent:rationale ブロッキングストリームは常に読み込み可能とみなします。UIはこれを見てステップを保留します。
    def has_pending(self) -> bool:
        return True

# @intent:responsibility 文字列の出力先を定義します。
class ConsoleOutput(ABC):
    @abstractmethod
    def write(self, text: str) -> None:
        pass

    def flush(self) -> None:
        # Intentional: バッファを持たない出力先では何もしない
        pass

# @intent:responsibility バイナリストリーム（例: sys.stdin.buffer）からの入力を提供します。
class StreamConsoleInput(ConsoleInput):
    def __init__(self, stream: BinaryIO):
        self._stream = stream

    def read_byte(self) -> int:
        data = self._stream.read(1)
        if not data:
            raise EOFError("Console input stream is exhausted.")
        return data[0]

# @intent:responsibility テキストストリーム（例: sys.stdout）への出力を提供します。
class StreamConsoleOutput(ConsoleOutput):
    def __init__(self, stream: TextIO):
        self._stream = stream

    def write(self, text: str) -> None:
        self._stream.write(text)

    def flush(self) -> None:
        self._stream.flush()

# @intent:responsibility 事前に投入されたバイト列を順に返す入力元です。テストとUIで使用します。
class QueueConsoleInput(ConsoleInput):
    """
    feed()で投入されたバイトを先入れ先出しで返す入力元。
    キューが空のときの読み込みはブロックせず、EOFErrorとなります。
    """
    def __init__(self, data: Union[bytes, str] = b""):
        self._queue: Deque[int] = deque()
        self.feed(data)

    def feed(self, data: Union[bytes, str]) -> None:
        if isinstance(data, str):
            data = data.encode("latin-1")
        self._queue.extend(data)

    def read_byte(self) -> int:
        if not self._queue:
            raise EOFError("No console input is queued.")
        return self._queue.popleft()

    def has_pending(self) -> bool:
        return bool(self._queue)

# @intent:responsibility 出力を内部に蓄積する出力先です。テストで出力を検証するために使用します。
class BufferedConsoleOutput(ConsoleOutput):
    def __init__(self):
        self._parts: List[str] = []

    def write(self, text: str) -> None:
        self._parts.append(text)

    def getvalue(self) -> str:
        return "".join(self._parts)

    def clear(self) -> None:
        self._parts.clear()

# @intent:responsibility トラップルーチンに注入される入出力の組と、その表示文言をまとめます。
@dataclass
class Console:
    input: ConsoleInput = field(default_factory=QueueConsoleInput)
    output: ConsoleOutput = field(default_factory=BufferedConsoleOutput)
    in_prompt: str = DEFAULT_IN_PROMPT
    halt_message: str = DEFAULT_HALT_MESSAGE
