# lc3_tracer/transport/memory.py
"""
Transport Layer (ワードアドレスのメモリ)

このモジュールは、16ビットワード単位でアドレスされるフラットな64Kワードのメモリ空間を提供し、
CPUからの読み書きアクセスを記録する責務を負います。
"""
from array import array
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

# @intent:constant アドレス空間のワード数（16ビットアドレス）。
MEMORY_SIZE = 1 << 16
WORD_MASK = 0xFFFF

# @intent:responsibility メモリアクセスを記録するためのタイプを定義します。
class MemoryAccessType(Enum):
    READ = "READ"
    WRITE = "WRITE"

# @intent:responsibility 個々のメモリアクセス操作を記録します。
@dataclass(frozen=True) # 不変データ構造
class MemoryAccess:
    """
    メモリ上で行われた単一のアクセス（読み込みまたは書き込み）を記録するデータクラス。
    書き込みの場合、previous_dataに上書き前の値を保持し、デバッガのステップバックに使用します。
    """
    address: int
    data: int # 16bit value
    access_type: MemoryAccessType
    previous_data: Optional[int] = None

# @intent:responsibility 64Kワードのメモリ空間を管理し、全てのアクセスを記録します。
# @intent:rationale メモリはエミュレーションセッションが所有し、CPUはランの間だけ借用します。
#                  これによりロード前の初期化と実行後の検査が可能になります。
class Memory:
    """
    65536個の独立した16ビットセルからなるメモリ。全セルは0で初期化されます。
    """
    def __init__(self):
        self._cells = array("H", [0]) * MEMORY_SIZE
        self._activity_log: List[MemoryAccess] = []

    # @intent:pre-condition アドレスは0..0xFFFFである必要があります。CPUは常にアドレスを16ビットに丸めてから渡します。
    def _check_address(self, address: int) -> None:
        if not 0 <= address < MEMORY_SIZE:
            raise IndexError(f"Address {address} out of bounds for memory of size {MEMORY_SIZE}.")

    def _check_value(self, value: int) -> None:
        if not 0 <= value <= WORD_MASK:
            raise ValueError(f"Data {value} is not a 16-bit value.")

    # @intent:responsibility 記録されたアクセスログを取得し、クリアします。
    def get_and_clear_activity_log(self) -> List[MemoryAccess]:
        log = self._activity_log
        self._activity_log = []
        return log

    # @intent:responsibility 指定されたアドレスから16bitのデータを読み出します。アクセスはログに記録されます。
    def read(self, address: int) -> int:
        self._check_address(address)
        data = self._cells[address]
        self._activity_log.append(MemoryAccess(address, data, MemoryAccessType.READ))
        return data

    # @intent:responsibility 指定されたアドレスに16bitのデータを書き込みます。アクセスはログに記録されます。
    def write(self, address: int, value: int) -> None:
        self._check_address(address)
        self._check_value(value)
        previous = self._cells[address]
        self._cells[address] = value
        self._activity_log.append(MemoryAccess(address, value, MemoryAccessType.WRITE, previous_data=previous))

    # @intent:responsibility ログを記録せずに指定されたアドレスからデータを読み出します（UIやデバッガ用）。
    def peek(self, address: int) -> int:
        self._check_address(address)
        return self._cells[address]

    # @intent:responsibility ログを記録せずに指定されたアドレスへ書き込みます（ローダーやステップバック用）。
    def load(self, address: int, value: int) -> None:
        self._check_address(address)
        self._check_value(value)
        self._cells[address] = value

    # @intent:responsibility 連続したプログラムイメージを指定されたオリジンから書き込みます。
    # @intent:pre-condition origin + len(values) <= 65536。違反した場合、1ワードも書き込まずにValueErrorを発生させます。
    def load_block(self, values: Iterable[int], origin: int) -> None:
        """
        プログラムイメージをoriginから連続して配置します。
        """
        words = list(values)
        if origin < 0 or origin + len(words) > MEMORY_SIZE:
            raise ValueError(
                f"Image of {len(words)} words at origin x{origin:04X} does not fit in {MEMORY_SIZE} words of memory."
            )
        for word in words:
            self._check_value(word)
        self._cells[origin:origin + len(words)] = array("H", words)

    # @intent:responsibility 指定範囲のワードをログなしで取得します。
    def dump(self, start: int, length: int) -> List[int]:
        """UI表示用。アドレスは16ビットで折り返します。"""
        return [self._cells[(start + i) & WORD_MASK] for i in range(length)]

    def get_size(self) -> int:
        return MEMORY_SIZE
