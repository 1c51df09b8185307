# lc3_tracer/loader/loader.py
"""
プログラムイメージのローダーモジュール。
LC-3 オブジェクトファイル（.obj）、16進テキスト（.hex）、およびシンボルファイル（.sym）をサポートします。
"""
import logging
import re
from pathlib import Path
from typing import List, Tuple, Union

from lc3_tracer.transport.memory import Memory
from lc3_tracer.common.types import SymbolMap

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# @intent:utility_function オブジェクトイメージ（ビッグエンディアンの16ビットワード列、先頭はオリジン）を解析します。
# @intent:rationale 永続化形式のバイト順の入れ替えはローダーの責務であり、コアはワード列とオリジンのみを受け取ります。
def parse_object_image(data: bytes) -> Tuple[int, List[int]]:
    """
    Returns:
        (origin, words)
    """
    if len(data) < 2:
        raise ValueError("Object image is too short: missing origin word.")
    if len(data) % 2:
        raise ValueError(f"Object image has odd length {len(data)}; expected whole 16-bit words.")
    words = [(data[i] << 8) | data[i + 1] for i in range(0, len(data), 2)]
    return words[0], words[1:]

class ObjectFileLoader:
    """
    LC-3アセンブラが出力するオブジェクトファイル(.obj)を解析し、メモリにロードするローダー。
    """
    def load_object_file(self, file_path: PathLike, memory: Memory) -> int:
        with open(file_path, "rb") as f:
            data = f.read()
        origin, words = parse_object_image(data)
        memory.load_block(words, origin)
        logger.info("Loaded %d words from %s at x%04X", len(words), file_path, origin)
        return origin

class HexFileLoader:
    """
    1行に1ワードの16進テキスト形式（先頭ワードはオリジン）を解析し、メモリにロードするローダー。
    各行は `3000`、`x3000`、`0x3000` のいずれの表記も受け付け、`;` 以降はコメントとして扱います。
    """
    _WORD_RE = re.compile(r"^(?:0x|x)?([0-9a-f]{1,4})$", re.IGNORECASE)

    def load_hex_file(self, file_path: PathLike, memory: Memory) -> int:
        words: List[int] = []
        with open(file_path, "r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, 1):
                line = line.split(";", 1)[0].strip()
                if not line:
                    continue
                match = self._WORD_RE.match(line)
                if not match:
                    raise ValueError(f"Invalid hex word on line {line_num}: {line}")
                words.append(int(match.group(1), 16))

        if not words:
            raise ValueError(f"Hex image {file_path} is empty: missing origin word.")
        origin = words[0]
        memory.load_block(words[1:], origin)
        logger.info("Loaded %d words from %s at x%04X", len(words) - 1, file_path, origin)
        return origin

class SymbolFileLoader:
    """
    LC-3アセンブラが出力するシンボルファイル(.sym)を解析します。
    `//\tLABEL   3000` 形式の行からラベルとアドレスを抽出し、それ以外の行は無視します。
    """
    _SYMBOL_RE = re.compile(r"^//\s+([A-Za-z_][A-Za-z0-9_]*)\s+([0-9A-Fa-f]{1,4})\s*$")

    def load_symbol_file(self, file_path: PathLike) -> SymbolMap:
        symbol_map: SymbolMap = {}
        with open(file_path, "r", encoding="utf-8") as f:
            for line in f:
                match = self._SYMBOL_RE.match(line.strip())
                if match:
                    symbol_map[match.group(1)] = int(match.group(2), 16)
        return symbol_map

# @intent:responsibility 拡張子に応じて適切なローダーを選択し、イメージをロードします。
def load_image(file_path: PathLike, memory: Memory) -> int:
    suffix = Path(file_path).suffix.lower()
    if suffix == ".obj":
        return ObjectFileLoader().load_object_file(file_path, memory)
    if suffix == ".hex":
        return HexFileLoader().load_hex_file(file_path, memory)
    raise ValueError(f"Unsupported program image format: {file_path}")
