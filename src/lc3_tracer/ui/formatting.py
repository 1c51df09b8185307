# src/lc3_tracer/ui/formatting.py
"""
UI表示用の文字列整形（Qtに依存しない部分）。
"""
from typing import List

from lc3_tracer.transport.memory import Memory

WORDS_PER_ROW = 8

# @intent:utility_function ワード値を表示可能なASCII文字に変換します（下位バイトのみ）。
def word_to_char(word: int) -> str:
    low = word & 0xFF
    return chr(low) if 32 <= low <= 126 else "."

# @intent:responsibility 指定アドレスを含む行から、メモリのワードダンプを生成します。
def format_memory_rows(memory: Memory, start: int, rows: int, words_per_row: int = WORDS_PER_ROW) -> List[str]:
    """
    各行は `x3000: 1025 F025 ... |..%.....|` の形式です。
    開始アドレスは行境界に切り下げ、アドレスは16ビットで折り返します。
    """
    lines = []
    address = (start // words_per_row) * words_per_row
    for _ in range(rows):
        words = memory.dump(address, words_per_row)
        hex_part = " ".join(f"{w:04X}" for w in words)
        ascii_part = "".join(word_to_char(w) for w in words)
        lines.append(f"x{address:04X}: {hex_part} |{ascii_part}|")
        address = (address + words_per_row) & 0xFFFF
    return lines

# @intent:responsibility レジスタ値をビット幅に応じた桁数の16進表記にします。
def format_register(value: int, width: int) -> str:
    digits = (width + 3) // 4 # 16bit -> 4chars, 3bit -> 1char
    return f"x{value:0{digits}X}"

def format_signed(value: int) -> str:
    return str(value - 0x10000 if value & 0x8000 else value)
