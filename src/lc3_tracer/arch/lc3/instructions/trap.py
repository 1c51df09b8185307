# src/lc3_tracer/arch/lc3/instructions/trap.py
"""
TRAP命令とサービスルーチン（GETC, OUT, PUTS, IN, PUTSP, HALT）の実装。

全ての入出力は注入されたConsoleを通して行います。各ルーチンは失敗し得る入出力を
レジスタの変更より先に行い、失敗時にはConsoleIOErrorを送出します。
"""
from typing import Callable, Dict, List

from lc3_tracer.core.errors import ConsoleIOError, UnknownTrapError
from lc3_tracer.core.snapshot import Operation
from lc3_tracer.core.state import RunState
from lc3_tracer.transport.console import Console
from lc3_tracer.transport.memory import Memory, MEMORY_SIZE
from lc3_tracer.arch.lc3.isa import Opcode, TrapVector
from lc3_tracer.arch.lc3.state import Lc3CpuState, Register
from .base import bits, add16, update_flags

# @intent:utility_function 入力元から1バイトを読み込みます。EOFやOSErrorはConsoleIOErrorに変換します。
def _read_byte(console: Console, op: Operation) -> int:
    try:
        return console.input.read_byte()
    except EOFError as e:
        raise ConsoleIOError(f"{op.mnemonic}: console input exhausted", op.instruction, op.address) from e
    except OSError as e:
        raise ConsoleIOError(f"{op.mnemonic}: console input failed: {e}", op.instruction, op.address) from e

# @intent:utility_function 出力先へ文字列を書き込み、フラッシュします。OSErrorと文字コード変換の失敗はConsoleIOErrorに変換します。
def _write(console: Console, op: Operation, text: str) -> None:
    try:
        console.output.write(text)
        console.output.flush()
    except (OSError, UnicodeError) as e:
        raise ConsoleIOError(f"{op.mnemonic}: console output failed: {e}", op.instruction, op.address) from e

# @intent:utility_function addressから0ワードの手前までのワード列を読み出します。
def _read_string_words(memory: Memory, address: int) -> List[int]:
    words = []
    # メモリ全体が非0の場合でも停止するよう、最大でアドレス空間1周分に制限する
    for _ in range(MEMORY_SIZE):
        word = memory.read(address)
        if word == 0:
            break
        words.append(word)
        address = add16(address, 1)
    return words

# --- サービスルーチン ---

# @intent:responsibility GETC: 1バイトをエコーなしで読み込み、R0に格納します。フラグは変化しません。
def trap_getc(state: Lc3CpuState, memory: Memory, op: Operation, console: Console) -> None:
    state.set_reg(Register.R0, _read_byte(console, op))

# @intent:responsibility OUT: R0の値をコードポイントとする1文字を出力します。
def trap_out(state: Lc3CpuState, memory: Memory, op: Operation, console: Console) -> None:
    _write(console, op, chr(state.reg(Register.R0)))

# @intent:responsibility PUTS: R0が指す1ワード1文字の文字列を0ワードまで出力します。
def trap_puts(state: Lc3CpuState, memory: Memory, op: Operation, console: Console) -> None:
    words = _read_string_words(memory, state.reg(Register.R0))
    _write(console, op, "".join(chr(word) for word in words))

# @intent:responsibility IN: プロンプトを出力し、1バイトを読み込んでR0に格納し、フラグを更新します。
def trap_in(state: Lc3CpuState, memory: Memory, op: Operation, console: Console) -> None:
    _write(console, op, console.in_prompt)
    state.set_reg(Register.R0, _read_byte(console, op))
    update_flags(state, Register.R0)

# @intent:responsibility PUTSP: 1ワード2文字（下位バイト、続いて非0なら上位バイト）の文字列を0ワードまで出力します。
def trap_putsp(state: Lc3CpuState, memory: Memory, op: Operation, console: Console) -> None:
    chars = []
    for word in _read_string_words(memory, state.reg(Register.R0)):
        chars.append(chr(word & 0xFF))
        high = word >> 8
        if high:
            chars.append(chr(high))
    _write(console, op, "".join(chars))

# @intent:responsibility HALT: 停止メッセージを出力し、CPUをHALTED状態に遷移させます。
def trap_halt(state: Lc3CpuState, memory: Memory, op: Operation, console: Console) -> None:
    _write(console, op, console.halt_message)
    state.run_state = RunState.HALTED

# @intent:map トラップベクタからサービスルーチンへのマッピングテーブル。
SERVICE_ROUTINES: Dict[TrapVector, Callable[[Lc3CpuState, Memory, Operation, Console], None]] = {
    TrapVector.GETC: trap_getc,
    TrapVector.OUT: trap_out,
    TrapVector.PUTS: trap_puts,
    TrapVector.IN: trap_in,
    TrapVector.PUTSP: trap_putsp,
    TrapVector.HALT: trap_halt,
}

# --- TRAP ---
# @intent:responsibility TRAP命令をデコードします。未定義のベクタは状態を変更する前に致命的エラーとします。
def decode_trap(instruction: int, address: int) -> Operation:
    raw_vector = bits(instruction, 7, 0)
    try:
        vector = TrapVector(raw_vector)
    except ValueError:
        raise UnknownTrapError(f"Unknown trap vector x{raw_vector:02X}", instruction, address) from None
    # ニーモニックはアセンブラの別名（HALT, PUTS等）を使用する
    return Operation(instruction, Opcode.TRAP, vector.name, address, [], {"vector": vector})

# @intent:responsibility TRAP命令を実行します。サービスルーチン完了後に戻りアドレスをR7に保存します。
def execute_trap(state: Lc3CpuState, memory: Memory, op: Operation, console: Console) -> None:
    return_addr = state.pc
    SERVICE_ROUTINES[TrapVector(op.fields["vector"])](state, memory, op, console)
    state[Register.R7] = return_addr
