# tests/arch/lc3/test_traps.py
"""
TRAP命令とサービスルーチンの単体テスト。
"""
import io

import pytest

from lc3_tracer.transport.memory import Memory
from lc3_tracer.transport.console import Console, ConsoleOutput, QueueConsoleInput, BufferedConsoleOutput, StreamConsoleOutput
from lc3_tracer.arch.lc3.cpu import Lc3Cpu
from lc3_tracer.arch.lc3.state import ConditionFlag, Register
from lc3_tracer.core.errors import ConsoleIOError

# @intent:test_suite トラップの入出力がConsoleを通して行われ、R7と条件フラグが正しく更新されることを検証します。

class FailingOutput(ConsoleOutput):
    def write(self, text: str) -> None:
        raise BrokenPipeError("closed")

def _store_string(memory: Memory, address: int, text: str) -> None:
    memory.load_block([ord(c) for c in text] + [0], address)

@pytest.fixture
def console():
    return Console(input=QueueConsoleInput(), output=BufferedConsoleOutput())

@pytest.fixture
def machine(console):
    memory = Memory()
    cpu = Lc3Cpu(memory, console)
    return cpu, memory, console

def _execute(cpu, memory, instruction):
    memory.load(cpu.get_state().pc, instruction)
    return cpu.step()

class TestTraps:
    # @intent:test_case GETCはエコーせずにR0へ格納し、フラグを変更しないことを検証します。
    def test_getc(self, machine):
        cpu, memory, console = machine
        console.input.feed(b"A")
        _execute(cpu, memory, 0xF020)
        state = cpu.get_state()
        assert state.reg(0) == 0x41
        assert state.reg(7) == 0x3001
        assert state.cond == ConditionFlag.ZRO
        assert console.output.getvalue() == ""

    # @intent:test_case OUTはR0の16ビット値全体をコードポイントとして1文字出力することを検証します。
    def test_out_writes_full_code_point(self, machine):
        cpu, memory, console = machine
        cpu.get_state()[Register.R0] = 0x263A
        _execute(cpu, memory, 0xF021)
        assert console.output.getvalue() == "☺"

    def test_out_ascii(self, machine):
        cpu, memory, console = machine
        cpu.get_state()[Register.R0] = 0x0048
        _execute(cpu, memory, 0xF021)
        assert console.output.getvalue() == "H"

    def test_puts(self, machine):
        cpu, memory, console = machine
        _store_string(memory, 0x4000, "HI")
        cpu.get_state()[Register.R0] = 0x4000
        _execute(cpu, memory, 0xF022)
        assert console.output.getvalue() == "HI"
        assert cpu.get_state().reg(7) == 0x3001

    # @intent:test_case PUTSは各ワードの値全体をコードポイントとして出力することを検証します。
    def test_puts_writes_full_words(self, machine):
        cpu, memory, console = machine
        memory.load_block([0x263A, 0x0041, 0x0000], 0x4000)
        cpu.get_state()[Register.R0] = 0x4000
        _execute(cpu, memory, 0xF022)
        assert console.output.getvalue() == "☺A"

    # @intent:test_case PUTSは最上位アドレスから0番地へ折り返して文字列を読むことを検証します。
    def test_puts_wraps_address_space(self, machine):
        cpu, memory, console = machine
        memory.load(0xFFFF, ord("A"))
        memory.load(0x0000, ord("B"))
        cpu.get_state()[Register.R0] = 0xFFFF
        _execute(cpu, memory, 0xF022)
        assert console.output.getvalue() == "AB"

    # @intent:test_case INはプロンプトを出力し、読み込んだ値でフラグを更新することを検証します。
    def test_in(self, machine):
        cpu, memory, console = machine
        console.input.feed(b"7")
        _execute(cpu, memory, 0xF023)
        state = cpu.get_state()
        assert console.output.getvalue() == "Enter a character: "
        assert state.reg(0) == ord("7")
        assert state.cond == ConditionFlag.POS

    def test_in_custom_prompt(self, machine):
        cpu, memory, console = machine
        console.in_prompt = "> "
        console.input.feed(b"\x00")
        _execute(cpu, memory, 0xF023)
        assert console.output.getvalue() == "> "
        assert cpu.get_state().cond == ConditionFlag.ZRO

    # @intent:test_case PUTSPは1ワード2文字を下位バイトから出力し、上位バイトが0なら省略することを検証します。
    def test_putsp(self, machine):
        cpu, memory, console = machine
        memory.load_block([0x6548, 0x6C6C, 0x006F, 0x0000], 0x4000) # "He", "ll", "o"
        cpu.get_state()[Register.R0] = 0x4000
        _execute(cpu, memory, 0xF024)
        assert console.output.getvalue() == "Hello"

    def test_halt(self, machine):
        cpu, memory, console = machine
        _execute(cpu, memory, 0xF025)
        assert cpu.is_halted
        assert console.output.getvalue() == "HALT\n"
        assert cpu.get_state().reg(7) == 0x3001

    # @intent:test_case_error 入力が尽きたGETCは致命的エラーとなり、状態を変更しないことを検証します。
    def test_getc_on_exhausted_input(self, machine):
        cpu, memory, _ = machine
        memory.load(0x3000, 0xF020)
        before = cpu.get_state().copy()
        with pytest.raises(ConsoleIOError) as excinfo:
            cpu.step()
        assert excinfo.value.address == 0x3000
        assert isinstance(excinfo.value.__cause__, EOFError)
        assert cpu.get_state().registers == before.registers

    # @intent:test_case_error 出力先の失敗はConsoleIOErrorとなり、R7は更新されないことを検証します。
    def test_output_failure(self):
        memory = Memory()
        cpu = Lc3Cpu(memory, Console(output=FailingOutput()))
        cpu.get_state()[Register.R7] = 0x1234
        memory.load(0x3000, 0xF021)
        with pytest.raises(ConsoleIOError):
            cpu.step()
        assert cpu.get_state().reg(7) == 0x1234
        assert cpu.get_state().pc == 0x3000

    # @intent:test_case_error 出力先で符号化できない文字はConsoleIOErrorとなり、PCとR7が戻されることを検証します。
    def test_unencodable_output(self):
        memory = Memory()
        stream = io.TextIOWrapper(io.BytesIO(), encoding="utf-8")
        cpu = Lc3Cpu(memory, Console(output=StreamConsoleOutput(stream)))
        state = cpu.get_state()
        state[Register.R0] = 0xD800 # 単独のサロゲート
        state[Register.R7] = 0x1234
        memory.load(0x3000, 0xF021)
        with pytest.raises(ConsoleIOError) as excinfo:
            cpu.step()
        assert isinstance(excinfo.value.__cause__, UnicodeError)
        assert state.pc == 0x3000
        assert state.reg(7) == 0x1234
