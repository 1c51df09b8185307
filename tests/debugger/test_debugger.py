# tests/debugger/test_debugger.py
"""
lc3_tracer.debugger.debuggerモジュールの単体テスト。
Debuggerの実行制御、ブレークポイント管理、および条件チェック機能を検証します。
"""
import pytest
from unittest.mock import patch

from lc3_tracer.transport.memory import Memory
from lc3_tracer.transport.console import Console, QueueConsoleInput, BufferedConsoleOutput
from lc3_tracer.arch.lc3.cpu import Lc3Cpu
from lc3_tracer.core.errors import UnknownTrapError
from lc3_tracer.core.outcome import RunStatus
from lc3_tracer.debugger.debugger import Debugger, BreakpointCondition, BreakpointConditionType

# @intent:test_suite デバッガのブレークポイントと実行制御機能の検証。

PROGRAM = [
    0x1025, # x3000: ADD R0, R0, #5
    0x3003, # x3001: ST R0, x3005
    0x1221, # x3002: ADD R1, R0, #1
    0xF025, # x3003: HALT
    0x0000,
    0x0000, # x3005: DATA
]

@pytest.fixture
def setup_debugger():
    memory = Memory()
    memory.load_block(PROGRAM, 0x3000)
    console = Console(input=QueueConsoleInput(), output=BufferedConsoleOutput())
    cpu = Lc3Cpu(memory, console)
    debugger = Debugger(cpu)
    return debugger, cpu, memory

class TestDebugger:
    # @intent:test_case_add_remove_breakpoint ブレークポイントの追加と削除が正しく行われることを検証します。
    def test_add_remove_breakpoint(self, setup_debugger):
        debugger, _, _ = setup_debugger
        bp1 = BreakpointCondition(BreakpointConditionType.PC_MATCH, value=0x3002)
        bp2 = BreakpointCondition(BreakpointConditionType.MEMORY_WRITE, address=0x3005)

        debugger.add_breakpoint(bp1)
        debugger.add_breakpoint(bp2)
        debugger.add_breakpoint(bp1) # 重複追加は無視される
        assert debugger.get_breakpoints() == [bp1, bp2]

        debugger.remove_breakpoint(bp1)
        debugger.remove_breakpoint(bp1) # 存在しないブレークポイントの削除はエラーにならない
        assert debugger.get_breakpoints() == [bp2]

    def test_update_breakpoint(self, setup_debugger):
        debugger, _, _ = setup_debugger
        bp = BreakpointCondition(BreakpointConditionType.PC_MATCH, value=0x3002)
        disabled = BreakpointCondition(BreakpointConditionType.PC_MATCH, value=0x3002, enabled=False)
        debugger.add_breakpoint(bp)
        debugger.update_breakpoint(bp, disabled)
        assert debugger.get_breakpoints() == [disabled]

    # @intent:test_case_step_instruction step_instructionがcpu.stepを呼び出し、履歴に記録することを検証します。
    def test_step_instruction(self, setup_debugger):
        debugger, cpu, _ = setup_debugger
        with patch.object(cpu, "step", wraps=cpu.step) as mock_step:
            snapshot = debugger.step_instruction()
        mock_step.assert_called_once()
        assert snapshot.operation.text == "ADD R0, R0, #5"
        assert debugger.get_last_snapshot() is snapshot
        assert debugger.get_history() == [snapshot]

    def test_run_until_halt(self, setup_debugger):
        debugger, cpu, memory = setup_debugger
        outcome = debugger.run()
        assert outcome.status is RunStatus.HALTED
        assert outcome.steps == 4
        assert memory.peek(0x3005) == 5
        assert not debugger.is_running

    # @intent:test_case_pc_breakpoint PC一致のブレークポイントで、その命令の実行前に停止することを検証します。
    def test_pc_breakpoint(self, setup_debugger):
        debugger, cpu, _ = setup_debugger
        debugger.add_breakpoint(BreakpointCondition(BreakpointConditionType.PC_MATCH, value=0x3002))

        outcome = debugger.run()

        assert outcome.status is RunStatus.STOPPED
        assert outcome.reason == "breakpoint at x3002"
        assert cpu.get_state().pc == 0x3002
        assert cpu.get_state().reg(1) == 0

        # 再開時は同じPCのブレークポイントで止まらない
        assert debugger.run().status is RunStatus.HALTED

    def test_disabled_breakpoint_is_ignored(self, setup_debugger):
        debugger, _, _ = setup_debugger
        debugger.add_breakpoint(BreakpointCondition(BreakpointConditionType.PC_MATCH, value=0x3002, enabled=False))
        assert debugger.run().status is RunStatus.HALTED

    # @intent:test_case_memory_breakpoint メモリ書き込みのブレークポイントで、その命令の実行後に停止することを検証します。
    def test_memory_write_breakpoint(self, setup_debugger):
        debugger, cpu, memory = setup_debugger
        debugger.add_breakpoint(BreakpointCondition(BreakpointConditionType.MEMORY_WRITE, address=0x3005))

        outcome = debugger.run()

        assert outcome.status is RunStatus.STOPPED
        assert outcome.steps == 2
        assert memory.peek(0x3005) == 5
        assert cpu.get_state().pc == 0x3002

    def test_register_value_breakpoint(self, setup_debugger):
        debugger, cpu, _ = setup_debugger
        debugger.add_breakpoint(BreakpointCondition(
            BreakpointConditionType.REGISTER_VALUE, value=6, register_name="R1"))
        outcome = debugger.run()
        assert outcome.status is RunStatus.STOPPED
        assert cpu.get_state().pc == 0x3003

    def test_register_change_breakpoint(self, setup_debugger):
        debugger, cpu, _ = setup_debugger
        debugger.add_breakpoint(BreakpointCondition(
            BreakpointConditionType.REGISTER_CHANGE, register_name="R0"))
        outcome = debugger.run()
        assert outcome.status is RunStatus.STOPPED
        assert outcome.steps == 1
        assert cpu.get_state().reg(0) == 5

    def test_step_limit(self, setup_debugger):
        debugger, cpu, _ = setup_debugger
        outcome = debugger.run(max_steps=2)
        assert outcome.status is RunStatus.STOPPED
        assert outcome.steps == 2
        assert cpu.get_state().pc == 0x3002

    # @intent:test_case_input 入力が無いGETCの前では、致命的エラーにせず入力待ちで停止することを検証します。
    def test_waits_for_console_input(self):
        memory = Memory()
        memory.load_block([0xF020, 0xF025], 0x3000)
        console = Console(input=QueueConsoleInput(), output=BufferedConsoleOutput())
        cpu = Lc3Cpu(memory, console)
        debugger = Debugger(cpu)

        outcome = debugger.run()
        assert outcome.status is RunStatus.STOPPED
        assert outcome.reason == "waiting for console input"
        assert cpu.get_state().pc == 0x3000

        console.input.feed("k")
        assert debugger.run().status is RunStatus.HALTED
        assert cpu.get_state().reg(0) == ord("k")

    def test_fatal_error(self):
        memory = Memory()
        memory.load(0x3000, 0xF0FF)
        debugger = Debugger(Lc3Cpu(memory))
        outcome = debugger.run()
        assert outcome.is_fatal
        assert isinstance(outcome.error, UnknownTrapError)

    # @intent:test_case_stop stop()で実行ループが中断されることを検証します。
    def test_stop(self, setup_debugger):
        debugger, cpu, _ = setup_debugger
        original_step = cpu.step

        def step_and_stop():
            snapshot = original_step()
            debugger.stop()
            return snapshot

        with patch.object(cpu, "step", side_effect=step_and_stop):
            outcome = debugger.run()
        assert outcome.status is RunStatus.STOPPED
        assert outcome.reason == "stopped"
        assert outcome.steps == 1

class TestDebuggerStepBack:
    # @intent:test_case_step_back ステップバックでレジスタとメモリの書き込みが元に戻ることを検証します。
    def test_step_back_restores_memory_and_state(self, setup_debugger):
        debugger, cpu, memory = setup_debugger
        debugger.step_instruction() # ADD
        debugger.step_instruction() # ST
        assert memory.peek(0x3005) == 5

        snapshot = debugger.step_back()

        assert memory.peek(0x3005) == 0
        assert snapshot.state.pc == 0x3001
        assert cpu.get_state().pc == 0x3001
        assert cpu.get_state().reg(0) == 5

    def test_step_back_to_initial_state(self, setup_debugger):
        debugger, cpu, _ = setup_debugger
        debugger.step_instruction()
        assert debugger.step_back() is None
        assert cpu.get_state().pc == 0x3000
        assert cpu.get_state().reg(0) == 0
        assert debugger.step_back() is None

    def test_step_back_after_halt(self, setup_debugger):
        debugger, cpu, _ = setup_debugger
        debugger.run()
        assert cpu.is_halted
        debugger.step_back()
        assert not cpu.is_halted
        assert cpu.get_state().pc == 0x3003

    def test_history_limit(self):
        memory = Memory()
        cpu = Lc3Cpu(memory)
        debugger = Debugger(cpu, history_limit=2)
        for _ in range(5):
            debugger.step_instruction()
        assert len(debugger.get_history()) == 2

    # @intent:test_case 履歴の上限を超えた後のステップバックで、レジスタとメモリが同じ時点に揃うことを検証します。
    def test_step_back_past_truncated_history(self):
        memory = Memory()
        memory.load_block([
            0x1021, # x3000: ADD R0, R0, #1
            0x7040, # x3001: STR R0, R1, #0
            0x1021, # x3002: ADD R0, R0, #1
            0x7040, # x3003: STR R0, R1, #0
            0xF025, # x3004: HALT
        ], 0x3000)
        cpu = Lc3Cpu(memory)
        debugger = Debugger(cpu, history_limit=2)
        for _ in range(4):
            debugger.step_instruction()
        assert memory.peek(0x0000) == 2

        previous = debugger.step_back()
        assert previous.state.pc == 0x3003
        assert cpu.get_state().reg(0) == 2
        assert memory.peek(0x0000) == 1

        # 破棄された2命令目の実行後の状態で止まる
        assert debugger.step_back() is None
        assert cpu.get_state().pc == 0x3002
        assert cpu.get_state().reg(0) == 1
        assert memory.peek(0x0000) == 1

        assert debugger.step_back() is None
        assert cpu.get_state().pc == 0x3002
        assert memory.peek(0x0000) == 1
