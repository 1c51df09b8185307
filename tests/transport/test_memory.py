# tests/transport/test_memory.py
"""
lc3_tracer.transport.memoryモジュールの単体テスト。
"""
import pytest

from lc3_tracer.transport.memory import Memory, MemoryAccess, MemoryAccessType, MEMORY_SIZE

# @intent:test_suite ワードアドレスのメモリと、そのアクセスログ機能を検証します。

class TestMemory:
    @pytest.fixture
    def memory(self):
        return Memory()

    # @intent:test_case_init 全セルが0で初期化され、サイズが65536ワードであることを検証します。
    def test_initial_state(self, memory):
        assert memory.get_size() == MEMORY_SIZE == 0x10000
        assert memory.peek(0x0000) == 0
        assert memory.peek(0x3000) == 0
        assert memory.peek(0xFFFF) == 0

    # @intent:test_case_rw 読み書きした値が保持されることを検証します。
    def test_read_write(self, memory):
        memory.write(0x3000, 0x1234)
        memory.write(0xFFFF, 0xBEEF)
        assert memory.read(0x3000) == 0x1234
        assert memory.read(0xFFFF) == 0xBEEF

    # @intent:test_case_boundary 最上位アドレスと0番地は独立したセルであることを検証します。
    def test_top_and_bottom_cells_are_independent(self, memory):
        memory.write(0xFFFF, 0xAAAA)
        memory.write(0x0000, 0x5555)
        assert memory.read(0xFFFF) == 0xAAAA
        assert memory.read(0x0000) == 0x5555

    # @intent:test_case_error 範囲外のアドレスと16ビットを超える値はエラーになることを検証します。
    def test_out_of_bounds_access(self, memory):
        with pytest.raises(IndexError):
            memory.read(0x10000)
        with pytest.raises(IndexError):
            memory.write(-1, 0)
        with pytest.raises(ValueError):
            memory.write(0x3000, 0x10000)

    # @intent:test_case_log 読み書きがアクセスログに記録され、書き込みは上書き前の値を持つことを検証します。
    def test_activity_log(self, memory):
        memory.load(0x4000, 0x0007)
        memory.read(0x3000)
        memory.write(0x4000, 0x0009)

        log = memory.get_and_clear_activity_log()
        assert log == [
            MemoryAccess(0x3000, 0x0000, MemoryAccessType.READ),
            MemoryAccess(0x4000, 0x0009, MemoryAccessType.WRITE, previous_data=0x0007),
        ]
        assert memory.get_and_clear_activity_log() == []

    # @intent:test_case_log peek/load/dumpはログに記録されないことを検証します。
    def test_unlogged_access(self, memory):
        memory.load(0x3000, 0x1025)
        assert memory.peek(0x3000) == 0x1025
        assert memory.dump(0x3000, 2) == [0x1025, 0x0000]
        assert memory.get_and_clear_activity_log() == []

    # @intent:test_case_dump dumpはアドレス空間の末尾で0番地へ折り返すことを検証します。
    def test_dump_wraps(self, memory):
        memory.load(0xFFFF, 0x0001)
        memory.load(0x0000, 0x0002)
        assert memory.dump(0xFFFF, 2) == [0x0001, 0x0002]

    # @intent:test_case_load_block プログラムイメージがオリジンから連続して配置されることを検証します。
    def test_load_block(self, memory):
        memory.load_block([0x1025, 0xF025], 0x3000)
        assert memory.peek(0x3000) == 0x1025
        assert memory.peek(0x3001) == 0xF025
        # アドレス空間の末尾にちょうど収まる場合は成功する
        memory.load_block([0x1111, 0x2222], 0xFFFE)
        assert memory.peek(0xFFFF) == 0x2222

    # @intent:test_case_load_block 収まらないイメージは1ワードも書き込まずに拒否されることを検証します。
    def test_load_block_overflow_is_rejected(self, memory):
        with pytest.raises(ValueError, match="does not fit"):
            memory.load_block([0x1111, 0x2222, 0x3333], 0xFFFE)
        assert memory.peek(0xFFFE) == 0
        assert memory.peek(0xFFFF) == 0
