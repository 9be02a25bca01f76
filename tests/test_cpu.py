"""Tests for the CPU module."""

import pytest
from chip8.cpu import CPU, STACK_SIZE
from chip8.errors import BoundsError


class TestCPU:
    """CPU module tests."""

    def test_default_initialization(self):
        """CPU starts at 0x200 with everything else zeroed."""
        cpu = CPU()
        assert cpu.v == [0] * 16
        assert cpu.i == 0
        assert cpu.pc == 0x200
        assert cpu.sp == 0
        assert cpu.dt == 0
        assert cpu.st == 0

    @pytest.mark.parametrize("index", range(16))
    def test_set_get_register(self, index):
        """Every register round-trips a value."""
        cpu = CPU()
        cpu.set_v(index, 0x40 + index)
        assert cpu.get_v(index) == 0x40 + index

    def test_register_wraps_to_byte(self):
        """Register writes keep the low 8 bits."""
        cpu = CPU()
        cpu.set_v(3, 0x1FF)
        assert cpu.get_v(3) == 0xFF
        cpu.set_v(3, -1)
        assert cpu.get_v(3) == 0xFF

    @pytest.mark.parametrize("index", [16, 17, -1])
    def test_register_index_out_of_range(self, index):
        """Out-of-range register writes are rejected, not truncated."""
        cpu = CPU()
        with pytest.raises(BoundsError) as exc:
            cpu.set_v(index, 1)
        assert exc.value.index == index

    def test_set_flag(self):
        """VF receives 1 or 0."""
        cpu = CPU()
        cpu.set_flag(True)
        assert cpu.v[0xF] == 1
        cpu.set_flag(False)
        assert cpu.v[0xF] == 0

    def test_pc_and_i_wrap_16_bit(self):
        """PC and I are 16-bit."""
        cpu = CPU()
        cpu.set_pc(0xFFFE)
        cpu.advance()
        assert cpu.pc == 0
        cpu.set_i(0x10005)
        assert cpu.i == 5

    def test_push_pop(self):
        """Push then pop returns addresses in LIFO order."""
        cpu = CPU()
        cpu.push(0x200)
        cpu.push(0x300)
        assert cpu.sp == 2
        assert cpu.pop() == 0x300
        assert cpu.pop() == 0x200
        assert cpu.sp == 0

    def test_stack_overflow(self):
        """The 17th push raises instead of wrapping."""
        cpu = CPU()
        for depth in range(STACK_SIZE):
            cpu.push(depth)
        with pytest.raises(BoundsError):
            cpu.push(0x999)
        assert cpu.sp == STACK_SIZE

    def test_stack_underflow(self):
        """Popping an empty stack raises."""
        cpu = CPU()
        with pytest.raises(BoundsError):
            cpu.pop()
        assert cpu.sp == 0

    def test_tick_timers(self):
        """Timers decrement by one and stop at zero."""
        cpu = CPU()
        cpu.dt = 2
        cpu.st = 1
        cpu.tick_timers()
        assert (cpu.dt, cpu.st) == (1, 0)
        cpu.tick_timers()
        cpu.tick_timers()
        assert (cpu.dt, cpu.st) == (0, 0)

    def test_get_state(self):
        """Get state returns correct dict."""
        cpu = CPU()
        cpu.set_v(1, 5)
        cpu.i = 0x300
        cpu.push(0x202)
        state = cpu.get_state()
        assert state["v"][1] == 5
        assert state["i"] == 0x300
        assert state["pc"] == 0x200
        assert state["sp"] == 1
        assert state["stack"][0] == 0x202

    def test_set_state_round_trip(self):
        """set_state restores what get_state captured."""
        cpu = CPU()
        cpu.set_v(2, 9)
        cpu.dt = 4
        cpu.push(0x222)
        state = cpu.get_state()
        other = CPU()
        other.set_state(state)
        assert other.get_state() == state

    def test_set_state_bad_stack_pointer(self):
        """A stack pointer beyond capacity is rejected."""
        state = CPU().get_state()
        state["sp"] = STACK_SIZE + 1
        with pytest.raises(BoundsError):
            CPU().set_state(state)

    @pytest.mark.parametrize("field", ["dt", "st"])
    def test_set_state_rejects_timer_out_of_range(self, field):
        """Timer values above 255 raise instead of being truncated."""
        cpu = CPU()
        cpu.dt = 7
        before = cpu.get_state()
        state = cpu.get_state()
        state[field] = 0x100
        with pytest.raises(BoundsError):
            cpu.set_state(state)
        assert cpu.get_state() == before

    def test_set_state_rejects_register_out_of_range(self):
        """A register value above 255 is rejected before anything changes."""
        cpu = CPU()
        cpu.set_v(3, 0x42)
        before = cpu.get_state()
        state = cpu.get_state()
        state["v"][0] = 0x11
        state["v"][5] = 0x1FF
        with pytest.raises(BoundsError):
            cpu.set_state(state)
        assert cpu.get_state() == before

    def test_set_state_rejects_negative_index_register(self):
        """A negative I is rejected."""
        state = CPU().get_state()
        state["i"] = -1
        with pytest.raises(BoundsError):
            CPU().set_state(state)
