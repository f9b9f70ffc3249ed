"""Tests for the host-facing Chip8 machine."""

import io

import numpy as np
import pytest
from chip8core import (
    Chip8, FONT_DATA, PROGRAM_START,
    DecodeError, MemoryBoundsError, StackUnderflowError, KeyIndexError
)
from chip8core.logging import MachineLogger


class TestInitialization:

    def test_startup_values(self, machine):
        state = machine.state
        assert state.pc == PROGRAM_START
        assert state.I == 0
        assert state.stack.pointer == 0
        assert not state.keypad.any()
        assert not machine.get_framebuffer().any()
        assert machine.get_sound_timer() == 0
        assert machine.get_delay_timer() == 0
        assert np.array_equal(np.asarray(state.memory[:80]), np.asarray(FONT_DATA))
        assert not np.asarray(state.memory[80:]).any()

    def test_reset_clears_everything(self, machine):
        machine.load_program(bytes([0x6A, 0x12, 0xA2, 0x34, 0x6B, 0x09, 0xFB, 0x18, 0x22, 0x00]))
        machine.set_key(3, True)
        machine.run(5)

        machine.reset()

        state = machine.state
        assert state.pc == PROGRAM_START
        assert state.I == 0
        assert not state.V.any()
        assert state.stack.pointer == 0
        assert not state.stack.data.any()
        assert not state.keypad.any()
        assert machine.get_sound_timer() == 0
        assert not np.asarray(state.memory[PROGRAM_START:]).any()
        assert np.array_equal(np.asarray(state.memory[:80]), np.asarray(FONT_DATA))
        assert machine.cycles == 0

    def test_reset_keeps_mode(self):
        machine = Chip8(modern_mode=False, logger=MachineLogger(log_level="CRITICAL"))
        machine.reset()
        assert machine.modern_mode is False


class TestProgramLoad:

    def test_load_program_copies_at_0x200(self, machine):
        machine.load_program(b"\x12\x34\x56")
        memory = machine.state.memory
        assert [int(b) for b in memory[0x200:0x203]] == [0x12, 0x34, 0x56]

    def test_load_program_fills_memory_exactly(self, machine):
        machine.load_program(bytes([0xAB]) * (4096 - 0x200))
        assert machine.state.memory[0xFFF] == 0xAB

    def test_load_program_too_large(self, machine):
        with pytest.raises(MemoryBoundsError):
            machine.load_program(bytes(4096 - 0x200 + 1))

    @pytest.mark.parametrize("program, expected", [
        (b"\x12\x34\x56", "loaded 3 bytes at 0x200-0x202"),
        (b"", "loaded empty program"),
    ])
    def test_load_is_logged(self, program, expected):
        stream = io.StringIO()
        machine = Chip8(logger=MachineLogger(log_level="INFO", stream=stream, show_timestamps=False))

        machine.load_program(program)

        assert expected in stream.getvalue()
        assert "0x200-0x200" not in stream.getvalue()

    def test_load_rom(self, machine, tmp_path):
        rom = tmp_path / "test.ch8"
        rom.write_bytes(bytes([0x60, 0x2A, 0x12, 0x02]))

        machine.load_rom(str(rom))
        machine.step()

        assert machine.state.V[0] == 0x2A


class TestKeys:

    def test_set_and_clear_key(self, machine):
        machine.set_key(0xF, True)
        assert machine.state.keypad[0xF]
        machine.set_key(0xF, False)
        assert not machine.state.keypad[0xF]

    @pytest.mark.parametrize("index", [-1, 16, 100])
    def test_invalid_key_index(self, machine, index):
        with pytest.raises(KeyIndexError):
            machine.set_key(index, True)

    def test_wait_for_key_across_steps(self, machine):
        machine.load_program(bytes([0xF5, 0x0A, 0x12, 0x02]))
        for _ in range(3):
            machine.step()
            assert machine.state.pc == 0x200

        machine.set_key(0x9, True)
        machine.step()

        assert machine.state.pc == 0x202
        assert machine.state.V[5] == 0x9


class TestStepping:

    def test_step_returns_decoded_instruction(self, machine):
        machine.load_program(bytes([0x61, 0x05]))
        instruction = machine.step()
        assert instruction.raw == 0x6105
        assert instruction.x == 1
        assert machine.cycles == 1

    def test_draw_program(self, machine):
        # V0 = 2, I = glyph 2, draw at (V1, V1), loop
        machine.load_program(bytes([0x60, 0x02, 0xF0, 0x29, 0xD1, 0x15, 0x12, 0x06]))
        machine.run(4)

        framebuffer = machine.get_framebuffer()
        assert framebuffer.shape == (64, 32)
        assert framebuffer[0:4, 0].all()
        assert machine.state.V[15] == 0

    def test_framebuffer_is_read_only(self, machine):
        framebuffer = machine.get_framebuffer()
        with pytest.raises(ValueError):
            framebuffer[0, 0] = True

    def test_failed_step_keeps_state(self, machine):
        machine.load_program(bytes([0x60, 0x07, 0xFF, 0xFF]))
        machine.step()
        before = machine.state

        with pytest.raises(DecodeError) as excinfo:
            machine.step()

        assert excinfo.value.address == 0x202
        assert machine.state is before
        assert machine.state.pc == 0x202
        assert machine.cycles == 1

    def test_return_without_call(self, machine):
        machine.load_program(bytes([0x00, 0xEE]))
        with pytest.raises(StackUnderflowError):
            machine.step()

    def test_fetch_at_end_of_memory(self, machine):
        machine.load_program(bytes([0x1F, 0xFF]))
        machine.step()
        with pytest.raises(MemoryBoundsError):
            machine.step()

    def test_step_errors_are_logged(self):
        stream = io.StringIO()
        logger = MachineLogger(log_level="ERROR", stream=stream, show_timestamps=False)
        machine = Chip8(logger=logger)
        machine.load_program(bytes([0x00, 0xEE]))

        with pytest.raises(StackUnderflowError):
            machine.step()

        assert logger.error_count == 1
        assert "StackUnderflowError" in stream.getvalue()
        assert "pc=0x200" in stream.getvalue()


class TestSound:

    def test_sound_timer_runs_down(self, machine):
        machine.load_program(bytes([0x60, 0x02, 0xF0, 0x18]))
        machine.run(2)
        assert machine.get_sound_timer() == 2
        assert machine.sound_active

        machine.tick_timers()
        assert machine.sound_active
        machine.tick_timers()
        assert not machine.sound_active
        machine.tick_timers()
        assert machine.get_sound_timer() == 0

    def test_sound_stop_is_logged(self):
        stream = io.StringIO()
        machine = Chip8(logger=MachineLogger(log_level="DEBUG", stream=stream))
        machine.load_program(bytes([0x60, 0x01, 0xF0, 0x18]))
        machine.run(2)

        machine.tick_timers()

        assert "stop tone" in stream.getvalue()

    def test_delay_timer_round_trip(self, machine):
        machine.load_program(bytes([0x60, 0x03, 0xF0, 0x15, 0xF1, 0x07]))
        machine.run(2)
        machine.tick_timers()
        machine.step()
        assert machine.state.V[1] == 2
