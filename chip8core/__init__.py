"""CHIP-8 emulator package."""

from chip8core.state import EmulatorState, StackState, create_state, reset_state
from chip8core.emulator import execute, fetch, step, tick_timers, load_program, load_rom
from chip8core.decode import DecodedInstruction, Opcode, decode, classify
from chip8core.constants import *
from chip8core.errors import (
    Chip8Error, DecodeError, MemoryBoundsError, StackError,
    StackOverflowError, StackUnderflowError, KeyIndexError
)
from chip8core.machine import Chip8

__all__ = [
    "Chip8",
    "EmulatorState",
    "StackState",
    "create_state",
    "reset_state",
    "fetch",
    "execute",
    "step",
    "tick_timers",
    "load_program",
    "load_rom",
    "DecodedInstruction",
    "Opcode",
    "decode",
    "classify",
    "Chip8Error",
    "DecodeError",
    "MemoryBoundsError",
    "StackError",
    "StackOverflowError",
    "StackUnderflowError",
    "KeyIndexError",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
]
