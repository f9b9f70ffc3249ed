"""Exceptions raised by the CHIP-8 core.

Every failure that aborts an instruction step derives from ``Chip8Error`` so a
host can catch the whole family in one place and decide whether to halt,
reset or continue.
"""

from typing import Optional


class Chip8Error(Exception):
    """Base class for all CHIP-8 core errors."""


class DecodeError(Chip8Error):
    """Instruction word does not match any known CHIP-8 instruction."""

    def __init__(self, instruction: int, address: Optional[int] = None):
        self.instruction = instruction
        self.address = address
        super().__init__(instruction, address)

    def __str__(self):
        where = f" at 0x{self.address:03X}" if self.address is not None else ""
        return f"unrecognized instruction 0x{self.instruction:04X}{where}"


class MemoryBoundsError(Chip8Error):
    """Fetch, load or indexed access outside the 4096-byte address space."""

    def __init__(self, address: int, reason: str = "memory access"):
        self.address = address
        self.reason = reason
        super().__init__(address, reason)

    def __str__(self):
        return f"{self.reason} out of bounds at 0x{self.address:04X}"


class StackError(Chip8Error):
    """Call stack misuse."""


class StackOverflowError(StackError):
    def __str__(self):
        return "call stack overflow: subroutine nesting exceeds 16 levels"


class StackUnderflowError(StackError):
    def __str__(self):
        return "call stack underflow: return with an empty stack"


class KeyIndexError(Chip8Error, ValueError):
    """Keypad index outside 0x0-0xF."""

    def __init__(self, index: int):
        self.index = index
        super().__init__(index)

    def __str__(self):
        return f"key index {self.index} outside keypad range 0-15"
