"""CHIP-8 instruction decoding."""

from enum import IntEnum

from chex import dataclass

from chip8core.errors import DecodeError


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    opcode: int  # First nibble
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit immediate)
    nn: int      # Last byte (8-bit immediate)
    nnn: int     # Last 12 bits (12-bit address)

    @property
    def nibbles(self) -> tuple[int, int, int, int]:
        return self.opcode, self.x, self.y, self.n


class Opcode(IntEnum):
    """Every instruction the interpreter executes."""
    NOP = 0
    CLS = 1
    RET = 2
    JP = 3
    CALL = 4
    SE_VX_NN = 5
    SNE_VX_NN = 6
    SE_VX_VY = 7
    LD_VX_NN = 8
    ADD_VX_NN = 9
    LD_VX_VY = 10
    OR = 11
    AND = 12
    XOR = 13
    ADD_VX_VY = 14
    SUB = 15
    SHR = 16
    SUBN = 17
    SHL = 18
    SNE_VX_VY = 19
    LD_I = 20
    JP_V0 = 21
    RND = 22
    DRW = 23
    SKP = 24
    SKNP = 25
    LD_VX_DT = 26
    LD_VX_K = 27
    LD_DT_VX = 28
    LD_ST_VX = 29
    ADD_I_VX = 30
    LD_F_VX = 31
    LD_B_VX = 32
    LD_I_VX = 33
    LD_VX_I = 34


_ALU_OPS = {
    0x0: Opcode.LD_VX_VY,
    0x1: Opcode.OR,
    0x2: Opcode.AND,
    0x3: Opcode.XOR,
    0x4: Opcode.ADD_VX_VY,
    0x5: Opcode.SUB,
    0x6: Opcode.SHR,
    0x7: Opcode.SUBN,
    0xE: Opcode.SHL,
}

_KEY_OPS = {
    0x9E: Opcode.SKP,
    0xA1: Opcode.SKNP,
}

_MISC_OPS = {
    0x07: Opcode.LD_VX_DT,
    0x0A: Opcode.LD_VX_K,
    0x15: Opcode.LD_DT_VX,
    0x18: Opcode.LD_ST_VX,
    0x1E: Opcode.ADD_I_VX,
    0x29: Opcode.LD_F_VX,
    0x33: Opcode.LD_B_VX,
    0x55: Opcode.LD_I_VX,
    0x65: Opcode.LD_VX_I,
}

# Families fully identified by the first nibble.
_FAMILY_OPS = {
    0x1: Opcode.JP,
    0x2: Opcode.CALL,
    0x3: Opcode.SE_VX_NN,
    0x4: Opcode.SNE_VX_NN,
    0x6: Opcode.LD_VX_NN,
    0x7: Opcode.ADD_VX_NN,
    0xA: Opcode.LD_I,
    0xB: Opcode.JP_V0,
    0xC: Opcode.RND,
    0xD: Opcode.DRW,
}

_SYSTEM_OPS = {
    0x0000: Opcode.NOP,
    0x00E0: Opcode.CLS,
    0x00EE: Opcode.RET,
}


def decode(instruction: int) -> DecodedInstruction:
    """Decode 16-bit instruction into components."""
    instruction = int(instruction)
    return DecodedInstruction(
        raw=instruction,
        opcode=(instruction & 0xF000) >> 12,
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=instruction & 0x000F,
        nn=instruction & 0x00FF,
        nnn=instruction & 0x0FFF
    )


def classify(instruction: DecodedInstruction) -> Opcode:
    """Map a decoded instruction onto its Opcode, raising DecodeError if unknown."""
    family = instruction.opcode
    op = None
    if family == 0x0:
        op = _SYSTEM_OPS.get(instruction.raw)
    elif family in _FAMILY_OPS:
        op = _FAMILY_OPS[family]
    elif family == 0x5 and instruction.n == 0:
        op = Opcode.SE_VX_VY
    elif family == 0x8:
        op = _ALU_OPS.get(instruction.n)
    elif family == 0x9 and instruction.n == 0:
        op = Opcode.SNE_VX_VY
    elif family == 0xE:
        op = _KEY_OPS.get(instruction.nn)
    elif family == 0xF:
        op = _MISC_OPS.get(instruction.nn)

    if op is None:
        raise DecodeError(instruction.raw)
    return op
