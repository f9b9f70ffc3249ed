"""Tests for instruction decoding and classification."""

import pytest
from chip8core import decode, classify, Opcode, DecodeError
from chip8core.emulator import HANDLERS


def test_decode_fields():
    instruction = decode(0xD12F)

    assert instruction.raw == 0xD12F
    assert instruction.nibbles == (0xD, 0x1, 0x2, 0xF)
    assert instruction.x == 0x1
    assert instruction.y == 0x2
    assert instruction.n == 0xF
    assert instruction.nn == 0x2F
    assert instruction.nnn == 0x12F


def test_every_opcode_has_a_handler():
    assert set(HANDLERS) == set(Opcode)


@pytest.mark.parametrize("instruction, expected", [
    (0x0000, Opcode.NOP),
    (0x00E0, Opcode.CLS),
    (0x00EE, Opcode.RET),
    (0x1ABC, Opcode.JP),
    (0x2ABC, Opcode.CALL),
    (0x3A12, Opcode.SE_VX_NN),
    (0x4A12, Opcode.SNE_VX_NN),
    (0x5AB0, Opcode.SE_VX_VY),
    (0x6A12, Opcode.LD_VX_NN),
    (0x7A12, Opcode.ADD_VX_NN),
    (0x8AB0, Opcode.LD_VX_VY),
    (0x8AB1, Opcode.OR),
    (0x8AB2, Opcode.AND),
    (0x8AB3, Opcode.XOR),
    (0x8AB4, Opcode.ADD_VX_VY),
    (0x8AB5, Opcode.SUB),
    (0x8AB6, Opcode.SHR),
    (0x8AB7, Opcode.SUBN),
    (0x8ABE, Opcode.SHL),
    (0x9AB0, Opcode.SNE_VX_VY),
    (0xAABC, Opcode.LD_I),
    (0xBABC, Opcode.JP_V0),
    (0xCA12, Opcode.RND),
    (0xDAB5, Opcode.DRW),
    (0xEA9E, Opcode.SKP),
    (0xEAA1, Opcode.SKNP),
    (0xFA07, Opcode.LD_VX_DT),
    (0xFA0A, Opcode.LD_VX_K),
    (0xFA15, Opcode.LD_DT_VX),
    (0xFA18, Opcode.LD_ST_VX),
    (0xFA1E, Opcode.ADD_I_VX),
    (0xFA29, Opcode.LD_F_VX),
    (0xFA33, Opcode.LD_B_VX),
    (0xFA55, Opcode.LD_I_VX),
    (0xFA65, Opcode.LD_VX_I),
])
def test_classify(instruction, expected):
    assert classify(decode(instruction)) == expected


def test_classify_unknown_reports_instruction():
    with pytest.raises(DecodeError) as excinfo:
        classify(decode(0xE1FF))

    assert excinfo.value.instruction == 0xE1FF
    assert "0xE1FF" in str(excinfo.value)
