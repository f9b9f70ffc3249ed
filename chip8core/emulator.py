"""Main CHIP-8 emulator execution engine."""

import jax.numpy as jnp
from chip8core.state import EmulatorState
from chip8core.decode import DecodedInstruction, Opcode, decode, classify
from chip8core.constants import PROGRAM_START, MEMORY_SIZE, MAX_ADDRESS, NUM_KEYS
from chip8core.errors import DecodeError, MemoryBoundsError, KeyIndexError
from chip8core.instructions.system import no_op, execute_clear_screen, execute_return
from chip8core.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key, execute_skip_if_not_key
)
from chip8core.instructions.alu import (
    execute_alu_set, execute_alu_or, execute_alu_and, execute_alu_xor,
    execute_alu_add, execute_alu_sub_xy, execute_alu_shift_right,
    execute_alu_sub_yx, execute_alu_shift_left
)
from chip8core.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chip8core.instructions.display import execute_display
from chip8core.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_bcd_conversion, execute_store_registers, execute_load_registers
)


HANDLERS = {
    Opcode.NOP: no_op,
    Opcode.CLS: execute_clear_screen,
    Opcode.RET: execute_return,
    Opcode.JP: execute_jump,
    Opcode.CALL: execute_call,
    Opcode.SE_VX_NN: execute_skip_if_equal_immediate,
    Opcode.SNE_VX_NN: execute_skip_if_not_equal_immediate,
    Opcode.SE_VX_VY: execute_skip_if_equal_register,
    Opcode.LD_VX_NN: execute_set,
    Opcode.ADD_VX_NN: execute_add,
    Opcode.LD_VX_VY: execute_alu_set,
    Opcode.OR: execute_alu_or,
    Opcode.AND: execute_alu_and,
    Opcode.XOR: execute_alu_xor,
    Opcode.ADD_VX_VY: execute_alu_add,
    Opcode.SUB: execute_alu_sub_xy,
    Opcode.SHR: execute_alu_shift_right,
    Opcode.SUBN: execute_alu_sub_yx,
    Opcode.SHL: execute_alu_shift_left,
    Opcode.SNE_VX_VY: execute_skip_if_not_equal_register,
    Opcode.LD_I: execute_set_index,
    Opcode.JP_V0: execute_jump_with_offset,
    Opcode.RND: execute_random,
    Opcode.DRW: execute_display,
    Opcode.SKP: execute_skip_if_key,
    Opcode.SKNP: execute_skip_if_not_key,
    Opcode.LD_VX_DT: execute_get_delay_timer,
    Opcode.LD_VX_K: execute_wait_for_key,
    Opcode.LD_DT_VX: execute_set_delay_timer,
    Opcode.LD_ST_VX: execute_set_sound_timer,
    Opcode.ADD_I_VX: execute_add_to_index,
    Opcode.LD_F_VX: execute_font_character,
    Opcode.LD_B_VX: execute_bcd_conversion,
    Opcode.LD_I_VX: execute_store_registers,
    Opcode.LD_VX_I: execute_load_registers,
}


def _indexed_span(op: Opcode, instruction: DecodedInstruction) -> int:
    """Number of bytes read or written at I, 0 when the instruction does not touch memory."""
    if op == Opcode.DRW:
        return instruction.n
    if op == Opcode.LD_B_VX:
        return 3
    if op in (Opcode.LD_I_VX, Opcode.LD_VX_I):
        return instruction.x + 1
    return 0


def check_bounds(state: EmulatorState, op: Opcode, instruction: DecodedInstruction):
    """Raise MemoryBoundsError if an I-relative access would leave memory.

    Key skips raise KeyIndexError when VX names no key.
    """
    if op in (Opcode.SKP, Opcode.SKNP):
        key = int(state.V[instruction.x])
        if key >= NUM_KEYS:
            raise KeyIndexError(key)
        return

    span = _indexed_span(op, instruction)
    if span:
        last_address = int(state.I) + span - 1
        if last_address > MAX_ADDRESS:
            raise MemoryBoundsError(last_address, f"{op.name} access")


def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction.

    Raises DecodeError, MemoryBoundsError, KeyIndexError or a StackError; the
    input state is never modified.
    """
    decoded_instruction = decode(instruction)
    op = classify(decoded_instruction)
    check_bounds(state, op, decoded_instruction)
    return HANDLERS[op](state, decoded_instruction)


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[EmulatorState, int]:
    """Fetch next instruction from memory."""
    pc = int(state.pc)
    if pc + 1 > MAX_ADDRESS:
        raise MemoryBoundsError(pc + 1, "instruction fetch")
    instruction = _pack_u16(state.memory[pc], state.memory[pc + 1])
    return state.replace(pc=jnp.astype(pc + 2, jnp.uint16)), int(instruction)


def step(state: EmulatorState) -> tuple[EmulatorState, DecodedInstruction]:
    """Fetch and execute one instruction, returning the new state and what ran."""
    address = int(state.pc)
    state, instruction = fetch(state)
    try:
        return execute(state, instruction), decode(instruction)
    except DecodeError as e:
        raise DecodeError(e.instruction, address) from None


def tick_timers(state: EmulatorState) -> EmulatorState:
    """Decrement the delay and sound timers once, stopping at zero."""
    return state.replace(
        delay_timer=jnp.where(state.delay_timer > 0, state.delay_timer - 1, state.delay_timer).astype(jnp.uint8),
        sound_timer=jnp.where(state.sound_timer > 0, state.sound_timer - 1, state.sound_timer).astype(jnp.uint8),
    )


def load_program(state: EmulatorState, program: bytes) -> EmulatorState:
    """Copy program bytes into CHIP-8 memory starting at 0x200."""
    end = PROGRAM_START + len(program)
    if end > MEMORY_SIZE:
        raise MemoryBoundsError(end - 1, "program load")
    if not program:
        return state
    program_array = jnp.array(list(program), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:end].set(program_array)
    return state.replace(memory=new_memory)


def load_rom(state: EmulatorState, filename: str) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    return load_program(state, rom_data)
