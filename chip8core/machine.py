"""Host-facing CHIP-8 machine.

``Chip8`` owns one ``EmulatorState`` and swaps it for the next value after
every successful operation, so a host can drive the machine through plain
method calls:

    machine = Chip8(seed=42)
    machine.load_rom("pong.ch8")
    while running:
        for key, pressed in poll_keys():
            machine.set_key(key, pressed)
        machine.step()
        if frame_due():
            machine.tick_timers()
            draw(machine.get_framebuffer())

A failed step raises and leaves the state as it was before the fetch.
"""

from typing import Optional

import jax
import numpy as np

from chip8core.constants import NUM_KEYS
from chip8core.decode import DecodedInstruction
from chip8core.emulator import step, tick_timers, load_program
from chip8core.errors import Chip8Error, KeyIndexError
from chip8core.logging import MachineLogger
from chip8core.state import EmulatorState, create_state, reset_state


class Chip8:
    """Mutable CHIP-8 machine built on the functional core."""

    def __init__(self, seed: int = 0, modern_mode: bool = True, logger: Optional[MachineLogger] = None):
        self.logger = logger or MachineLogger()
        self._state = create_state(jax.random.PRNGKey(seed), modern_mode=modern_mode)
        self.cycles = 0

    @property
    def state(self) -> EmulatorState:
        return self._state

    @property
    def modern_mode(self) -> bool:
        return self._state.modern_mode

    def reset(self):
        """Return every field to its startup value, font reloaded and pc at 0x200."""
        self._state = reset_state(self._state)
        self.cycles = 0
        self.logger.log_reset()

    def load_program(self, program: bytes):
        self._state = load_program(self._state, bytes(program))
        self.logger.log_program_loaded(len(program))

    def load_rom(self, filename: str):
        with open(filename, "rb") as f:
            self.load_program(f.read())

    def set_key(self, index: int, pressed: bool):
        if not 0 <= index < NUM_KEYS:
            raise KeyIndexError(index)
        self._state = self._state.replace(keypad=self._state.keypad.at[index].set(bool(pressed)))

    def get_framebuffer(self) -> np.ndarray:
        """Read-only copy of the display, shape (64, 32), indexed [x, y]."""
        framebuffer = np.array(self._state.display, dtype=bool)
        framebuffer.setflags(write=False)
        return framebuffer

    def get_sound_timer(self) -> int:
        return int(self._state.sound_timer)

    def get_delay_timer(self) -> int:
        return int(self._state.delay_timer)

    @property
    def sound_active(self) -> bool:
        """True while the host should be playing a tone."""
        return self.get_sound_timer() > 0

    def step(self) -> DecodedInstruction:
        """Execute one instruction and return it decoded."""
        try:
            new_state, instruction = step(self._state)
        except Chip8Error as e:
            self.logger.log_step_error(int(self._state.pc), self.cycles, e)
            raise
        self._state = new_state
        self.cycles += 1
        return instruction

    def run(self, num_steps: int):
        """Execute ``num_steps`` instructions without touching the timers."""
        for _ in range(num_steps):
            self.step()

    def tick_timers(self):
        """Advance both timers by one 60 Hz tick."""
        was_sounding = self.sound_active
        self._state = tick_timers(self._state)
        if was_sounding and not self.sound_active:
            self.logger.log_sound_stopped()
