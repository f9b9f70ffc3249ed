"""CHIP-8 stack operations."""

import jax.numpy as jnp
from chip8core.constants import STACK_SIZE
from chip8core.errors import StackOverflowError, StackUnderflowError
from chip8core.state import StackState


def push(stack: StackState, address: jnp.ndarray) -> StackState:
    """Push address onto stack."""
    if stack.pointer >= STACK_SIZE:
        raise StackOverflowError()
    return_address = jnp.astype(address, jnp.uint16)
    new_data = stack.data.at[stack.pointer].set(return_address)
    return stack.replace(data=new_data, pointer=stack.pointer + 1)


def pop(stack: StackState) -> tuple[StackState, jnp.ndarray]:
    """Pop address from stack."""
    if stack.pointer <= 0:
        raise StackUnderflowError()
    new_pointer = stack.pointer - 1
    popped_address = stack.data[new_pointer]
    new_data = stack.data.at[new_pointer].set(0)
    return stack.replace(data=new_data, pointer=new_pointer), popped_address
