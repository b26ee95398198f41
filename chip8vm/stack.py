"""
Fixed-size call stack for CHIP-8 return addresses.
"""

import numpy as np

from .constants import STACK_SIZE
from .errors import StackFull, StackEmpty


class CallStack:
    """
    Bounded LIFO of 16-bit return addresses.
    Overflow and underflow raise instead of wrapping.
    """

    def __init__(self, size: int = STACK_SIZE):
        self.size = size
        self.stack = np.zeros(size, dtype=np.uint16)
        self.stack_pointer = 0

    def __len__(self) -> int:
        return self.stack_pointer

    def push(self, address: int):
        if self.stack_pointer >= self.size:
            raise StackFull(f"Stack overflow pushing 0x{address:03X} (depth {self.stack_pointer})")
        self.stack[self.stack_pointer] = address
        self.stack_pointer += 1

    def pop(self) -> int:
        if self.stack_pointer == 0:
            raise StackEmpty("Return with empty stack")
        self.stack_pointer -= 1
        return int(self.stack[self.stack_pointer])
