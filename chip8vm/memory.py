"""
CHIP-8 address space: 4096 bytes, every access bounds-checked.
"""

import numpy as np
from typing import Union

from .constants import MEMORY_SIZE, FONT_START, CHIP8_FONT
from .errors import MemoryAccessError


class Memory:
    """Flat 4K RAM backed by a numpy uint8 array"""

    def __init__(self):
        self.data = np.zeros(MEMORY_SIZE, dtype=np.uint8)
        self.data[FONT_START:FONT_START + len(CHIP8_FONT)] = np.frombuffer(CHIP8_FONT, dtype=np.uint8)

    def __len__(self) -> int:
        return MEMORY_SIZE

    def _check(self, address: int, length: int = 1):
        if address < 0 or length < 0 or address + length > MEMORY_SIZE:
            raise MemoryAccessError(address, length)

    def read(self, address: int) -> int:
        self._check(address)
        # Convert to regular Python int to avoid numpy overflow issues
        return int(self.data[address])

    def write(self, address: int, value: int):
        self._check(address)
        self.data[address] = value & 0xFF

    def read_word(self, address: int) -> int:
        """Read a big-endian 16-bit word"""
        self._check(address, 2)
        return (int(self.data[address]) << 8) | int(self.data[address + 1])

    def read_block(self, address: int, length: int) -> np.ndarray:
        self._check(address, length)
        return self.data[address:address + length].copy()

    def write_block(self, address: int, values: Union[bytes, np.ndarray, list]):
        if isinstance(values, (bytes, bytearray)):
            values = np.frombuffer(bytes(values), dtype=np.uint8)
        else:
            values = np.asarray(values, dtype=np.uint8)
        self._check(address, len(values))
        self.data[address:address + len(values)] = values
