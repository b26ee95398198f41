"""
Shared fixtures for the chip8vm test suite.
"""

import pytest

from chip8vm import Chip8Emulator, Variant


class FakeClock:
    """Manually advanced clock for timer tests"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_emulator(clock):
    """Factory: load a ROM (list of 16-bit words or raw bytes) with a fixed seed and fake clock"""
    def _make(program, variant=Variant.CHIP8, **kwargs):
        if isinstance(program, (bytes, bytearray)):
            rom = bytes(program)
        else:
            rom = b"".join(word.to_bytes(2, "big") for word in program)
        kwargs.setdefault('seed', 1234)
        kwargs.setdefault('clock', clock)
        return Chip8Emulator.load(rom, variant=variant, **kwargs)
    return _make


@pytest.fixture
def emulator(make_emulator):
    """Emulator with a single NOP loaded, for executing instructions directly"""
    return make_emulator(bytes([0x00, 0x00]))
