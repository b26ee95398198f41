"""
chip8vm - CHIP-8 / SUPER-CHIP interpreter core.
"""

from .chip8 import Chip8Emulator, Variant, VARIANT_QUIRKS
from .decoder import Instruction, Op, decode
from .display import Framebuffer
from .errors import (
    Chip8Error, UnknownOpcode, Unimplemented, StackFull, StackEmpty,
    MemoryAccessError, RomLoadError, RomSizeError,
)

__version__ = "0.1.0"


def load(rom_data, variant=Variant.CHIP8, **kwargs) -> Chip8Emulator:
    """Build an emulator from ROM bytes or a ROM path"""
    return Chip8Emulator.load(rom_data, variant, **kwargs)
