"""
Exceptions raised by the CHIP-8 core.

None of these are handled inside the emulator; whoever drives ``cycle``
decides whether to halt, reset or report.
"""

from typing import Optional


class Chip8Error(Exception):
    """Base class for all emulator errors"""


class UnknownOpcode(Chip8Error):
    """An opcode that does not decode to any known instruction"""

    def __init__(self, opcode: int, pc: Optional[int] = None):
        self.opcode = opcode
        self.pc = pc
        if pc is None:
            message = f"Unknown opcode 0x{opcode:04X}"
        else:
            message = f"Unknown opcode 0x{opcode:04X} at PC=0x{pc:03X}"
        super().__init__(message)


class Unimplemented(Chip8Error):
    """A decoded instruction the execution engine has no handler for"""

    def __init__(self, instruction):
        self.instruction = instruction
        super().__init__(f"Unimplemented instruction: {instruction}")


class StackFull(Chip8Error):
    """CALL with all 16 stack slots in use"""


class StackEmpty(Chip8Error):
    """RET with nothing on the stack"""


class MemoryAccessError(Chip8Error, IndexError):
    """Read or write outside the 4096-byte address space"""

    def __init__(self, address: int, length: int = 1):
        self.address = address
        self.length = length
        super().__init__(f"Memory access out of range: 0x{address:04X} (+{length})")


class RomLoadError(Chip8Error, OSError):
    """ROM file missing or unreadable"""


class RomSizeError(Chip8Error, ValueError):
    """ROM is empty or does not fit between 0x200 and the end of memory"""
