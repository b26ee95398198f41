"""
CHIP-8 opcode decoder.

Turns a 16-bit big-endian opcode into an Instruction: an Op tag plus the
operands that op uses. Decoding is pure; it never looks at emulator state.

Operand fields, by nibble of the opcode 0xHXYN:
    x        bits 8-11   register index
    y        bits 4-7    register index
    value    low 8 bits  (NN immediate) or low 4 bits (N, draw height)
    address  low 12 bits (NNN)
"""

from dataclasses import dataclass
from enum import Enum, auto

from .errors import UnknownOpcode


class Op(Enum):
    IGNORED = auto()                 # 0x00 low byte: SYS/NOP
    CLEAR_DISPLAY = auto()           # 00E0
    RETURN = auto()                  # 00EE
    JUMP = auto()                    # 1NNN
    CALL = auto()                    # 2NNN
    SKIP_IF_EQ = auto()              # 3XNN
    SKIP_IF_NE = auto()              # 4XNN
    SKIP_IF_REGISTERS_EQ = auto()    # 5XY0
    SET_REGISTER = auto()            # 6XNN
    ADD = auto()                     # 7XNN
    SET_REGISTER_TO_REGISTER = auto()  # 8XY0
    OR = auto()                      # 8XY1
    AND = auto()                     # 8XY2
    XOR = auto()                     # 8XY3
    ADD_REGISTERS = auto()           # 8XY4
    SUB_REGISTERS = auto()           # 8XY5
    SHIFT_RIGHT = auto()             # 8XY6
    SUB_REGISTERS_REVERSE = auto()   # 8XY7
    SHIFT_LEFT = auto()              # 8XYE
    SKIP_IF_REGISTERS_NE = auto()    # 9XY0
    SET_ADDRESS_REGISTER = auto()    # ANNN
    JUMP_PLUS_REGISTER = auto()      # BNNN
    RANDOM = auto()                  # CXNN
    DRAW = auto()                    # DXYN
    SKIP_IF_KEY_PRESSED = auto()     # EX9E
    SKIP_IF_KEY_NOT_PRESSED = auto()  # EXA1
    SET_REGISTER_TO_DELAY_TIMER = auto()  # FX07
    WAIT_FOR_KEY_PRESS = auto()      # FX0A
    SET_DELAY_TIMER = auto()         # FX15
    SET_SOUND_TIMER = auto()         # FX18
    ADD_TO_ADDRESS_REGISTER = auto()  # FX1E
    SET_ADDRESS_REGISTER_TO_SPRITE = auto()  # FX29
    STORE_BCD = auto()               # FX33
    STORE_REGISTERS = auto()         # FX55
    READ_REGISTERS = auto()          # FX65


@dataclass(frozen=True)
class Instruction:
    op: Op
    opcode: int
    x: int = 0
    y: int = 0
    value: int = 0
    address: int = 0

    def __str__(self) -> str:
        return f"{self.op.name}(0x{self.opcode:04X})"


# 8XYN register/arithmetic family, keyed by N
_REGISTER_OPS = {
    0x0: Op.SET_REGISTER_TO_REGISTER,
    0x1: Op.OR,
    0x2: Op.AND,
    0x3: Op.XOR,
    0x4: Op.ADD_REGISTERS,
    0x5: Op.SUB_REGISTERS,
    0x6: Op.SHIFT_RIGHT,
    0x7: Op.SUB_REGISTERS_REVERSE,
    0xE: Op.SHIFT_LEFT,
}

# EXNN key family, keyed by NN
_KEY_OPS = {
    0x9E: Op.SKIP_IF_KEY_PRESSED,
    0xA1: Op.SKIP_IF_KEY_NOT_PRESSED,
}

# FXNN timer/memory family, keyed by NN
_MISC_OPS = {
    0x07: Op.SET_REGISTER_TO_DELAY_TIMER,
    0x0A: Op.WAIT_FOR_KEY_PRESS,
    0x15: Op.SET_DELAY_TIMER,
    0x18: Op.SET_SOUND_TIMER,
    0x1E: Op.ADD_TO_ADDRESS_REGISTER,
    0x29: Op.SET_ADDRESS_REGISTER_TO_SPRITE,
    0x33: Op.STORE_BCD,
    0x55: Op.STORE_REGISTERS,
    0x65: Op.READ_REGISTERS,
}

# Families whose whole low 12 bits are an address
_ADDRESS_OPS = {
    0x1: Op.JUMP,
    0x2: Op.CALL,
    0xA: Op.SET_ADDRESS_REGISTER,
    0xB: Op.JUMP_PLUS_REGISTER,
}

# Families of the form XNN
_IMMEDIATE_OPS = {
    0x3: Op.SKIP_IF_EQ,
    0x4: Op.SKIP_IF_NE,
    0x6: Op.SET_REGISTER,
    0x7: Op.ADD,
    0xC: Op.RANDOM,
}


def decode(opcode: int) -> Instruction:
    """
    Decode a 16-bit opcode.
    Raises UnknownOpcode for anything outside the CHIP-8 instruction set.
    """
    if not 0 <= opcode <= 0xFFFF:
        raise UnknownOpcode(opcode)

    family = (opcode & 0xF000) >> 12
    x = (opcode & 0x0F00) >> 8
    y = (opcode & 0x00F0) >> 4
    n = opcode & 0x000F
    kk = opcode & 0x00FF
    nnn = opcode & 0x0FFF

    if family == 0x0:
        return _decode_0xxx(opcode, kk)
    elif family in _ADDRESS_OPS:
        return Instruction(_ADDRESS_OPS[family], opcode, address=nnn)
    elif family in _IMMEDIATE_OPS:
        return Instruction(_IMMEDIATE_OPS[family], opcode, x=x, value=kk)
    elif family == 0x5 or family == 0x9:
        if n != 0:  # 5xy0/9xy0 format check
            raise UnknownOpcode(opcode)
        op = Op.SKIP_IF_REGISTERS_EQ if family == 0x5 else Op.SKIP_IF_REGISTERS_NE
        return Instruction(op, opcode, x=x, y=y)
    elif family == 0x8:
        if n not in _REGISTER_OPS:
            raise UnknownOpcode(opcode)
        return Instruction(_REGISTER_OPS[n], opcode, x=x, y=y)
    elif family == 0xD:
        return Instruction(Op.DRAW, opcode, x=x, y=y, value=n)
    elif family == 0xE:
        if kk not in _KEY_OPS:
            raise UnknownOpcode(opcode)
        return Instruction(_KEY_OPS[kk], opcode, x=x)
    else:  # 0xF
        if kk not in _MISC_OPS:
            raise UnknownOpcode(opcode)
        return Instruction(_MISC_OPS[kk], opcode, x=x)


def _decode_0xxx(opcode: int, kk: int) -> Instruction:
    """0x0 family: CLS, RET and the ignored SYS/NOP words"""
    if kk == 0xE0:
        return Instruction(Op.CLEAR_DISPLAY, opcode)
    elif kk == 0xEE:
        return Instruction(Op.RETURN, opcode)
    elif kk == 0x00:
        return Instruction(Op.IGNORED, opcode, address=opcode & 0x0FFF)
    raise UnknownOpcode(opcode)
