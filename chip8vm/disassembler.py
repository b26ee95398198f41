"""
CHIP-8 ROM disassembler built on the decoder.
"""

from typing import List, Tuple

from .constants import PROGRAM_START
from .decoder import Instruction, Op, decode
from .errors import UnknownOpcode

# Op -> (mnemonic, operand template, description template).
# Templates are filled from the instruction fields: x, y, kk (value), nnn (address).
_SYNTAX = {
    Op.IGNORED: ("SYS", "${nnn:03X}", "no-op system word"),
    Op.CLEAR_DISPLAY: ("CLS", "", "screen := blank"),
    Op.RETURN: ("RET", "", "PC := pop()"),
    Op.JUMP: ("JP", "${nnn:03X}", "PC := {nnn:03X}"),
    Op.CALL: ("CALL", "${nnn:03X}", "push(PC); PC := {nnn:03X}"),
    Op.SKIP_IF_EQ: ("SE", "V{x:X}, #{kk:02X}", "skip next when V{x:X} = {kk:02X}"),
    Op.SKIP_IF_NE: ("SNE", "V{x:X}, #{kk:02X}", "skip next when V{x:X} <> {kk:02X}"),
    Op.SKIP_IF_REGISTERS_EQ: ("SE", "V{x:X}, V{y:X}", "skip next when V{x:X} = V{y:X}"),
    Op.SKIP_IF_REGISTERS_NE: ("SNE", "V{x:X}, V{y:X}", "skip next when V{x:X} <> V{y:X}"),
    Op.SET_REGISTER: ("LD", "V{x:X}, #{kk:02X}", "V{x:X} := {kk:02X}"),
    Op.ADD: ("ADD", "V{x:X}, #{kk:02X}", "V{x:X} := V{x:X} + {kk:02X}, flag untouched"),
    Op.SET_REGISTER_TO_REGISTER: ("LD", "V{x:X}, V{y:X}", "V{x:X} := V{y:X}"),
    Op.OR: ("OR", "V{x:X}, V{y:X}", "V{x:X} := V{x:X} | V{y:X}"),
    Op.AND: ("AND", "V{x:X}, V{y:X}", "V{x:X} := V{x:X} & V{y:X}"),
    Op.XOR: ("XOR", "V{x:X}, V{y:X}", "V{x:X} := V{x:X} ^ V{y:X}"),
    Op.ADD_REGISTERS: ("ADD", "V{x:X}, V{y:X}", "V{x:X} := V{x:X} + V{y:X}; VF := carry"),
    Op.SUB_REGISTERS: ("SUB", "V{x:X}, V{y:X}", "V{x:X} := V{x:X} - V{y:X}; VF := no borrow"),
    Op.SHIFT_RIGHT: ("SHR", "V{x:X}, V{y:X}", "V{x:X} := source >> 1; VF := bit 0"),
    Op.SUB_REGISTERS_REVERSE: ("SUBN", "V{x:X}, V{y:X}", "V{x:X} := V{y:X} - V{x:X}; VF := no borrow"),
    Op.SHIFT_LEFT: ("SHL", "V{x:X}, V{y:X}", "V{x:X} := source << 1; VF := bit 7"),
    Op.SET_ADDRESS_REGISTER: ("LD", "I, ${nnn:03X}", "I := {nnn:03X}"),
    Op.JUMP_PLUS_REGISTER: ("JP", "V0, ${nnn:03X}", "PC := {nnn:03X} + V0"),
    Op.RANDOM: ("RND", "V{x:X}, #{kk:02X}", "V{x:X} := rand() & {kk:02X}"),
    Op.DRAW: ("DRW", "V{x:X}, V{y:X}, #{kk:X}", "sprite[I..I+{kk}] at (V{x:X}, V{y:X}); VF := collision"),
    Op.SKIP_IF_KEY_PRESSED: ("SKP", "V{x:X}", "skip next when key[V{x:X}] down"),
    Op.SKIP_IF_KEY_NOT_PRESSED: ("SKNP", "V{x:X}", "skip next when key[V{x:X}] up"),
    Op.SET_REGISTER_TO_DELAY_TIMER: ("LD", "V{x:X}, DT", "V{x:X} := delay timer"),
    Op.WAIT_FOR_KEY_PRESS: ("LD", "V{x:X}, K", "V{x:X} := next key down (repeats until one is)"),
    Op.SET_DELAY_TIMER: ("LD", "DT, V{x:X}", "delay timer := V{x:X}"),
    Op.SET_SOUND_TIMER: ("LD", "ST, V{x:X}", "sound timer := V{x:X}"),
    Op.ADD_TO_ADDRESS_REGISTER: ("ADD", "I, V{x:X}", "I := I + V{x:X}"),
    Op.SET_ADDRESS_REGISTER_TO_SPRITE: ("LD", "F, V{x:X}", "I := font glyph of V{x:X}"),
    Op.STORE_BCD: ("LD", "B, V{x:X}", "mem[I..I+2] := decimal digits of V{x:X}"),
    Op.STORE_REGISTERS: ("LD", "[I], V{x:X}", "mem[I..] := V0..V{x:X}"),
    Op.READ_REGISTERS: ("LD", "V{x:X}, [I]", "V0..V{x:X} := mem[I..]"),
}


def format_instruction(instruction: Instruction) -> Tuple[str, str, str]:
    """Render a decoded instruction as (mnemonic, operands, description)"""
    mnemonic, operands, description = _SYNTAX[instruction.op]
    fields = {
        'x': instruction.x,
        'y': instruction.y,
        'kk': instruction.value,
        'nnn': instruction.address,
    }
    return mnemonic, operands.format(**fields), description.format(**fields)


def disassemble(rom_data: bytes, start_address: int = PROGRAM_START) -> List[Tuple[int, int, str, str, str]]:
    """
    Disassemble entire ROM
    Returns list of (address, instruction, mnemonic, operands, description)

    Words that don't decode (sprite data, padding) come out as DW rows.
    A trailing odd byte is listed as DB.
    """
    disassembly = []
    address = start_address

    for i in range(0, len(rom_data) - 1, 2):
        # Combine two bytes into 16-bit instruction (big-endian)
        word = (rom_data[i] << 8) | rom_data[i + 1]
        try:
            mnemonic, operands, description = format_instruction(decode(word))
        except UnknownOpcode:
            mnemonic, operands, description = "DW", f"${word:04X}", "data word"
        disassembly.append((address, word, mnemonic, operands, description))
        address += 2

    if len(rom_data) % 2:
        last = rom_data[-1]
        disassembly.append((address, last, "DB", f"${last:02X}", "data byte"))

    return disassembly


def format_listing(disassembly: List[Tuple[int, int, str, str, str]]) -> str:
    lines = ["Address  Opcode  Mnemonic Operands        Description"]
    for address, word, mnemonic, operands, description in disassembly:
        lines.append(f"${address:03X}    ${word:04X}   {mnemonic:<8} {operands:<15} ; {description}")
    return '\n'.join(lines)
