"""
CHIP-8 Emulator core.

Holds the machine state (memory, registers, stack, timers, framebuffer,
keypad) and runs it one fetch-decode-execute step per cycle(). Presentation,
key mapping and frame pacing belong to whoever calls cycle().
"""

import logging
import os
import time
from enum import Enum
from typing import Callable, Dict, Optional, Union

import numpy as np

from .constants import (
    REGISTER_COUNT, FLAG_REGISTER, KEYPAD_SIZE, PROGRAM_START, MAX_ROM_SIZE,
    FONT_START, FONT_GLYPH_SIZE, MEMORY_SIZE,
)
from .decoder import Instruction, Op, decode
from .display import Framebuffer
from .errors import Chip8Error, MemoryAccessError, RomLoadError, RomSizeError, UnknownOpcode, Unimplemented
from .memory import Memory
from .stack import CallStack
from .timers import Timers


class Variant(Enum):
    CHIP8 = 'chip8'
    SUPER_CHIP = 'schip'


# Quirks per system variant
VARIANT_QUIRKS = {
    Variant.CHIP8: {
        'logic': True,     # 8xy1/8xy2/8xy3 reset vF to 0
        'shifting': True,  # 8xy6/8xyE shift vY into vX
        'memory': True,    # Fx55/Fx65 increment I register by X+1
    },
    Variant.SUPER_CHIP: {
        'logic': False,
        'shifting': False,
        'memory': False,
    },
}

RomSource = Union[bytes, bytearray, np.ndarray, str, os.PathLike]


def read_rom(rom_data: RomSource) -> bytes:
    """Get ROM bytes from raw data or a file path"""
    if isinstance(rom_data, (str, os.PathLike)):
        try:
            with open(rom_data, 'rb') as f:
                rom_bytes = f.read()
        except OSError as e:
            raise RomLoadError(e.errno, f"Cannot read ROM {os.fspath(rom_data)}: {e.strerror}") from e
    elif isinstance(rom_data, np.ndarray):
        rom_bytes = rom_data.astype(np.uint8).tobytes()
    else:
        rom_bytes = bytes(rom_data)

    if not rom_bytes:
        raise RomSizeError("ROM is empty")
    if len(rom_bytes) > MAX_ROM_SIZE:
        raise RomSizeError(f"ROM too large: {len(rom_bytes)} bytes, max {MAX_ROM_SIZE}")
    return rom_bytes


class Chip8Emulator:
    """
    Single CHIP-8 machine.

    Build one with Chip8Emulator.load(), then call cycle() repeatedly. The
    keypad is written through set_key() by the host between cycles; the
    framebuffer and timers are exposed read-only for rendering and audio.
    """

    def __init__(self, variant: Variant = Variant.CHIP8, quirks: Optional[dict] = None,
                 seed: Optional[int] = None, clock: Optional[Callable[[], float]] = None,
                 logger: Optional[logging.Logger] = None):
        self.variant = Variant(variant)
        self.quirks = dict(VARIANT_QUIRKS[self.variant])
        if quirks:
            unknown = set(quirks) - set(self.quirks)
            if unknown:
                raise ValueError(f"Unknown quirks: {sorted(unknown)}")
            self.quirks.update(quirks)

        self.logger = logger or logging.getLogger(__name__)
        self.seed = time.time_ns() if seed is None else seed
        self.rng = np.random.default_rng(self.seed)

        self.memory = Memory()
        self.display = Framebuffer()
        self.stack = CallStack()
        self.timers = Timers(clock)
        self.registers = np.zeros(REGISTER_COUNT, dtype=np.uint8)
        self.index_register = 0
        self.program_counter = PROGRAM_START
        self.keypad = np.zeros(KEYPAD_SIZE, dtype=np.uint8)

        # Instrumentation
        self.stats = {
            'instructions_executed': 0,
            'display_clears': 0,
            'display_writes': 0,
            'sprite_collisions': 0,
            'subroutine_calls': 0,
            'returns': 0,
            'jumps_taken': 0,
            'key_waits': 0,
            'timer_ticks': 0,
        }

    @classmethod
    def load(cls, rom_data: RomSource, variant: Variant = Variant.CHIP8, **kwargs) -> 'Chip8Emulator':
        """Create an emulator with the ROM copied to 0x200"""
        rom_bytes = read_rom(rom_data)
        emulator = cls(variant=variant, **kwargs)
        emulator.memory.write_block(PROGRAM_START, rom_bytes)
        emulator.logger.info("Loaded ROM: %d bytes, variant %s", len(rom_bytes), emulator.variant.name)
        emulator.logger.info("First instruction: 0x%04X", emulator.memory.read_word(PROGRAM_START))
        return emulator

    # Read-only surface for renderers and audio

    @property
    def framebuffer(self) -> np.ndarray:
        return self.display.view()

    @property
    def delay_timer(self) -> int:
        return self.timers.delay

    @property
    def sound_timer(self) -> int:
        return self.timers.sound

    def set_key(self, key: int, pressed: bool):
        """Set key state (0-F)"""
        if not 0 <= key < KEYPAD_SIZE:
            raise ValueError(f"Key index out of range: {key}")
        self.keypad[key] = 1 if pressed else 0

    def get_stats(self) -> Dict[str, int]:
        return self.stats.copy()

    # Execution

    def cycle(self):
        """Tick timers if due, then fetch, decode and execute one instruction"""
        if self.timers.tick():
            self.stats['timer_ticks'] += 1

        pc = self.program_counter
        try:
            opcode = self.memory.read_word(pc)
        except MemoryAccessError:
            self.logger.error("Error fetching opcode at PC=0x%03X", pc)
            raise
        self.program_counter += 2
        self.logger.debug("Fetched 0x%04X at PC=0x%03X", opcode, pc)

        try:
            instruction = decode(opcode)
        except UnknownOpcode as e:
            self.logger.error("Error decoding opcode 0x%04X at PC=0x%03X", opcode, pc)
            raise UnknownOpcode(opcode, pc) from e

        try:
            self.execute(instruction)
        except Chip8Error:
            self.logger.error("Error executing %s at PC=0x%03X", instruction, pc)
            raise
        self.stats['instructions_executed'] += 1

    def run(self, max_cycles: int = 1000):
        """Run emulator for max_cycles cycles"""
        for _ in range(max_cycles):
            self.cycle()

    def execute(self, instruction: Instruction):
        """Apply one decoded instruction to the machine state"""
        op = instruction.op
        x = instruction.x
        y = instruction.y
        kk = instruction.value
        nnn = instruction.address
        V = self.registers

        if op is Op.IGNORED:
            pass

        elif op is Op.CLEAR_DISPLAY:
            self.display.clear()
            self.stats['display_clears'] += 1

        elif op is Op.RETURN:
            self.program_counter = self._checked_program_counter(self.stack.pop())
            self.stats['returns'] += 1

        elif op is Op.JUMP:
            self.program_counter = self._checked_program_counter(nnn)
            self.stats['jumps_taken'] += 1

        elif op is Op.CALL:
            target = self._checked_program_counter(nnn)
            self.stack.push(self.program_counter)
            self.program_counter = target
            self.stats['subroutine_calls'] += 1

        elif op is Op.SKIP_IF_EQ:
            self._skip_if(int(V[x]) == kk)

        elif op is Op.SKIP_IF_NE:
            self._skip_if(int(V[x]) != kk)

        elif op is Op.SKIP_IF_REGISTERS_EQ:
            self._skip_if(int(V[x]) == int(V[y]))

        elif op is Op.SKIP_IF_REGISTERS_NE:
            self._skip_if(int(V[x]) != int(V[y]))

        elif op is Op.SET_REGISTER:
            V[x] = kk

        elif op is Op.ADD:
            V[x] = (int(V[x]) + kk) & 0xFF

        elif op is Op.SET_REGISTER_TO_REGISTER:
            V[x] = V[y]

        elif op in (Op.OR, Op.AND, Op.XOR):
            self._logic(op, x, y)

        elif op in (Op.ADD_REGISTERS, Op.SUB_REGISTERS, Op.SUB_REGISTERS_REVERSE):
            self._arithmetic(op, x, y)

        elif op in (Op.SHIFT_RIGHT, Op.SHIFT_LEFT):
            self._shift(op, x, y)

        elif op is Op.SET_ADDRESS_REGISTER:
            self.index_register = nnn

        elif op is Op.JUMP_PLUS_REGISTER:
            self.program_counter = self._checked_program_counter(nnn + int(V[0]))
            self.stats['jumps_taken'] += 1

        elif op is Op.RANDOM:
            V[x] = int(self.rng.integers(0, 256)) & kk

        elif op is Op.DRAW:
            self._draw_sprite(x, y, kk)

        elif op is Op.SKIP_IF_KEY_PRESSED:
            self._skip_if(self.keypad[int(V[x]) & 0xF])

        elif op is Op.SKIP_IF_KEY_NOT_PRESSED:
            self._skip_if(not self.keypad[int(V[x]) & 0xF])

        elif op is Op.WAIT_FOR_KEY_PRESS:
            self._wait_for_key(x)

        elif op is Op.SET_REGISTER_TO_DELAY_TIMER:
            V[x] = self.timers.delay

        elif op is Op.SET_DELAY_TIMER:
            self.timers.delay = int(V[x])

        elif op is Op.SET_SOUND_TIMER:
            self.timers.sound = int(V[x])

        elif op is Op.ADD_TO_ADDRESS_REGISTER:
            self.index_register = (self.index_register + int(V[x])) & 0xFFFF

        elif op is Op.SET_ADDRESS_REGISTER_TO_SPRITE:
            self.index_register = FONT_START + (int(V[x]) & 0xF) * FONT_GLYPH_SIZE

        elif op is Op.STORE_BCD:
            value = int(V[x])
            self.memory.write_block(self.index_register, [value // 100, (value // 10) % 10, value % 10])

        elif op is Op.STORE_REGISTERS:
            self.memory.write_block(self.index_register, V[:x + 1])
            if self.quirks['memory']:
                self.index_register = (self.index_register + x + 1) & 0xFFFF

        elif op is Op.READ_REGISTERS:
            V[:x + 1] = self.memory.read_block(self.index_register, x + 1)
            if self.quirks['memory']:
                self.index_register = (self.index_register + x + 1) & 0xFFFF

        else:
            raise Unimplemented(instruction)

    def _skip_if(self, condition):
        if condition:
            self.program_counter = self._checked_program_counter(self.program_counter + 2)

    def _checked_program_counter(self, address: int) -> int:
        """New PC values must leave room for a full opcode fetch"""
        if address < 0 or address + 2 > MEMORY_SIZE:
            raise MemoryAccessError(address, 2)
        return address

    def _logic(self, op: Op, x: int, y: int):
        """8xy1/8xy2/8xy3"""
        vx = int(self.registers[x])
        vy = int(self.registers[y])
        if op is Op.OR:
            self.registers[x] = vx | vy
        elif op is Op.AND:
            self.registers[x] = vx & vy
        else:
            self.registers[x] = vx ^ vy

        if self.quirks['logic']:
            self.registers[FLAG_REGISTER] = 0

    def _arithmetic(self, op: Op, x: int, y: int):
        """8xy4/8xy5/8xy7. Operands are read before vF is written."""
        vx = int(self.registers[x])
        vy = int(self.registers[y])
        if op is Op.ADD_REGISTERS:
            result = vx + vy
            flag = 1 if result > 0xFF else 0
        elif op is Op.SUB_REGISTERS:
            result = vx - vy
            flag = 1 if vx >= vy else 0  # NOT borrow
        else:
            result = vy - vx
            flag = 1 if vy >= vx else 0

        self.registers[x] = result & 0xFF
        self.registers[FLAG_REGISTER] = flag

    def _shift(self, op: Op, x: int, y: int):
        """8xy6/8xyE. vF gets the bit shifted out."""
        source = int(self.registers[y if self.quirks['shifting'] else x])
        if op is Op.SHIFT_RIGHT:
            result = source >> 1
            flag = source & 0x1
        else:
            result = (source << 1) & 0xFF
            flag = (source & 0x80) >> 7

        self.registers[x] = result
        self.registers[FLAG_REGISTER] = flag

    def _draw_sprite(self, x_reg: int, y_reg: int, height: int):
        """Draw a sprite at position (Vx, Vy) with given height, vF = collision"""
        vx = int(self.registers[x_reg])
        vy = int(self.registers[y_reg])
        sprite = self.memory.read_block(self.index_register, height)
        self.logger.debug("Drawing sprite at (%d, %d), height: %d", vx, vy, height)

        collision = self.display.draw_sprite(vx, vy, sprite)
        self.registers[FLAG_REGISTER] = 1 if collision else 0
        self.stats['display_writes'] += 1
        if collision:
            self.stats['sprite_collisions'] += 1

    def _wait_for_key(self, x: int):
        """Fx0A: busy-wait by re-fetching this instruction until a key is down"""
        pressed = np.flatnonzero(self.keypad)
        if len(pressed):
            self.registers[x] = int(pressed[0])
        else:
            self.program_counter -= 2
            self.stats['key_waits'] += 1
