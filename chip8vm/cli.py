#!/usr/bin/env python3
"""
Headless command-line runner for the CHIP-8 core.

    chip8vm run ROM [--variant chip8|schip] [--cycles N] [--show] [--png out.png]
    chip8vm disasm ROM
"""

import argparse
import logging
import sys

from .chip8 import Chip8Emulator, Variant, read_rom
from .disassembler import disassemble, format_listing
from .errors import Chip8Error


def configure_logging(verbose: bool = False, debug_file: str = None):
    level = logging.DEBUG if verbose or debug_file else logging.WARNING
    handlers = [logging.StreamHandler(sys.stderr)]
    if debug_file:
        handlers.append(logging.FileHandler(debug_file, mode='w', encoding='utf-8'))
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
        handlers=handlers,
        force=True,
    )
    if debug_file and not verbose:
        # Full trace goes to the file only
        handlers[0].setLevel(logging.WARNING)


def run_rom(args) -> int:
    emulator = Chip8Emulator.load(args.rom, variant=Variant(args.variant), seed=args.seed)

    status = 0
    try:
        emulator.run(max_cycles=args.cycles)
    except Chip8Error as e:
        print(f"Emulator error: {e}", file=sys.stderr)
        status = 1

    print("Execution completed!" if status == 0 else "Execution stopped.")
    print(f"Program counter: 0x{emulator.program_counter:03X}")
    print("CHIP-8 Emulator Statistics:")
    print("-" * 30)
    for key, value in emulator.get_stats().items():
        print(f"{key:25s}: {value}")

    if args.show:
        print("\nDisplay output:")
        print(emulator.display.as_text())

    if args.png:
        emulator.display.save_png(args.png, scale=args.scale)
        print(f"Display saved to: {args.png}")

    return status


def disasm_rom(args) -> int:
    print(format_listing(disassemble(read_rom(args.rom))))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='chip8vm', description='Headless CHIP-8 interpreter')
    subparsers = parser.add_subparsers(dest='command', required=True)

    run_parser = subparsers.add_parser('run', help='Run a ROM for a fixed number of cycles')
    run_parser.add_argument('rom', help='ROM file to load')
    run_parser.add_argument('--variant', choices=[v.value for v in Variant], default=Variant.CHIP8.value,
                            help='System variant selecting quirk behavior')
    run_parser.add_argument('--cycles', type=int, default=1000, help='Number of cycles to execute')
    run_parser.add_argument('--seed', type=int, help='Random seed for CXNN')
    run_parser.add_argument('--show', action='store_true', help='Print the final display')
    run_parser.add_argument('--png', help='Save the final display as a PNG')
    run_parser.add_argument('--scale', type=int, default=8, help='PNG scale factor')
    run_parser.add_argument('--debug-file', help='Write a debug trace to this file')
    run_parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging to stderr')
    run_parser.set_defaults(func=run_rom)

    disasm_parser = subparsers.add_parser('disasm', help='Disassemble a ROM')
    disasm_parser.add_argument('rom', help='ROM file to disassemble')
    disasm_parser.set_defaults(func=disasm_rom)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == 'run' and args.scale < 1:
        parser.error("scale must be greater than 0")

    try:
        configure_logging(getattr(args, 'verbose', False), getattr(args, 'debug_file', None))
    except OSError as e:
        print(f"Cannot open debug file: {e}", file=sys.stderr)
        return 1

    try:
        return args.func(args)
    except (OSError, ValueError) as e:
        print(f"Error loading ROM: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
