#!/usr/bin/env python3
"""
cyclesim - Teaching CPU Cycle Simulator CLI

Usage:
    cyclesim list [--type arithmetic|logical|data|control|io]
    cyclesim run "<mnemonic>" [--set REG=VAL ...] [--mem ADDR=VAL ...]
                              [--format txt|json] [--animate] [--speed S]
                              [--narrate] [--dump] [--allow-unknown]

Values accept 0x hex (0x2A), Intel-style trailing h (60h) or decimal.

Examples:
    cyclesim list --type control
    cyclesim run "DIV CX" --set AX=10 --set CX=3
    cyclesim run "PUSH AX" --set AX=99 --set SP=10 --format json
    cyclesim run "ADD AX, BX" --set AX=2 --set BX=3 --animate --speed 2 --narrate
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from . import __version__
from .config import ConfigError, load_config
from .cpu import catalogue
from .cpu.catalogue import Instruction, InstructionType, UnknownInstruction
from .cpu.regs import RegisterStateError, display
from .mem.memory import Memory, MemoryOutOfBounds
from .sim.narration import phase_narration
from .sim.session import Simulator

logger = logging.getLogger('cyclesim')

EXIT_OK = 0
EXIT_CONTRACT = 1
EXIT_USAGE = 2


def parse_int_arg(value: str) -> int:
    """Parse an integer that may be 0x-hex, trailing-h hex, or decimal."""
    value = value.strip()
    neg = value.startswith('-')
    if neg:
        value = value[1:]
    if value.lower().startswith('0x'):
        result = int(value, 16)
    elif value.lower().endswith('h'):
        result = int(value[:-1], 16)
    else:
        result = int(value)
    return -result if neg else result


def parse_assignment(text: str):
    """Split 'NAME=VALUE' into (NAME, int)."""
    if '=' not in text:
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got {text!r}")
    name, value = text.split('=', 1)
    try:
        return name.strip(), parse_int_arg(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"bad value in {text!r}") from None


def setup_logging(verbose: int, quiet: bool, default_level: str = 'INFO'):
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = getattr(logging, default_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    logging.basicConfig(level=level, handlers=[handler], force=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='cyclesim',
        description='Step a teaching CPU through fetch/decode/execute/memory/writeback',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('--config', help='JSON configuration file')
    parser.add_argument('--verbose', '-v', action='count', default=0,
                        help='Debug logging')
    parser.add_argument('--quiet', '-q', action='store_true',
                        help='Only log errors')
    parser.add_argument('--version', action='version',
                        version=f'cyclesim {__version__}')

    sub = parser.add_subparsers(dest='command', required=True)

    p_list = sub.add_parser('list', help='Show the instruction catalogue')
    p_list.add_argument('--type', choices=[t.value for t in InstructionType],
                        help='Only show one category')

    p_run = sub.add_parser('run', help='Execute one instruction step by step')
    p_run.add_argument('mnemonic', help='Exact catalogue mnemonic, e.g. "MOV AX, 42"')
    p_run.add_argument('--set', dest='registers', action='append', default=[],
                       type=parse_assignment, metavar='REG=VAL',
                       help='Initial register value (repeatable)')
    p_run.add_argument('--mem', dest='memory', action='append', default=[],
                       type=parse_assignment, metavar='ADDR=VAL',
                       help='Initial memory cell (repeatable)')
    p_run.add_argument('--format', choices=['txt', 'json'], default='txt')
    p_run.add_argument('--animate', action='store_true',
                       help='Pace steps at the configured interval')
    p_run.add_argument('--speed', type=float, default=1.0,
                       help='Playback speed multiplier for --animate')
    p_run.add_argument('--narrate', action='store_true',
                       help='Add beginner-level narration to each phase')
    p_run.add_argument('--dump', action='store_true',
                       help='Hex dump of memory after the instruction')
    p_run.add_argument('--allow-unknown', action='store_true',
                       help='Run mnemonics outside the catalogue (generic execute step)')
    return parser


def cmd_list(args) -> int:
    wanted = InstructionType(args.type) if args.type else None
    for itype, instructions in catalogue.by_type().items():
        if wanted is not None and itype != wanted:
            continue
        print(f"{catalogue.CATEGORY_LABELS[itype]} ({len(instructions)})")
        for instr in instructions:
            print(f"  {instr.id:3d}  {instr.mnemonic:15s} {instr.description}")
    return EXIT_OK


def _resolve_instruction(args) -> Instruction:
    try:
        return catalogue.find(args.mnemonic)
    except UnknownInstruction:
        if not args.allow_unknown:
            raise
        logger.warning("%r is not in the catalogue, running generic cycle", args.mnemonic)
        return Instruction(0, args.mnemonic, 'Unknown instruction',
                           InstructionType.CONTROL, 0)


def cmd_run(args, config) -> int:
    instruction = _resolve_instruction(args)

    registers = config.registers()
    for name, value in args.registers:
        registers[name] = value

    memory = Memory(config.memory_size)
    for addr, value in args.memory:
        memory.write(parse_int_arg(addr), value)

    sim = Simulator(config, registers=registers, memory=memory.cells())
    sim.set_speed(args.speed)
    before = memory.snapshot()

    if args.format == 'json':
        steps = sim.run(instruction)
        print(json.dumps({
            'instruction': instruction.mnemonic,
            'steps': [s.to_dict() for s in steps],
            'registers': sim.state.registers,
            'memoryChanges': {str(a): new for a, (_, new) in
                              Memory.diff(before, sim.state.memory).items()},
        }, indent=2))
        return EXIT_OK

    def show(step):
        print(step)
        if args.narrate:
            print(f"            {phase_narration(step.phase, instruction)}")

    print(f"{instruction.mnemonic}")
    print(f"  before: {display(sim.state.registers)}")
    if args.animate:
        sim.load(instruction)
        sim.play(on_step=show)
    else:
        for step in sim.run(instruction):
            show(step)
    print(f"  after:  {display(sim.state.registers)}")
    for addr, (old, new) in Memory.diff(before, sim.state.memory).items():
        print(f"  mem[{addr}]: {old} -> {new}")
    if args.dump:
        print(Memory.from_cells(sim.state.memory).hexdump())
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        setup_logging(args.verbose, args.quiet)
        logger.error("%s", e)
        return EXIT_USAGE
    setup_logging(args.verbose, args.quiet, config.log_level)

    if args.command == 'run' and args.speed not in config.speeds:
        logger.error("Unsupported speed %s; choose one of %s",
                     args.speed, list(config.speeds))
        return EXIT_USAGE

    try:
        if args.command == 'list':
            return cmd_list(args)
        return cmd_run(args, config)
    except UnknownInstruction as e:
        logger.error("Unknown instruction %s (see 'cyclesim list')", e)
        return EXIT_USAGE
    except (RegisterStateError, MemoryOutOfBounds, ValueError) as e:
        logger.error("%s", e)
        return EXIT_CONTRACT


if __name__ == '__main__':
    sys.exit(main())
