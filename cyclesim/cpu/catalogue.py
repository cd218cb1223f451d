"""
cyclesim - Instruction Catalogue

The teaching CPU does not decode binary opcodes. Every instruction is a
fixed, pre-formatted mnemonic string covering exactly one operand
combination ("MOV AX, 42", "ADD AX, BX", ...). The engine dispatches on
that exact string, so two catalogue entries may never share a mnemonic.

The ``type`` field only groups instructions for display; the engine never
looks at it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple


class InstructionType(Enum):
    ARITHMETIC = 'arithmetic'
    LOGICAL = 'logical'
    DATA = 'data'
    CONTROL = 'control'
    IO = 'io'


# Display order + labels for catalogue grouping
CATEGORY_LABELS = {
    InstructionType.ARITHMETIC: 'Math Operations',
    InstructionType.LOGICAL:    'Logical Operations',
    InstructionType.DATA:       'Data Movement',
    InstructionType.CONTROL:    'Program Flow',
    InstructionType.IO:         'Input/Output',
}

CATEGORY_DESCRIPTIONS = {
    InstructionType.ARITHMETIC: 'Instructions for basic math like addition and subtraction',
    InstructionType.LOGICAL:    'Instructions for comparing and manipulating bits',
    InstructionType.DATA:       'Instructions for moving data between registers and memory',
    InstructionType.CONTROL:    'Instructions for changing the flow of program execution',
    InstructionType.IO:         'Instructions for interacting with external devices',
}


class CatalogueError(Exception):
    """Raised when a catalogue is built with duplicate ids or mnemonics."""
    pass


class UnknownInstruction(KeyError):
    """Raised by catalogue lookups for a mnemonic / id that is not listed."""
    pass


@dataclass(frozen=True)
class Instruction:
    id: int
    mnemonic: str
    description: str
    type: InstructionType
    operands: int
    beginner_explanation: Optional[str] = None


# ──────────────────────────────────────────────
# The fixed catalogue
# ──────────────────────────────────────────────
# Format: (id, mnemonic, description, type, operands, beginner_explanation)

_A = InstructionType.ARITHMETIC
_L = InstructionType.LOGICAL
_D = InstructionType.DATA
_C = InstructionType.CONTROL
_IO = InstructionType.IO

_ENTRIES = [
    # ── Arithmetic ──
    (1,  'ADD AX, BX',    'Add BX to AX, result in AX',              _A, 2,
     'Adds the number in BX to the number in AX and keeps the answer in AX.'),
    (2,  'SUB CX, DX',    'Subtract DX from CX, result in CX',       _A, 2,
     'Takes the number in DX away from the number in CX.'),
    (3,  'MUL BX',        'Multiply AX by BX, result in AX',         _A, 1,
     'Multiplies AX by BX, like working out 6 x 7.'),
    (4,  'DIV CX',        'Divide AX by CX, quotient in AX, remainder in DX', _A, 1,
     'Shares AX into CX equal parts: the answer goes to AX and what is left over goes to DX.'),
    (5,  'INC CX',        'Increment CX by 1',                       _A, 1,
     'Adds one to CX, like counting up on your fingers.'),
    (6,  'DEC BX',        'Decrement BX by 1',                       _A, 1,
     'Takes one away from BX, like a countdown.'),

    # ── Logical ──
    (7,  'AND AX, 0xFF',  'Bitwise AND of AX with 0xFF',             _L, 2,
     'Keeps only the lowest 8 bits of AX and clears the rest.'),
    (8,  'OR BX, CX',     'Bitwise OR of BX with CX, result in BX',  _L, 2,
     'Turns on every bit in BX that is on in either BX or CX.'),
    (9,  'XOR DX, DX',    'Bitwise XOR of DX with itself',           _L, 2,
     'A quick trick to set DX to zero.'),
    (10, 'NOT AX',        'Bitwise complement of AX (16-bit)',       _L, 1,
     'Flips every bit in AX: ones become zeros and zeros become ones.'),
    (11, 'CMP AX, BX',    'Compare AX with BX and set FLAGS',        _L, 2,
     'Checks whether AX and BX hold the same number and remembers the answer in FLAGS.'),

    # ── Data movement ──
    (12, 'MOV AX, 42',    'Load immediate value 42 into AX',         _D, 2,
     'Puts the number 42 into the AX box.'),
    (13, 'MOV BX, AX',    'Copy AX into BX',                         _D, 2,
     'Copies whatever is in AX into BX. AX keeps its value.'),
    (14, 'XCHG AX, BX',   'Exchange AX and BX',                      _D, 2,
     'Swaps the numbers in AX and BX.'),
    (15, 'MOV AX, [100]', 'Load memory address 100 into AX',         _D, 2,
     'Reads the number stored at memory address 100 and puts it in AX.'),
    (16, 'MOV [200], BX', 'Store BX at memory address 200',          _D, 2,
     'Writes the number in BX into memory address 200.'),
    (17, 'PUSH AX',       'Push AX onto the stack',                  _D, 1,
     'Puts AX on top of the stack, like adding a plate to a pile.'),
    (18, 'POP BX',        'Pop the top of the stack into BX',        _D, 1,
     'Takes the top plate off the stack and puts its number in BX.'),

    # ── Control flow ──
    (19, 'JMP 0x100',     'Unconditional jump to address 0x100',     _C, 1,
     'Skips straight to the instruction at address 0x100.'),
    (20, 'JE 0x200',      'Jump to 0x200 if the equal flag is set',  _C, 1,
     'Jumps to 0x200 only if the last comparison said "equal".'),
    (21, 'JNE 0x300',     'Jump to 0x300 if the equal flag is clear', _C, 1,
     'Jumps to 0x300 only if the last comparison said "not equal".'),
    (22, 'CALL 0x400',    'Call subroutine at 0x400',                _C, 1,
     'Remembers where we are on the stack, then runs the helper code at 0x400.'),
    (23, 'RET',           'Return from subroutine',                  _C, 0,
     'Goes back to where the last CALL came from.'),

    # ── Input / output ──
    (24, 'IN AX, 60h',    'Read input port 60h into AX',             _IO, 2,
     'Reads a value from a device (like a keyboard) into AX.'),
    (25, 'OUT 61h, AL',   'Write AL to output port 61h',             _IO, 2,
     'Sends the low byte of AX out to a device (like a speaker).'),
]


def build_catalogue(entries: Iterable[tuple]) -> Tuple[Instruction, ...]:
    """Build Instruction values, rejecting duplicate ids or mnemonics."""
    seen_ids = set()
    seen_mnemonics = set()
    result = []
    for entry in entries:
        instr = Instruction(*entry)
        if instr.id in seen_ids:
            raise CatalogueError(f"Duplicate instruction id {instr.id}")
        if instr.mnemonic in seen_mnemonics:
            raise CatalogueError(f"Duplicate mnemonic {instr.mnemonic!r}")
        seen_ids.add(instr.id)
        seen_mnemonics.add(instr.mnemonic)
        result.append(instr)
    return tuple(result)


CATALOGUE = build_catalogue(_ENTRIES)

_BY_MNEMONIC = {instr.mnemonic: instr for instr in CATALOGUE}
_BY_ID = {instr.id: instr for instr in CATALOGUE}


def by_type() -> Dict[InstructionType, List[Instruction]]:
    """Catalogue grouped by category, in display order."""
    groups: Dict[InstructionType, List[Instruction]] = {t: [] for t in CATEGORY_LABELS}
    for instr in CATALOGUE:
        groups[instr.type].append(instr)
    return groups


def find(mnemonic: str) -> Instruction:
    """Look up a catalogue entry by exact mnemonic (case-sensitive)."""
    try:
        return _BY_MNEMONIC[mnemonic]
    except KeyError:
        raise UnknownInstruction(mnemonic) from None


def get(instruction_id: int) -> Instruction:
    """Look up a catalogue entry by id."""
    try:
        return _BY_ID[instruction_id]
    except KeyError:
        raise UnknownInstruction(instruction_id) from None
