"""
cyclesim - Instruction Execution Engine

execute_instruction() turns one catalogue instruction plus a snapshot of
the processor state into the ordered list of phase steps the front end
animates:

  1. fetch      - PC := PC + 1 (always, even for jumps / CALL / RET)
  2. decode     - narration only
  3. execute    - per-mnemonic handler from the dispatch table below
  4. memory     - only for the fixed MEMORY_ACCESS_MNEMONICS set
  5. writeback  - narration only

The engine is pure: it never mutates ``registers`` or ``memory``. Every
value placed in a step is computed here from the pre-instruction snapshot,
so the consumer applies steps by plain overwrite, in order. A later PC
write (JMP, CALL, RET, taken branches) therefore supersedes the fetch
increment.

Unknown mnemonics are not an error: they get a generic execute step.
"""

import logging
from typing import Callable, Dict, List, Mapping, Sequence

from ..mem.memory import read_cell
from . import alu
from .regs import FLAG_SET, FLAG_CLEAR, validate_registers
from .step import ExecutionStep, Phase

logger = logging.getLogger(__name__)

# Membership is a literal list tied to catalogue mnemonics, not a rule over
# mnemonic shape. JMP 0x100 is listed even though a jump reads no memory.
MEMORY_ACCESS_MNEMONICS = frozenset([
    'PUSH AX',
    'POP BX',
    'JMP 0x100',
    'MOV AX, [100]',
    'MOV [200], BX',
    'CALL 0x400',
    'RET',
])

# Fixed value returned by the simulated input port
SIMULATED_INPUT = 0x42

Registers = Mapping[str, int]
Memory = Sequence[int]
Handler = Callable[[Registers, Memory], ExecutionStep]


def _execute(description: str, regs: dict = None, mem: dict = None) -> ExecutionStep:
    return ExecutionStep(Phase.EXECUTE, description, regs, mem)


# ══════════════════════════════════════════════
# Instruction handlers
# ══════════════════════════════════════════════
# Handler signature: handler(registers, memory) -> execute-phase step
# ``registers`` / ``memory`` are the pre-instruction snapshot.

# ── Data movement ──

def _op_mov_ax_imm(r, m):
    return _execute("Moving value 42 to register AX", {'AX': 42})


def _op_mov_bx_ax(r, m):
    return _execute("Copying value from AX to BX", {'BX': r['AX']})


def _op_xchg_ax_bx(r, m):
    return _execute("Exchanging values in AX and BX",
                    {'AX': r['BX'], 'BX': r['AX']})


def _op_mov_ax_mem(r, m):
    return _execute("Loading value from memory address 100 into AX",
                    {'AX': read_cell(m, 100)})


def _op_mov_mem_bx(r, m):
    return _execute("Storing value of BX into memory address 200",
                    mem={'200': r['BX']})


def _op_push_ax(r, m):
    sp = r['SP'] - 2
    return _execute("Pushing AX onto the stack",
                    {'SP': sp}, {str(sp): r['AX']})


def _op_pop_bx(r, m):
    return _execute("Popping value from stack into BX",
                    {'BX': read_cell(m, r['SP']), 'SP': r['SP'] + 2})


# ── Arithmetic ──

def _op_add_ax_bx(r, m):
    result, flags = alu.add(r['AX'], r['BX'])
    return _execute("Adding BX to AX", {'AX': result, 'FLAGS': flags})


def _op_sub_cx_dx(r, m):
    result, flags = alu.sub(r['CX'], r['DX'])
    return _execute("Subtracting DX from CX", {'CX': result, 'FLAGS': flags})


def _op_mul_bx(r, m):
    result, flags = alu.mul(r['AX'], r['BX'])
    return _execute("Multiplying AX by BX", {'AX': result, 'FLAGS': flags})


def _op_div_cx(r, m):
    if r['CX'] == 0:
        # Modelled condition, not a fault: flag it and carry on
        return _execute("Error: Division by zero", {'FLAGS': FLAG_SET})
    quotient, remainder, flags = alu.div(r['AX'], r['CX'])
    return _execute("Dividing AX by CX",
                    {'AX': quotient, 'DX': remainder, 'FLAGS': flags})


def _op_inc_cx(r, m):
    result, flags = alu.inc(r['CX'])
    return _execute("Incrementing CX by 1", {'CX': result, 'FLAGS': flags})


def _op_dec_bx(r, m):
    result, flags = alu.dec(r['BX'])
    return _execute("Decrementing BX by 1", {'BX': result, 'FLAGS': flags})


# ── Logic ──

def _op_and_ax_ff(r, m):
    result, flags = alu.and_(r['AX'], alu.MASK8)
    return _execute("Performing bitwise AND on AX with 0xFF",
                    {'AX': result, 'FLAGS': flags})


def _op_or_bx_cx(r, m):
    result, flags = alu.or_(r['BX'], r['CX'])
    return _execute("Performing bitwise OR on BX with CX",
                    {'BX': result, 'FLAGS': flags})


def _op_xor_dx_dx(r, m):
    result, flags = alu.xor(r['DX'], r['DX'])
    return _execute("Performing XOR on DX with itself",
                    {'DX': result, 'FLAGS': flags})


def _op_not_ax(r, m):
    result, flags = alu.not16(r['AX'])
    return _execute("Performing bitwise NOT on AX",
                    {'AX': result, 'FLAGS': flags})


def _op_cmp_ax_bx(r, m):
    return _execute("Comparing AX with BX",
                    {'FLAGS': alu.compare(r['AX'], r['BX'])})


# ── Control flow ──

def _op_jmp(r, m):
    return _execute("Jumping to memory address 0x100", {'PC': 0x100})


def _op_je(r, m):
    if r['FLAGS'] == FLAG_SET:
        return _execute("Equal flag is set, jumping to address 0x200", {'PC': 0x200})
    return _execute("Equal flag is not set, no jump", {})


def _op_jne(r, m):
    if r['FLAGS'] == FLAG_CLEAR:
        return _execute("Equal flag is not set, jumping to address 0x300", {'PC': 0x300})
    return _execute("Equal flag is set, no jump", {})


def _op_call(r, m):
    # Return address is the PC seen before this instruction's own fetch
    # increment; kept as-is rather than pointing at the next instruction.
    sp = r['SP'] - 2
    return _execute("Calling subroutine at address 0x400",
                    {'SP': sp, 'PC': 0x400}, {str(sp): r['PC']})


def _op_ret(r, m):
    return _execute("Returning from subroutine",
                    {'PC': read_cell(m, r['SP']), 'SP': r['SP'] + 2})


# ── I/O ──

def _op_in_ax(r, m):
    return _execute("Reading input from port 60h into AX", {'AX': SIMULATED_INPUT})


def _op_out_al(r, m):
    return _execute("Sending value in AL to output port 61h")


_DISPATCH: Dict[str, Handler] = {
    'MOV AX, 42':    _op_mov_ax_imm,
    'MOV BX, AX':    _op_mov_bx_ax,
    'ADD AX, BX':    _op_add_ax_bx,
    'SUB CX, DX':    _op_sub_cx_dx,
    'MUL BX':        _op_mul_bx,
    'DIV CX':        _op_div_cx,
    'AND AX, 0xFF':  _op_and_ax_ff,
    'OR BX, CX':     _op_or_bx_cx,
    'XOR DX, DX':    _op_xor_dx_dx,
    'NOT AX':        _op_not_ax,
    'JMP 0x100':     _op_jmp,
    'JE 0x200':      _op_je,
    'JNE 0x300':     _op_jne,
    'PUSH AX':       _op_push_ax,
    'POP BX':        _op_pop_bx,
    'XCHG AX, BX':   _op_xchg_ax_bx,
    'MOV AX, [100]': _op_mov_ax_mem,
    'MOV [200], BX': _op_mov_mem_bx,
    'CMP AX, BX':    _op_cmp_ax_bx,
    'INC CX':        _op_inc_cx,
    'DEC BX':        _op_dec_bx,
    'IN AX, 60h':    _op_in_ax,
    'OUT 61h, AL':   _op_out_al,
    'CALL 0x400':    _op_call,
    'RET':           _op_ret,
}


def supported_mnemonics() -> List[str]:
    """Mnemonics with a dedicated execute handler."""
    return list(_DISPATCH)


def execute_instruction(instruction, registers: Registers,
                        memory: Memory) -> List[ExecutionStep]:
    """Build the full step sequence for one instruction.

    Args:
        instruction: catalogue Instruction (any object with a ``mnemonic``
            attribute is accepted; foreign mnemonics fall through to the
            generic execute step)
        registers: pre-instruction register file (required keys AX..FLAGS)
        memory: pre-instruction memory cells

    Returns:
        list of ExecutionStep: fetch, decode, execute, [memory], writeback

    Raises:
        RegisterStateError: register file missing a required key or
            holding a non-int value
        TypeError: instruction has no ``mnemonic``
    """
    mnemonic = getattr(instruction, 'mnemonic', None)
    if not isinstance(mnemonic, str):
        raise TypeError(
            f"instruction must carry a str mnemonic, got {instruction!r}")
    validate_registers(registers)

    steps = [
        ExecutionStep(Phase.FETCH, "Fetching instruction from memory",
                      {'PC': registers['PC'] + 1}),
        ExecutionStep(Phase.DECODE, f"Decoding instruction: {mnemonic}"),
    ]

    handler = _DISPATCH.get(mnemonic)
    if handler is None:
        logger.debug("No handler for %r, using generic execute step", mnemonic)
        steps.append(_execute("Executing instruction"))
    else:
        logger.debug("Dispatching %r", mnemonic)
        steps.append(handler(registers, memory))

    if mnemonic in MEMORY_ACCESS_MNEMONICS:
        steps.append(ExecutionStep(Phase.MEMORY, "Accessing memory"))

    steps.append(ExecutionStep(Phase.WRITEBACK, "Writing results back to registers"))
    return steps
