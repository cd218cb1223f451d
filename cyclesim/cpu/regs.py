"""
cyclesim - Register File + FLAGS Handling

Register model for the teaching CPU:
  AX, BX, CX, DX  - general purpose
  PC              - program counter (auto-incremented on every fetch)
  SP              - stack pointer (grows downward, 2 cells per push)
  FLAGS           - simplified one-bit condition register:
                    1 = zero/equal condition true, 0 = false

A register file is a plain ``dict`` of name -> int. The required keys
below must always be present; extra keys are legal and are carried
through untouched when steps are applied.
"""

from typing import Dict, Mapping

REQUIRED_REGISTERS = ('AX', 'BX', 'CX', 'DX', 'PC', 'SP', 'FLAGS')

# FLAGS values
FLAG_SET = 1
FLAG_CLEAR = 0


class RegisterStateError(ValueError):
    """Raised when a register file is missing a required key or holds a non-int."""
    pass


def initial_registers(**overrides: int) -> Dict[str, int]:
    """Power-on register file: every required register zeroed.

    Keyword overrides are applied on top, e.g. ``initial_registers(SP=10)``.
    """
    regs = {name: 0 for name in REQUIRED_REGISTERS}
    regs.update(overrides)
    validate_registers(regs)
    return regs


def validate_registers(registers: Mapping[str, int]):
    """Fail fast on a malformed register file.

    Checks every required key is present and every value (required or
    extra) is a plain int. ``bool`` is rejected even though it subclasses int.
    """
    if not isinstance(registers, Mapping):
        raise RegisterStateError(
            f"Register file must be a mapping, got {type(registers).__name__}")

    missing = [name for name in REQUIRED_REGISTERS if name not in registers]
    if missing:
        raise RegisterStateError(
            f"Register file missing required register(s): {', '.join(missing)}")

    for name, value in registers.items():
        if isinstance(value, bool) or not isinstance(value, int):
            raise RegisterStateError(
                f"Register {name} must hold an int, got {value!r}")


def zero_flag(result: int) -> int:
    """FLAGS value for a result: set when the result is zero."""
    return FLAG_SET if result == 0 else FLAG_CLEAR


def display(registers: Mapping[str, int]) -> str:
    """Format a register file for debugging / CLI output.

    Values print as 4-digit hex; negative values (no wraparound is
    modelled for ADD/SUB/DEC) keep their sign. Extra registers follow the
    required ones in sorted order.
    """
    def fmt(value: int) -> str:
        if value < 0:
            return f"-{-value:04X}"
        return f"{value:04X}"

    parts = [f"{name}={fmt(registers[name])}"
             for name in REQUIRED_REGISTERS if name != 'FLAGS']
    flag_str = 'Z' if registers.get('FLAGS') == FLAG_SET else '.'
    parts.append(f"FLAGS=[{flag_str}]")

    extras = sorted(k for k in registers if k not in REQUIRED_REGISTERS)
    for name in extras:
        parts.append(f"{name}={fmt(registers[name])}")
    return ' '.join(parts)
