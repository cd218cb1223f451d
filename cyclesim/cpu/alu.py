"""
cyclesim - ALU Operations

Each function returns a tuple: (result, flags), where ``flags`` is the
one-bit FLAGS value (1 when the result is zero). The engine places both
into the execute step; nothing here touches a register file.

Arithmetic is plain signed Python int arithmetic with no overflow
masking. Only AND (8-bit immediate mask) and NOT (16-bit complement)
narrow their result.
"""

from .regs import FLAG_SET, FLAG_CLEAR, zero_flag

MASK8 = 0xFF
MASK16 = 0xFFFF


def add(a: int, b: int) -> tuple:
    result = a + b
    return (result, zero_flag(result))


def sub(a: int, b: int) -> tuple:
    result = a - b
    return (result, zero_flag(result))


def mul(a: int, b: int) -> tuple:
    result = a * b
    return (result, zero_flag(result))


def div(a: int, b: int) -> tuple:
    """Divide a by b. Returns (quotient, remainder, flags).

    Quotient is floored; the remainder truncates toward zero and carries
    the dividend's sign (-7 / 2 -> quotient -4, remainder -1). FLAGS
    tracks the quotient. The caller must check for b == 0 first.
    """
    quotient = a // b
    truncated = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        truncated = -truncated
    remainder = a - b * truncated
    return (quotient, remainder, zero_flag(quotient))


def and_(a: int, b: int) -> tuple:
    result = a & b
    return (result, zero_flag(result))


def or_(a: int, b: int) -> tuple:
    result = a | b
    return (result, zero_flag(result))


def xor(a: int, b: int) -> tuple:
    result = a ^ b
    return (result, zero_flag(result))


def not16(a: int) -> tuple:
    """16-bit complement."""
    result = ~a & MASK16
    return (result, zero_flag(result))


def inc(a: int) -> tuple:
    return add(a, 1)


def dec(a: int) -> tuple:
    return sub(a, 1)


def compare(a: int, b: int) -> int:
    """FLAGS value for CMP: set when both operands are equal."""
    return FLAG_SET if a == b else FLAG_CLEAR
