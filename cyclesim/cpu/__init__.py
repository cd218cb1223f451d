"""CPU model: register file, instruction catalogue, ALU and execution engine."""

from .catalogue import (
    CATALOGUE, Instruction, InstructionType, UnknownInstruction, CatalogueError,
)
from .engine import execute_instruction, MEMORY_ACCESS_MNEMONICS
from .regs import REQUIRED_REGISTERS, RegisterStateError, initial_registers
from .step import ExecutionPhase, ExecutionStep, Phase
