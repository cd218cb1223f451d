"""
cyclesim - Teaching CPU Cycle Simulator
=======================================
Steps a simplified single-core processor through the classic
fetch / decode / execute / memory / writeback cycle, one instruction at a
time, so each phase's register and memory changes can be shown to a
learner.

Architecture:
    ┌─────────────┐    ┌──────────────────────┐    ┌──────────────────┐
    │ Catalogue   │───>│ execute_instruction  │───>│ Simulator        │
    │ (mnemonics) │    │ (pure, step list)    │    │ (apply / replay) │
    └─────────────┘    └──────────────────────┘    └──────────────────┘

    - cpu/catalogue.py: fixed list of Instruction values, grouped by type
    - cpu/engine.py:    mnemonic -> handler dispatch, builds the steps
    - cpu/regs.py:      required registers, validation, display
    - mem/memory.py:    flat memory with the bounds policy
    - sim/session.py:   apply_step() reducer + playback controls
"""

__version__ = "0.1.0"

from .cpu import (
    CATALOGUE, Instruction, InstructionType, UnknownInstruction,
    execute_instruction, MEMORY_ACCESS_MNEMONICS,
    REQUIRED_REGISTERS, RegisterStateError, initial_registers,
    ExecutionPhase, ExecutionStep, Phase,
)
from .mem import Memory, MemoryOutOfBounds
from .sim import CPUState, Simulator, apply_step, apply_all, phase_narration
from .config import SimConfig, ConfigError, load_config
