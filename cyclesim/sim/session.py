"""
cyclesim - Step Application + Playback Driver

The engine only produces steps. This module applies them:

  apply_step(state, step) -> state'   pure reducer, one step at a time
  Simulator                           driver with the front end's controls
                                      (load, tick, step forward/back,
                                      pause, speed, reset, play)

Steps are applied strictly in list order, one at a time, by absolute
overwrite of the named registers and memory cells.

Usage:
    sim = Simulator()
    sim.load(catalogue.find('MOV AX, 42'))
    while not sim.done:
        sim.tick()
    print(sim.state.registers['AX'])   # 42
"""

import logging
import time
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..config import SimConfig, DEFAULT_SPEED
from ..cpu.engine import execute_instruction
from ..cpu.regs import validate_registers
from ..cpu.step import ExecutionPhase, ExecutionStep
from ..mem.memory import Memory, MemoryOutOfBounds

logger = logging.getLogger(__name__)


@dataclass
class CPUState:
    registers: Dict[str, int]
    memory: List[int]
    current_instruction: Optional[object] = None
    execution_phase: ExecutionPhase = ExecutionPhase.IDLE
    execution_steps: List[ExecutionStep] = field(default_factory=list)
    current_step: int = -1
    is_animating: bool = False


def _apply_changes(registers: Dict[str, int], memory: List[int],
                   step: ExecutionStep) -> Tuple[Dict[str, int], List[int]]:
    """Return new (registers, memory) with the step's changes overwritten."""
    new_regs = dict(registers)
    if step.register_changes:
        new_regs.update(step.register_changes)

    if step.memory_changes:
        mem = Memory.from_cells(memory)
        mem.apply_changes(step.memory_changes)
        new_mem = mem.cells()
    else:
        new_mem = list(memory)
    return new_regs, new_mem


def apply_step(state: CPUState, step: ExecutionStep) -> CPUState:
    """Apply one step to a state, returning a new state.

    The input state is left untouched. Registers not named by the step
    (including any extra registers) carry over unchanged.
    """
    regs, mem = _apply_changes(state.registers, state.memory, step)
    return replace(state, registers=regs, memory=mem,
                   execution_phase=ExecutionPhase.of(step.phase))


def apply_all(registers: Dict[str, int], memory: Sequence[int],
              steps: Sequence[ExecutionStep]) -> Tuple[Dict[str, int], List[int]]:
    """Apply every step in order; return the final (registers, memory)."""
    regs, mem = dict(registers), list(memory)
    for step in steps:
        regs, mem = _apply_changes(regs, mem, step)
    return regs, mem


class Simulator:
    """Step-by-step driver over the execution engine.

    Holds one CPUState and replaces it on every change. ``load()`` records
    the pre-instruction registers/memory so ``step_backward()`` can
    rebuild any earlier point by replaying from there.
    """

    def __init__(self, config: Optional[SimConfig] = None,
                 registers: Optional[Dict[str, int]] = None,
                 memory: Optional[Sequence[int]] = None):
        self.config = config or SimConfig()
        regs = dict(registers) if registers is not None else self.config.registers()
        validate_registers(regs)
        mem = list(memory) if memory is not None else [0] * self.config.memory_size
        self.state = CPUState(registers=regs, memory=mem)
        self.paused = False
        self.speed = DEFAULT_SPEED
        self._base: Tuple[Dict[str, int], List[int]] = (dict(regs), list(mem))

    # --- Properties ---

    @property
    def interval(self) -> float:
        """Seconds between automatic ticks at the current speed."""
        return self.config.base_interval / self.speed

    @property
    def done(self) -> bool:
        return self.state.current_step >= len(self.state.execution_steps)

    # --- Controls ---

    def load(self, instruction) -> List[ExecutionStep]:
        """Queue an instruction for playback; returns its steps."""
        steps = execute_instruction(instruction, self.state.registers, self.state.memory)
        self._base = (dict(self.state.registers), list(self.state.memory))
        self.state = replace(self.state,
                             current_instruction=instruction,
                             execution_phase=ExecutionPhase.FETCH,
                             execution_steps=steps,
                             current_step=0,
                             is_animating=True)
        logger.info("Loaded %s (%d steps)", instruction.mnemonic, len(steps))
        return steps

    def tick(self) -> Optional[ExecutionStep]:
        """Timer-driven advance: apply the step at current_step.

        Does nothing while paused, not animating, or past the last step.
        """
        s = self.state
        if not s.is_animating or self.paused or self.done:
            return None
        step = s.execution_steps[s.current_step]
        try:
            nxt = apply_step(s, step)
        except MemoryOutOfBounds:
            # Failed step stays unapplied; stop the timer so it is not retried
            self.state = replace(s, is_animating=False)
            raise
        self.state = replace(nxt, current_step=s.current_step + 1,
                             is_animating=s.current_step + 1 < len(s.execution_steps))
        logger.debug("%s", step)
        return step

    def step_forward(self) -> Optional[ExecutionStep]:
        """Manual advance; stops automatic animation."""
        s = self.state
        if s.current_step < 0 or self.done:
            return None
        step = s.execution_steps[s.current_step]
        nxt = apply_step(s, step)
        self.state = replace(nxt, current_step=s.current_step + 1, is_animating=False)
        logger.debug("%s", step)
        return step

    def step_backward(self) -> bool:
        """Undo the last applied step by replaying from the pre-instruction
        snapshot. Returns False when no step has been applied yet.
        """
        s = self.state
        if s.current_step <= 0:
            return False
        target = s.current_step - 1
        regs, mem = dict(self._base[0]), list(self._base[1])
        # Nothing applied yet looks the same as a fresh load()
        phase = ExecutionPhase.FETCH
        for step in s.execution_steps[:target]:
            regs, mem = _apply_changes(regs, mem, step)
            phase = ExecutionPhase.of(step.phase)
        self.state = replace(s, registers=regs, memory=mem, execution_phase=phase,
                             current_step=target, is_animating=False)
        return True

    def toggle_pause(self) -> bool:
        """Play/pause button. Returns the new paused flag.

        After manual stepping (animation stopped, not paused) this resumes
        automatic playback instead of pausing.
        """
        s = self.state
        if not s.is_animating and not self.paused:
            self.state = replace(s, is_animating=s.current_step >= 0 and not self.done)
            return self.paused
        self.paused = not self.paused
        return self.paused

    def set_speed(self, speed: float):
        if speed not in self.config.speeds:
            raise ValueError(
                f"Unsupported speed {speed}; choose one of {list(self.config.speeds)}")
        self.speed = speed

    def reset(self):
        """Drop the loaded instruction. Registers and memory are kept."""
        self.state = replace(self.state,
                             current_instruction=None,
                             execution_phase=ExecutionPhase.IDLE,
                             execution_steps=[],
                             current_step=-1,
                             is_animating=False)
        self.paused = False
        self.speed = DEFAULT_SPEED

    def play(self, sleep: Callable[[float], None] = time.sleep,
             on_step: Optional[Callable[[ExecutionStep], None]] = None) -> List[ExecutionStep]:
        """Tick until the steps run out or playback is paused.

        ``sleep`` is called with ``interval`` before every tick.
        """
        applied = []
        while self.state.is_animating and not self.paused and not self.done:
            sleep(self.interval)
            step = self.tick()
            if step is None:
                break
            applied.append(step)
            if on_step is not None:
                on_step(step)
        return applied

    def run(self, instruction) -> List[ExecutionStep]:
        """Load and apply every step at once (no pacing)."""
        steps = self.load(instruction)
        self.paused = False
        while self.tick() is not None:
            pass
        return steps
