"""
cyclesim - Execution Phases + Step Records

One ExecutionStep describes what a single phase of the
fetch / decode / execute / memory / writeback cycle did. Register and
memory changes hold the *absolute* value to assign, never a delta, so a
consumer applies a step by plain overwrite.

Memory change keys are decimal address strings ("8", "200") to keep the
step shape identical to its JSON rendering.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional


class Phase(Enum):
    FETCH = 'fetch'
    DECODE = 'decode'
    EXECUTE = 'execute'
    MEMORY = 'memory'
    WRITEBACK = 'writeback'


class ExecutionPhase(Enum):
    """Processor-level phase. Adds IDLE, which the engine never emits."""
    IDLE = 'idle'
    FETCH = 'fetch'
    DECODE = 'decode'
    EXECUTE = 'execute'
    MEMORY = 'memory'
    WRITEBACK = 'writeback'

    @classmethod
    def of(cls, phase: Phase) -> 'ExecutionPhase':
        return cls(phase.value)


@dataclass(frozen=True)
class ExecutionStep:
    phase: Phase
    description: str
    register_changes: Optional[Dict[str, int]] = None
    memory_changes: Optional[Dict[str, int]] = None

    def to_dict(self) -> dict:
        """Render with the camelCase keys used by the browser front end."""
        out = {'phase': self.phase.value, 'description': self.description}
        if self.register_changes is not None:
            out['registerChanges'] = dict(self.register_changes)
        if self.memory_changes is not None:
            out['memoryChanges'] = dict(self.memory_changes)
        return out

    def __str__(self) -> str:
        text = f"[{self.phase.value:9s}] {self.description}"
        if self.register_changes:
            regs = ', '.join(f"{k}={v}" for k, v in self.register_changes.items())
            text += f"  regs: {regs}"
        if self.memory_changes:
            mem = ', '.join(f"[{k}]={v}" for k, v in self.memory_changes.items())
            text += f"  mem: {mem}"
        return text
