"""Beginner-level narration for each processor phase."""

from typing import Optional, Union

from ..cpu.step import ExecutionPhase, Phase

_FIXED = {
    ExecutionPhase.FETCH:
        "The CPU is getting the instruction from memory, like picking up a recipe card.",
    ExecutionPhase.MEMORY:
        "The CPU is accessing memory to read or write data, like opening a filing cabinet.",
    ExecutionPhase.WRITEBACK:
        "The CPU is saving the results back to registers, like writing down the answer.",
    ExecutionPhase.IDLE:
        "The CPU is waiting for an instruction, like a chef waiting for an order.",
}


def phase_narration(phase: Union[Phase, ExecutionPhase], instruction: Optional[object]) -> str:
    """Plain-language description of what ``phase`` does for ``instruction``.

    Returns an empty string when no instruction is loaded.
    """
    if instruction is None:
        return ""
    if isinstance(phase, Phase):
        phase = ExecutionPhase.of(phase)

    if phase == ExecutionPhase.DECODE:
        return (f'The CPU is figuring out what "{instruction.mnemonic}" means '
                f'and what it needs to do.')
    if phase == ExecutionPhase.EXECUTE:
        explanation = (getattr(instruction, 'beginner_explanation', None)
                       or getattr(instruction, 'description', ''))
        return f"The CPU is performing the operation: {explanation}"
    return _FIXED.get(phase, "Processing the instruction...")
