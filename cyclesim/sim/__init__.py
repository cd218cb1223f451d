from .session import CPUState, Simulator, apply_step, apply_all
from .narration import phase_narration
