"""
cyclesim - Simulator Configuration

Defaults match the browser simulator: 64 memory cells, one step per
second at normal speed, speed choices 0.5x / 1x / 2x.

A JSON file can override any field:

    {
        "memory_size": 128,
        "base_interval": 0.5,
        "speeds": [0.5, 1, 2, 4],
        "initial_registers": {"SP": 62},
        "log_level": "DEBUG"
    }
"""

import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, Optional, Tuple

from .cpu.regs import REQUIRED_REGISTERS
from .mem.memory import DEFAULT_SIZE

BASE_INTERVAL = 1.0          # seconds between steps at 1x
SPEEDS = (0.5, 1.0, 2.0)     # slow / normal / fast
DEFAULT_SPEED = 1.0
LOG_LEVEL = 'INFO'

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised for an unreadable or invalid configuration file."""
    pass


@dataclass
class SimConfig:
    memory_size: int = DEFAULT_SIZE
    base_interval: float = BASE_INTERVAL
    speeds: Tuple[float, ...] = SPEEDS
    initial_registers: Dict[str, int] = field(default_factory=dict)
    log_level: str = LOG_LEVEL

    def validate(self):
        if isinstance(self.memory_size, bool) or not isinstance(self.memory_size, int) \
                or self.memory_size < 0:
            raise ConfigError(f"memory_size must be a non-negative int, got {self.memory_size!r}")
        if not isinstance(self.base_interval, (int, float)) or self.base_interval < 0:
            raise ConfigError(f"base_interval must be >= 0, got {self.base_interval!r}")
        if not self.speeds or any(
                not isinstance(s, (int, float)) or s <= 0 for s in self.speeds):
            raise ConfigError(f"speeds must be positive numbers, got {self.speeds!r}")
        if DEFAULT_SPEED not in self.speeds:
            raise ConfigError(f"speeds must include {DEFAULT_SPEED}")
        for name, value in self.initial_registers.items():
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"initial register {name} must be an int, got {value!r}")
        if logging.getLevelName(str(self.log_level).upper()) not in (
                logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR, logging.CRITICAL):
            raise ConfigError(f"Unknown log_level {self.log_level!r}")

    def registers(self) -> Dict[str, int]:
        """Power-on register file with configured overrides applied."""
        regs = {name: 0 for name in REQUIRED_REGISTERS}
        regs.update(self.initial_registers)
        return regs


def load_config(path: Optional[str] = None) -> SimConfig:
    """Load a SimConfig from JSON. ``None`` returns the defaults."""
    if path is None:
        config = SimConfig()
        config.validate()
        return config

    p = Path(path)
    try:
        data = json.loads(p.read_text(encoding='utf-8'))
    except OSError as e:
        raise ConfigError(f"Cannot read config {p}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {p}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config {p} must contain a JSON object")

    known = {f.name for f in fields(SimConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown config key(s) in {p}: {', '.join(unknown)}")

    if 'speeds' in data:
        if not isinstance(data['speeds'], list):
            raise ConfigError("speeds must be a list")
        data['speeds'] = tuple(float(s) if isinstance(s, (int, float)) else s
                               for s in data['speeds'])
    if 'initial_registers' in data and not isinstance(data['initial_registers'], dict):
        raise ConfigError("initial_registers must be an object")

    config = SimConfig(**data)
    config.validate()
    logger.debug("Loaded config from %s: %s", p, config)
    return config
