from .memory import Memory, MemoryOutOfBounds, DEFAULT_SIZE
