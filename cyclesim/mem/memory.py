"""
cyclesim - Flat Memory Array

Memory is a flat list of integer cells, one value per address, 64 zeroed
cells at power-on. Cells are not narrowed to a byte or word: the engine
stores whatever the register held.

Bounds policy:
  read   - any address outside the array reads as 0
  write  - an address past the end grows the array with zeroed cells;
           a negative address raises MemoryOutOfBounds
"""

from typing import Dict, Iterable, List, Mapping, Optional, Sequence

DEFAULT_SIZE = 64


class MemoryOutOfBounds(IndexError):
    """Raised on a write to a negative address."""
    pass


class Memory:
    """Growable flat memory.

    Behaves as a read-only Sequence (``len``, indexing, iteration) so it
    can be handed straight to execute_instruction().
    """

    def __init__(self, size: int = DEFAULT_SIZE):
        if size < 0:
            raise ValueError(f"Memory size must be >= 0, got {size}")
        self._cells: List[int] = [0] * size

    @classmethod
    def from_cells(cls, cells: Iterable[int]) -> 'Memory':
        mem = cls(0)
        mem._cells = [int(v) for v in cells]
        return mem

    # --- Sequence protocol ---

    def __len__(self) -> int:
        return len(self._cells)

    def __getitem__(self, addr):
        return self._cells[addr]

    def __iter__(self):
        return iter(self._cells)

    def __eq__(self, other) -> bool:
        if isinstance(other, Memory):
            return self._cells == other._cells
        if isinstance(other, list):
            return self._cells == other
        return NotImplemented

    def __repr__(self) -> str:
        used = sum(1 for v in self._cells if v)
        return f"Memory(size={len(self._cells)}, nonzero={used})"

    # --- Core read/write ---

    def read(self, addr: int) -> int:
        return read_cell(self._cells, addr)

    def write(self, addr: int, value: int):
        if addr < 0:
            raise MemoryOutOfBounds(f"Write to negative address {addr}")
        if addr >= len(self._cells):
            self._cells.extend([0] * (addr + 1 - len(self._cells)))
        self._cells[addr] = value

    def apply_changes(self, changes: Mapping[str, int]):
        """Apply a step's memory changes ({"addr": value}) by overwrite."""
        for key, value in changes.items():
            self.write(parse_address(key), value)

    def cells(self) -> List[int]:
        return list(self._cells)

    # --- Snapshots ---

    def snapshot(self) -> tuple:
        return tuple(self._cells)

    @staticmethod
    def diff(snap_a, snap_b) -> Dict[int, tuple]:
        """Compare two snapshots, return {addr: (old, new)} for changes.

        Snapshots of different lengths compare missing cells as 0.
        """
        changes = {}
        for addr in range(max(len(snap_a), len(snap_b))):
            old = snap_a[addr] if addr < len(snap_a) else 0
            new = snap_b[addr] if addr < len(snap_b) else 0
            if old != new:
                changes[addr] = (old, new)
        return changes

    # --- Hex dump ---

    def hexdump(self, start: int = 0, length: Optional[int] = None,
                width: int = 8) -> str:
        """One line per ``width`` cells: address followed by 4-digit hex values."""
        if length is None:
            length = len(self._cells) - start
        lines = []
        for offset in range(0, length, width):
            addr = start + offset
            count = min(width, length - offset)
            values = ' '.join(f'{self.read(addr + i) & 0xFFFF:04X}'
                              for i in range(count))
            lines.append(f'{addr:04d}  {values}')
        return '\n'.join(lines)


def read_cell(cells: Sequence[int], addr: int) -> int:
    """Read one cell of any int sequence, 0 for any address outside it."""
    if 0 <= addr < len(cells):
        return cells[addr]
    return 0


def parse_address(key) -> int:
    """Decode a memory-change key ("8", "200") to an int address."""
    if isinstance(key, int) and not isinstance(key, bool):
        return key
    text = str(key).strip()
    if not text.lstrip('-').isdigit():
        raise ValueError(f"Memory address key must be a decimal integer, got {key!r}")
    return int(text)
