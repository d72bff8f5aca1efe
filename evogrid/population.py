# population.py
# The population: a fixed grid of genome slots, one per displayed cell.
# Slot 0 doubles as the preview slot while breeding.

from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Tuple

import numpy as np

PREVIEW = 0


@dataclass
class Slot:
    genome: Any = None
    # caches, dropped whenever the genome changes
    thumbnail: Optional[np.ndarray] = None
    complexity: Optional[int] = None

    @property
    def is_set(self) -> bool:
        return self.genome is not None

    def invalidate(self):
        self.thumbnail = None
        self.complexity = None


class Population:
    def __init__(self, cols: int, rows: int, cell_w: int = 1, cell_h: int = 1):
        if cols < 1 or rows < 1:
            raise ValueError(f"bad population shape {cols}x{rows}")
        self.cols = cols; self.rows = rows
        self.cell_w = cell_w; self.cell_h = cell_h
        self.slots: List[Slot] = [Slot() for _ in range(cols * rows)]

    @property
    def size(self) -> int:
        return self.cols * self.rows

    def __len__(self):
        return self.size

    def __getitem__(self, index: int) -> Slot:
        return self.slots[self.check_index(index)]

    def check_index(self, index: int) -> int:
        if not 0 <= index < self.size:
            raise IndexError(f"slot index {index} outside 0..{self.size - 1}")
        return index

    def index_of(self, row: int, col: int) -> int:
        if not 0 <= row < self.rows:
            raise IndexError(f"row {row} outside 0..{self.rows - 1}")
        if not 0 <= col < self.cols:
            raise IndexError(f"column {col} outside 0..{self.cols - 1}")
        return row * self.cols + col

    def coords_of(self, index: int) -> Tuple[int, int]:
        return divmod(self.check_index(index), self.cols)

    def index_at(self, x: int, y: int) -> int:
        # pixel position on the grid -> slot index
        if x < 0 or y < 0:
            raise IndexError(f"pixel ({x}, {y}) outside the grid")
        return self.index_of(y // self.cell_h, x // self.cell_w)

    def cell_origin(self, index: int) -> Tuple[int, int]:
        row, col = self.coords_of(index)
        return col * self.cell_w, row * self.cell_h

    def indices(self, start: int = 0) -> range:
        return range(start, self.size)

    def __iter__(self) -> Iterator[Slot]:
        return iter(self.slots)

    def unset(self) -> List[int]:
        return [i for i, slot in enumerate(self.slots) if not slot.is_set]
