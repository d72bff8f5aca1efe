# genome.py
# What the browser needs from a kind of genome. The browser only ever
# touches genomes through these operations, on population slots.

import abc
import copy as _copy
from typing import Any, Tuple

import numpy as np

from .population import Slot


class StateFormatError(ValueError):
    pass


class GenomeKind(abc.ABC):
    name = "genome"
    has_complexity = False

    def __init__(self, thumb_w: int, thumb_h: int, grid_shape: Tuple[int, int] = (1, 1)):
        self.thumb_w = thumb_w; self.thumb_h = thumb_h
        self.grid_cols, self.grid_rows = grid_shape

    # ---- genome content ----
    @abc.abstractmethod
    def random_genome(self) -> Any: ...

    @abc.abstractmethod
    def mutated(self, genome: Any) -> Any: ...

    @abc.abstractmethod
    def draw(self, genome: Any) -> np.ndarray:
        """Render `genome` as a (thumb_h, thumb_w, 3) uint8 image."""

    @abc.abstractmethod
    def draw_sector(self, genome: Any, sector: int) -> np.ndarray:
        """Render one thumbnail-sized sector of the genome at full scale."""

    @abc.abstractmethod
    def dumps(self, genome: Any) -> str: ...

    @abc.abstractmethod
    def loads(self, line: str) -> Any: ...

    def measure(self, genome: Any) -> int:
        raise NotImplementedError(f"{self.name} genomes have no complexity measure")

    # ---- slot operations ----
    def generate(self, slot: Slot):
        slot.genome = self.random_genome()
        slot.invalidate()

    def mutate(self, slot: Slot):
        slot.genome = self.mutated(slot.genome)
        slot.invalidate()

    def load(self, slot: Slot, line: str):
        slot.genome = self.loads(line)
        slot.invalidate()

    def render(self, slot: Slot) -> np.ndarray:
        if slot.thumbnail is None:
            slot.thumbnail = self.draw(slot.genome)
        return slot.thumbnail

    def complexity(self, slot: Slot) -> int:
        if slot.complexity is None:
            slot.complexity = self.measure(slot.genome)
        return slot.complexity

    def copy(self, dst: Slot, src: Slot):
        # dst receives src; the caches describe the same content, so they travel along
        dst.genome = _copy.deepcopy(src.genome)
        dst.thumbnail = None if src.thumbnail is None else src.thumbnail.copy()
        dst.complexity = src.complexity

    def same_thumbnail(self, a: Slot, b: Slot) -> bool:
        return bool(np.array_equal(self.render(a), self.render(b)))

    @property
    def sectors(self) -> int:
        return self.grid_cols * self.grid_rows

    def sector_origin(self, sector: int) -> Tuple[int, int]:
        row, col = divmod(sector, self.grid_cols)
        return col * self.thumb_w, row * self.thumb_h
