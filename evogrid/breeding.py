# breeding.py
# Whole-grid operations and the selection step. Everything that walks the
# grid goes through gridding(), so it stops as soon as new input arrives.

import logging
from typing import Optional

from .acceptance import AcceptancePolicy, SearchExhausted
from .config import MIN_COMPLEXITY
from .display import Display
from .driver import LoopState, gridding
from .genome import GenomeKind
from .mailbox import Mailbox
from .population import PREVIEW, Population

logger = logging.getLogger(__name__)


class Breeder:
    def __init__(self, population: Population, kind: GenomeKind, display: Display, mailbox: Mailbox,
                 max_attempts: Optional[int] = None, min_complexity: int = MIN_COMPLEXITY):
        self.population = population
        self.kind = kind
        self.display = display
        self.mailbox = mailbox
        self.min_complexity = min_complexity
        self.policy = AcceptancePolicy(kind, population, max_attempts, on_render=self.reshow)

    def grid_pass(self, action, start: int = 0, limit: Optional[int] = None) -> LoopState:
        if limit is None:
            limit = self.population.size
        return gridding(action, start, limit, self.mailbox)

    # ---- single slots ----
    def reshow(self, index: int):
        self.kind.render(self.population[index])
        self.display.redraw(index)
        self.display.show()

    def good_start(self, index: int) -> bool:
        if not self.kind.has_complexity:
            return True
        return self.kind.complexity(self.population[index]) > self.min_complexity

    def init(self, index: int):
        # rejection sampling: boring random genomes are thrown back
        slot = self.population[index]
        self.kind.generate(slot)
        while not self.good_start(index):
            self.kind.generate(slot)
        self.reshow(index)

    def ensure(self, index: int):
        # cells left empty by an interrupted fresh pass
        if not self.population[index].is_set:
            self.init(index)

    def redisplay(self, index: int):
        if self.population[index].is_set:
            self.reshow(index)
        else:
            self.init(index)

    def replace(self, index: int):
        try:
            self.policy.mutating(index)
        except SearchExhausted:
            # draw the restored genome over the last rejected child
            self.reshow(index)
            raise
        self.display.show()

    def zoom(self, index: int, sector: int):
        self.display.zoom(index, sector)
        self.display.show()

    # ---- whole grid ----
    def fresh(self) -> LoopState:
        return self.grid_pass(self.init)

    def grid(self) -> LoopState:
        return self.grid_pass(self.redisplay)

    def big(self) -> LoopState:
        # the preview slot at full size, one sector at a time
        self.ensure(PREVIEW)
        return self.grid_pass(lambda sector: self.zoom(PREVIEW, sector), 0, self.kind.sectors)

    def choose(self, index: int) -> LoopState:
        """Breed from slot `index`.

        The chosen genome is copied into the preview slot; every other slot
        then receives an accepted mutation of it, in index order. Only the
        walk over the slots can be interrupted; each individual search runs
        to completion.
        """
        self.ensure(index)
        self.kind.copy(self.population[PREVIEW], self.population[index])
        self.reshow(PREVIEW)
        state = self.grid_pass(self.replace, PREVIEW + 1)
        logger.debug("choose(%d) %s, %d attempts so far", index, state.value, self.policy.attempts)
        return state
