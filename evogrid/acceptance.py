# acceptance.py
# Decides whether a mutated child may replace the copy of its ancestor.
#
# The retry loop below never looks at the mailbox: once a search has
# started it runs until a child is accepted (or max_attempts runs out),
# whatever the user clicks or types meanwhile.

import logging
from typing import Callable, Optional

from .genome import GenomeKind
from .population import PREVIEW, Population, Slot

logger = logging.getLogger(__name__)


class SearchExhausted(RuntimeError):
    def __init__(self, index: int, attempts: int):
        super().__init__(f"no acceptable mutation for slot {index} after {attempts} attempts")
        self.index = index
        self.attempts = attempts


def complex_enough(ancestor: int, candidate: int) -> bool:
    # the child must beat its ancestor's complexity by better than 3:2
    return 2 * ancestor < 3 * candidate


def accept(ancestor: int, candidate: int, novel: bool) -> bool:
    return novel and complex_enough(ancestor, candidate)


class AcceptancePolicy:
    def __init__(self, kind: GenomeKind, population: Population,
                 max_attempts: Optional[int] = None,
                 on_render: Optional[Callable[[int], None]] = None):
        self.kind = kind
        self.population = population
        self.max_attempts = max_attempts
        # called after every candidate that got rendered, so the display can follow the search
        self.on_render = on_render
        self.attempts = 0

    def decent(self, index: int) -> bool:
        pop, kind = self.population, self.kind
        candidate, ancestor = pop[index], pop[PREVIEW]
        if kind.has_complexity and not complex_enough(kind.complexity(ancestor), kind.complexity(candidate)):
            return False
        kind.render(candidate)
        if self.on_render is not None:
            self.on_render(index)
        return not kind.same_thumbnail(candidate, ancestor)

    def attempt(self, index: int):
        # every attempt starts again from the ancestor, so rejected mutations never accumulate
        slot = self.population[index]
        self.kind.copy(slot, self.population[PREVIEW])
        self.kind.mutate(slot)

    def mutating(self, index: int) -> int:
        """Mutate slot `index` from the preview slot until a child is accepted.

        Returns the number of attempts it took. Raises SearchExhausted if
        max_attempts is set and used up; the slot then gets back the genome
        it held before the search.
        """
        self.population.check_index(index)
        if index == PREVIEW:
            raise ValueError("cannot breed into the preview slot")
        previous = Slot()
        self.kind.copy(previous, self.population[index])
        attempts = 0
        while True:
            if self.max_attempts is not None and attempts >= self.max_attempts:
                self.kind.copy(self.population[index], previous)
                raise SearchExhausted(index, attempts)
            attempts += 1
            self.attempt(index)
            if self.decent(index):
                break
        self.attempts += attempts
        logger.debug("slot %d accepted after %d attempts", index, attempts)
        return attempts
