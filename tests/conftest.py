"""
Shared fixtures: a scripted input source, a display that only records what
it was asked to draw, and a genome kind whose genomes are plain integers
(the integer is both its complexity and its thumbnail).
"""

import os
import random
from collections import deque

import numpy as np
import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

from evogrid.breeding import Breeder
from evogrid.commands import Dispatcher
from evogrid.genome import GenomeKind, StateFormatError
from evogrid.mailbox import NO_EVENT, Mailbox
from evogrid.population import Population


class ScriptedInput:
    def __init__(self, listen=(), wait=()):
        self.listen_queue = deque(listen)
        self.wait_queue = deque(wait)
        self.listens = 0

    def push(self, event):
        self.listen_queue.append(event)

    def listen(self):
        self.listens += 1
        if self.listen_queue:
            return self.listen_queue.popleft()
        return NO_EVENT

    def wait(self):
        if not self.wait_queue:
            raise AssertionError("wait() called with nothing scripted; it would block forever")
        return self.wait_queue.popleft()


class RecordingDisplay:
    def __init__(self):
        self.calls = []

    @property
    def shows(self):
        return sum(1 for call in self.calls if call[0] == "show")

    def show(self):
        self.calls.append(("show",))

    def redraw(self, index):
        self.calls.append(("redraw", index))

    def zoom(self, index, sector):
        self.calls.append(("zoom", index, sector))

    def save_image(self, path):
        self.calls.append(("save_image", path))
        with open(path, "wb") as f:
            f.write(b"image")


class CountingKind(GenomeKind):
    name = "counting"

    def __init__(self, starts=(), steps=(), has_complexity=True, grid_shape=(1, 1), default_start=10):
        super().__init__(1, 1, grid_shape)
        self.starts = deque(starts)
        self.steps = deque(steps)
        self.has_complexity = has_complexity
        self.default_start = default_start
        self.generated = 0
        self.mutations = 0
        self.on_mutate = None

    def random_genome(self):
        self.generated += 1
        return self.starts.popleft() if self.starts else self.default_start

    def mutated(self, genome):
        self.mutations += 1
        if self.on_mutate is not None:
            self.on_mutate(self.mutations)
        return genome + (self.steps.popleft() if self.steps else 1)

    def draw(self, genome):
        return np.array([genome])

    def draw_sector(self, genome, sector):
        return np.array([genome, sector])

    def measure(self, genome):
        if not self.has_complexity:
            raise NotImplementedError
        return genome

    def dumps(self, genome):
        return str(genome)

    def loads(self, line):
        try:
            return int(line)
        except ValueError:
            raise StateFormatError(f"not a counting genome: {line!r}") from None


class Rig:
    """A browser wired to fakes."""

    def __init__(self, cols=3, rows=3, kind=None, listen=(), wait=(), max_attempts=None, tmp_path=None, keys=None):
        self.population = Population(cols, rows, 10, 10)
        self.kind = kind or CountingKind(grid_shape=(cols, rows))
        self.source = ScriptedInput(listen, wait)
        self.mailbox = Mailbox(self.source)
        self.display = RecordingDisplay()
        self.breeder = Breeder(self.population, self.kind, self.display, self.mailbox, max_attempts=max_attempts)
        options = {}
        if tmp_path is not None:
            options = dict(state_file=str(tmp_path / "evo-state"), saved_file=str(tmp_path / "evo-saved"),
                           image_pattern=str(tmp_path / "evo%d.png"))
        if keys is not None:
            options["keys"] = keys
        self.dispatcher = Dispatcher(self.breeder, self.mailbox, rng=random.Random(7), **options)

    def genomes(self):
        return [slot.genome for slot in self.population]


@pytest.fixture
def rig():
    return Rig()
