# turtle.py
# Turtle-drawing genomes: a fixed-length list of turtle commands run by a
# flock of turtles on a patch field. Turtles can hatch copies of
# themselves, so a short program can draw with thousands of them.

import math
import random
from typing import List, NamedTuple, Optional

import numpy as np

from .config import MAX_NESTING, MAX_TURTLES, TURTLE_GENOME_LENGTH, TURTLE_MUTATION_RATE
from .genome import GenomeKind, StateFormatError
from .raster import color_value

BORDER = (0, 0, 255)

# name -> number of arguments
TURTLE_OPS = {
    "plot": 0,
    "fd": 1,
    "lt": 1,
    "hatch[": 0,
    "]": 0,
    "diffuse": 0,
    "+r": 1,
    "+g": 1,
    "+b": 1,
}
OP_NAMES = list(TURTLE_OPS)


class Command(NamedTuple):
    op: str
    arg: int = 0


class Flock:
    """Turtles and the patch field they draw on."""

    def __init__(self, width: int, height: int, max_turtles: int = MAX_TURTLES, max_nesting: int = MAX_NESTING):
        self.width = width; self.height = height
        self.max_turtles = max_turtles
        self.max_nesting = max_nesting
        self.patches = np.zeros((height, width, 3), dtype=np.float64)
        # one white turtle at the origin, facing along the x axis
        self.x = np.zeros(1); self.y = np.zeros(1); self.heading = np.zeros(1)
        self.rgb = np.ones((1, 3))
        self.first = 0
        self.stack: List[int] = []

    @property
    def count(self) -> int:
        return len(self.x)

    @property
    def active(self) -> slice:
        return slice(self.first, self.count)

    def plot(self):
        a = self.active
        ix = np.trunc(self.width // 2 + self.x[a]).astype(np.int64) % self.width
        iy = np.trunc(self.height // 2 - self.y[a]).astype(np.int64) % self.height
        self.patches[iy, ix] = self.rgb[a]

    def forward(self, d: float):
        a = self.active
        self.x[a] += d * np.cos(self.heading[a])
        self.y[a] += d * np.sin(self.heading[a])

    def left(self, degrees: float):
        self.heading[self.active] += math.radians(degrees)

    def hatch(self):
        a = self.active
        d = min(self.count - self.first, self.max_turtles - self.count)
        if len(self.stack) < self.max_nesting:
            self.stack.append(self.first)
        src = slice(a.start, a.start + d)
        self.x = np.concatenate([self.x, self.x[src]])
        self.y = np.concatenate([self.y, self.y[src]])
        self.heading = np.concatenate([self.heading, self.heading[src]])
        self.rgb = np.concatenate([self.rgb, self.rgb[src]])
        self.first = self.count - d

    def end(self):
        if self.stack:
            self.first = self.stack.pop()

    def diffuse(self):
        p = self.patches
        self.patches = (p + np.roll(p, 1, axis=0) + np.roll(p, -1, axis=0)
                        + np.roll(p, 1, axis=1) + np.roll(p, -1, axis=1)) / 5.0

    def tint(self, channel: int, amount: int):
        self.rgb[self.active, channel] += amount / 100.0

    def run(self, genome):
        for op, arg in genome:
            if op == "plot":
                self.plot()
            elif op == "fd":
                self.forward(arg)
            elif op == "lt":
                self.left(arg)
            elif op == "hatch[":
                self.hatch()
            elif op == "]":
                self.end()
            elif op == "diffuse":
                self.diffuse()
            elif op in ("+r", "+g", "+b"):
                self.tint("rgb".index(op[1]), arg)
            else:
                raise ValueError(f"unknown turtle op {op!r}")
        return self

    def image(self) -> np.ndarray:
        return color_value(self.patches)


class TurtleKind(GenomeKind):
    name = "turtle"
    has_complexity = False

    def __init__(self, thumb_w: int, thumb_h: int, grid_shape=(1, 1),
                 rng: Optional[random.Random] = None,
                 genome_length: int = TURTLE_GENOME_LENGTH,
                 mutation_rate: float = TURTLE_MUTATION_RATE,
                 max_turtles: int = MAX_TURTLES):
        super().__init__(thumb_w, thumb_h, grid_shape)
        self.rng = rng or random.Random()
        self.genome_length = genome_length
        self.mutation_rate = mutation_rate
        self.max_turtles = max_turtles

    def random_command(self) -> Command:
        return Command(self.rng.choice(OP_NAMES), self.rng.randrange(200) - 100)

    def random_genome(self):
        return tuple(self.random_command() for _ in range(self.genome_length))

    def mutated(self, genome):
        return tuple(self.random_command() if self.rng.random() < self.mutation_rate else cmd
                     for cmd in genome)

    def draw(self, genome) -> np.ndarray:
        img = Flock(self.thumb_w, self.thumb_h, self.max_turtles).run(genome).image()
        img[0, :] = BORDER
        img[:, 0] = BORDER
        return img

    def draw_sector(self, genome, sector: int) -> np.ndarray:
        if not 0 <= sector < self.sectors:
            raise IndexError(f"sector {sector} outside 0..{self.sectors - 1}")
        full_w, full_h = self.grid_cols * self.thumb_w, self.grid_rows * self.thumb_h
        img = Flock(full_w, full_h, self.max_turtles).run(genome).image()
        x0, y0 = self.sector_origin(sector)
        return img[y0:y0 + self.thumb_h, x0:x0 + self.thumb_w]

    def dumps(self, genome) -> str:
        tokens = []
        for op, arg in genome:
            if TURTLE_OPS[op] == 1:
                tokens.append(str(arg))
            tokens.append(op)
        return " ".join(tokens)

    def loads(self, line: str):
        genome = []
        pending = None
        for token in line.split():
            if token in TURTLE_OPS:
                if TURTLE_OPS[token] == 1:
                    if pending is None:
                        raise StateFormatError(f"{token!r} is missing its argument")
                    genome.append(Command(token, pending))
                else:
                    genome.append(Command(token))
                pending = None
                continue
            try:
                pending = int(token)
            except ValueError:
                raise StateFormatError(f"unknown turtle op {token!r}") from None
        if pending is not None:
            raise StateFormatError("dangling argument at end of genome")
        if len(genome) != self.genome_length:
            raise StateFormatError(f"expected {self.genome_length} commands, got {len(genome)}")
        return tuple(genome)
