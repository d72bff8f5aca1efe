# config.py
# Shared constants for the evolutionary art browsers and the runtime
# configuration built from the command line.

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

# ---------- CONFIG ----------
COLS = 8                # population grid, in thumbnails
ROWS = 6
THUMB_W = 128           # pixels per thumbnail
THUMB_H = 128

MIN_COMPLEXITY = 5      # fresh raster genomes must be strictly more complex than this

# raster programs
PROGRAM_LENGTH = 40     # instructions, including the terminating end marker
MUTATION_RATE = 0.15
STACK_LIMIT = 6

# turtle programs
TURTLE_GENOME_LENGTH = 100
TURTLE_MUTATION_RATE = 0.03
MAX_TURTLES = 131072
MAX_NESTING = 20

STATE_FILE = "evo-state"
SAVED_FILE = "evo-saved"
IMAGE_PATTERN = "evo%d.png"

MAX_ATTEMPTS = None     # breeding retries before giving up; None => search forever
# ---------- END CONFIG ----------

# Gene weights bias the random construction of raster programs.
GENE_WEIGHTS: Dict[str, int] = {
    "constant": 5,
    "x": 12,
    "y": 12,
    "sprinkle": 0,
    "abs": 1, "atan": 1, "cos": 1, "exp": 1, "floor": 1, "log": 1,
    "neg": 1, "sign": 1, "sin": 1, "sqrt": 1, "tan": 1,
    "hwb": 1,
    "+": 1, "-": 1, "*": 1, "/": 1,
    "average": 1, "hypot": 1, "max": 1, "min": 1, "mix": 1,
    "mod": 1, "pow": 1, "and": 1, "or": 1, "xor": 1,
    "color": 5,
    "rotcolor": 2,
}

KINDS = ("raster", "turtle")


def build_gene_weights(overrides: Optional[Dict[str, int]] = None) -> Dict[str, int]:
    """Return a copy of GENE_WEIGHTS with `overrides` applied.

    Raises ValueError for an unknown operator name or a negative weight.
    """
    weights = dict(GENE_WEIGHTS)
    for name, weight in (overrides or {}).items():
        if name not in weights:
            raise ValueError(f"unknown gene {name!r}")
        if int(weight) < 0:
            raise ValueError(f"gene weight for {name!r} must be non-negative, got {weight}")
        weights[name] = int(weight)
    if sum(weights.values()) <= 0:
        raise ValueError("at least one gene needs a positive weight")
    return weights


def parse_weight(text: str) -> Tuple[str, int]:
    # "name=weight", as given to --weight
    name, sep, value = text.rpartition("=")
    if not sep or not name:
        raise ValueError(f"expected NAME=WEIGHT, got {text!r}")
    return name, int(value)


@dataclass
class BrowserConfig:
    kind: str = "raster"
    cols: int = COLS
    rows: int = ROWS
    thumb_w: int = THUMB_W
    thumb_h: int = THUMB_H
    min_complexity: int = MIN_COMPLEXITY
    max_attempts: Optional[int] = MAX_ATTEMPTS
    state_file: str = STATE_FILE
    saved_file: str = SAVED_FILE
    image_pattern: str = IMAGE_PATTERN
    restore: bool = False
    seed: Optional[int] = None
    gene_weights: Dict[str, int] = field(default_factory=lambda: dict(GENE_WEIGHTS))

    def __post_init__(self):
        if self.kind not in KINDS:
            raise ValueError(f"unknown genome kind {self.kind!r}")
        if self.cols < 1 or self.rows < 1:
            raise ValueError("the population grid needs at least one cell")
        if self.thumb_w < 1 or self.thumb_h < 1:
            raise ValueError("thumbnails need a positive size")
        if self.max_attempts is not None and self.max_attempts < 1:
            raise ValueError("max_attempts must be positive or None")

    @property
    def size(self) -> int:
        return self.cols * self.rows
