# raster.py
# Image genomes: short stack programs whose instructions are RGB image
# operations. A program is compiled into a DAG of shared nodes, which gives
# both the picture (evaluated with numpy) and the complexity score (the
# number of distinct reachable nodes).

import math
import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np

from .config import GENE_WEIGHTS, MUTATION_RATE, PROGRAM_LENGTH, STACK_LIMIT
from .genome import GenomeKind, StateFormatError


@dataclass(frozen=True)
class Op:
    name: str
    kind: str       # constant, nullary, unary, binary, mix, hwb, color, rotcolor, sprinkle
    pops: int
    pushes: int


@dataclass(frozen=True)
class Instruction:
    name: str
    value: float = 0.0      # only meaningful for constants


def _bits(a):
    return a.astype(np.float32).view(np.uint32)


def _unbits(u):
    return u.view(np.float32)


_UNARY = {
    "abs": np.abs,
    "atan": np.arctan,
    "cos": np.cos,
    "exp": np.exp,
    "floor": np.floor,
    "log": lambda a: np.log(np.abs(a)),
    "neg": np.negative,
    "sign": np.sign,
    "sin": np.sin,
    "sqrt": lambda a: np.sqrt(np.abs(a)),
    "tan": np.tan,
}

_BINARY = {
    "+": np.add,
    "-": np.subtract,
    "*": np.multiply,
    "/": np.divide,
    "average": lambda a, b: 0.5 * (a + b),
    "hypot": np.hypot,
    "max": lambda a, b: np.where(a > b, a, b),
    "min": lambda a, b: np.where(a < b, a, b),
    "mod": np.fmod,
    "pow": np.power,
    "and": lambda a, b: _unbits(_bits(a) & _bits(b)),
    "or": lambda a, b: _unbits(_bits(a) | _bits(b)),
    "xor": lambda a, b: _unbits(_bits(a) ^ _bits(b)),
}

# One of each instruction type, in file/toolbox order.
TOOLBOX: List[Op] = (
    [Op("constant", "constant", 0, 1),
     Op("x", "nullary", 0, 1),
     Op("y", "nullary", 0, 1),
     Op("sprinkle", "sprinkle", 0, 1)]
    + [Op(name, "unary", 1, 1) for name in _UNARY]
    + [Op("hwb", "hwb", 1, 1)]
    + [Op(name, "binary", 2, 1) for name in list(_BINARY)[:8]]
    + [Op("mix", "mix", 2, 1)]
    + [Op(name, "binary", 2, 1) for name in list(_BINARY)[8:]]
    + [Op("color", "color", 3, 1),
       Op("rotcolor", "rotcolor", 1, 1)]
)
OPS: Dict[str, Op] = {op.name: op for op in TOOLBOX}


# ---------- Compilation ----------
class Node:
    __slots__ = ("op", "args", "value", "step")

    def __init__(self, op: str, args: tuple, value: float, step: int):
        self.op = op; self.args = args; self.value = value; self.step = step

    def __repr__(self):
        if self.op == "constant":
            return f"Node({self.value:g})"
        return f"Node({self.op}, {len(self.args)} args)"


class Graph:
    """Hash-consing node table: structurally equal nodes are the same object."""

    def __init__(self):
        self.table: Dict[tuple, Node] = {}

    def node(self, op: str, args: tuple = (), value: float = 0.0, step: int = 0) -> Node:
        # the step only distinguishes nodes whose output depends on it
        key = (op, args,
               value if op == "constant" else 0.0,
               step if op in ("mix", "sprinkle") else 0)
        found = self.table.get(key)
        if found is None:
            found = self.table[key] = Node(op, args, value, step)
        return found


def compile_program(program) -> Tuple[Node, Node, Node]:
    """Symbolically run `program` on a circular stack of RGB node triples.

    Returns the (r, g, b) nodes left on top of the stack.
    """
    graph = Graph()
    zero = graph.node("constant", value=0.0)
    depth = STACK_LIMIT
    stack = [(zero, zero, zero) for _ in range(depth)]
    sp = 0
    for step, ins in enumerate(program):
        op = OPS[ins.name]
        sp = (sp - op.pops) % depth
        tos, nos, pos = stack[sp], stack[(sp + 1) % depth], stack[(sp + 2) % depth]
        if op.kind == "constant":
            n = graph.node("constant", value=ins.value)
            result = (n, n, n)
        elif op.kind == "nullary":
            n = graph.node(op.name)
            result = (n, n, n)
        elif op.kind == "unary":
            result = tuple(graph.node(op.name, (tos[c],)) for c in range(3))
        elif op.kind in ("binary", "mix"):
            result = tuple(graph.node(op.name, (tos[c], nos[c]), step=step) for c in range(3))
        elif op.kind == "color":
            result = (tos[0], nos[1], pos[2])
        elif op.kind == "hwb":
            h = graph.node("hwb", tuple(tos))
            result = (h, graph.node("part1", (h,)), graph.node("part2", (h,)))
        elif op.kind == "rotcolor":
            result = (tos[1], tos[2], tos[0])
        elif op.kind == "sprinkle":
            n = graph.node("sprinkle", (tos[0],), step=step)
            result = (n, n, n)
        else:
            raise ValueError(f"unknown op kind {op.kind!r}")
        stack[sp] = result
        sp = (sp + op.pushes) % depth
    return stack[(sp - 1) % depth]


def count_reachable(roots) -> int:
    seen = set()
    todo = list(roots)
    while todo:
        node = todo.pop()
        if id(node) in seen:
            continue
        seen.add(id(node))
        todo.extend(node.args)
    return len(seen)


# ---------- Evaluation ----------
def hwb_to_rgb(a_h, a_w, a_b):
    h = np.fmod(a_h, 6.0)
    h = np.where(h < 0, h + 6.0, h)
    w = np.modf(a_w)[0]
    v = 1 - np.modf(a_b)[0]
    floor_h = np.floor(h)
    i = np.where(np.isfinite(floor_h), floor_h, 0).astype(np.int64)
    f = h - floor_h
    f = np.where(i & 1, 1 - f, f)
    n = w + f * (v - w)
    cases = [i == 1, i == 2, i == 3, i == 4, i == 5]
    r = np.select(cases, [n, w, w, n, v], default=v)
    g = np.select(cases, [v, v, n, w, w], default=n)
    b = np.select(cases, [w, n, v, v, n], default=w)
    return r, g, b


class Evaluator:
    def __init__(self, xs: np.ndarray, ys: np.ndarray, tile_id: int):
        self.xs = xs; self.ys = ys
        self.tile_id = tile_id
        self.cache: Dict[object, object] = {}

    def rng(self, node: Node):
        return np.random.default_rng(node.step + 64 * self.tile_id)

    def eval(self, node: Node):
        found = self.cache.get(id(node))
        if found is not None:
            return found
        op = node.op
        shape = self.xs.shape
        if op == "constant":
            out = np.full(shape, node.value, dtype=np.float32)
        elif op == "x":
            out = self.xs
        elif op == "y":
            out = self.ys
        elif op in _UNARY:
            out = _UNARY[op](self.eval(node.args[0]))
        elif op in _BINARY:
            out = _BINARY[op](self.eval(node.args[0]), self.eval(node.args[1]))
        elif op == "mix":
            a, b = self.eval(node.args[0]), self.eval(node.args[1])
            out = np.where(self.rng(node).integers(0, 2, shape).astype(bool), a, b)
        elif op == "sprinkle":
            a = self.eval(node.args[0])
            out = np.where(self.rng(node).random(shape) < a, 1.0, 0.0)
        elif op == "hwb":
            out = self.hwb(node)[0]
        elif op == "part1":
            out = self.hwb(node.args[0])[1]
        elif op == "part2":
            out = self.hwb(node.args[0])[2]
        else:
            raise ValueError(f"cannot evaluate {op!r}")
        out = np.asarray(out, dtype=np.float32)
        self.cache[id(node)] = out
        return out

    def hwb(self, node: Node):
        # the three channels of an hwb node; the node itself stands for the first
        key = ("hwb", id(node))
        found = self.cache.get(key)
        if found is None:
            rgb = hwb_to_rgb(*(self.eval(arg) for arg in node.args))
            found = self.cache[key] = tuple(np.asarray(c, dtype=np.float32) for c in rgb)
        return found

    def image(self, roots) -> np.ndarray:
        with np.errstate(all="ignore"):
            r, g, b = (self.eval(root) for root in roots)
            return np.stack([color_value(r), color_value(g), color_value(b)], axis=-1)


def color_value(intensity: np.ndarray) -> np.ndarray:
    # 0..1 nominal intensity -> clipped byte
    v = np.floor(256.0 * intensity.astype(np.float64))
    v = np.nan_to_num(v, nan=0.0, posinf=255.0, neginf=0.0)
    return np.clip(v, 0, 255).astype(np.uint8)


# ---------- Genome kind ----------
class RasterKind(GenomeKind):
    name = "raster"
    has_complexity = True

    def __init__(self, thumb_w: int, thumb_h: int, grid_shape=(1, 1),
                 gene_weights: Optional[Dict[str, int]] = None,
                 rng: Optional[random.Random] = None,
                 program_length: int = PROGRAM_LENGTH,
                 mutation_rate: float = MUTATION_RATE):
        super().__init__(thumb_w, thumb_h, grid_shape)
        weights = dict(GENE_WEIGHTS if gene_weights is None else gene_weights)
        self.names = [op.name for op in TOOLBOX]
        self.weights = [weights.get(name, 0) for name in self.names]
        if sum(self.weights) <= 0:
            raise ValueError("gene weights are all zero")
        self.rng = rng or random.Random()
        self.program_length = program_length
        self.mutation_rate = mutation_rate

    def random_instruction(self) -> Instruction:
        name = self.rng.choices(self.names, weights=self.weights)[0]
        if name == "constant":
            return Instruction(name, self.rng.random())
        return Instruction(name)

    def random_genome(self):
        return tuple(self.random_instruction() for _ in range(self.program_length - 1))

    def point_mutation(self, ins: Instruction) -> Instruction:
        if ins.name == "constant" and self.rng.random() < 0.5:
            return Instruction("constant", ins.value + (self.rng.random() - 0.5) / 10.0)
        return self.random_instruction()

    def mutated(self, genome):
        return tuple(self.point_mutation(ins) if self.rng.random() < self.mutation_rate else ins
                     for ins in genome)

    def measure(self, genome) -> int:
        return count_reachable(compile_program(genome))

    def _coords(self, width: int, height: int, x0: int = 0, y0: int = 0, total_w=None, total_h=None):
        aspect = self.thumb_w / self.thumb_h
        total_w = total_w or width
        total_h = total_h or height
        px = np.arange(x0, x0 + width, dtype=np.float32)
        py = np.arange(y0, y0 + height, dtype=np.float32)
        xs = -aspect + (2 * aspect / total_w) * px
        ys = -1.0 + (2.0 / total_h) * py
        return np.meshgrid(xs.astype(np.float32), ys.astype(np.float32))

    def draw(self, genome) -> np.ndarray:
        xs, ys = self._coords(self.thumb_w, self.thumb_h)
        return Evaluator(xs, ys, 0).image(compile_program(genome))

    def draw_sector(self, genome, sector: int) -> np.ndarray:
        if not 0 <= sector < self.sectors:
            raise IndexError(f"sector {sector} outside 0..{self.sectors - 1}")
        x0, y0 = self.sector_origin(sector)
        xs, ys = self._coords(self.thumb_w, self.thumb_h, x0, y0,
                              self.grid_cols * self.thumb_w, self.grid_rows * self.thumb_h)
        return Evaluator(xs, ys, 1 + sector).image(compile_program(genome))

    def dumps(self, genome) -> str:
        tokens = [repr(ins.value) if ins.name == "constant" else ins.name for ins in genome]
        return " ".join([str(len(genome))] + tokens)

    def loads(self, line: str):
        tokens = line.split()
        if not tokens:
            raise StateFormatError("empty genome line")
        try:
            count = int(tokens[0])
        except ValueError:
            raise StateFormatError(f"bad instruction count {tokens[0]!r}") from None
        if count != self.program_length - 1 or len(tokens) - 1 != count:
            raise StateFormatError(f"expected {self.program_length - 1} instructions, got {len(tokens) - 1}")
        program = []
        for token in tokens[1:]:
            if token in OPS and token != "constant":
                program.append(Instruction(token))
                continue
            try:
                value = float(token)
            except ValueError:
                raise StateFormatError(f"unknown instruction {token!r}") from None
            if math.isnan(value):
                raise StateFormatError("NaN constant")
            program.append(Instruction("constant", value))
        return tuple(program)
