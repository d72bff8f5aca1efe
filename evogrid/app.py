# app.py
# Breed pictures by picking them: one pygame window showing a grid of
# genomes. Click the one you like and the rest of the grid fills with its
# mutants.
#
# Run: python -m evogrid [--kind turtle]
# Requirements: pip install pygame numpy

import argparse
import logging
import random
from typing import List, Optional

import pygame

from .breeding import Breeder
from .commands import RASTER_KEYS, TURTLE_KEYS, Dispatcher
from .config import KINDS, BrowserConfig, build_gene_weights, parse_weight
from .display import PygameInput, PygameScreen
from .genome import GenomeKind
from .mailbox import Mailbox
from .population import Population
from .raster import RasterKind
from .turtle import TurtleKind

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="evogrid", description="Evolve images by aesthetic selection.")
    parser.add_argument("--kind", choices=KINDS, default="raster",
                        help="raster images or turtle drawings (default: raster)")
    parser.add_argument("--cols", type=int, default=None, help="thumbnails per row")
    parser.add_argument("--rows", type=int, default=None, help="thumbnails per column")
    parser.add_argument("--thumb", type=int, nargs=2, metavar=("W", "H"), default=None,
                        help="thumbnail size in pixels")
    parser.add_argument("--max-attempts", type=int, default=None,
                        help="give up a breeding search after this many rejected mutations")
    parser.add_argument("--weight", action="append", default=[], metavar="NAME=N",
                        help="override one gene weight (repeatable)")
    parser.add_argument("--restore", action="store_true", help="start from the saved state file")
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def config_from_args(args: argparse.Namespace) -> BrowserConfig:
    overrides = dict(parse_weight(text) for text in args.weight)
    options = dict(kind=args.kind, max_attempts=args.max_attempts, restore=args.restore,
                   seed=args.seed, gene_weights=build_gene_weights(overrides))
    if args.kind == "turtle":
        # turtle drawings need room; fewer, larger tiles
        options.update(cols=4, rows=3, thumb_w=256, thumb_h=256)
    if args.cols is not None:
        options["cols"] = args.cols
    if args.rows is not None:
        options["rows"] = args.rows
    if args.thumb is not None:
        options["thumb_w"], options["thumb_h"] = args.thumb
    return BrowserConfig(**options)


def make_kind(config: BrowserConfig, rng: random.Random) -> GenomeKind:
    shape = (config.cols, config.rows)
    if config.kind == "turtle":
        return TurtleKind(config.thumb_w, config.thumb_h, shape, rng=rng)
    return RasterKind(config.thumb_w, config.thumb_h, shape, gene_weights=config.gene_weights, rng=rng)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = config_from_args(args)
    except ValueError as e:
        parser.error(str(e))
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    rng = random.Random(config.seed)
    population = Population(config.cols, config.rows, config.thumb_w, config.thumb_h)
    kind = make_kind(config, rng)

    pygame.init()
    try:
        screen = PygameScreen(population, kind, caption=f"evogrid ({config.kind})")
        mailbox = Mailbox(PygameInput())
        breeder = Breeder(population, kind, screen, mailbox,
                          max_attempts=config.max_attempts, min_complexity=config.min_complexity)
        dispatcher = Dispatcher(breeder, mailbox,
                                keys=TURTLE_KEYS if config.kind == "turtle" else RASTER_KEYS,
                                state_file=config.state_file, saved_file=config.saved_file,
                                image_pattern=config.image_pattern, rng=rng)
        print(f"Rendering {config.size} thumbnails ({config.cols}x{config.rows}), "
              f"thumb size {config.thumb_w}x{config.thumb_h}")
        dispatcher.run(restore=config.restore)
        logger.debug("%d frames shown", screen.frames)
    finally:
        pygame.quit()
    print("Exited cleanly.")
    return 0
