# store.py
# Saving and loading populations as text, one genome per line in slot order,
# plus the album file that collects favourites across sessions.

import os
import random
from typing import List, Optional

from .display import Display
from .genome import GenomeKind
from .population import PREVIEW, Population


def atomic_write_text(path: str, text: str):
    tmp = path + ".tmp"
    with open(tmp, "w", encoding="utf-8") as f:
        f.write(text)
    os.replace(tmp, path)


def state_lines(population: Population, kind: GenomeKind) -> List[str]:
    # restore fills slots by line number, so the first empty slot ends the file
    lines = []
    for slot in population:
        if not slot.is_set:
            break
        lines.append(kind.dumps(slot.genome) + "\n")
    return lines


def load_lines(population: Population, kind: GenomeKind, lines: List[str]) -> int:
    """Load `lines` into slots 0, 1, ... and return how many were loaded.

    Every line is parsed before any slot changes, so a malformed line
    (StateFormatError) leaves the population as it was.
    """
    genomes = [kind.loads(line) for line in lines[:population.size] if line.strip()]
    for index, genome in enumerate(genomes):
        slot = population[index]
        slot.genome = genome
        slot.invalidate()
    return len(genomes)


def save(population: Population, kind: GenomeKind, path: str) -> bool:
    try:
        atomic_write_text(path, "".join(state_lines(population, kind)))
    except OSError as e:
        print(f"Warning: could not save {path}: {e}")
        return False
    print(f"Saved as {path}")
    return True


def restore(population: Population, kind: GenomeKind, path: str) -> bool:
    try:
        with open(path, "r", encoding="utf-8") as f:
            lines = f.readlines()
    except OSError as e:
        print(f"Warning: could not read {path}: {e}")
        return False
    load_lines(population, kind, lines)
    return True


def append(population: Population, kind: GenomeKind, path: str, only_preview: bool = False) -> bool:
    lines = state_lines(population, kind)
    if only_preview:
        lines = lines[:1] if population[PREVIEW].is_set else []
    try:
        with open(path, "a", encoding="utf-8") as f:
            f.writelines(lines)
    except OSError as e:
        print(f"Warning: could not append to {path}: {e}")
        return False
    print(f"Appended {'1 ' if only_preview else ''}to {path}")
    return True


def pick_lines(lines: List[str], n: int, rng: random.Random) -> List[str]:
    # selection sampling: n lines chosen uniformly, file order kept
    picked = []
    remaining = len(lines)
    for line in lines:
        if len(picked) == n:
            break
        if rng.randrange(remaining) < n - len(picked):
            picked.append(line)
        remaining -= 1
    return picked


def load_random(population: Population, kind: GenomeKind, path: str,
                rng: Optional[random.Random] = None) -> bool:
    try:
        with open(path, "r", encoding="utf-8") as f:
            lines = [line for line in f if line.strip()]
    except OSError as e:
        print(f"Warning: could not read {path}: {e}")
        return False
    load_lines(population, kind, pick_lines(lines, population.size, rng or random.Random()))
    return True


def next_free_path(pattern: str) -> str:
    n = 0
    while os.path.exists(pattern % n):
        n += 1
    return pattern % n


def save_image(display: Display, pattern: str) -> Optional[str]:
    path = next_free_path(pattern)
    try:
        display.save_image(path)
    except Exception as e:
        print(f"Couldn't write image file {path}: {e}")
        return None
    print(f"Image written to {path}")
    return path
