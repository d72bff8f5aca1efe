# display.py
# The pygame window the population is drawn into, and the pygame event
# source feeding the mailbox.

from typing import Protocol

import numpy as np
import pygame

from .genome import GenomeKind
from .mailbox import NO_EVENT, Event
from .population import Population

COLOR_BG = (22, 22, 22)


class Display(Protocol):
    def show(self) -> None: ...
    def redraw(self, index: int) -> None: ...
    def zoom(self, index: int, sector: int) -> None: ...
    def save_image(self, path: str) -> None: ...


class PygameScreen:
    def __init__(self, population: Population, kind: GenomeKind, caption: str = "evogrid"):
        self.population = population
        self.kind = kind
        w = population.cols * population.cell_w
        h = population.rows * population.cell_h
        self.surface = pygame.display.set_mode((w, h))
        pygame.display.set_caption(caption)
        self.surface.fill(COLOR_BG)
        self.frames = 0

    def blit_image(self, img: np.ndarray, x: int, y: int):
        # images are (h, w, 3); pygame surfaces are indexed (x, y)
        surf = pygame.surfarray.make_surface(np.transpose(img, (1, 0, 2)))
        self.surface.blit(surf, (x, y))

    def redraw(self, index: int):
        slot = self.population[index]
        x, y = self.population.cell_origin(index)
        if slot.is_set:
            self.blit_image(self.kind.render(slot), x, y)
        else:
            pygame.draw.rect(self.surface, COLOR_BG, (x, y, self.population.cell_w, self.population.cell_h))

    def zoom(self, index: int, sector: int):
        img = self.kind.draw_sector(self.population[index].genome, sector)
        self.blit_image(img, *self.kind.sector_origin(sector))

    def show(self):
        pygame.display.flip()
        self.frames += 1

    def save_image(self, path: str):
        pygame.image.save(self.surface, path)


class PygameInput:
    """Keyboard and mouse input, reduced to the events the browser understands."""

    @staticmethod
    def translate(event) -> Event:
        if event.type == pygame.QUIT:
            return Event.keyboard("q")
        if event.type == pygame.KEYDOWN and event.unicode:
            return Event.keyboard(event.unicode)
        if event.type == pygame.MOUSEBUTTONDOWN:
            return Event.mouse(*event.pos)
        return NO_EVENT

    def listen(self) -> Event:
        # skip motion and other noise so a click queued behind it is seen now
        while True:
            event = pygame.event.poll()
            if event.type == pygame.NOEVENT:
                return NO_EVENT
            translated = self.translate(event)
            if translated.pending:
                return translated

    def wait(self) -> Event:
        while True:
            translated = self.translate(pygame.event.wait())
            if translated.pending:
                return translated
