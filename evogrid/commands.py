# commands.py
# Turns keyboard and mouse events into browser actions and runs the
# top-level react/wait loop.

import code
import enum
import logging
import random
from typing import Callable, Dict, Optional

from . import store
from .acceptance import SearchExhausted
from .breeding import Breeder
from .config import IMAGE_PATTERN, SAVED_FILE, STATE_FILE
from .genome import StateFormatError
from .mailbox import Event, EventKind, Mailbox

logger = logging.getLogger(__name__)


class State(enum.Enum):
    IDLE = "idle"
    REACTING = "reacting"
    QUIT = "quit"


class Command(enum.Enum):
    FRESH = "fresh"
    GRID = "grid"
    BIG = "big"
    SAVE_IMAGE = "save-image"
    SAVE = "save"
    RESTORE = "restore"
    LOAD_RANDOM = "load-random"
    APPEND = "append"
    APPEND_ONE = "append1"
    QUIT = "quit"
    CONSOLE = "console"


RASTER_KEYS: Dict[str, Command] = {
    "!": Command.CONSOLE,
    "1": Command.APPEND_ONE,
    "a": Command.APPEND,
    "b": Command.BIG,
    "f": Command.FRESH,
    "g": Command.GRID,
    "i": Command.SAVE_IMAGE,
    "q": Command.QUIT,
    "r": Command.RESTORE,
    "s": Command.SAVE,
    "v": Command.LOAD_RANDOM,
}

TURTLE_KEYS: Dict[str, Command] = {
    "f": Command.FRESH,
    "q": Command.QUIT,
}


def key_label(char: str) -> str:
    return str(ord(char)) if len(char) == 1 else repr(char)


class Dispatcher:
    def __init__(self, breeder: Breeder, mailbox: Mailbox, keys: Dict[str, Command] = RASTER_KEYS,
                 state_file: str = STATE_FILE, saved_file: str = SAVED_FILE,
                 image_pattern: str = IMAGE_PATTERN, rng: Optional[random.Random] = None):
        self.breeder = breeder
        self.mailbox = mailbox
        self.keys = keys
        self.state_file = state_file
        self.saved_file = saved_file
        self.image_pattern = image_pattern
        self.rng = rng or random.Random()
        self.state = State.IDLE
        self.handlers: Dict[Command, Callable[[], None]] = {
            Command.FRESH: self.breeder.fresh,
            Command.GRID: self.breeder.grid,
            Command.BIG: self.breeder.big,
            Command.SAVE_IMAGE: self.save_image,
            Command.SAVE: self.save,
            Command.RESTORE: self.restore,
            Command.LOAD_RANDOM: self.load_random,
            Command.APPEND: self.append,
            Command.APPEND_ONE: self.append_one,
            Command.QUIT: self.quit,
            Command.CONSOLE: self.console,
        }

    @property
    def population(self):
        return self.breeder.population

    @property
    def kind(self):
        return self.breeder.kind

    # ---- commands ----
    def quit(self):
        self.state = State.QUIT

    def save(self):
        store.save(self.population, self.kind, self.state_file)

    def restore(self):
        if store.restore(self.population, self.kind, self.state_file):
            self.breeder.grid()

    def load_random(self):
        if store.load_random(self.population, self.kind, self.saved_file, self.rng):
            self.breeder.grid()

    def append(self):
        store.append(self.population, self.kind, self.saved_file)

    def append_one(self):
        store.append(self.population, self.kind, self.saved_file, only_preview=True)

    def save_image(self):
        store.save_image(self.breeder.display, self.image_pattern)

    def console(self):
        code.interact(banner="evogrid console; Ctrl-D returns to the browser",
                      local={"browser": self, "population": self.population,
                             "kind": self.kind, "breeder": self.breeder},
                      exitmsg="")

    # ---- events ----
    def on_keyboard(self, char: str):
        self.mailbox.reset()
        command = self.keys.get(char)
        if command is None:
            print(f"{key_label(char)} ?")
            return
        self.handlers[command]()

    def on_mouse(self, x: int, y: int):
        self.mailbox.reset()
        try:
            index = self.population.index_at(x, y)
        except IndexError:
            logger.warning("click at (%d, %d) is outside the grid", x, y)
            return
        logger.debug("click at (%d, %d) -> cell %s", x, y, self.population.coords_of(index))
        self.breeder.choose(index)

    def react(self, event: Event):
        # an event arriving while this one is handled stays in the mailbox and is handled next
        self.state = State.REACTING
        try:
            if event.kind == EventKind.KEYBOARD:
                self.on_keyboard(event.char)
            elif event.kind == EventKind.MOUSE:
                self.on_mouse(*event.xy)
        except SearchExhausted as e:
            print(f"Gave up: {e}")
        except StateFormatError as e:
            print(f"Warning: bad saved genome: {e}")
        finally:
            if self.state is State.REACTING:
                self.state = State.IDLE
        self.breeder.display.show()

    def reacting(self):
        while self.state is not State.QUIT:
            self.react(self.mailbox.wait_for_change())

    def run(self, restore: bool = False):
        if restore and store.restore(self.population, self.kind, self.state_file):
            self.breeder.grid()
        else:
            self.breeder.fresh()
        self.reacting()
