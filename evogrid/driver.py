# driver.py
# The counted loop behind every whole-grid operation. It checks the mailbox
# before each step so that a click or key press cuts the pass short.

import enum
import logging
from typing import Callable

from .mailbox import Mailbox

logger = logging.getLogger(__name__)


class LoopState(enum.Enum):
    COMPLETED = "completed"
    INTERRUPTED = "interrupted"


def gridding(action: Callable[[int], None], start: int, limit: int, mailbox: Mailbox) -> LoopState:
    """Apply `action` to start, start+1, ... limit-1 in order.

    Stops early, without touching the remaining indices, as soon as the
    mailbox reports a pending event.
    """
    i = start
    while i < limit:
        if mailbox.poll().pending:
            logger.debug("gridding interrupted at %d of %d", i, limit)
            return LoopState.INTERRUPTED
        action(i)
        i += 1
    return LoopState.COMPLETED
