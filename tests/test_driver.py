from conftest import ScriptedInput
from evogrid.driver import LoopState, gridding
from evogrid.mailbox import Event, Mailbox


def test_runs_every_index_in_order():
    box = Mailbox(ScriptedInput())
    seen = []
    assert gridding(seen.append, 0, 9, box) is LoopState.COMPLETED
    assert seen == list(range(9))


def test_event_after_index_3_stops_the_pass():
    source = ScriptedInput()
    box = Mailbox(source)
    seen = []

    def action(i):
        seen.append(i)
        if i == 3:
            source.push(Event.keyboard("q"))

    assert gridding(action, 0, 9, box) is LoopState.INTERRUPTED
    assert seen == [0, 1, 2, 3]
    assert box.held == Event.keyboard("q")


def test_pending_event_means_nothing_runs():
    box = Mailbox(ScriptedInput(listen=[Event.mouse(0, 0)]))
    seen = []
    assert gridding(seen.append, 0, 9, box) is LoopState.INTERRUPTED
    assert seen == []


def test_start_offset_and_empty_range():
    box = Mailbox(ScriptedInput())
    seen = []
    gridding(seen.append, 1, 4, box)
    assert seen == [1, 2, 3]
    assert gridding(seen.append, 4, 4, box) is LoopState.COMPLETED
    assert seen == [1, 2, 3]
