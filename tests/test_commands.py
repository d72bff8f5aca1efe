import logging

from conftest import CountingKind, Rig
from evogrid.commands import TURTLE_KEYS, State, key_label
from evogrid.mailbox import Event


def test_key_label():
    assert key_label("z") == "122"
    assert key_label("!") == "33"


def test_unknown_key_is_echoed(rig, capsys):
    rig.breeder.fresh()
    before = rig.genomes()
    rig.dispatcher.react(Event.keyboard("z"))
    assert capsys.readouterr().out == "122 ?\n"
    assert rig.genomes() == before
    assert rig.dispatcher.state is State.IDLE


def test_turtle_keys_only_know_fresh_and_quit(tmp_path, capsys):
    rig = Rig(tmp_path=tmp_path, keys=TURTLE_KEYS)
    rig.breeder.fresh()
    rig.dispatcher.react(Event.keyboard("s"))
    assert capsys.readouterr().out == "115 ?\n"
    assert not (tmp_path / "evo-state").exists()
    rig.dispatcher.react(Event.keyboard("q"))
    assert rig.dispatcher.state is State.QUIT


def test_fresh_key_regenerates_every_slot():
    kind = CountingKind(starts=range(20, 40))
    rig = Rig(cols=2, rows=2, kind=kind)
    rig.dispatcher.react(Event.keyboard("f"))
    assert rig.genomes() == [20, 21, 22, 23]
    assert rig.display.shows > 0


def test_big_key_zooms_preview(rig):
    rig.breeder.fresh()
    rig.dispatcher.react(Event.keyboard("b"))
    assert [c[2] for c in rig.display.calls if c[0] == "zoom"] == list(range(rig.kind.sectors))


def test_click_breeds_from_the_clicked_cell(rig):
    rig.breeder.fresh()
    rig.population[5].genome = 30
    rig.population[5].invalidate()
    # cells are 10x10 and the grid is 3 wide: (25, 12) is row 1, column 2
    rig.dispatcher.react(Event.mouse(25, 12))
    assert rig.genomes() == [30] + [31] * 8


def test_click_outside_the_grid_is_ignored(rig, caplog):
    rig.breeder.fresh()
    before = rig.genomes()
    with caplog.at_level(logging.WARNING, logger="evogrid.commands"):
        rig.dispatcher.react(Event.mouse(100, 5))
    assert rig.genomes() == before
    assert "outside the grid" in caplog.text
    assert rig.dispatcher.state is State.IDLE


def test_quit_during_propagation():
    # 'q' arrives during the very first search; that search still finishes
    # (two rejects, then an accept) but no further slot is bred
    rig = Rig(kind=CountingKind(steps=[-5, -5, 1], grid_shape=(3, 3)), wait=[Event.mouse(15, 5)])
    rig.breeder.fresh()

    def on_mutate(n):
        if n == 1:
            rig.source.push(Event.keyboard("q"))

    rig.kind.on_mutate = on_mutate
    rig.dispatcher.reacting()
    assert rig.kind.mutations == 3
    assert rig.genomes() == [10, 11] + [10] * 7
    assert rig.dispatcher.state is State.QUIT


def test_key_during_propagation_is_handled_next():
    kind = CountingKind(starts=[10] * 9 + [50] * 9, grid_shape=(3, 3))
    rig = Rig(kind=kind, wait=[Event.mouse(5, 5), Event.keyboard("q")])
    rig.breeder.fresh()
    rig.kind.on_mutate = lambda n: n == 2 and rig.source.push(Event.keyboard("f"))
    rig.dispatcher.reacting()
    # the click was cut short after two children, then 'f' redrew from scratch
    assert rig.genomes() == [50] * 9
    assert rig.dispatcher.state is State.QUIT


def test_search_that_gives_up_is_reported(capsys):
    rig = Rig(kind=CountingKind(steps=[0] * 50, grid_shape=(3, 3)), max_attempts=3)
    rig.breeder.fresh()
    rig.dispatcher.react(Event.mouse(5, 5))
    assert "Gave up: no acceptable mutation for slot 1 after 3 attempts" in capsys.readouterr().out
    assert rig.genomes() == [10] * 9
    assert rig.dispatcher.state is State.IDLE


def test_save_and_restore(tmp_path, capsys):
    rig = Rig(tmp_path=tmp_path)
    rig.breeder.fresh()
    rig.population[3].genome = 42
    rig.dispatcher.react(Event.keyboard("s"))
    state = tmp_path / "evo-state"
    assert state.read_text().splitlines() == ["10", "10", "10", "42", "10", "10", "10", "10", "10"]
    assert f"Saved as {state}" in capsys.readouterr().out

    for slot in rig.population:
        slot.genome = 99
        slot.invalidate()
    rig.dispatcher.react(Event.keyboard("r"))
    assert rig.genomes() == [10, 10, 10, 42, 10, 10, 10, 10, 10]
    assert rig.population[3].thumbnail.tolist() == [42]


def test_restore_of_a_bad_file_changes_nothing(tmp_path, capsys):
    rig = Rig(tmp_path=tmp_path)
    rig.breeder.fresh()
    (tmp_path / "evo-state").write_text("12\nnot a genome\n")
    rig.dispatcher.react(Event.keyboard("r"))
    assert "Warning: bad saved genome" in capsys.readouterr().out
    assert rig.genomes() == [10] * 9


def test_restore_of_a_missing_file_warns(tmp_path, capsys):
    rig = Rig(tmp_path=tmp_path)
    rig.breeder.fresh()
    rig.dispatcher.react(Event.keyboard("r"))
    assert "Warning: could not read" in capsys.readouterr().out
    assert rig.genomes() == [10] * 9


def test_append_and_append_one(tmp_path, capsys):
    rig = Rig(tmp_path=tmp_path)
    rig.breeder.fresh()
    rig.population[0].genome = 7
    rig.dispatcher.react(Event.keyboard("a"))
    rig.dispatcher.react(Event.keyboard("1"))
    rig.dispatcher.react(Event.keyboard("1"))
    lines = (tmp_path / "evo-saved").read_text().splitlines()
    assert lines == ["7"] + ["10"] * 8 + ["7", "7"]
    out = capsys.readouterr().out
    assert f"Appended to {tmp_path / 'evo-saved'}" in out
    assert f"Appended 1 to {tmp_path / 'evo-saved'}" in out


def test_load_random_picks_from_the_album(tmp_path):
    rig = Rig(tmp_path=tmp_path)
    rig.breeder.fresh()
    (tmp_path / "evo-saved").write_text("".join(f"{n}\n" for n in range(100, 130)))
    rig.dispatcher.react(Event.keyboard("v"))
    genomes = rig.genomes()
    assert len(set(genomes)) == 9
    assert genomes == sorted(genomes)
    assert all(100 <= g < 130 for g in genomes)
    assert rig.population.unset() == []


def test_save_image_numbers_files(tmp_path, capsys):
    rig = Rig(tmp_path=tmp_path)
    rig.breeder.fresh()
    rig.dispatcher.react(Event.keyboard("i"))
    rig.dispatcher.react(Event.keyboard("i"))
    assert (tmp_path / "evo0.png").exists() and (tmp_path / "evo1.png").exists()
    assert f"Image written to {tmp_path / 'evo1.png'}" in capsys.readouterr().out


def test_console_gets_the_browser(rig, monkeypatch):
    seen = {}
    monkeypatch.setattr("code.interact", lambda **kw: seen.update(kw["local"]))
    rig.breeder.fresh()
    rig.dispatcher.react(Event.keyboard("!"))
    assert seen["population"] is rig.population
    assert seen["breeder"] is rig.breeder


def test_run_starts_fresh_and_quits():
    rig = Rig(wait=[Event.keyboard("q")])
    rig.dispatcher.run()
    assert rig.population.unset() == []
    assert rig.dispatcher.state is State.QUIT


def test_run_with_restore(tmp_path):
    (tmp_path / "evo-state").write_text("1\n2\n3\n")
    rig = Rig(kind=CountingKind(grid_shape=(3, 3), has_complexity=False), tmp_path=tmp_path,
              wait=[Event.keyboard("q")])
    rig.dispatcher.run(restore=True)
    # slots past the end of the file are filled in by the redraw
    assert rig.genomes() == [1, 2, 3] + [10] * 6
