import typing

import pytest

import hotbeat.player


def test_default_tempo () -> None:

	player = hotbeat.player.Player()

	assert player.bpm() == 120
	assert player.tick == 0.5


def test_bpm_sets_tick () -> None:

	player = hotbeat.player.Player()

	assert player.bpm(60) == 60
	assert player.tick == 1.0


def test_bpm_must_be_positive () -> None:

	with pytest.raises(ValueError):
		hotbeat.player.Player(0)

	with pytest.raises(ValueError):
		hotbeat.player.Player().bpm(-10)


def test_bang_handlers_fire_in_order () -> None:

	player = hotbeat.player.Player()
	calls: typing.List[typing.Tuple[str, int]] = []

	player.register_bang(lambda b: calls.append(("a", b)))
	player.bang(lambda b: calls.append(("b", b)))

	player.fire_bang(7)

	assert calls == [("a", 7), ("b", 7)]


def test_bang_works_as_decorator () -> None:

	player = hotbeat.player.Player()

	@player.bang
	def handler (beat: int) -> None:
		pass

	assert handler is not None
	assert player.bang_handlers == (handler,)


def test_failing_bang_stops_later_handlers () -> None:

	player = hotbeat.player.Player()
	calls: typing.List[str] = []

	def bad (beat: int) -> None:
		raise RuntimeError("bad")

	player.bang(lambda b: calls.append("first"))
	player.bang(bad)
	player.bang(lambda b: calls.append("never"))

	with pytest.raises(RuntimeError):
		player.fire_bang(0)

	assert calls == ["first"]


def test_fire_close_runs_all_then_raises_first_error () -> None:

	player = hotbeat.player.Player()
	calls: typing.List[str] = []

	def bad () -> None:
		calls.append("bad")
		raise KeyError("first")

	def worse () -> None:
		raise ValueError("second")

	player.close(bad)
	player.close(worse)
	player.close(lambda: calls.append("last"))

	with pytest.raises(KeyError):
		player.fire_close()

	assert calls == ["bad", "last"]


def test_reset_clears_handlers () -> None:

	player = hotbeat.player.Player()
	player.bang(lambda b: None)
	player.close(lambda: None)

	player.reset()

	assert player.bang_handlers == ()
	assert player.close_handlers == ()


def test_spawn_copies_tempo_only () -> None:

	parent = hotbeat.player.Player(90)
	parent.bang(lambda b: None)
	parent.freeze()

	child = parent.spawn()

	assert child.bpm() == 90
	assert child.tick == parent.tick
	assert child.bang_handlers == ()
	assert child.frozen is False

	# The child's changes never reach the parent.
	child.bpm(140)
	child.bang(lambda b: None)
	assert parent.bpm() == 90
	assert len(parent.bang_handlers) == 1


def test_frozen_player_is_immutable () -> None:

	player = hotbeat.player.Player()
	player.freeze()

	with pytest.raises(RuntimeError):
		player.bang(lambda b: None)

	with pytest.raises(RuntimeError):
		player.close(lambda: None)

	with pytest.raises(RuntimeError):
		player.bpm(100)

	with pytest.raises(RuntimeError):
		player.reset()

	# Reading the tempo is still fine.
	assert player.bpm() == 120


def test_surface_exposes_live_names () -> None:

	player = hotbeat.player.Player()
	surface = player.surface()

	assert sorted(surface) == ["bang", "bpm", "close"]

	surface["bpm"](100)
	surface["bang"](lambda b: None)

	assert player.bpm() == 100
	assert len(player.bang_handlers) == 1
