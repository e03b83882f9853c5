import typing

import mido
import pytest

import hotbeat.instrument
import hotbeat.recorder


@pytest.fixture
def instrument (midi_out, registry) -> hotbeat.instrument.Instrument:

	return hotbeat.instrument.Instrument(port=midi_out, bpm=120, registry=registry)


def test_direct_messages (instrument, midi_out) -> None:

	instrument.program_change(0, 40)
	instrument.note_on(1, 60, 90)
	instrument.note_off(1, 60)

	assert midi_out.sent == [
		mido.Message('program_change', channel=0, program=40),
		mido.Message('note_on', channel=1, note=60, velocity=90),
		mido.Message('note_off', channel=1, note=60, velocity=64),
	]


@pytest.mark.parametrize("call", [
	lambda i: i.note_on(16, 60),
	lambda i: i.note_on(0, 128),
	lambda i: i.note_off(-1, 60),
	lambda i: i.program_change(0, 200),
	lambda i: i.play(0, 60, 1, velocity=300),
	lambda i: i.play(0, 60, -1),
])
def test_out_of_range_values_raise (instrument, call: typing.Callable) -> None:

	with pytest.raises(ValueError):
		call(instrument)


def test_wheel_resolution_is_a_tenth_of_a_beat (instrument, registry) -> None:

	assert instrument.interval == 0.5
	assert instrument.wheel is registry.get(0.05)


def test_play_schedules_on_and_off (instrument, midi_out, clock) -> None:

	"""Duration is in beats: one beat at 120 BPM is half a second."""

	instrument.play(2, 64, 1)

	instrument.wheel.dispatch(clock.now)
	assert midi_out.sent == [mido.Message('note_on', channel=2, note=64, velocity=100)]

	instrument.wheel.dispatch(clock.now + 0.45)
	assert len(midi_out.sent) == 1

	instrument.wheel.dispatch(clock.now + 0.5)
	assert midi_out.sent[-1] == mido.Message('note_off', channel=2, note=64, velocity=100)


def test_play_at_explicit_time (instrument, midi_out, clock) -> None:

	instrument.play(0, 60, 2, velocity=80, at=clock.now + 1.0)

	instrument.wheel.dispatch(clock.now + 0.9)
	assert midi_out.sent == []

	instrument.wheel.dispatch(clock.now + 1.0)
	assert midi_out.of_type("note_on") == [mido.Message('note_on', channel=0, note=60, velocity=80)]

	instrument.wheel.dispatch(clock.now + 2.0)
	assert len(midi_out.of_type("note_off")) == 1


def test_messages_are_recorded_at_scheduled_time (midi_out, registry, clock) -> None:

	recorder = hotbeat.recorder.Recorder(clock=clock)
	instrument = hotbeat.instrument.Instrument(port=midi_out, registry=registry, recorder=recorder)

	instrument.play(0, 60, 1, at=clock.now + 0.5)
	instrument.wheel.dispatch(clock.now + 0.52)
	instrument.wheel.dispatch(clock.now + 1.03)

	assert [at for at, _ in recorder.events] == [clock.now + 0.5, clock.now + 1.0]


def test_send_failure_is_logged_not_raised (instrument, midi_out, caplog: pytest.LogCaptureFixture) -> None:

	def broken (message: mido.Message) -> None:
		raise IOError("unplugged")

	midi_out.send = broken

	instrument.note_on(0, 60)

	assert "MIDI send failed" in caplog.text


def test_opens_named_device (patch_midi, registry) -> None:

	instrument = hotbeat.instrument.Instrument(device="Other MIDI", registry=registry)

	assert instrument.device_name == "Other MIDI"
	assert patch_midi[-1][0] == "Other MIDI"
	assert instrument.port is patch_midi[-1][2]


def test_auto_discovers_first_device (patch_midi, registry) -> None:

	instrument = hotbeat.instrument.Instrument(registry=registry)

	assert instrument.device_name == "Dummy MIDI"


def test_virtual_port (patch_midi, registry) -> None:

	instrument = hotbeat.instrument.Instrument(device="jam", virtual=True, registry=registry)

	assert patch_midi[-1][:2] == ("jam", True)
	assert instrument.device_name == "jam"


def test_unknown_device_drops_messages (patch_midi, registry) -> None:

	instrument = hotbeat.instrument.Instrument(device="Missing", registry=registry)

	assert instrument.port is None
	instrument.note_on(0, 60)


def test_close_closes_port (instrument, midi_out) -> None:

	instrument.close()

	assert midi_out.closed is True
	assert instrument.port is None
