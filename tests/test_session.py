import os
import pathlib

import mido
import pytest

import hotbeat
import hotbeat.config
import hotbeat.session


SONG = """
bpm(120)
melody = Pattern(60, "4202")

@bang
def play (beat):
    pitch, length = melody[beat]
    instrument.play(0, pitch, length)
"""


@pytest.fixture
def song (tmp_path: pathlib.Path) -> pathlib.Path:

	path = tmp_path / "song.py"
	path.write_text(SONG)
	return path


def test_session_plays_live_file (song: pathlib.Path, registry, clock, midi_out) -> None:

	config = hotbeat.config.Config(program=40)
	session = hotbeat.session.Session(str(song), config, port=midi_out, registry=registry)

	assert midi_out.sent[0] == mido.Message('program_change', channel=0, program=40)

	session.start(clock.now)

	for _ in range(4):
		session.monitor.wheel.dispatch(clock.now)
		session.instrument.wheel.dispatch(clock.now)
		clock.advance(0.5)

	assert [message.note for message in midi_out.of_type("note_on")] == [64, 62, 60, 62]
	assert session.halted is False


def test_session_records_and_saves (song: pathlib.Path, tmp_path: pathlib.Path, registry, clock, midi_out) -> None:

	filename = str(tmp_path / "take.mid")
	config = hotbeat.config.Config(record=True, record_filename=filename)
	session = hotbeat.session.Session(str(song), config, port=midi_out, registry=registry)

	session.start(clock.now)

	for _ in range(3):
		session.monitor.wheel.dispatch(clock.now)
		session.instrument.wheel.dispatch(clock.now)
		clock.advance(0.5)

	assert session.stop() == filename
	assert os.path.exists(filename)
	assert midi_out.closed is True

	notes = [m for m in mido.MidiFile(filename).tracks[0] if m.type == 'note_on']
	assert [m.note for m in notes] == [64, 62, 60]


def test_session_without_recorder_saves_nothing (song: pathlib.Path, registry, midi_out) -> None:

	session = hotbeat.session.Session(str(song), port=midi_out, registry=registry)

	assert session.recorder is None
	assert session.stop() is None


def test_owned_registry_is_stopped (song: pathlib.Path, midi_out) -> None:

	session = hotbeat.session.Session(str(song), port=midi_out)

	assert session.monitor.wheel.running is True

	session.stop()

	assert all(not wheel.running for wheel in session.registry.wheels())


def test_package_exports () -> None:

	assert hotbeat.Session is hotbeat.session.Session
	assert hotbeat.Pattern(60, "0")[0] == (60, 1)
	assert hotbeat.load_config is hotbeat.config.load_config
