import typing

import mido
import pytest

import hotbeat.scheduler


class FakeMidiOut:

	"""MIDI output stub that keeps every message it is sent."""

	def __init__ (self) -> None:

		self.sent: typing.List[mido.Message] = []
		self.closed = False

	def send (self, message: mido.Message) -> None:

		"""Store the outgoing message."""

		self.sent.append(message)

	def close (self) -> None:

		"""Mark the fake device closed."""

		self.closed = True

	def of_type (self, message_type: str) -> typing.List[mido.Message]:

		"""Sent messages of one type, in order."""

		return [message for message in self.sent if message.type == message_type]


class FakeClock:

	"""A clock that only moves when a test moves it."""

	def __init__ (self, now: float = 1000.0) -> None:

		self.now = now

	def __call__ (self) -> float:

		return self.now

	def advance (self, seconds: float) -> float:

		self.now += seconds
		return self.now


# Module-level reference so tests can inspect the most recently opened fake output.
_opened_outputs: typing.List[typing.Tuple[str, bool, FakeMidiOut]] = []


def _fake_get_output_names () -> typing.List[str]:

	"""Return a fixed list of MIDI output names for tests."""

	return ["Dummy MIDI", "Other MIDI"]


def _fake_open_output (name: str, virtual: bool = False) -> FakeMidiOut:

	"""Return a fake MIDI output regardless of the name."""

	port = FakeMidiOut()
	_opened_outputs.append((name, virtual, port))
	return port


@pytest.fixture
def patch_midi (monkeypatch: pytest.MonkeyPatch) -> typing.List[typing.Tuple[str, bool, FakeMidiOut]]:

	"""Patch mido to use fake MIDI outputs; returns the list of opened ports."""

	_opened_outputs.clear()
	monkeypatch.setattr(mido, "get_output_names", _fake_get_output_names)
	monkeypatch.setattr(mido, "open_output", _fake_open_output)
	return _opened_outputs


@pytest.fixture
def clock () -> FakeClock:

	return FakeClock()


@pytest.fixture
def registry (clock: FakeClock) -> hotbeat.scheduler.WheelRegistry:

	"""A registry whose wheels never start threads; tests call dispatch() themselves."""

	return hotbeat.scheduler.WheelRegistry(clock=clock, autostart=False)


@pytest.fixture
def midi_out () -> FakeMidiOut:

	return FakeMidiOut()
