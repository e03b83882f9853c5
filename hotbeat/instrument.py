"""MIDI output for live code.

An :class:`Instrument` sends note and program messages through a mido output
port and knows the tempo it was created for, so :meth:`Instrument.play` can
take durations in beats and schedule the matching note off itself::

	instrument = Instrument(device="Synth", bpm=120)
	instrument.program_change(0, 40)
	instrument.play(0, 60, 1)   # middle C for one beat, starting now
"""

import logging
import typing

import mido

import hotbeat.constants
import hotbeat.midi_utils
import hotbeat.recorder
import hotbeat.scheduler


logger = logging.getLogger(__name__)


class MidiPort (typing.Protocol):

	"""Anything that accepts mido messages (a mido output port, or a test double)."""

	def send (self, message: mido.Message) -> None:
		...


class Instrument:

	"""
	Note on/off and program change over one output port, with scheduled playback.
	"""

	def __init__ (
		self,
		port: typing.Optional[MidiPort] = None,
		device: typing.Optional[str] = None,
		virtual: bool = False,
		bpm: float = hotbeat.constants.DEFAULT_BPM,
		registry: typing.Optional[hotbeat.scheduler.WheelRegistry] = None,
		recorder: typing.Optional[hotbeat.recorder.Recorder] = None
	) -> None:

		"""
		Parameters:
			port: An already open output. When omitted a port is opened with
				:func:`hotbeat.midi_utils.open_output` using *device* and *virtual*.
			device: Output device name (or the name of the virtual port).
			virtual: Create a virtual output instead of connecting to a device.
			bpm: Tempo used to turn beat durations into seconds.
			registry: Wheels used by :meth:`play`. Defaults to the process registry.
			recorder: Optional sink receiving a copy of every message sent.
		"""

		if bpm <= 0:
			raise ValueError("BPM must be positive")

		self.bpm = bpm
		self.interval = hotbeat.constants.SECONDS_PER_MINUTE / bpm
		self.recorder = recorder
		self.registry = registry or hotbeat.scheduler.WheelRegistry.default()
		self.wheel = self.registry.get(self.interval / hotbeat.constants.RESOLUTION_DIVISOR)

		self.device_name = device
		self.port: typing.Optional[typing.Any] = port

		if self.port is None:
			self.device_name, self.port = hotbeat.midi_utils.open_output(device, virtual=virtual)

	def __repr__ (self) -> str:

		return f"Instrument(device={self.device_name!r}, bpm={self.bpm!r})"

	def note_on (self, channel: int, pitch: int, velocity: int = hotbeat.constants.DEFAULT_VELOCITY) -> None:

		"""Start *pitch* on *channel*."""

		_check_channel(channel)
		_check_data("pitch", pitch)
		_check_data("velocity", velocity)

		self._send(mido.Message('note_on', channel=channel, note=pitch, velocity=velocity))

	def note_off (self, channel: int, pitch: int, velocity: int = hotbeat.constants.DEFAULT_VELOCITY) -> None:

		"""Stop *pitch* on *channel*."""

		_check_channel(channel)
		_check_data("pitch", pitch)
		_check_data("velocity", velocity)

		self._send(mido.Message('note_off', channel=channel, note=pitch, velocity=velocity))

	def program_change (self, channel: int, preset: int) -> None:

		"""Switch *channel* to instrument *preset* (there are 128 presets for 16 channels)."""

		_check_channel(channel)
		_check_data("preset", preset)

		self._send(mido.Message('program_change', channel=channel, program=preset))

	def play (
		self,
		channel: int,
		pitch: int,
		duration: float,
		velocity: int = hotbeat.constants.DEFAULT_PLAY_VELOCITY,
		at: typing.Optional[float] = None
	) -> None:

		"""Schedule *pitch* to sound at *at* (default now) for *duration* beats.

		Arguments are validated here so a bad call fails inside the caller
		(for example a live bang handler) instead of later on the wheel thread.
		"""

		_check_channel(channel)
		_check_data("pitch", pitch)
		_check_data("velocity", velocity)

		if duration < 0:
			raise ValueError("Duration cannot be negative")

		on_time = self.wheel.clock() if at is None else at
		off_time = on_time + duration * self.interval

		on_message = mido.Message('note_on', channel=channel, note=pitch, velocity=velocity)
		off_message = mido.Message('note_off', channel=channel, note=pitch, velocity=velocity)

		self.wheel.schedule(on_time, lambda t: self._send(on_message, t))
		self.wheel.schedule(off_time, lambda t: self._send(off_message, t))

	def close (self) -> None:

		"""Close the output port if this instrument has one."""

		if self.port is not None and hasattr(self.port, "close"):
			self.port.close()
			logger.info(f"Closed MIDI output: {self.device_name}")

		self.port = None

	def _send (self, message: mido.Message, at: typing.Optional[float] = None) -> None:

		"""Send to the port (if any) and copy to the recorder (if any).

		Scheduled messages pass their scheduled time as *at* so the recording
		keeps the intended grid rather than the dispatch jitter.
		"""

		if self.recorder is not None:
			self.recorder.record(message, at)

		if self.port is None:
			logger.debug(f"No MIDI output - dropped {message}")
			return

		try:
			self.port.send(message)
		except Exception:
			logger.exception("MIDI send failed (device may be disconnected)")


def _check_channel (channel: int) -> None:

	if not 0 <= channel < hotbeat.constants.MIDI_CHANNELS:
		raise ValueError(f"MIDI channel must be 0-{hotbeat.constants.MIDI_CHANNELS - 1}, got {channel!r}")


def _check_data (name: str, value: int) -> None:

	if not 0 <= value <= hotbeat.constants.MIDI_DATA_MAX:
		raise ValueError(f"MIDI {name} must be 0-{hotbeat.constants.MIDI_DATA_MAX}, got {value!r}")
