"""Self-rescheduling players built on a timer wheel.

Both performers keep time the same way: each callback schedules its successor
at ``scheduled_time + interval`` before doing any work, so a slow callback
delays only itself and the grid never drifts.
"""

import logging
import typing

import hotbeat.constants
import hotbeat.instrument
import hotbeat.notation
import hotbeat.scheduler


logger = logging.getLogger(__name__)


class Metronome:

	"""A click on every beat."""

	def __init__ (
		self,
		instrument: hotbeat.instrument.Instrument,
		bpm: float = hotbeat.constants.DEFAULT_BPM,
		channel: int = 0,
		pitch: int = hotbeat.constants.METRONOME_PITCH,
		program: typing.Optional[int] = hotbeat.constants.METRONOME_PROGRAM,
		registry: typing.Optional[hotbeat.scheduler.WheelRegistry] = None
	) -> None:

		if bpm <= 0:
			raise ValueError("BPM must be positive")

		self.instrument = instrument
		self.channel = channel
		self.pitch = pitch
		self.interval = hotbeat.constants.SECONDS_PER_MINUTE / bpm
		self.registry = registry or instrument.registry
		self.wheel = self.registry.get(self.interval / hotbeat.constants.RESOLUTION_DIVISOR)
		self.clicks = 0

		if program is not None:
			self.instrument.program_change(channel, program)

	def start (self, now: typing.Optional[float] = None) -> None:

		"""Begin clicking at *now* (default: the wheel clock)."""

		if now is None:
			now = self.wheel.clock()

		logger.info(f"Metronome started ({hotbeat.constants.SECONDS_PER_MINUTE / self.interval:g} BPM)")
		self._register_next(now)

	def _register_next (self, at: float) -> None:

		self.wheel.schedule(at, self._bang)

	def _bang (self, at: float) -> None:

		self._register_next(at + self.interval)

		self.clicks += 1
		self.instrument.play(
			self.channel,
			self.pitch,
			hotbeat.constants.METRONOME_CLICK_BEATS,
			at = at + hotbeat.constants.METRONOME_DELAY
		)


class PatternPlayer:

	"""
	Plays a :class:`~hotbeat.notation.Pattern` one slot per step.

	Each slot takes one step on the grid; held slots sound for their full
	duration (minus a short gap so repeated pitches re-articulate) while the
	next slot starts on the following step, exactly as the notation's author
	tapped them out. Rests are silent steps.
	"""

	def __init__ (
		self,
		instrument: hotbeat.instrument.Instrument,
		pattern: hotbeat.notation.Pattern,
		bpm: float = hotbeat.constants.DEFAULT_BPM,
		channel: int = 0,
		repeat: bool = False,
		registry: typing.Optional[hotbeat.scheduler.WheelRegistry] = None
	) -> None:

		if bpm <= 0:
			raise ValueError("BPM must be positive")

		self.instrument = instrument
		self.pattern = pattern
		self.channel = channel
		self.repeat = repeat
		self.interval = hotbeat.constants.SECONDS_PER_MINUTE / bpm
		self.registry = registry or instrument.registry
		self.wheel = self.registry.get(self.interval / hotbeat.constants.RESOLUTION_DIVISOR)

		self.step = 0
		self.finished = False

	def start (self, now: typing.Optional[float] = None) -> None:

		"""Play the first slot at *now* (default: the wheel clock)."""

		if now is None:
			now = self.wheel.clock()

		self.wheel.schedule(now, self._play)

	def _play (self, at: float) -> None:

		if not self.repeat and self.step >= self.pattern.size():
			self.finished = True
			logger.info(f"Finished {self.pattern!r}")
			return

		pitch, duration = self.pattern[self.step]
		self.step += 1

		self.wheel.schedule(at + self.interval, self._play)

		if pitch is not None:
			length = duration - hotbeat.constants.NOTE_GAP_BEATS
			self.instrument.play(self.channel, pitch, length, at=at)
