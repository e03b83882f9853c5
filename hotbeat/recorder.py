"""Offline capture of a performance to a Standard MIDI File.

The :class:`Recorder` is not time critical: an :class:`~hotbeat.instrument.Instrument`
hands it every message it sends, stamped with the clock time, and
:meth:`Recorder.save` converts the seconds to ticks at the end of the session.
"""

import datetime
import logging
import threading
import time
import typing

import mido

import hotbeat.constants


logger = logging.getLogger(__name__)


class Recorder:

	"""Accumulates timed MIDI messages and writes them as a Type 1 file."""

	def __init__ (
		self,
		bpm: float = hotbeat.constants.DEFAULT_BPM,
		clock: typing.Callable[[], float] = time.monotonic,
		filename: typing.Optional[str] = None
	) -> None:

		"""
		Parameters:
			bpm: Tempo written to the file's ``set_tempo`` event and used to
				convert seconds to ticks.
			clock: Time source for messages recorded without an explicit time.
				Use the same clock as the wheels driving the instrument.
			filename: Default output path for :meth:`save` (a timestamped name
				when omitted).
		"""

		if bpm <= 0:
			raise ValueError("BPM must be positive")

		self.bpm = bpm
		self.clock = clock
		self.filename = filename
		self.events: typing.List[typing.Tuple[float, mido.Message]] = []

		self._lock = threading.Lock()

	def record (self, message: mido.Message, at: typing.Optional[float] = None) -> None:

		"""Store *message* at time *at* (seconds; now when omitted)."""

		if at is None:
			at = self.clock()

		with self._lock:
			self.events.append((at, message))

	def save (self, filename: typing.Optional[str] = None) -> typing.Optional[str]:

		"""Write the recording and return the file name, or None when empty."""

		with self._lock:
			events = sorted(self.events, key=lambda event: event[0])

		if not events:
			logger.info("Nothing recorded - no MIDI file written")
			return None

		filename = filename or self.filename or datetime.datetime.now().strftime("session_%Y%m%d_%H%M%S.mid")

		logger.info(f"Saving MIDI recording ({len(events)} events) to {filename}...")

		tempo = mido.bpm2tempo(self.bpm)
		ticks_per_beat = hotbeat.constants.TICKS_PER_BEAT

		mid = mido.MidiFile(type=1, ticks_per_beat=ticks_per_beat)
		track = mido.MidiTrack()
		mid.tracks.append(track)

		track.append(mido.MetaMessage('set_tempo', tempo=tempo, time=0))

		# Times are relative to the first event so the file starts immediately.
		start = events[0][0]
		last_tick = 0

		for at, message in events:

			tick = int(round(mido.second2tick(at - start, ticks_per_beat, tempo)))
			delta = max(0, tick - last_tick)

			track.append(message.copy(time=delta))
			last_tick = max(last_tick, tick)

		try:
			mid.save(filename)
			logger.info(f"Saved {filename}")
		except Exception as e:
			logger.error(f"Failed to save MIDI recording: {e}")
			raise

		return filename
