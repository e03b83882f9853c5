"""Everything needed to perform one live file, wired together.

::

	session = hotbeat.Session("song.py", hotbeat.config.load_config())
	session.start()

The live file sees ``instrument`` (the session's :class:`~hotbeat.instrument.Instrument`)
and ``Pattern`` alongside ``bpm``, ``bang`` and ``close``.
"""

import logging
import typing

import hotbeat.config
import hotbeat.instrument
import hotbeat.monitor
import hotbeat.notation
import hotbeat.recorder
import hotbeat.scheduler


logger = logging.getLogger(__name__)


class Session:

	"""Registry, instrument, optional recorder and monitor for one live file."""

	def __init__ (
		self,
		filename: str,
		config: typing.Optional[hotbeat.config.Config] = None,
		port: typing.Optional[hotbeat.instrument.MidiPort] = None,
		registry: typing.Optional[hotbeat.scheduler.WheelRegistry] = None
	) -> None:

		"""
		Parameters:
			filename: The live source file.
			config: Settings (defaults when omitted).
			port: An open MIDI output to use instead of the configured device.
			registry: Wheels to schedule on. A private registry is created when
				omitted, and stopped again by :meth:`stop`.
		"""

		self.config = config or hotbeat.config.Config()
		self._owns_registry = registry is None
		self.registry = registry or hotbeat.scheduler.WheelRegistry()

		self.recorder: typing.Optional[hotbeat.recorder.Recorder] = None

		if self.config.record:
			self.recorder = hotbeat.recorder.Recorder(
				bpm = self.config.bpm,
				clock = self.registry.clock,
				filename = self.config.record_filename
			)

		self.instrument = hotbeat.instrument.Instrument(
			port = port,
			device = self.config.device,
			virtual = self.config.virtual,
			bpm = self.config.bpm,
			registry = self.registry,
			recorder = self.recorder
		)

		if self.config.program is not None:
			self.instrument.program_change(self.config.channel, self.config.program)

		self.monitor = hotbeat.monitor.Monitor(
			filename,
			registry = self.registry,
			bpm = self.config.bpm,
			resolution = self.config.monitor_resolution,
			namespace = {
				"instrument": self.instrument,
				"Pattern": hotbeat.notation.Pattern,
			}
		)

	@property
	def halted (self) -> bool:

		return self.monitor.halted

	def start (self, now: typing.Optional[float] = None) -> None:

		"""Start the beat loop."""

		self.monitor.start(now)

	def stop (self) -> typing.Optional[str]:

		"""Stop the wheels (if this session created them), close the port, save the recording.

		Returns the recording's file name when one was written.
		"""

		if self._owns_registry:
			self.registry.stop_all()

		self.instrument.close()

		if self.recorder is not None:
			return self.recorder.save()

		return None
