"""Session settings, optionally read from a YAML file.

Example ``hotbeat.yaml``::

	bpm: 96
	device: "IAC Driver Bus 1"
	program: 40
	record: true
	record_filename: jam.mid
"""

import dataclasses
import logging
import os
import typing

import yaml

import hotbeat.constants


logger = logging.getLogger(__name__)


@dataclasses.dataclass
class Config:

	"""
	Everything a :class:`~hotbeat.session.Session` needs besides the live file.
	"""

	bpm: float = hotbeat.constants.DEFAULT_BPM
	monitor_resolution: float = hotbeat.constants.MONITOR_RESOLUTION
	device: typing.Optional[str] = None
	virtual: bool = False
	channel: int = 0
	program: typing.Optional[int] = None
	record: bool = False
	record_filename: typing.Optional[str] = None

	def __post_init__ (self) -> None:

		_check_type("bpm", self.bpm, (int, float))
		_check_type("monitor_resolution", self.monitor_resolution, (int, float))
		_check_type("channel", self.channel, int)
		_check_type("virtual", self.virtual, bool)
		_check_type("record", self.record, bool)

		if self.program is not None:
			_check_type("program", self.program, int)

		for name in ("device", "record_filename"):
			if getattr(self, name) is not None:
				_check_type(name, getattr(self, name), str)

		if self.bpm <= 0:
			raise ValueError("bpm must be positive")

		if self.monitor_resolution <= 0:
			raise ValueError("monitor_resolution must be positive")

		if not 0 <= self.channel < hotbeat.constants.MIDI_CHANNELS:
			raise ValueError(f"channel must be 0-{hotbeat.constants.MIDI_CHANNELS - 1}")

		if self.program is not None and not 0 <= self.program <= hotbeat.constants.MIDI_DATA_MAX:
			raise ValueError(f"program must be 0-{hotbeat.constants.MIDI_DATA_MAX}")

	@classmethod
	def from_dict (cls, data: typing.Dict[str, typing.Any]) -> "Config":

		"""Build a Config, rejecting keys it does not know."""

		known = {field.name for field in dataclasses.fields(cls)}
		unknown = sorted(set(data) - known)

		if unknown:
			raise ValueError(f"Unknown config keys: {unknown}. Available: {sorted(known)}")

		return cls(**data)


def load_config (config_path: str = 'hotbeat.yaml') -> Config:

	"""
	Load configuration from a YAML file, falling back to defaults when it is missing.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return Config()

	with open(config_path, 'r') as f:
		data = yaml.safe_load(f)

	if data is None:
		return Config()

	if not isinstance(data, dict):
		raise ValueError(f"Config file {config_path} must contain a mapping, got {type(data).__name__}")

	return Config.from_dict(data)


def _check_type (name: str, value: typing.Any, expected: typing.Union[type, typing.Tuple[type, ...]]) -> None:

	"""Raise ValueError unless *value* is an instance of *expected* (bools never count as numbers)."""

	numeric = expected is int or (isinstance(expected, tuple) and int in expected)

	if not isinstance(value, expected) or (numeric and isinstance(value, bool)):
		raise ValueError(f"{name} has the wrong type: {value!r}")
