"""One generation of live-coded behaviour.

A :class:`Player` is a tempo plus two ordered handler lists: *bang* handlers,
called once per beat with the beat index, and *close* handlers, a teardown
hook. A live source file builds a fresh Player each time it is loaded, using
only the three names from :meth:`Player.surface`::

	bpm(90)

	@bang
	def kick (beat):
		if beat % 4 == 0:
			instrument.play(9, 36, 0.5)

Once a :class:`~hotbeat.monitor.Monitor` installs a Player it is frozen: its
handlers and tempo no longer change. The next edit produces a new Player via
:meth:`Player.spawn`, which inherits the tempo and nothing else.
"""

import logging
import typing

import hotbeat.constants


logger = logging.getLogger(__name__)

BangHandler = typing.Callable[[int], typing.Any]
CloseHandler = typing.Callable[[], typing.Any]


class Player:

	"""
	A tick interval with ordered bang and close handlers.
	"""

	def __init__ (self, bpm: float = hotbeat.constants.DEFAULT_BPM) -> None:

		"""Create an unfrozen generation at *bpm* with no handlers."""

		self._bpm: float = 0
		self.tick: float = 0.0
		self.frozen = False

		self._bang_handlers: typing.List[BangHandler] = []
		self._close_handlers: typing.List[CloseHandler] = []

		self.bpm(bpm)

	def __repr__ (self) -> str:

		return f"Player(bpm={self._bpm!r}, bangs={len(self._bang_handlers)}, closes={len(self._close_handlers)}, frozen={self.frozen})"

	@property
	def bang_handlers (self) -> typing.Tuple[BangHandler, ...]:

		return tuple(self._bang_handlers)

	@property
	def close_handlers (self) -> typing.Tuple[CloseHandler, ...]:

		return tuple(self._close_handlers)

	def _require_unfrozen (self, action: str) -> None:

		if self.frozen:
			raise RuntimeError(f"Cannot {action} on an installed generation")

	def bpm (self, value: typing.Optional[float] = None) -> float:

		"""Set the tempo when *value* is given; always return the current BPM."""

		if value is not None:

			self._require_unfrozen("change tempo")

			if value <= 0:
				raise ValueError("BPM must be positive")

			self._bpm = value
			self.tick = hotbeat.constants.SECONDS_PER_MINUTE / value

		return self._bpm

	def reset (self) -> None:

		"""Drop every bang and close handler."""

		self._require_unfrozen("reset")

		self._bang_handlers = []
		self._close_handlers = []

	def register_bang (self, handler: BangHandler) -> BangHandler:

		"""Append a per-beat handler. Returns it, so it also works as a decorator."""

		self._require_unfrozen("register a bang handler")
		self._bang_handlers.append(handler)

		return handler

	def register_close (self, handler: CloseHandler) -> CloseHandler:

		"""Append a teardown handler. Returns it, so it also works as a decorator."""

		self._require_unfrozen("register a close handler")
		self._close_handlers.append(handler)

		return handler

	# Live-file spellings.
	bang = register_bang
	close = register_close

	def fire_bang (self, beat: int) -> None:

		"""Call each bang handler in order.

		The first exception propagates immediately; handlers after the failing
		one do not run for this beat.
		"""

		for handler in self._bang_handlers:
			handler(beat)

	def fire_close (self) -> None:

		"""Call every close handler, even if some fail.

		Nothing calls this automatically. Owners invoke it when they retire a
		generation and want its teardown to run. Failures are logged as they
		happen and the first one is re-raised once all handlers have run.
		"""

		first_error: typing.Optional[Exception] = None

		for handler in self._close_handlers:
			try:
				handler()
			except Exception as exc:
				logger.exception("Close handler failed")
				if first_error is None:
					first_error = exc

		if first_error is not None:
			raise first_error

	def spawn (self) -> "Player":

		"""Return a new, empty, unfrozen generation with this one's tempo."""

		child = Player(self._bpm)
		child.reset()

		return child

	def freeze (self) -> None:

		"""Mark this generation as installed. Further changes raise ``RuntimeError``."""

		self.frozen = True

	def surface (self) -> typing.Dict[str, typing.Callable[..., typing.Any]]:

		"""The capability interface handed to live source: ``bpm``, ``bang``, ``close``."""

		return {
			"bpm": self.bpm,
			"bang": self.bang,
			"close": self.close,
		}
