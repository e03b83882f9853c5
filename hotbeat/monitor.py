"""Hot reload of a live source file with crash-only rollback.

A :class:`Monitor` watches one Python file. On every beat it checks whether the
file changed, and if so executes it against a fresh
:class:`~hotbeat.player.Player` built from the current one's tempo. A file
that fails to load is reported and ignored; the music carries on with what was
already playing.

Every successful load is pushed onto a stack of generations. If the newest
generation raises during a beat it is thrown away for good and the beat is
retried on the one below, so a bad edit peels back to the last code that
worked. If every generation fails the stack empties and the Monitor halts: it
stops scheduling itself, sets :attr:`Monitor.halted` and emits ``"halted"``.
Nothing restarts it.

Security note: the file is executed with full Python privileges in this
process. It is meant for a performer editing their own code, not for
untrusted input.
"""

import builtins
import logging
import os
import time
import typing

import hotbeat.constants
import hotbeat.event_emitter
import hotbeat.player
import hotbeat.scheduler


logger = logging.getLogger(__name__)

# Calls that would block the dispatch thread while waiting on a terminal.
BLOCKED_BUILTINS = ("help", "input", "breakpoint", "exit", "quit")

EVENTS = ("load", "load_error", "run_error", "halted", "beat")


class Monitor:

	"""
	Drives the beat loop for one live source file.
	"""

	def __init__ (
		self,
		filename: str,
		registry: typing.Optional[hotbeat.scheduler.WheelRegistry] = None,
		bpm: float = hotbeat.constants.DEFAULT_BPM,
		resolution: float = hotbeat.constants.MONITOR_RESOLUTION,
		namespace: typing.Optional[typing.Dict[str, typing.Any]] = None,
		wall_clock: typing.Callable[[], float] = time.time
	) -> None:

		"""Check the file and install the bootstrap generation.

		Parameters:
			filename: Live source file. It must exist and be readable.
			registry: Where the beat wheel comes from. Defaults to the process
				registry.
			bpm: Tempo of the bootstrap generation, inherited by the first load.
			resolution: Wheel resolution for the beat loop. It also bounds how
				quickly a saved edit is noticed, independently of the tempo.
			namespace: Extra names visible to the live file (an instrument,
				helpers, and so on).
			wall_clock: Time source comparable with file modification times.
		"""

		if not os.path.exists(filename):
			raise FileNotFoundError(f"Live file does not exist: {filename}")

		if not os.access(filename, os.R_OK):
			raise PermissionError(f"Can't read live file: {filename}")

		self.filename = filename
		self.namespace = dict(namespace or {})
		self.wall_clock = wall_clock

		self.registry = registry or hotbeat.scheduler.WheelRegistry.default()
		self.wheel = self.registry.get(resolution)

		bootstrap = hotbeat.player.Player(bpm)
		bootstrap.freeze()

		self.generations: typing.List[hotbeat.player.Player] = [bootstrap]
		self.beat = 0
		self.last_load_time = 0.0
		self.halted = False
		self.events = hotbeat.event_emitter.EventEmitter()

	def __repr__ (self) -> str:

		return f"Monitor({self.filename!r}, generations={len(self.generations)}, beat={self.beat}, halted={self.halted})"

	@property
	def current (self) -> typing.Optional[hotbeat.player.Player]:

		"""The generation that plays the next beat, or None once halted."""

		return self.generations[-1] if self.generations else None

	def on (self, event_name: str, callback: typing.Callable[..., typing.Any]) -> None:

		"""Subscribe to a status event.

		``"load"`` (player), ``"load_error"`` (exception), ``"run_error"``
		(player, exception), ``"halted"`` (no args) and ``"beat"`` (beat index,
		scheduled time).
		"""

		if event_name not in EVENTS:
			raise ValueError(f"Unknown event {event_name!r}. Available: {list(EVENTS)}")

		self.events.on(event_name, callback)

	def modified (self) -> bool:

		"""True when the file changed after the last successful load."""

		try:
			mtime = os.stat(self.filename).st_mtime
		except OSError as exc:
			logger.warning(f"Can't stat live file {self.filename}: {exc}")
			return False

		return mtime > self.last_load_time

	def load (self) -> bool:

		"""Execute the file against a new generation and install it on success.

		Never raises. On failure the stack and :attr:`last_load_time` are left
		exactly as they were, so the current generation keeps playing.
		"""

		parent = self.current

		if parent is None:
			logger.warning("Monitor is halted - not loading")
			return False

		candidate = parent.spawn()
		# Stamped before reading: a save that lands during exec must still look modified.
		started = self.wall_clock()

		try:
			with open(self.filename, "r", encoding="utf-8") as f:
				source = f.read()

			code = compile(source, self.filename, "exec")
			exec(code, self._build_namespace(candidate))

		except (Exception, SystemExit) as exc:
			logger.exception(f"LOAD ERROR in {self.filename}: {exc!r} - keeping current generation")
			self.events.emit("load_error", exc)
			return False

		candidate.freeze()
		self.generations.append(candidate)
		self.last_load_time = started

		logger.info(f"Loaded {self.filename} (generation {len(self.generations)}, {candidate.bpm():g} BPM, {len(candidate.bang_handlers)} bang handlers)")
		self.events.emit("load", candidate)

		return True

	def run (self, now: typing.Optional[float] = None) -> None:

		"""Play one beat and schedule the next.

		This is the wheel callback, so *now* is the beat's scheduled time.
		"""

		if self.halted:
			return

		if now is None:
			now = self.wheel.clock()

		if self.modified():
			self.load()

		while self.generations:

			player = self.generations[-1]

			try:
				player.fire_bang(self.beat)
				break

			except (Exception, SystemExit) as exc:
				self.generations.pop()
				logger.exception(f"RUN ERROR on beat {self.beat}: {exc!r} - dropped generation, {len(self.generations)} left")
				self.events.emit("run_error", player, exc)

		if not self.generations:
			self.halted = True
			logger.critical(f"Every generation of {self.filename} failed - playback halted until restarted")
			self.events.emit("halted")
			return

		self.events.emit("beat", self.beat, now)
		self.beat += 1

		self.wheel.schedule(now + self.generations[-1].tick, self.run)

	def start (self, now: typing.Optional[float] = None) -> None:

		"""Schedule the first beat at *now* (default: the wheel clock)."""

		if now is None:
			now = self.wheel.clock()

		logger.info(f"Monitoring {self.filename}")
		self.wheel.schedule(now, self.run)

	def close (self) -> None:

		"""Run the current generation's close handlers."""

		if self.current is not None:
			self.current.fire_close()

	def _build_namespace (self, player: hotbeat.player.Player) -> typing.Dict[str, typing.Any]:

		"""Globals for one load: the player's surface, extras, and guarded builtins."""

		import hotbeat

		safe_builtins = {name: getattr(builtins, name) for name in dir(builtins)}

		for name in BLOCKED_BUILTINS:
			safe_builtins[name] = _blocked(name)

		namespace: typing.Dict[str, typing.Any] = {
			"__builtins__": safe_builtins,
			"__name__": "__live__",
			"__file__": self.filename,
			"hotbeat": hotbeat,
		}
		namespace.update(self.namespace)
		namespace.update(player.surface())

		return namespace


def _blocked (name: str) -> typing.Callable:

	"""Return a function that raises RuntimeError when called."""

	def _raise (*args: typing.Any, **kwargs: typing.Any) -> None:
		raise RuntimeError(f"{name}() is not available in live code - it would block the beat loop.")

	_raise.__name__ = name
	_raise.__qualname__ = name

	return _raise
