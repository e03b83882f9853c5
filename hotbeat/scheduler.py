"""Resolution-bucketed deferred callbacks.

A :class:`TimerWheel` holds ``(fire_time, callback)`` entries and wakes once
per *resolution*. On every tick it takes a snapshot of the entries that are
due, then calls each one with the time it was **scheduled** for rather than
the time it actually ran. Timing jitter is therefore bounded by the
resolution, and a self-rescheduling callback (``wheel.schedule(t + period,
fn)``) keeps a drift-free grid because it always builds on its scheduled time.

There is no cancellation. Once scheduled, a callback fires. Behaviour stops by
not scheduling itself again.

A :class:`WheelRegistry` hands out one wheel per distinct resolution, so every
consumer that asks for 0.05 s shares the same dispatch thread::

	registry = WheelRegistry()
	wheel = registry.get(0.05)
	wheel.schedule(wheel.clock() + 1.0, lambda t: print("one second", t))
"""

import dataclasses
import datetime
import logging
import threading
import time
import typing

import hotbeat.constants


logger = logging.getLogger(__name__)

Clock = typing.Callable[[], float]
Callback = typing.Callable[[float], typing.Any]


@dataclasses.dataclass
class ScheduledEntry:

	"""
	A callback waiting in a wheel's queue.
	"""

	fire_time: float
	callback: Callback


class TimerWheel:

	"""
	A single dispatch loop ticking at a fixed resolution.
	"""

	def __init__ (self, resolution: float, clock: Clock = time.monotonic) -> None:

		"""Create a stopped wheel.

		Parameters:
			resolution: Seconds between ticks. Choose it finer than the shortest
				period it serves (commonly a tenth) to bound jitter.
			clock: Time source shared by the loop and by callers computing
				fire times.
		"""

		if resolution <= 0:
			raise ValueError("Resolution must be positive")

		self.resolution = float(resolution)
		self.clock = clock

		self._queue: typing.List[ScheduledEntry] = []
		self._lock = threading.Lock()
		self._wake = threading.Event()
		self._thread: typing.Optional[threading.Thread] = None
		self.running = False

	def __repr__ (self) -> str:

		return f"TimerWheel(resolution={self.resolution!r}, pending={self.pending}, running={self.running})"

	@property
	def pending (self) -> int:

		"""Number of entries waiting to fire."""

		with self._lock:
			return len(self._queue)

	def schedule (self, fire_time: typing.Union[float, datetime.datetime], callback: Callback) -> None:

		"""Queue *callback* to run on the first tick at or after *fire_time*.

		Safe to call from any thread, including from a callback running inside
		this wheel's own dispatch. Entries added during a tick are picked up on
		the next one.
		"""

		if isinstance(fire_time, datetime.datetime):
			fire_time = fire_time.timestamp()

		with self._lock:
			self._queue.append(ScheduledEntry(float(fire_time), callback))

	def dispatch (self, now: typing.Optional[float] = None) -> int:

		"""Run one tick and return how many callbacks fired.

		The ready/pending split is taken before any callback runs. A failing
		callback is logged and the remaining ready entries still fire.
		"""

		if now is None:
			now = self.clock()

		with self._lock:
			ready = [entry for entry in self._queue if entry.fire_time <= now]
			self._queue = [entry for entry in self._queue if entry.fire_time > now]

		for entry in ready:
			try:
				entry.callback(entry.fire_time)
			except Exception:
				logger.exception(f"Scheduled callback {_callback_name(entry.callback)} failed (fire time {entry.fire_time:.3f})")

		return len(ready)

	def start (self) -> None:

		"""Start the dispatch thread. A second call while running is a no-op."""

		if self.running:
			return

		self.running = True
		self._wake.clear()
		self._thread = threading.Thread(
			target = self._run_loop,
			name   = f"hotbeat-wheel-{self.resolution:g}",
			daemon = True,
		)
		self._thread.start()

		logger.info(f"Timer wheel started (resolution {self.resolution:g}s)")

	def stop (self, timeout: typing.Optional[float] = None) -> None:

		"""Ask the dispatch thread to exit and wait up to *timeout* for it.

		Queued entries are kept; they fire if the wheel is started again.
		"""

		if not self.running:
			return

		self.running = False
		self._wake.set()

		if self._thread is not None and self._thread is not threading.current_thread():
			self._thread.join(timeout)

		self._thread = None

		logger.info(f"Timer wheel stopped (resolution {self.resolution:g}s)")

	def _run_loop (self) -> None:

		"""Thread target: dispatch, then wait for the next tick boundary."""

		next_tick = time.monotonic()

		try:
			while self.running:

				self.dispatch()

				next_tick += self.resolution
				delay = next_tick - time.monotonic()

				if delay < -self.resolution:
					# Fell more than a tick behind (a slow callback); resynchronise
					# instead of firing a burst of catch-up ticks.
					next_tick = time.monotonic()
					delay = 0.0

				if delay > 0:
					self._wake.wait(delay)

		finally:
			# Only a thread that was not asked to stop can still be the current one here.
			if self.running and self._thread is threading.current_thread():
				logger.critical(f"Timer wheel thread died (resolution {self.resolution:g}s)")
				self.running = False
				self._thread = None


class WheelRegistry:

	"""
	One :class:`TimerWheel` per distinct resolution.

	Resolutions are quantized to whole milliseconds before lookup so that
	``0.1`` and ``0.30000000000000004 / 3`` land on the same wheel. The
	registry is the context object shared by everything that schedules; pass
	one around explicitly, or use :meth:`default` for the process-wide one.
	"""

	_default: typing.Optional["WheelRegistry"] = None
	_default_lock = threading.Lock()

	def __init__ (self, clock: Clock = time.monotonic, autostart: bool = True) -> None:

		"""
		Parameters:
			clock: Time source for every wheel created by this registry.
			autostart: Start each wheel's thread when it is created. Tests turn
				this off and drive :meth:`TimerWheel.dispatch` by hand.
		"""

		self.clock = clock
		self.autostart = autostart

		self._wheels: typing.Dict[int, TimerWheel] = {}
		self._lock = threading.Lock()

	@classmethod
	def default (cls) -> "WheelRegistry":

		"""Return the process-lifetime registry, creating it on first use."""

		with cls._default_lock:
			if cls._default is None:
				cls._default = cls()
			return cls._default

	@staticmethod
	def key (resolution: float) -> int:

		"""Quantize *resolution* (seconds) to an integer millisecond key."""

		key = int(round(resolution * hotbeat.constants.RESOLUTION_QUANTUM))

		if key < 1:
			raise ValueError(f"Resolution {resolution!r} is below one millisecond")

		return key

	def get (self, resolution: float) -> TimerWheel:

		"""Return the wheel for *resolution*, creating (and starting) it if needed."""

		key = self.key(resolution)

		with self._lock:

			wheel = self._wheels.get(key)

			if wheel is None:
				wheel = TimerWheel(key / hotbeat.constants.RESOLUTION_QUANTUM, clock=self.clock)
				self._wheels[key] = wheel

				if self.autostart:
					wheel.start()

		return wheel

	def wheels (self) -> typing.List[TimerWheel]:

		"""All wheels created so far, finest resolution first."""

		with self._lock:
			return [self._wheels[key] for key in sorted(self._wheels)]

	def stop_all (self) -> None:

		"""Stop every wheel's dispatch thread."""

		for wheel in self.wheels():
			wheel.stop()

	def __len__ (self) -> int:

		with self._lock:
			return len(self._wheels)

	def __contains__ (self, resolution: float) -> bool:

		with self._lock:
			return self.key(resolution) in self._wheels


def _callback_name (callback: Callback) -> str:

	"""Best-effort readable name for log messages."""

	return getattr(callback, "__qualname__", None) or repr(callback)
