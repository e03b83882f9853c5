import logging
import threading
import typing


logger = logging.getLogger(__name__)

CallbackType = typing.Callable[..., typing.Any]


class EventEmitter:

	"""
	A small named-event registry used as an observable status channel.

	Listeners run synchronously on whichever thread emits (usually a timer
	wheel's dispatch thread). A listener that raises is logged and skipped so
	that observers can never break the beat loop they are watching.
	"""

	def __init__ (self) -> None:

		"""
		Initialize an empty event registry.
		"""

		self._listeners: typing.Dict[str, typing.List[CallbackType]] = {}
		self._lock = threading.Lock()


	def on (self, event_name: str, callback: CallbackType) -> None:

		"""
		Register a callback for an event name.
		"""

		with self._lock:
			self._listeners.setdefault(event_name, []).append(callback)

	def off (self, event_name: str, callback: CallbackType) -> None:

		"""
		Unregister a previously registered callback.

		Raises ``ValueError`` if the callback is not registered for the event.
		"""

		with self._lock:

			if event_name not in self._listeners or callback not in self._listeners[event_name]:
				raise ValueError(f"Callback not registered for event {event_name!r}")

			self._listeners[event_name].remove(callback)


	def emit (self, event_name: str, *args: typing.Any, **kwargs: typing.Any) -> None:

		"""
		Call every listener for *event_name* in registration order.
		"""

		with self._lock:
			listeners = list(self._listeners.get(event_name, ()))

		for callback in listeners:
			try:
				callback(*args, **kwargs)
			except Exception:
				logger.exception(f"Listener for {event_name!r} failed")
