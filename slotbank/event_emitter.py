import logging
import typing


logger = logging.getLogger(__name__)

CallbackType = typing.Callable[..., typing.Any]


class EventEmitter:

	"""
	A synchronous event emitter for engine notifications.

	Listeners run in registration order on the caller's stack. A listener
	that raises is logged and skipped; it never aborts the engine operation
	that emitted the event or stops later listeners from running.
	"""

	def __init__ (self) -> None:

		self._listeners: typing.Dict[str, typing.List[CallbackType]] = {}

	def on (self, event_name: str, callback: CallbackType) -> typing.Callable[[], None]:

		"""
		Register a callback for an event name.

		Returns a zero-argument function that unregisters it again.
		"""

		self._listeners.setdefault(event_name, []).append(callback)

		def _unsubscribe () -> None:
			if callback in self._listeners.get(event_name, []):
				self._listeners[event_name].remove(callback)

		return _unsubscribe

	def off (self, event_name: str, callback: CallbackType) -> None:

		"""
		Unregister a previously registered callback.

		Raises ``ValueError`` if the callback is not registered for the event.
		"""

		if event_name not in self._listeners or callback not in self._listeners[event_name]:
			raise ValueError(f"Callback not registered for event {event_name!r}")

		self._listeners[event_name].remove(callback)

	def listener_count (self, event_name: str) -> int:
		return len(self._listeners.get(event_name, []))

	def emit (self, event_name: str, *args: typing.Any, **kwargs: typing.Any) -> None:

		"""Call every listener for ``event_name`` with the given arguments."""

		# Copy so listeners may unsubscribe themselves while being called.
		for callback in list(self._listeners.get(event_name, [])):

			try:
				callback(*args, **kwargs)

			except Exception as exc:
				logger.warning(f"Listener for {event_name!r} raised: {exc}")
