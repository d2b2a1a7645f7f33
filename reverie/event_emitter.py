import asyncio
import typing


CallbackType = typing.Callable[..., typing.Any]


# Events raised by the engine.
ENGINE_EVENTS: typing.Tuple[str, ...] = (
	"start",        # ()
	"stop",         # ()
	"reset",        # ()
	"chunk",        # (ChunkAnalysis)
	"trigger",      # (LayerTrigger)
	"active_axes",  # ({axis: bool})
	"flourish",     # ()
)


class EventEmitter:

	"""
	Observer registry for engine notifications.

	Listeners are output-only: they learn what the engine heard and played,
	but nothing they do feeds back into the audio decisions.  Chunk handling
	is synchronous, so ``emit_sync`` is the common path; ``emit_async`` is
	used from coroutines such as replay and lets listeners be coroutines.
	"""

	def __init__ (self, known_events: typing.Optional[typing.Iterable[str]] = None) -> None:

		"""
		Parameters:
			known_events: When given, ``on()`` rejects any other event name so
				that a typo fails loudly instead of never firing.
		"""

		self._known: typing.Optional[typing.FrozenSet[str]] = frozenset(known_events) if known_events is not None else None
		self._listeners: typing.Dict[str, typing.List[CallbackType]] = {}


	def on (self, event_name: str, callback: CallbackType) -> None:

		"""
		Register a callback for an event name.
		"""

		if self._known is not None and event_name not in self._known:
			raise ValueError(f"Unknown event {event_name!r} (expected one of {', '.join(sorted(self._known))})")

		self._listeners.setdefault(event_name, []).append(callback)


	def off (self, event_name: str, callback: CallbackType) -> None:

		"""
		Unregister a previously registered callback.

		Raises ``ValueError`` if the callback is not registered for the event.
		"""

		if callback not in self._listeners.get(event_name, []):
			raise ValueError(f"Callback not registered for event {event_name!r}")

		self._listeners[event_name].remove(callback)


	def listener_count (self, event_name: str) -> int:

		return len(self._listeners.get(event_name, []))


	def emit_sync (self, event_name: str, *args: typing.Any, **kwargs: typing.Any) -> None:

		"""
		Call every listener for ``event_name`` immediately.

		Raises ``ValueError`` if a listener is a coroutine function, since it
		could not be awaited here.
		"""

		for callback in list(self._listeners.get(event_name, [])):

			if asyncio.iscoroutinefunction(callback):
				raise ValueError(f"Async callback registered for {event_name!r} cannot be called from emit_sync")

			callback(*args, **kwargs)


	async def emit_async (self, event_name: str, *args: typing.Any, **kwargs: typing.Any) -> None:

		"""
		Call plain listeners immediately and await coroutine listeners together.
		"""

		tasks: typing.List[typing.Awaitable[typing.Any]] = []

		for callback in list(self._listeners.get(event_name, [])):

			if asyncio.iscoroutinefunction(callback):
				tasks.append(callback(*args, **kwargs))

			else:
				callback(*args, **kwargs)

		if tasks:
			await asyncio.gather(*tasks)
