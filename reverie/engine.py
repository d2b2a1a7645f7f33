import asyncio
import collections
import dataclasses
import functools
import logging
import time
import typing

import reverie.backend
import reverie.constants.durations as dur
import reverie.event_emitter
import reverie.flourish
import reverie.intensity
import reverie.layers
import reverie.mixer
import reverie.patterns
import reverie.pitch
import reverie.scheduler
import reverie.session_state


logger = logging.getLogger(__name__)


DECISION_LOG_SIZE = 4096

Decision = typing.Tuple[str, str, float, float]


@dataclasses.dataclass (frozen=True)
class ChunkAnalysis:

	"""
	Everything the engine worked out about one accepted chunk.

	Emitted on the ``chunk`` event and returned by :meth:`Engine.add_delta`.
	``triggers`` lists what the layers decided to play; it is the same
	whether or not a backend was attached to actually play it.
	"""

	text: str
	flags: reverie.patterns.PatternFlags
	intensity: float
	frequency: float
	label: str
	phase: str
	active_axes: typing.Dict[str, bool]
	repeated: bool
	interval: typing.Optional[float]
	velocity: float
	burst: bool
	trend: str
	triggers: typing.Tuple[reverie.layers.LayerTrigger, ...]


class Engine:

	"""
	Real-time sonification of a stream of reasoning text.

	Each chunk passed to :meth:`add_delta` runs through marker detection,
	the intensity ladder, pitch mapping, the axis mixer and the five layer
	rules.  The resulting notes are handed to an :class:`EventScheduler`
	as deferred actions, so ``add_delta`` returns as soon as the decisions
	are made.

	The audio backend is optional and can arrive late (see
	:meth:`attach_backend`).  Until it does, every trigger is a silent no-op
	while the rest of the pipeline - session bookkeeping, decisions and
	observer notifications - keeps running.

	Typical session:

		```python
		engine = reverie.Engine()
		engine.connect_midi("IAC Driver Bus 1")

		engine.reset()
		await engine.start()

		async for text in stream:
			engine.add_delta(text)

		engine.start_flourish()
		```
	"""

	def __init__ (
		self,
		backend: typing.Optional[reverie.backend.AudioBackend] = None,
		mixer: typing.Optional[typing.Mapping[str, typing.Any]] = None,
		clock: typing.Callable[[], float] = time.perf_counter,
		replay_base_delay: float = dur.REPLAY_BASE_DELAY,
		record: bool = False
	) -> None:

		"""
		Parameters:
			backend: Instruments to play through.  May be attached later.
			mixer: Initial per-axis settings (``MixerSetting`` or dicts).
			clock: Monotonic time source in seconds, shared with the scheduler.
			replay_base_delay: Seconds between replayed chunks at speed 1.
			record: Keep every accepted chunk in :attr:`transcript` so the
				session can be saved and replayed later.
		"""

		if replay_base_delay < 0:
			raise ValueError("Replay base delay cannot be negative")

		self.clock = clock
		self.replay_base_delay = replay_base_delay
		self.recording = record

		self._backend: typing.Optional[reverie.backend.AudioBackend] = backend
		self._mixer: typing.Dict[str, reverie.mixer.MixerSetting] = reverie.mixer.settings_from_dict(mixer or {})

		self.scheduler = reverie.scheduler.EventScheduler(clock=clock)
		self.session = reverie.session_state.SessionState()
		self.events = reverie.event_emitter.EventEmitter(reverie.event_emitter.ENGINE_EVENTS)

		self.active = False
		self.decisions: typing.Deque[Decision] = collections.deque(maxlen=DECISION_LOG_SIZE)
		self.transcript: typing.List[str] = []


	# ------------------------------------------------------------------
	# Backend

	@property
	def backend (self) -> typing.Optional[reverie.backend.AudioBackend]:
		return self._backend

	@property
	def backend_ready (self) -> bool:
		return self._backend is not None


	def attach_backend (self, backend: reverie.backend.AudioBackend) -> None:

		"""Make instruments available; triggers start sounding immediately."""

		self._backend = backend
		logger.info(f"Audio backend attached: {type(backend).__name__}")


	def detach_backend (self) -> typing.Optional[reverie.backend.AudioBackend]:

		"""Stop using the current backend (without closing it) and return it."""

		backend = self._backend
		self._backend = None

		if backend is not None:
			logger.info(f"Audio backend detached: {type(backend).__name__}")

		return backend


	def connect_midi (
		self,
		device_name: typing.Optional[str] = None,
		channels: typing.Optional[typing.Mapping[str, int]] = None,
		noise_note: int = reverie.backend.DEFAULT_NOISE_NOTE
	) -> reverie.backend.MidiBackend:

		"""
		Open a MIDI output and attach it as the backend.

		Raises:
			AudioBackendError: The port could not be opened.  Nothing is
				retried; the engine keeps running silently.
		"""

		backend = reverie.backend.MidiBackend.open(device_name, channels=channels, noise_note=noise_note)
		self.attach_backend(backend)

		return backend


	# ------------------------------------------------------------------
	# Mixer and observers

	@property
	def mixer (self) -> typing.Dict[str, reverie.mixer.MixerSetting]:

		"""A copy of the current per-axis settings."""

		return dict(self._mixer)


	def update_mixer_controls (self, settings: typing.Mapping[str, typing.Any]) -> None:

		"""
		Replace the per-axis mixer map.

		Axes missing from ``settings`` go back to their defaults.  The new
		settings apply from the next triggered event; notes already scheduled
		keep the gain they were scheduled with.
		"""

		self._mixer = reverie.mixer.settings_from_dict(settings)

		logger.info("Mixer updated: " + ", ".join(
			f"{axis}={'S' if s.solo else ''}{'M' if s.muted else ''}{s.volume:g}"
			for axis, s in self._mixer.items()
		))


	def set_axis (
		self,
		axis: str,
		muted: typing.Optional[bool] = None,
		solo: typing.Optional[bool] = None,
		volume: typing.Optional[float] = None
	) -> None:

		"""Change one axis strip, leaving the others as they are."""

		if axis not in reverie.mixer.AXES:
			raise ValueError(f"Unknown axis {axis!r}")

		changes: typing.Dict[str, typing.Any] = {}

		if muted is not None:
			changes["muted"] = muted

		if solo is not None:
			changes["solo"] = solo

		if volume is not None:
			changes["volume"] = volume

		settings = dict(self._mixer)
		settings[axis] = dataclasses.replace(settings[axis], **changes)

		self.update_mixer_controls(settings)


	def on_event (self, event_name: str, callback: typing.Callable[..., typing.Any]) -> None:

		"""
		Register an observer.  See ``reverie.event_emitter.ENGINE_EVENTS``.

		``chunk``, ``trigger``, ``active_axes`` and ``flourish`` fire from
		synchronous code, so their listeners must be plain functions.
		"""

		self.events.on(event_name, callback)


	def on_active_axes_change (self, callback: typing.Callable[[typing.Dict[str, bool]], typing.Any]) -> None:

		"""Register a callback that receives ``{axis: bool}`` after each chunk."""

		self.events.on("active_axes", callback)


	def set_active_axes (self, axes: typing.Mapping[str, bool]) -> None:

		"""
		Push an active-axes report to the observers.

		Output only: this never changes what the layers play.
		"""

		report = {axis: bool(axes.get(axis, False)) for axis in reverie.mixer.AXES}
		self.events.emit_sync("active_axes", report)


	# ------------------------------------------------------------------
	# Session lifecycle

	async def start (self) -> None:

		"""
		Arm the engine so that deltas are accepted.

		Starts the scheduler loop on the running event loop.  Does not clear
		the session - call :meth:`reset` first for a fresh one.
		"""

		if self.active:
			return

		await self.scheduler.start()
		self.active = True

		logger.info("Engine started")

		await self.events.emit_async("start")


	def stop (self) -> None:

		"""
		Disarm the engine and silence sustained sounds.

		Pad chords and texture noise stop at once.  Short notes that were
		already scheduled are left to finish.  The session keeps its state.
		"""

		self.active = False
		self._silence_continuous()

		logger.info("Engine stopped")

		self.events.emit_sync("stop")


	def reset (self) -> None:

		"""Clear the session, the decision log and the transcript, then disarm."""

		self.active = False
		self._silence_continuous()

		self.session.clear()
		self.decisions.clear()
		self.transcript = []

		logger.info("Engine reset")

		self.events.emit_sync("reset")


	async def close (self) -> None:

		"""Stop the scheduler loop, drop pending actions and close the backend."""

		self.active = False

		await self.scheduler.stop()
		self.scheduler.clear()

		if self._backend is not None:
			self._backend.close()
			self._backend = None

		logger.info("Engine closed")


	def _silence_continuous (self) -> None:

		self.scheduler.discard_continuous()

		if self._backend is not None:
			self._backend.release(reverie.layers.CONTINUOUS_LAYERS)


	# ------------------------------------------------------------------
	# Chunk pipeline

	def add_delta (self, text: str) -> typing.Optional[ChunkAnalysis]:

		"""
		Run the full pipeline for one chunk of streamed text.

		Returns the analysis, or ``None`` if the engine is not started (in
		which case nothing at all happens - no sound and no bookkeeping).
		"""

		if not self.active:
			logger.debug("Delta ignored: engine not started")
			return None

		if not isinstance(text, str):
			logger.warning(f"Delta is not text ({type(text).__name__}) - treating as empty")
			text = ""

		chunk = reverie.session_state.TextChunk(text=text, timestamp=self.clock())

		flags = reverie.patterns.detect(text)
		value = reverie.intensity.intensity(flags)
		frequency = reverie.pitch.pitch(value, text)

		# Gains are read fresh for every chunk so mixer changes apply at once.
		axis_gains = reverie.mixer.gains(self._mixer)
		triggers = reverie.layers.evaluate(flags, value, frequency, axis_gains)

		label = reverie.patterns.dominant_category(flags)
		phase = reverie.session_state.infer_phase(flags)
		stats = self.session.record(chunk, label, phase)

		if self.recording:
			self.transcript.append(text)

		for trigger in triggers:
			self.decisions.append(trigger.decision())
			self._play(trigger)

		logger.debug(
			f"Chunk {self.session.chunk_count}: {flags.active() or ['none']} "
			f"intensity={value:.2f} freq={frequency:.1f}Hz layers={[t.layer + ':' + t.kind for t in triggers]}"
		)

		axes = reverie.mixer.active_axes(flags)
		self.set_active_axes(axes)

		analysis = ChunkAnalysis(
			text = text,
			flags = flags,
			intensity = value,
			frequency = frequency,
			label = label,
			phase = phase,
			active_axes = axes,
			repeated = stats.repeated,
			interval = stats.interval,
			velocity = stats.velocity,
			burst = stats.burst,
			trend = self.session.trend(),
			triggers = tuple(triggers)
		)

		self.events.emit_sync("chunk", analysis)

		return analysis


	def start_flourish (self) -> None:

		"""
		Play the closing chord.  Call once when the upstream stream ends.

		Not guarded: a second call layers a second flourish over the first.
		"""

		if not self.active:
			logger.debug("Flourish ignored: engine not started")
			return

		logger.info("Flourish")

		for trigger in reverie.flourish.flourish_events():
			self._play(trigger)

		self.events.emit_sync("flourish")


	def _play (self, trigger: reverie.layers.LayerTrigger) -> None:

		"""Hand one trigger's events to the scheduler, if there is anything to play on."""

		self.events.emit_sync("trigger", trigger)

		if self._backend is None:
			return

		label = f"{trigger.layer}:{trigger.kind}"

		for note in trigger.notes:

			self.scheduler.schedule(
				note.delay,
				functools.partial(self._note_on, trigger.layer, note.frequency, note.volume),
				continuous = trigger.continuous,
				label = label
			)

			self.scheduler.schedule(
				note.delay + note.duration,
				functools.partial(self._note_off, trigger.layer, note.frequency),
				continuous = trigger.continuous,
				label = label
			)

		if trigger.noise is not None:

			burst = trigger.noise

			self.scheduler.schedule(
				burst.delay,
				functools.partial(self._noise_on, burst.cutoff, burst.volume),
				continuous = True,
				label = label
			)

			self.scheduler.schedule(
				burst.delay + burst.duration,
				self._noise_off,
				continuous = True,
				label = label
			)


	# The backend can be detached between scheduling and firing, so each
	# action checks again.

	def _note_on (self, layer: str, frequency: float, volume: float) -> None:

		if self._backend is not None:
			self._backend.note_on(layer, frequency, volume)


	def _note_off (self, layer: str, frequency: float) -> None:

		if self._backend is not None:
			self._backend.note_off(layer, frequency)


	def _noise_on (self, cutoff: float, volume: float) -> None:

		if self._backend is not None:
			self._backend.noise_on(cutoff, volume)


	def _noise_off (self) -> None:

		if self._backend is not None:
			self._backend.noise_off()


	# ------------------------------------------------------------------
	# Replay

	async def replay (self, chunks: typing.Iterable[str], speed: float = 1.0) -> None:

		"""
		Re-drive a recorded chunk sequence through the live pipeline.

		Chunks are submitted ``replay_base_delay / speed`` seconds apart, then
		one flourish follows after twice that delay.  The same chunks under
		the same mixer settings make the same decisions as the original run;
		only wall-clock timing may differ.  Calling :meth:`stop` during a
		replay ends it early.

		Raises ``ValueError`` if ``speed`` is not positive.
		"""

		if speed <= 0:
			raise ValueError("Replay speed must be positive")

		chunk_list = list(chunks)
		delay = self.replay_base_delay / speed

		self._silence_continuous()

		if not self.active:
			await self.start()

		logger.info(f"Replaying {len(chunk_list)} chunks at {speed:g}x ({delay * 1000:.0f} ms apart)")

		for text in chunk_list:

			await asyncio.sleep(delay)

			if not self.active:
				logger.info("Replay interrupted")
				return

			self.add_delta(text)

		await asyncio.sleep(delay * 2)

		if self.active:
			self.start_flourish()
