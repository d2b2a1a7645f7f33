"""Bounded memory of a single sonification session.

One :class:`SessionState` belongs to exactly one engine.  It is created with
the engine, cleared by ``reset()`` and updated on every accepted chunk.
Every buffer is bounded so that per-chunk cost stays flat however long the
stream runs:

- the trailing text window (200 characters) used for repetition checks,
- arrival timestamps (last 20) for pacing and burst detection,
- label and phase history (last 10) for the session trend.

Nothing in here feeds back into what the layers play.  It describes the
stream for observers (legend, OSC, logs), so replaying the same chunks
always makes the same sounds regardless of what the session saw before.
"""

import collections
import dataclasses
import typing

import reverie.patterns


TEXT_WINDOW = 200
TIMING_WINDOW = 20
HISTORY_WINDOW = 10

MIN_REPEAT_LENGTH = 4
BURST_INTERVAL = 0.05

FLOWING_SHARE = 0.6
STRUGGLING_SHARE = 0.4


@dataclasses.dataclass (frozen=True)
class TextChunk:

	"""An incoming text fragment and its arrival time (monotonic seconds)."""

	text: str
	timestamp: float


@dataclasses.dataclass (frozen=True)
class ChunkStats:

	"""Per-chunk observations produced by :meth:`SessionState.record`."""

	repeated: bool
	interval: typing.Optional[float]
	velocity: float
	burst: bool


def infer_phase (flags: reverie.patterns.PatternFlags) -> str:

	"""
	Name the reasoning phase a chunk belongs to, first match wins.
	"""

	if flags.revision:
		return "backtracking"

	if flags.question:
		return "questioning"

	if flags.resolution:
		return "concluding"

	if flags.causation or flags.enumeration or flags.comparison:
		return "reasoning"

	return "thinking"


class SessionState:

	"""
	Rolling text, timing and history buffers for the current run.
	"""

	def __init__ (
		self,
		text_window: int = TEXT_WINDOW,
		timing_window: int = TIMING_WINDOW,
		history_window: int = HISTORY_WINDOW
	) -> None:

		if text_window <= 0 or timing_window <= 1 or history_window <= 0:
			raise ValueError("Session windows must be positive (timing window at least 2)")

		self.text_window = text_window
		self.recent_text: str = ""
		self.timestamps: typing.Deque[float] = collections.deque(maxlen=timing_window)
		self.labels: typing.Deque[str] = collections.deque(maxlen=history_window)
		self.phases: typing.Deque[str] = collections.deque(maxlen=history_window)

		self.chunk_count: int = 0
		self.repetition_count: int = 0
		self.burst_count: int = 0


	def clear (self) -> None:

		"""Forget everything - used by the engine's ``reset()``."""

		self.recent_text = ""
		self.timestamps.clear()
		self.labels.clear()
		self.phases.clear()
		self.chunk_count = 0
		self.repetition_count = 0
		self.burst_count = 0


	@property
	def is_empty (self) -> bool:
		return self.chunk_count == 0


	@property
	def phase (self) -> str:

		"""The phase of the most recent chunk, or ``"idle"`` before the first."""

		if not self.phases:
			return "idle"

		return self.phases[-1]


	def is_repetition (self, text: str) -> bool:

		"""Return True if ``text`` already appears in the trailing window."""

		stripped = text.strip()

		if len(stripped) < MIN_REPEAT_LENGTH:
			return False

		return stripped.lower() in self.recent_text.lower()


	def record (self, chunk: TextChunk, label: str, phase: str) -> ChunkStats:

		"""
		Fold one chunk into the session and report what was observed.

		The repetition check runs against the window *before* this chunk is
		appended, so a chunk never counts as repeating itself.
		"""

		repeated = self.is_repetition(chunk.text)

		if repeated:
			self.repetition_count += 1

		interval: typing.Optional[float] = None
		velocity = 0.0
		burst = False

		if self.timestamps:
			interval = max(0.0, chunk.timestamp - self.timestamps[-1])

			if interval > 0:
				velocity = len(chunk.text) / interval

			if interval < BURST_INTERVAL:
				burst = True
				self.burst_count += 1

		self.timestamps.append(chunk.timestamp)

		self.recent_text += chunk.text

		if len(self.recent_text) > self.text_window:
			self.recent_text = self.recent_text[-self.text_window:]

		self.labels.append(label)
		self.phases.append(phase)
		self.chunk_count += 1

		return ChunkStats(repeated=repeated, interval=interval, velocity=velocity, burst=burst)


	def intervals (self) -> typing.List[float]:

		"""Inter-arrival gaps between the buffered timestamps, oldest first."""

		stamps = list(self.timestamps)
		return [later - earlier for earlier, later in zip(stamps, stamps[1:])]


	def mean_interval (self) -> typing.Optional[float]:

		gaps = self.intervals()

		if not gaps:
			return None

		return sum(gaps) / len(gaps)


	def trend (self) -> str:

		"""
		Summarise the label history.

		``flowing`` when at least 60% of recent chunks read as certain,
		``struggling`` when at least 40% read as uncertain or hedged,
		``exploring`` otherwise, and ``idle`` before the first chunk.
		"""

		if not self.labels:
			return "idle"

		total = len(self.labels)
		certain = sum(1 for label in self.labels if label == "certainty")
		unsure = sum(1 for label in self.labels if label in ("uncertainty", "hedging"))

		if certain / total >= FLOWING_SHARE:
			return "flowing"

		if unsure / total >= STRUGGLING_SHARE:
			return "struggling"

		return "exploring"
