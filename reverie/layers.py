"""The five sound layers and their trigger rules.

Every layer is evaluated independently for every chunk, so anywhere from
zero to five layers fire together.

==========  ==========================================  =====================
Layer       Fires on                                    Governing axis
==========  ==========================================  =====================
bass        causation, enumeration or resolution        reasoning / resolution
mid         always                                      revision / certainty / none
high        emphasis, comparison or hedging             resolution / reasoning / certainty
pad         uncertainty, resolution or causation        certainty / resolution / reasoning
texture     uncertainty, revision or negation           certainty / revision
==========  ==========================================  =====================

:func:`evaluate` is pure: it turns flags, intensity, pitch and axis gains
into a list of :class:`LayerTrigger` records, each holding a short sequence
of events with delays relative to the moment the chunk was processed.  The
engine hands these to the scheduler.  A trigger whose axis gain is zero is
never produced, so nothing inaudible is ever scheduled.

Levels are computed in dB per layer (``floor + slope * intensity``), with a
per-note decay for sequenced triggers, then converted to linear gain and
multiplied by the axis gain.
"""

import dataclasses
import math
import typing

import reverie.constants.durations as dur
import reverie.patterns
import reverie.pitch


LAYERS: typing.Tuple[str, ...] = ("bass", "mid", "high", "pad", "texture")

# Sustained sources that stop() and reset() must silence at once.
CONTINUOUS_LAYERS: typing.FrozenSet[str] = frozenset({"pad", "texture"})


# Level curves: (dB at intensity 0, dB added per unit of intensity).
BASS_LEVEL = (-18.0, 5.0)
MID_LEVEL = (-12.0, 8.0)
HIGH_LEVEL = (-22.0, 6.0)
PAD_LEVEL = (-28.0, 5.0)
TEXTURE_LEVEL = (-38.0, 10.0)

BASS_RATIO = 0.25            # two octaves below the base pitch
HIGH_RATIO = 2.5

DESCENDING_RUN = [0, -2, -4, -6, -8]
ASCENDING_ARPEGGIO = [0, 2, 4, 7, 9]
MAJOR_TRIAD = [0, 4, 7]
EMPHASIS_BURST = [0, 5, 7, 12]
DISSONANT_CHORD = [0, 1, 6]
CONSONANT_CHORD = [0, 4, 7]

REVISION_CUTOFF = 1200.0
NEGATION_CUTOFF = 600.0
UNCERTAINTY_CUTOFF = 900.0


def db_to_gain (db: float) -> float:

	"""Convert decibels to a linear amplitude factor."""

	return math.pow(10.0, db / 20.0)


def gain_to_db (gain: float) -> float:

	"""Convert a linear amplitude factor to decibels (``-inf`` for silence)."""

	if gain <= 0:
		return -math.inf

	return 20.0 * math.log10(gain)


def level_db (level: typing.Tuple[float, float], intensity: float) -> float:

	"""Evaluate a ``(floor, slope)`` level curve at the given intensity."""

	floor, slope = level
	return floor + slope * intensity


@dataclasses.dataclass (frozen=True)
class NoteEvent:

	"""
	A pitched note to play on a layer.

	Attributes:
		delay: Seconds after the chunk was processed.
		frequency: Pitch in Hz.
		volume: Linear gain, axis gain already applied.
		duration: Seconds until release.
	"""

	delay: float
	frequency: float
	volume: float
	duration: float


@dataclasses.dataclass (frozen=True)
class NoiseBurst:

	"""A short burst of filtered noise on the texture layer."""

	delay: float
	cutoff: float
	volume: float
	duration: float


@dataclasses.dataclass (frozen=True)
class LayerTrigger:

	"""
	One layer's response to one chunk.

	``frequency`` and ``intensity`` are the chunk's base values, so the
	decision tuple is identical for every layer of the same chunk apart from
	``layer`` and ``kind``.  ``axis`` is ``None`` for triggers that ignore
	the mixer (the plain mid note and the flourish).
	"""

	layer: str
	kind: str
	axis: typing.Optional[str]
	intensity: float
	frequency: float
	notes: typing.Tuple[NoteEvent, ...] = ()
	noise: typing.Optional[NoiseBurst] = None

	@property
	def continuous (self) -> bool:
		return self.layer in CONTINUOUS_LAYERS

	def decision (self) -> typing.Tuple[str, str, float, float]:

		"""Return ``(layer, kind, intensity, frequency)``."""

		return (self.layer, self.kind, self.intensity, self.frequency)


def _sequence (
	root: float,
	intervals: typing.Sequence[int],
	spacing: float,
	base_db: float,
	decay_db: float,
	duration: float,
	gain: float
) -> typing.Tuple[NoteEvent, ...]:

	"""
	Build a staggered run of notes above ``root``.

	Note *i* fires ``i * spacing`` seconds after the chunk and is ``i *
	decay_db`` quieter than the first.  Pass ``spacing=0`` for a chord.
	"""

	return tuple(
		NoteEvent(
			delay = i * spacing,
			frequency = reverie.pitch.transpose(root, semitones),
			volume = db_to_gain(base_db - i * decay_db) * gain,
			duration = duration
		)
		for i, semitones in enumerate(intervals)
	)


def _bass (flags: reverie.patterns.PatternFlags, intensity: float, base: float, gains: typing.Mapping[str, float]) -> typing.Optional[LayerTrigger]:

	if not (flags.causation or flags.enumeration or flags.resolution):
		return None

	axis = "reasoning" if flags.causation or flags.enumeration else "resolution"
	gain = gains[axis]

	if gain <= 0:
		return None

	note = NoteEvent(
		delay = 0.0,
		frequency = base * BASS_RATIO,
		volume = db_to_gain(level_db(BASS_LEVEL, intensity)) * gain,
		duration = dur.QUARTER
	)

	return LayerTrigger("bass", "foundation", axis, intensity, base, notes=(note,))


def _mid (flags: reverie.patterns.PatternFlags, intensity: float, base: float, gains: typing.Mapping[str, float]) -> typing.Optional[LayerTrigger]:

	mid_db = level_db(MID_LEVEL, intensity)

	# Only the first matching branch plays; a silenced branch does not fall through.
	if flags.revision:
		kind, axis = "descending_run", "revision"
		intervals, spacing, decay, length = DESCENDING_RUN, dur.DESCENDING_RUN_SPACING, 1.0, dur.THIRTYSECOND

	elif flags.question:
		kind, axis = "ascending_arpeggio", "revision"
		intervals, spacing, decay, length = ASCENDING_ARPEGGIO, dur.ARPEGGIO_SPACING, 1.0, dur.SIXTEENTH

	elif flags.certainty:
		kind, axis = "major_triad", "certainty"
		intervals, spacing, decay, length = MAJOR_TRIAD, dur.TRIAD_SPACING, 3.0, dur.EIGHTH

	else:
		note = NoteEvent(0.0, base, db_to_gain(mid_db), dur.EIGHTH)
		return LayerTrigger("mid", "plain_note", None, intensity, base, notes=(note,))

	gain = gains[axis]

	if gain <= 0:
		return None

	notes = _sequence(base, intervals, spacing, mid_db, decay, length, gain)
	return LayerTrigger("mid", kind, axis, intensity, base, notes=notes)


def _high (flags: reverie.patterns.PatternFlags, intensity: float, base: float, gains: typing.Mapping[str, float]) -> typing.Optional[LayerTrigger]:

	if not (flags.emphasis or flags.comparison or flags.hedging):
		return None

	if flags.emphasis:
		axis = "resolution"
	elif flags.comparison:
		axis = "reasoning"
	else:
		axis = "certainty"

	gain = gains[axis]

	if gain <= 0:
		return None

	high = base * HIGH_RATIO
	high_db = level_db(HIGH_LEVEL, intensity)

	if flags.emphasis:
		notes = _sequence(high, EMPHASIS_BURST, dur.EMPHASIS_BURST_SPACING, high_db, 2.0, dur.THIRTYSECOND, gain)
		return LayerTrigger("high", "emphasis_burst", axis, intensity, base, notes=notes)

	note = NoteEvent(0.0, high, db_to_gain(high_db) * gain, dur.SIXTEENTH)
	return LayerTrigger("high", "shimmer", axis, intensity, base, notes=(note,))


def _pad (flags: reverie.patterns.PatternFlags, intensity: float, base: float, gains: typing.Mapping[str, float]) -> typing.Optional[LayerTrigger]:

	if not (flags.uncertainty or flags.resolution or flags.causation):
		return None

	if flags.uncertainty:
		axis = "certainty"
	elif flags.resolution:
		axis = "resolution"
	else:
		axis = "reasoning"

	gain = gains[axis]

	if gain <= 0:
		return None

	if flags.uncertainty:
		kind, chord = "dissonant_chord", DISSONANT_CHORD
	else:
		kind, chord = "consonant_chord", CONSONANT_CHORD

	notes = _sequence(base, chord, 0.0, level_db(PAD_LEVEL, intensity), 2.0, dur.HALF, gain)
	return LayerTrigger("pad", kind, axis, intensity, base, notes=notes)


def _texture (flags: reverie.patterns.PatternFlags, intensity: float, base: float, gains: typing.Mapping[str, float]) -> typing.Optional[LayerTrigger]:

	if not (flags.uncertainty or flags.revision or flags.negation):
		return None

	axis = "certainty" if flags.uncertainty else "revision"
	gain = gains[axis]

	if gain <= 0:
		return None

	# The cutoff follows its own precedence, independent of the governing axis.
	if flags.revision:
		kind, cutoff = "revision_noise", REVISION_CUTOFF
	elif flags.negation:
		kind, cutoff = "negation_noise", NEGATION_CUTOFF
	else:
		kind, cutoff = "uncertainty_noise", UNCERTAINTY_CUTOFF

	burst = NoiseBurst(
		delay = 0.0,
		cutoff = cutoff,
		volume = db_to_gain(level_db(TEXTURE_LEVEL, intensity)) * gain,
		duration = dur.NOISE_BURST
	)

	return LayerTrigger("texture", kind, axis, intensity, base, noise=burst)


LayerRule = typing.Callable[
	[reverie.patterns.PatternFlags, float, float, typing.Mapping[str, float]],
	typing.Optional[LayerTrigger]
]

LAYER_RULES: typing.List[typing.Tuple[str, LayerRule]] = [
	("bass", _bass),
	("mid", _mid),
	("high", _high),
	("pad", _pad),
	("texture", _texture),
]


def evaluate (
	flags: reverie.patterns.PatternFlags,
	intensity: float,
	base_frequency: float,
	gains: typing.Mapping[str, float]
) -> typing.List[LayerTrigger]:

	"""
	Decide which layers fire for a chunk and what each of them plays.

	Parameters:
		flags: Detected categories for the chunk.
		intensity: Chunk intensity in [0, 1].
		base_frequency: Chunk base pitch in Hz.
		gains: ``{axis: gain}`` as returned by :func:`reverie.mixer.gains`.

	Returns:
		Triggers in layer order (bass, mid, high, pad, texture).  Layers that
		do not fire, or whose governing axis is silenced, are absent.
	"""

	triggers: typing.List[LayerTrigger] = []

	for _, rule in LAYER_RULES:
		trigger = rule(flags, intensity, base_frequency, gains)

		if trigger is not None:
			triggers.append(trigger)

	return triggers
