"""Priority ladder mapping detected categories to a scalar intensity.

The ladder is an ordered list evaluated top-down; the first rung whose
predicate matches sets the base value.  Revision outranks everything, so a
backtracking chunk is always the loudest and highest event regardless of
what else it contains.
"""

import typing

import reverie.patterns


IntensityRule = typing.Tuple[str, typing.Callable[[reverie.patterns.PatternFlags], bool], float]


INTENSITY_LADDER: typing.List[IntensityRule] = [
	("revision",    lambda f: f.revision,                0.90),
	("resolution",  lambda f: f.resolution,              0.85),
	("certainty",   lambda f: f.certainty,               0.80),
	("uncertainty", lambda f: f.uncertainty or f.hedging, 0.70),
	("enumeration", lambda f: f.enumeration,             0.65),
	("question",    lambda f: f.question,                0.60),
	("causation",   lambda f: f.causation,               0.60),
]

DEFAULT_INTENSITY = 0.50
EMPHASIS_BONUS = 0.15
MAX_INTENSITY = 1.0


def base_intensity (flags: reverie.patterns.PatternFlags) -> typing.Tuple[str, float]:

	"""
	Return the name and value of the first ladder rung that matches.

	Falls back to ``("default", 0.5)`` when nothing matches.
	"""

	for name, predicate, value in INTENSITY_LADDER:
		if predicate(flags):
			return name, value

	return "default", DEFAULT_INTENSITY


def intensity (flags: reverie.patterns.PatternFlags) -> float:

	"""
	Compute the intensity of a chunk in [0, 1].

	The base value comes from :data:`INTENSITY_LADDER`; emphasis adds
	:data:`EMPHASIS_BONUS` on top, capped at 1.0.
	"""

	_, value = base_intensity(flags)

	if flags.emphasis:
		value = min(MAX_INTENSITY, value + EMPHASIS_BONUS)

	return value
