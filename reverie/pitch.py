"""Pitch helpers and the intensity-to-frequency mapping.

Intensity spreads linearly over three octaves starting at C3 (MIDI 48).
Syntactic complexity - commas and opening parentheses - nudges the result
upward by a whole tone per marker, so dense, clause-heavy text sits higher
than plain text of the same intensity.
"""

import math
import typing


BASE_MIDI_NOTE = 48          # C3
MIDI_RANGE = 36              # three octaves
COMPLEXITY_SEMITONES = 2
COMPLEXITY_MARKERS: typing.Tuple[str, ...] = (",", "(")

A4_MIDI_NOTE = 69
MAX_MIDI_NOTE = 127
A4_FREQUENCY = 440.0


def midi_to_frequency (note: float) -> float:

	"""Convert a (possibly fractional) MIDI note number to Hz."""

	return A4_FREQUENCY * math.pow(2.0, (note - A4_MIDI_NOTE) / 12.0)


def frequency_to_midi (frequency: float) -> float:

	"""
	Convert a frequency in Hz to a fractional MIDI note number.

	Raises ``ValueError`` for non-positive frequencies.
	"""

	if frequency <= 0:
		raise ValueError("Frequency must be positive")

	return A4_MIDI_NOTE + 12.0 * math.log2(frequency / A4_FREQUENCY)


def transpose (frequency: float, semitones: float) -> float:

	"""Shift a frequency by an equal-tempered interval."""

	return frequency * math.pow(2.0, semitones / 12.0)


def complexity (text: str) -> int:

	"""Count the complexity markers (commas and open parentheses) in a chunk."""

	return sum(text.count(marker) for marker in COMPLEXITY_MARKERS)


def pitch_midi (intensity: float, text: str) -> float:

	"""
	Return the base pitch of a chunk as a fractional MIDI note number.

	Capped at the top of the MIDI range so very clause-heavy chunks still
	map to a finite frequency.
	"""

	note = BASE_MIDI_NOTE + intensity * MIDI_RANGE
	note += complexity(text) * COMPLEXITY_SEMITONES

	return min(note, MAX_MIDI_NOTE)


def pitch (intensity: float, text: str) -> float:

	"""
	Map intensity and textual complexity to a base frequency in Hz.

	Monotonic in ``intensity`` and non-decreasing in the number of
	complexity markers, up to the frequency of MIDI note 127.
	"""

	return midi_to_frequency(pitch_midi(intensity, text))
