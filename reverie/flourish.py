"""The closing flourish played when the upstream stream ends.

A C major triad taken from the concluding (Ionian) scale, spread across
three layers: the mid layer walks up root, third and fifth 100 ms apart,
the high layer doubles each note an octave higher, and the bass holds the
root underneath.  The flourish bypasses the mixer - it marks the end of the
stream, not any one cognitive axis.
"""

import typing

import reverie.constants.durations as dur
import reverie.constants.scales
import reverie.layers
import reverie.pitch


MID_VOLUME = 0.5
HIGH_VOLUME = 0.3
BASS_VOLUME = 0.4


def triad_notes () -> typing.List[int]:

	"""Return the root, third and fifth of the concluding scale as MIDI notes."""

	scale = reverie.constants.scales.CONCLUDING
	return [scale[0], scale[2], scale[4]]


def flourish_events () -> typing.List[reverie.layers.LayerTrigger]:

	"""
	Build the flourish as layer triggers.

	The result is the same on every call; playing it twice simply layers two
	flourishes on top of each other.
	"""

	chord = triad_notes()
	root_frequency = reverie.pitch.midi_to_frequency(chord[0])

	mid_notes = tuple(
		reverie.layers.NoteEvent(i * dur.FLOURISH_SPACING, reverie.pitch.midi_to_frequency(note), MID_VOLUME, dur.HALF)
		for i, note in enumerate(chord)
	)

	high_notes = tuple(
		reverie.layers.NoteEvent(i * dur.FLOURISH_SPACING, reverie.pitch.midi_to_frequency(note + 12), HIGH_VOLUME, dur.HALF)
		for i, note in enumerate(chord)
	)

	bass_note = reverie.layers.NoteEvent(0.0, root_frequency, BASS_VOLUME, dur.WHOLE)

	return [
		reverie.layers.LayerTrigger("bass", "flourish", None, 1.0, root_frequency, notes=(bass_note,)),
		reverie.layers.LayerTrigger("mid", "flourish", None, 1.0, root_frequency, notes=mid_notes),
		reverie.layers.LayerTrigger("high", "flourish", None, 1.0, root_frequency, notes=high_notes),
	]
