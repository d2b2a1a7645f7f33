import pytest

import reverie.pitch


def test_midi_to_frequency_reference_points () -> None:

	assert reverie.pitch.midi_to_frequency(69) == pytest.approx(440.0)
	assert reverie.pitch.midi_to_frequency(60) == pytest.approx(261.6256, rel=1e-5)
	assert reverie.pitch.midi_to_frequency(81) == pytest.approx(880.0)


def test_frequency_to_midi_inverts () -> None:

	assert reverie.pitch.frequency_to_midi(440.0) == pytest.approx(69.0)
	assert reverie.pitch.frequency_to_midi(reverie.pitch.midi_to_frequency(48.5)) == pytest.approx(48.5)


def test_frequency_to_midi_rejects_non_positive () -> None:

	with pytest.raises(ValueError):
		reverie.pitch.frequency_to_midi(0.0)


def test_transpose_octave () -> None:

	assert reverie.pitch.transpose(220.0, 12) == pytest.approx(440.0)
	assert reverie.pitch.transpose(220.0, -12) == pytest.approx(110.0)


def test_complexity_counts_commas_and_parentheses () -> None:

	assert reverie.pitch.complexity("a, b (c), d") == 3
	assert reverie.pitch.complexity("plain") == 0
	assert reverie.pitch.complexity("closing only)") == 0


def test_pitch_range_without_complexity () -> None:

	"""Intensity 0 sits on C3 and intensity 1 three octaves above."""

	assert reverie.pitch.pitch(0.0, "plain") == pytest.approx(reverie.pitch.midi_to_frequency(48))
	assert reverie.pitch.pitch(1.0, "plain") == pytest.approx(reverie.pitch.midi_to_frequency(84))


def test_each_complexity_marker_adds_a_whole_tone () -> None:

	plain = reverie.pitch.pitch_midi(0.5, "text")
	busy = reverie.pitch.pitch_midi(0.5, "text, (more), again,")

	assert busy - plain == pytest.approx(4 * 2)


def test_pitch_is_monotonic_in_intensity () -> None:

	values = [reverie.pitch.pitch(i / 10, "same text, here") for i in range(11)]

	assert values == sorted(values)
	assert len(set(values)) == len(values)


def test_comma_and_causation_pitch () -> None:

	"""0.65 intensity with two commas lands on MIDI 75.4."""

	assert reverie.pitch.pitch_midi(0.65, "First, because the set is finite, therefore it converges.") == pytest.approx(75.4)


def test_clause_heavy_text_is_capped_at_top_note () -> None:

	"""Thousands of commas would overflow the frequency conversion without the cap."""

	commas = "," * 7000

	assert reverie.pitch.pitch_midi(0.5, commas) == reverie.pitch.MAX_MIDI_NOTE
	assert reverie.pitch.pitch(0.5, commas) == pytest.approx(reverie.pitch.midi_to_frequency(127))
	assert reverie.pitch.pitch(0.5, "," * 30) <= reverie.pitch.pitch(0.5, "," * 40) <= reverie.pitch.pitch(0.5, commas)
