import typing

import pytest

import reverie.backend
import reverie.pitch

import conftest


A3 = reverie.pitch.midi_to_frequency(57)


def _backend (**kwargs) -> reverie.backend.MidiBackend:
	return reverie.backend.MidiBackend(conftest.FakeMidiOut(), **kwargs)


def test_midi_backend_satisfies_protocol () -> None:

	assert isinstance(_backend(), reverie.backend.AudioBackend)


def test_note_on_and_off_use_layer_channel () -> None:

	backend = _backend()

	backend.note_on("high", A3, 0.5)
	backend.note_off("high", A3)

	on, off = backend.midi_out.messages

	assert on.type == "note_on"
	assert on.channel == 2
	assert on.note == 57
	assert on.velocity == 64
	assert off.type == "note_off"
	assert off.note == 57
	assert backend.active_notes == set()


def test_custom_channels () -> None:

	backend = _backend(channels={"bass": 9})
	backend.note_on("bass", A3, 1.0)

	assert backend.midi_out.messages[0].channel == 9
	assert backend.channels["mid"] == 1


def test_invalid_channel_rejected () -> None:

	with pytest.raises(ValueError):
		_backend(channels={"pad": 16})


def test_frequencies_round_to_nearest_note () -> None:

	assert reverie.backend.frequency_to_note(reverie.pitch.midi_to_frequency(60.4)) == 60
	assert reverie.backend.frequency_to_note(reverie.pitch.midi_to_frequency(60.6)) == 61
	assert reverie.backend.frequency_to_note(5.0) == 0


def test_volume_never_maps_to_zero_velocity () -> None:

	assert reverie.backend.volume_to_midi(0.0) == 1
	assert reverie.backend.volume_to_midi(1.0) == 127
	assert reverie.backend.volume_to_midi(3.0) == 127


def test_cutoff_mapping_is_logarithmic () -> None:

	assert reverie.backend.cutoff_to_cc(20.0) == 0
	assert reverie.backend.cutoff_to_cc(20000.0) == 127
	assert reverie.backend.cutoff_to_cc(600.0) < reverie.backend.cutoff_to_cc(900.0) < reverie.backend.cutoff_to_cc(1200.0)


def test_noise_on_sets_filter_then_holds_note () -> None:

	backend = _backend()

	backend.noise_on(1200.0, 0.1)
	backend.noise_on(600.0, 0.1)

	notes = backend.midi_out.of_type("note_on")
	controls = backend.midi_out.of_type("control_change")

	assert len(notes) == 1
	assert notes[0].channel == 4
	assert notes[0].note == reverie.backend.DEFAULT_NOISE_NOTE
	assert [c.control for c in controls] == [74, 7, 74, 7]
	assert controls[2].value == reverie.backend.cutoff_to_cc(600.0)

	backend.noise_off()
	backend.noise_off()

	assert len(backend.midi_out.of_type("note_off")) == 1
	assert backend.noise_active is False


def test_release_only_touches_named_layers () -> None:

	backend = _backend()

	backend.note_on("pad", A3, 0.2)
	backend.note_on("mid", A3, 0.2)
	backend.noise_on(900.0, 0.1)
	backend.midi_out.messages.clear()

	backend.release({"pad", "texture"})

	offs = backend.midi_out.of_type("note_off")

	assert {(m.channel, m.note) for m in offs} == {(3, 57), (4, reverie.backend.DEFAULT_NOISE_NOTE)}
	assert backend.active_notes == {(1, 57)}


def test_close_panics_and_closes_port () -> None:

	backend = _backend()
	port = backend.midi_out

	backend.note_on("bass", A3, 0.5)
	backend.close()

	assert port.closed is True
	assert backend.midi_out is None
	assert len(port.of_type("note_off")) == 1

	controls = {(m.channel, m.control) for m in port.of_type("control_change")}

	for channel in range(5):
		assert (channel, 123) in controls
		assert (channel, 120) in controls

	# Further calls are silently ignored.
	backend.note_on("bass", A3, 0.5)
	backend.close()


def test_send_failure_is_logged (caplog: pytest.LogCaptureFixture) -> None:

	class BrokenPort (conftest.FakeMidiOut):
		def send (self, message) -> None:
			raise OSError("unplugged")

	backend = reverie.backend.MidiBackend(BrokenPort())
	backend.note_on("mid", A3, 0.5)

	assert "MIDI send failed" in caplog.text


def test_open_uses_selected_device (fake_output: typing.Callable[[], conftest.FakeMidiOut]) -> None:

	backend = reverie.backend.MidiBackend.open(channels={"texture": 10}, noise_note=42)

	assert backend.device_name == "Dummy MIDI"
	assert backend.midi_out is fake_output()
	assert backend.channels["texture"] == 10
	assert backend.noise_note == 42
