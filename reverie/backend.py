"""Audio backends - the instruments the layers play through.

The engine never synthesises audio itself.  It addresses five opaque
instruments through the :class:`AudioBackend` protocol: pitched notes on
``bass``, ``mid``, ``high`` and ``pad``, and a filtered noise source on
``texture``.  Envelopes, oscillators and effects belong to the backend.

:class:`MidiBackend` is the shipped implementation.  Each layer gets its own
MIDI channel, so any synth - hardware, a DAW, a soft-synth host - can voice
the layers with whatever patches suit it.  Frequencies are rounded to the
nearest MIDI note and linear volumes become velocities.  The noise source is
a held note on the texture channel, with its filter cutoff sent as CC 74
(brightness) and its level as CC 7 (channel volume).
"""

import logging
import math
import typing

import mido

import reverie.midi_utils
import reverie.pitch


logger = logging.getLogger(__name__)


AudioBackendError = reverie.midi_utils.AudioBackendError


DEFAULT_CHANNELS: typing.Dict[str, int] = {
	"bass": 0,
	"mid": 1,
	"high": 2,
	"pad": 3,
	"texture": 4,
}

DEFAULT_NOISE_NOTE = 60
NOISE_VELOCITY = 100

CC_CHANNEL_VOLUME = 7
CC_BRIGHTNESS = 74
CC_ALL_SOUND_OFF = 120
CC_ALL_NOTES_OFF = 123

MIN_CUTOFF = 20.0
MAX_CUTOFF = 20000.0


@typing.runtime_checkable
class AudioBackend (typing.Protocol):

	"""
	Protocol for the instruments the engine triggers.
	"""

	def note_on (self, layer: str, frequency: float, volume: float) -> None:
		...

	def note_off (self, layer: str, frequency: float) -> None:
		...

	def noise_on (self, cutoff: float, volume: float) -> None:
		...

	def noise_off (self) -> None:
		...

	def release (self, layers: typing.Iterable[str]) -> None:

		"""Immediately silence everything sounding on the given layers."""

		...

	def close (self) -> None:
		...


def frequency_to_note (frequency: float) -> int:

	"""Nearest MIDI note to a frequency, clamped to 0-127."""

	return max(0, min(127, int(round(reverie.pitch.frequency_to_midi(frequency)))))


def volume_to_midi (volume: float) -> int:

	"""
	Map a linear gain (0-1) onto a 1-127 MIDI value.

	Never returns 0: a note-on with velocity 0 is a note-off in MIDI.
	"""

	return max(1, min(127, int(round(volume * 127))))


def cutoff_to_cc (cutoff: float) -> int:

	"""Map a filter cutoff in Hz onto 0-127 on a logarithmic scale."""

	clamped = max(MIN_CUTOFF, min(MAX_CUTOFF, cutoff))
	position = math.log(clamped / MIN_CUTOFF) / math.log(MAX_CUTOFF / MIN_CUTOFF)

	return int(round(position * 127))


class MidiBackend:

	"""
	Drive the five layers as MIDI instruments through a ``mido`` output port.
	"""

	def __init__ (
		self,
		midi_out: typing.Any,
		channels: typing.Optional[typing.Mapping[str, int]] = None,
		noise_note: int = DEFAULT_NOISE_NOTE,
		device_name: typing.Optional[str] = None
	) -> None:

		"""
		Parameters:
			midi_out: An open ``mido`` output port (anything with ``send``).
			channels: ``{layer: channel}``; missing layers use
				:data:`DEFAULT_CHANNELS`.
			noise_note: Note held on the texture channel while noise sounds.
			device_name: Port name, for logging.
		"""

		merged = dict(DEFAULT_CHANNELS)

		if channels:
			merged.update(channels)

		for layer, channel in merged.items():
			if not 0 <= channel <= 15:
				raise ValueError(f"MIDI channel for layer {layer!r} must be 0-15, got {channel}")

		self.midi_out = midi_out
		self.channels: typing.Dict[str, int] = merged
		self.noise_note = noise_note
		self.device_name = device_name

		self.active_notes: typing.Set[typing.Tuple[int, int]] = set()
		self.noise_active = False


	@classmethod
	def open (
		cls,
		device_name: typing.Optional[str] = None,
		channels: typing.Optional[typing.Mapping[str, int]] = None,
		noise_note: int = DEFAULT_NOISE_NOTE
	) -> "MidiBackend":

		"""
		Open a MIDI output and wrap it.

		Raises:
			AudioBackendError: The port could not be found or opened.
		"""

		selected_name, midi_out = reverie.midi_utils.select_output_device(device_name)

		return cls(midi_out, channels=channels, noise_note=noise_note, device_name=selected_name)


	def _send (self, message: mido.Message) -> None:

		if self.midi_out is None:
			return

		try:
			self.midi_out.send(message)
		except Exception:
			logger.exception("MIDI send failed (device may be disconnected)")


	def note_on (self, layer: str, frequency: float, volume: float) -> None:

		channel = self.channels[layer]
		note = frequency_to_note(frequency)

		self._send(mido.Message('note_on', channel=channel, note=note, velocity=volume_to_midi(volume)))
		self.active_notes.add((channel, note))


	def note_off (self, layer: str, frequency: float) -> None:

		channel = self.channels[layer]
		note = frequency_to_note(frequency)

		self._send(mido.Message('note_off', channel=channel, note=note, velocity=0))
		self.active_notes.discard((channel, note))


	def noise_on (self, cutoff: float, volume: float) -> None:

		"""Start (or re-shape, if already sounding) the texture noise."""

		channel = self.channels["texture"]

		self._send(mido.Message('control_change', channel=channel, control=CC_BRIGHTNESS, value=cutoff_to_cc(cutoff)))
		self._send(mido.Message('control_change', channel=channel, control=CC_CHANNEL_VOLUME, value=volume_to_midi(volume)))

		if not self.noise_active:
			self._send(mido.Message('note_on', channel=channel, note=self.noise_note, velocity=NOISE_VELOCITY))
			self.noise_active = True


	def noise_off (self) -> None:

		if not self.noise_active:
			return

		channel = self.channels["texture"]
		self._send(mido.Message('note_off', channel=channel, note=self.noise_note, velocity=0))
		self.noise_active = False


	def release (self, layers: typing.Iterable[str]) -> None:

		layer_set = set(layers)
		channels = {self.channels[layer] for layer in layer_set}

		for channel, note in sorted(self.active_notes):
			if channel in channels:
				self._send(mido.Message('note_off', channel=channel, note=note, velocity=0))
				self.active_notes.discard((channel, note))

		if "texture" in layer_set:
			self.noise_off()


	def panic (self) -> None:

		"""
		Silence every layer: release tracked notes, then All Notes Off and
		All Sound Off on each layer channel.
		"""

		logger.info("Panic: sending all notes off.")

		self.release(self.channels.keys())

		for channel in sorted(set(self.channels.values())):
			self._send(mido.Message('control_change', channel=channel, control=CC_ALL_NOTES_OFF, value=0))
			self._send(mido.Message('control_change', channel=channel, control=CC_ALL_SOUND_OFF, value=0))


	def close (self) -> None:

		if self.midi_out is None:
			return

		self.panic()

		try:
			self.midi_out.close()
		except Exception:
			logger.exception("Failed to close MIDI output")

		self.midi_out = None

		logger.info(f"Closed MIDI output: {self.device_name or '<unnamed>'}")
