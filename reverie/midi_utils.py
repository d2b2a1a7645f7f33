import logging
import typing

import mido


logger = logging.getLogger(__name__)


class AudioBackendError (RuntimeError):

	"""Raised when an audio backend cannot be constructed or connected."""


def select_output_device (device_name: typing.Optional[str] = None) -> typing.Tuple[str, typing.Any]:

	"""
	Select and open a MIDI output port for the layer instruments.

	If `device_name` is provided, that exact port is opened.
	If `device_name` is None, auto-discovers available ports:
	- If exactly one port exists, it is selected.
	- If several exist, the first one is used and the rest are logged, so
	  that stdin stays free for streamed text.

	Failures are never retried here; the caller decides whether to try
	again with another device.

	Returns:
		A tuple of (device_name, midi_out_object).

	Raises:
		AudioBackendError: No ports exist, the named port is missing, or the
			port could not be opened.
	"""

	try:
		outputs = mido.get_output_names()
	except Exception as e:
		raise AudioBackendError(f"Could not list MIDI outputs: {e}") from e

	logger.info(f"Available MIDI outputs: {outputs}")

	if not outputs:
		raise AudioBackendError("No MIDI output devices found.")

	if device_name is not None:
		if device_name not in outputs:
			raise AudioBackendError(
				f"MIDI output device '{device_name}' not found. "
				f"Available devices: {outputs}"
			)
		selected_name = device_name

	else:
		selected_name = outputs[0]

		if len(outputs) > 1:
			logger.warning(
				f"Several MIDI outputs found - using '{selected_name}'. "
				f"Pass a device name to choose another: {outputs[1:]}"
			)

	try:
		midi_out = mido.open_output(selected_name)
	except Exception as e:
		raise AudioBackendError(f"Failed to open MIDI output '{selected_name}': {e}") from e

	logger.info(f"Opened MIDI output: {selected_name}")

	return selected_name, midi_out
