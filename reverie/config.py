"""YAML configuration for the engine, the MIDI backend and the OSC bridge.

Every section is optional and anything left out falls back to its default::

    midi:
      device_name: "IAC Driver Bus 1"
      channels: {bass: 0, mid: 1, high: 2, pad: 3, texture: 4}
      noise_note: 60
    mixer:
      revision: {muted: false, solo: false, volume: 80}
    replay:
      base_delay: 0.1
      speed: 1.0
    osc:
      enabled: true
      receive_port: 9000
      send_port: 9001
      send_host: "127.0.0.1"
    logging:
      level: INFO
"""

import dataclasses
import logging
import os
import typing

import yaml

import reverie.backend
import reverie.constants.durations as dur
import reverie.mixer


logger = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = "reverie.yaml"


def load_config (config_path: str = DEFAULT_CONFIG_PATH) -> typing.Dict[str, typing.Any]:

	"""
	Load configuration from a YAML file.

	A missing file is not an error: a warning is logged and ``{}`` returned.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return {}

	with open(config_path, 'r') as f:
		data = yaml.safe_load(f)

	if data is None:
		return {}

	if not isinstance(data, dict):
		raise ValueError(f"Config file {config_path} must contain a mapping at the top level")

	return data


@dataclasses.dataclass
class MidiConfig:

	device_name: typing.Optional[str] = None
	channels: typing.Dict[str, int] = dataclasses.field(default_factory=lambda: dict(reverie.backend.DEFAULT_CHANNELS))
	noise_note: int = reverie.backend.DEFAULT_NOISE_NOTE


@dataclasses.dataclass
class ReplayConfig:

	base_delay: float = dur.REPLAY_BASE_DELAY
	speed: float = 1.0


@dataclasses.dataclass
class OscConfig:

	enabled: bool = False
	receive_port: int = 9000
	send_port: int = 9001
	send_host: str = "127.0.0.1"


@dataclasses.dataclass
class EngineConfig:

	"""Parsed configuration, with defaults for everything not given."""

	midi: MidiConfig = dataclasses.field(default_factory=MidiConfig)
	mixer: typing.Dict[str, reverie.mixer.MixerSetting] = dataclasses.field(default_factory=reverie.mixer.default_settings)
	replay: ReplayConfig = dataclasses.field(default_factory=ReplayConfig)
	osc: OscConfig = dataclasses.field(default_factory=OscConfig)
	log_level: str = "INFO"


	@classmethod
	def from_dict (cls, data: typing.Mapping[str, typing.Any]) -> "EngineConfig":

		"""
		Build a config from the mapping returned by :func:`load_config`.

		Raises ``ValueError`` for unknown layers, unknown axes, out-of-range
		volumes and a non-positive replay speed.
		"""

		midi_data = data.get("midi") or {}
		channels = dict(reverie.backend.DEFAULT_CHANNELS)

		for layer, channel in (midi_data.get("channels") or {}).items():
			if layer not in channels:
				raise ValueError(f"Unknown layer {layer!r} in midi.channels")
			channels[layer] = int(channel)

		midi = MidiConfig(
			device_name = midi_data.get("device_name"),
			channels = channels,
			noise_note = int(midi_data.get("noise_note", reverie.backend.DEFAULT_NOISE_NOTE))
		)

		replay_data = data.get("replay") or {}
		replay = ReplayConfig(
			base_delay = float(replay_data.get("base_delay", dur.REPLAY_BASE_DELAY)),
			speed = float(replay_data.get("speed", 1.0))
		)

		if replay.speed <= 0:
			raise ValueError("replay.speed must be positive")

		osc_data = data.get("osc") or {}
		osc = OscConfig(
			enabled = bool(osc_data.get("enabled", False)),
			receive_port = int(osc_data.get("receive_port", 9000)),
			send_port = int(osc_data.get("send_port", 9001)),
			send_host = str(osc_data.get("send_host", "127.0.0.1"))
		)

		logging_data = data.get("logging") or {}

		return cls(
			midi = midi,
			mixer = reverie.mixer.settings_from_dict(data.get("mixer") or {}),
			replay = replay,
			osc = osc,
			log_level = str(logging_data.get("level", "INFO")).upper()
		)


def read_config (config_path: str = DEFAULT_CONFIG_PATH) -> EngineConfig:

	"""Load and parse a YAML config file in one step."""

	return EngineConfig.from_dict(load_config(config_path))
