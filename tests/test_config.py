import pathlib

import pytest

import reverie.config


def test_missing_file_gives_defaults (tmp_path: pathlib.Path, caplog: pytest.LogCaptureFixture) -> None:

	config = reverie.config.read_config(str(tmp_path / "absent.yaml"))

	assert config == reverie.config.EngineConfig()
	assert "not found" in caplog.text


def test_empty_file_gives_defaults (tmp_path: pathlib.Path) -> None:

	path = tmp_path / "empty.yaml"
	path.write_text("")

	assert reverie.config.load_config(str(path)) == {}


def test_full_file_is_parsed (tmp_path: pathlib.Path) -> None:

	path = tmp_path / "reverie.yaml"
	path.write_text(
		"midi:\n"
		"  device_name: \"IAC Driver Bus 1\"\n"
		"  channels: {pad: 7}\n"
		"  noise_note: 38\n"
		"mixer:\n"
		"  revision: {muted: true}\n"
		"  reasoning: {solo: true, volume: 60}\n"
		"replay:\n"
		"  base_delay: 0.25\n"
		"  speed: 2\n"
		"osc:\n"
		"  enabled: true\n"
		"  send_port: 9100\n"
		"logging:\n"
		"  level: debug\n"
	)

	config = reverie.config.read_config(str(path))

	assert config.midi.device_name == "IAC Driver Bus 1"
	assert config.midi.channels["pad"] == 7
	assert config.midi.channels["bass"] == 0
	assert config.midi.noise_note == 38
	assert config.mixer["revision"].muted is True
	assert config.mixer["reasoning"].volume == 60
	assert config.mixer["certainty"].solo is False
	assert config.replay.base_delay == pytest.approx(0.25)
	assert config.replay.speed == pytest.approx(2.0)
	assert config.osc.enabled is True
	assert config.osc.receive_port == 9000
	assert config.osc.send_port == 9100
	assert config.log_level == "DEBUG"


def test_non_mapping_rejected (tmp_path: pathlib.Path) -> None:

	path = tmp_path / "list.yaml"
	path.write_text("- a\n- b\n")

	with pytest.raises(ValueError):
		reverie.config.load_config(str(path))


@pytest.mark.parametrize("data", [
	{"midi": {"channels": {"drums": 9}}},
	{"mixer": {"melody": {"muted": True}}},
	{"mixer": {"revision": {"volume": 140}}},
	{"mixer": {"revision": {"muted": "false"}}},
	{"mixer": ["revision"]},
	{"replay": {"speed": 0}},
])
def test_invalid_values_rejected (data: dict) -> None:

	with pytest.raises(ValueError):
		reverie.config.EngineConfig.from_dict(data)


def test_empty_mixer_axis_block_gives_defaults (tmp_path: pathlib.Path) -> None:

	path = tmp_path / "reverie.yaml"
	path.write_text("mixer:\n  certainty:\n  revision: {muted: true}\n")

	config = reverie.config.read_config(str(path))

	assert config.mixer["certainty"].muted is False
	assert config.mixer["certainty"].volume == 100
	assert config.mixer["revision"].muted is True
