import pytest

import reverie.mixer
import reverie.patterns


MixerSetting = reverie.mixer.MixerSetting


def test_defaults_give_unity_gain () -> None:

	gains = reverie.mixer.gains(reverie.mixer.default_settings())

	assert gains == {axis: 1.0 for axis in reverie.mixer.AXES}


def test_volume_scales_gain () -> None:

	settings = reverie.mixer.settings_from_dict({"reasoning": {"volume": 40}})

	assert reverie.mixer.axis_gain("reasoning", settings) == pytest.approx(0.4)
	assert reverie.mixer.axis_gain("certainty", settings) == pytest.approx(1.0)


def test_mute_silences_axis () -> None:

	settings = reverie.mixer.settings_from_dict({"revision": MixerSetting(muted=True)})

	assert reverie.mixer.axis_gain("revision", settings) == 0.0
	assert reverie.mixer.axis_gain("resolution", settings) == 1.0


def test_solo_silences_everything_else () -> None:

	settings = reverie.mixer.settings_from_dict({"reasoning": {"solo": True, "volume": 70}})
	gains = reverie.mixer.gains(settings)

	assert gains == {"certainty": 0.0, "reasoning": pytest.approx(0.7), "revision": 0.0, "resolution": 0.0}


def test_several_solos_play_together () -> None:

	settings = reverie.mixer.settings_from_dict({
		"reasoning": {"solo": True},
		"revision": {"solo": True},
	})
	gains = reverie.mixer.gains(settings)

	assert gains["reasoning"] == 1.0
	assert gains["revision"] == 1.0
	assert gains["certainty"] == 0.0


def test_soloed_axis_ignores_its_own_mute () -> None:

	settings = reverie.mixer.settings_from_dict({"certainty": {"solo": True, "muted": True, "volume": 50}})

	assert reverie.mixer.axis_gain("certainty", settings) == pytest.approx(0.5)


def test_mute_on_other_axis_irrelevant_under_solo () -> None:

	settings = reverie.mixer.settings_from_dict({
		"certainty": {"solo": True},
		"reasoning": {"muted": True},
	})

	assert reverie.mixer.axis_gain("reasoning", settings) == 0.0
	assert reverie.mixer.axis_gain("certainty", settings) == 1.0


def test_volume_out_of_range_rejected () -> None:

	with pytest.raises(ValueError):
		MixerSetting(volume=101)

	with pytest.raises(ValueError):
		MixerSetting(volume=-1)


def test_unknown_axis_rejected () -> None:

	with pytest.raises(ValueError):
		reverie.mixer.settings_from_dict({"melody": {"muted": True}})

	with pytest.raises(ValueError):
		reverie.mixer.axis_gain("melody", reverie.mixer.default_settings())


def test_missing_axes_fall_back_to_defaults () -> None:

	settings = reverie.mixer.settings_from_dict({"revision": {"volume": 10}})

	assert set(settings) == set(reverie.mixer.AXES)
	assert settings["certainty"] == MixerSetting()


def test_active_axes_follow_membership () -> None:

	flags = reverie.patterns.PatternFlags(hedging=True, question=True)

	assert reverie.mixer.active_axes(flags) == {
		"certainty": True,
		"reasoning": False,
		"revision": True,
		"resolution": False,
	}


def test_every_category_belongs_to_an_axis () -> None:

	members = [m for group in reverie.mixer.AXIS_MEMBERS.values() for m in group]

	assert sorted(members) == sorted(reverie.patterns.CATEGORIES)


def test_empty_axis_block_gives_defaults () -> None:

	settings = reverie.mixer.settings_from_dict({"certainty": None})

	assert settings["certainty"] == MixerSetting()
	assert reverie.mixer.settings_from_dict(None) == reverie.mixer.default_settings()


@pytest.mark.parametrize("value", [
	{"muted": "false"},
	{"solo": 1},
	{"volume": "loud"},
	5,
	["muted"],
])
def test_malformed_setting_rejected (value: object) -> None:

	with pytest.raises(ValueError):
		reverie.mixer.settings_from_dict({"certainty": value})
