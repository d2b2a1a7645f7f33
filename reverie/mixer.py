"""Cognitive axes and the mute/solo/volume mixer.

The eleven marker categories fold into four higher-level axes.  Membership
is non-exclusive and fixed:

- ``certainty``  - uncertainty, certainty, hedging
- ``reasoning``  - causation, enumeration, comparison
- ``revision``   - revision, negation, question
- ``resolution`` - resolution, emphasis

Each axis has a :class:`MixerSetting`.  Gains are recomputed from the
current settings every time a layer fires, so changes made between chunks
take effect on the very next trigger.
"""

import dataclasses
import typing

import reverie.patterns


AXES: typing.Tuple[str, ...] = ("certainty", "reasoning", "revision", "resolution")

AXIS_MEMBERS: typing.Dict[str, typing.Tuple[str, ...]] = {
	"certainty":  ("uncertainty", "certainty", "hedging"),
	"reasoning":  ("causation", "enumeration", "comparison"),
	"revision":   ("revision", "negation", "question"),
	"resolution": ("resolution", "emphasis"),
}

MAX_VOLUME = 100


@dataclasses.dataclass (frozen=True)
class MixerSetting:

	"""
	Mixer strip for one axis.

	Attributes:
		muted: Silence this axis (ignored while another axis is soloed
			and irrelevant while this one is).
		solo: Silence every axis that is not also soloed.
		volume: 0-100, mapped linearly onto a 0-1 gain.
	"""

	muted: bool = False
	solo: bool = False
	volume: float = MAX_VOLUME

	def __post_init__ (self) -> None:

		if not 0 <= self.volume <= MAX_VOLUME:
			raise ValueError(f"Mixer volume must be between 0 and {MAX_VOLUME}, got {self.volume}")


MixerSettings = typing.Mapping[str, MixerSetting]


def default_settings () -> typing.Dict[str, MixerSetting]:

	"""Return a fresh settings map with every axis unmuted at full volume."""

	return {axis: MixerSetting() for axis in AXES}


def _check_axis (axis: str) -> None:

	if axis not in AXIS_MEMBERS:
		raise ValueError(f"Unknown axis {axis!r} (expected one of {', '.join(AXES)})")


def _flag (data: typing.Mapping[str, typing.Any], key: str) -> bool:

	value = data.get(key, False)

	if not isinstance(value, bool):
		raise ValueError(f"Mixer {key} must be true or false, got {value!r}")

	return value


def setting_from_dict (data: typing.Optional[typing.Mapping[str, typing.Any]]) -> MixerSetting:

	"""
	Build a :class:`MixerSetting` from a plain dict, filling in defaults.

	``None`` (an empty axis block in YAML) gives the defaults.  Anything that
	is not a mapping, a non-boolean ``muted``/``solo`` or a non-numeric
	``volume`` raises ``ValueError``.
	"""

	if data is None:
		data = {}

	if not isinstance(data, typing.Mapping):
		raise ValueError(f"Mixer setting must be a mapping, got {data!r}")

	volume = data.get("volume", MAX_VOLUME)

	if isinstance(volume, bool) or not isinstance(volume, (int, float)):
		raise ValueError(f"Mixer volume must be a number, got {volume!r}")

	return MixerSetting(
		muted = _flag(data, "muted"),
		solo = _flag(data, "solo"),
		volume = float(volume)
	)


def settings_from_dict (data: typing.Optional[typing.Mapping[str, typing.Any]]) -> typing.Dict[str, MixerSetting]:

	"""
	Normalise a settings mapping as found in YAML config or sent by a UI.

	Values may be :class:`MixerSetting` instances or plain dicts.  Axes that
	are not mentioned keep their defaults.  Unknown axis names raise
	``ValueError``.
	"""

	settings = default_settings()

	if data is None:
		return settings

	if not isinstance(data, typing.Mapping):
		raise ValueError(f"Mixer settings must map axis names to settings, got {data!r}")

	for axis, value in data.items():

		_check_axis(axis)

		if isinstance(value, MixerSetting):
			settings[axis] = value
		else:
			settings[axis] = setting_from_dict(value)

	return settings


def axis_gain (axis: str, settings: MixerSettings) -> float:

	"""
	Gain multiplier for a single axis under the given settings.

	Soloing wins over everything: if any axis is soloed and this one is not,
	the gain is 0.  Otherwise a muted axis is 0 and an unmuted axis is
	``volume / 100``.
	"""

	_check_axis(axis)

	setting = settings.get(axis, MixerSetting())
	any_solo = any(s.solo for s in settings.values())

	if any_solo and not setting.solo:
		return 0.0

	# A soloed axis plays at its own volume even when it is also muted.
	if setting.muted and not setting.solo:
		return 0.0

	return setting.volume / MAX_VOLUME


def gains (settings: MixerSettings) -> typing.Dict[str, float]:

	"""Return ``{axis: gain}`` for all four axes."""

	return {axis: axis_gain(axis, settings) for axis in AXES}


def active_axes (flags: reverie.patterns.PatternFlags) -> typing.Dict[str, bool]:

	"""
	Report which axes a chunk touches.

	An axis is active iff any of its member flags is set.  This is for
	observers only; it has no bearing on what the layers play.
	"""

	return {
		axis: any(getattr(flags, member) for member in members)
		for axis, members in AXIS_MEMBERS.items()
	}
