import typing

import mido
import pytest

import reverie.engine


class FakeMidiOut:

	"""MIDI output stub that records every message sent to it."""

	def __init__ (self, name: str = "Dummy MIDI") -> None:

		self.name = name
		self.messages: typing.List[mido.Message] = []
		self.closed = False


	def send (self, message: mido.Message) -> None:

		"""Keep outgoing MIDI messages for inspection."""

		self.messages.append(message)


	def close (self) -> None:

		self.closed = True


	def of_type (self, message_type: str) -> typing.List[mido.Message]:

		"""Return the recorded messages of one type, in send order."""

		return [m for m in self.messages if m.type == message_type]


class RecordingBackend:

	"""Audio backend that logs calls instead of making sound."""

	def __init__ (self) -> None:

		self.calls: typing.List[typing.Tuple[typing.Any, ...]] = []
		self.closed = False


	def note_on (self, layer: str, frequency: float, volume: float) -> None:
		self.calls.append(("note_on", layer, frequency, volume))

	def note_off (self, layer: str, frequency: float) -> None:
		self.calls.append(("note_off", layer, frequency))

	def noise_on (self, cutoff: float, volume: float) -> None:
		self.calls.append(("noise_on", cutoff, volume))

	def noise_off (self) -> None:
		self.calls.append(("noise_off",))

	def release (self, layers: typing.Iterable[str]) -> None:
		self.calls.append(("release", frozenset(layers)))

	def close (self) -> None:
		self.closed = True


	def named (self, name: str) -> typing.List[typing.Tuple[typing.Any, ...]]:

		"""Return the recorded calls with the given method name."""

		return [call for call in self.calls if call[0] == name]


class ManualClock:

	"""A clock that only moves when a test advances it."""

	def __init__ (self, start: float = 100.0) -> None:

		self.now = start

	def __call__ (self) -> float:
		return self.now

	def advance (self, seconds: float) -> None:
		self.now += seconds


# Module-level reference so tests can inspect the most recently opened port.
_current_fake_output: typing.Optional[FakeMidiOut] = None


def _fake_get_output_names () -> typing.List[str]:

	"""Return a fixed list of MIDI output names for tests."""

	return ["Dummy MIDI"]


def _fake_open_output (name: str) -> FakeMidiOut:

	"""Return a fake MIDI output regardless of the name."""

	global _current_fake_output
	fake = FakeMidiOut(name)
	_current_fake_output = fake
	return fake


@pytest.fixture
def patch_midi (monkeypatch: pytest.MonkeyPatch) -> None:

	"""Patch mido to use a fake MIDI output for all tests that need it."""

	monkeypatch.setattr(mido, "get_output_names", _fake_get_output_names)
	monkeypatch.setattr(mido, "open_output", _fake_open_output)


@pytest.fixture
def fake_output (patch_midi: None) -> typing.Callable[[], typing.Optional[FakeMidiOut]]:

	"""Return a getter for the fake port most recently opened through mido."""

	return lambda: _current_fake_output


@pytest.fixture
def clock () -> ManualClock:
	return ManualClock()


@pytest.fixture
def backend () -> RecordingBackend:
	return RecordingBackend()


@pytest.fixture
def engine (backend: RecordingBackend, clock: ManualClock) -> reverie.engine.Engine:

	"""An engine with a recording backend, a manual clock and zero replay delay."""

	return reverie.engine.Engine(backend=backend, clock=clock, replay_base_delay=0.0)
