import asyncio
import typing

import pytest

import reverie.scheduler

import conftest


def test_process_due_runs_in_time_order (clock: conftest.ManualClock) -> None:

	scheduler = reverie.scheduler.EventScheduler(clock=clock)
	fired: typing.List[str] = []

	scheduler.schedule(0.2, lambda: fired.append("late"))
	scheduler.schedule(0.1, lambda: fired.append("early"))
	scheduler.schedule(0.1, lambda: fired.append("early-second"))

	assert scheduler.process_due() == 0

	clock.advance(0.15)
	assert scheduler.process_due() == 2
	assert fired == ["early", "early-second"]

	clock.advance(1.0)
	scheduler.process_due()
	assert fired == ["early", "early-second", "late"]
	assert scheduler.pending == 0


def test_negative_delay_rejected (clock: conftest.ManualClock) -> None:

	scheduler = reverie.scheduler.EventScheduler(clock=clock)

	with pytest.raises(ValueError):
		scheduler.schedule(-0.01, lambda: None)


def test_failing_action_does_not_block_others (clock: conftest.ManualClock, caplog: pytest.LogCaptureFixture) -> None:

	scheduler = reverie.scheduler.EventScheduler(clock=clock)
	fired: typing.List[int] = []

	def broken () -> None:
		raise RuntimeError("device gone")

	scheduler.schedule(0.0, broken, label="mid:plain_note")
	scheduler.schedule(0.0, lambda: fired.append(1))

	assert scheduler.process_due() == 2
	assert fired == [1]
	assert "mid:plain_note" in caplog.text


def test_discard_continuous_keeps_one_shots (clock: conftest.ManualClock) -> None:

	scheduler = reverie.scheduler.EventScheduler(clock=clock)
	fired: typing.List[str] = []

	scheduler.schedule(0.5, lambda: fired.append("pad"), continuous=True)
	scheduler.schedule(0.3, lambda: fired.append("mid"))
	scheduler.schedule(0.1, lambda: fired.append("noise"), continuous=True)

	assert scheduler.discard_continuous() == 2
	assert scheduler.pending == 1

	clock.advance(1.0)
	scheduler.process_due()

	assert fired == ["mid"]


def test_clear_drops_everything (clock: conftest.ManualClock) -> None:

	scheduler = reverie.scheduler.EventScheduler(clock=clock)

	scheduler.schedule(0.1, lambda: None)
	scheduler.schedule(0.2, lambda: None, continuous=True)
	scheduler.clear()

	assert scheduler.pending == 0


@pytest.mark.asyncio
async def test_loop_fires_actions_in_real_time () -> None:

	"""The drive loop wakes for newly scheduled actions and runs them when due."""

	scheduler = reverie.scheduler.EventScheduler()
	fired: typing.List[str] = []

	await scheduler.start()

	scheduler.schedule(0.05, lambda: fired.append("b"))
	scheduler.schedule(0.0, lambda: fired.append("a"))

	await asyncio.sleep(0.02)
	assert fired == ["a"]

	await asyncio.sleep(0.1)
	assert fired == ["a", "b"]

	await scheduler.stop()

	assert scheduler.running is False
	assert scheduler.task is None


@pytest.mark.asyncio
async def test_stop_leaves_pending_actions () -> None:

	scheduler = reverie.scheduler.EventScheduler()

	await scheduler.start()
	scheduler.schedule(10.0, lambda: None)
	await scheduler.stop()

	assert scheduler.pending == 1
