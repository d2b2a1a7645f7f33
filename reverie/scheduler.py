import asyncio
import dataclasses
import heapq
import itertools
import logging
import time
import typing


logger = logging.getLogger(__name__)


ActionType = typing.Callable[[], typing.Any]


@dataclasses.dataclass (order=True)
class ScheduledAction:

	"""
	A deferred action waiting in the scheduler queue.

	Ordering is by fire time, then by insertion order, so actions scheduled
	for the same instant run in the order they were added.
	"""

	fire_time: float
	sequence: int
	action: ActionType = dataclasses.field(compare=False)
	continuous: bool = dataclasses.field(compare=False, default=False)
	label: str = dataclasses.field(compare=False, default="")


class EventScheduler:

	"""
	Fire-and-forget timer queue drained by a single asyncio task.

	``schedule()`` is synchronous and cheap - it pushes onto a heap and wakes
	the drive loop - so a caller feeding chunks in a tight burst never
	waits on audio.  The loop sleeps until the earliest fire time (or until
	woken by a new, earlier action) and then runs everything that is due.

	Actions tagged ``continuous`` belong to sustained sources; they can be
	dropped as a group with :meth:`discard_continuous` while one-shot notes
	are left to finish.
	"""

	def __init__ (self, clock: typing.Callable[[], float] = time.perf_counter) -> None:

		"""
		Parameters:
			clock: Monotonic time source in seconds.  Tests pass a manual clock
				and drive :meth:`process_due` directly.
		"""

		self.clock = clock
		self.queue: typing.List[ScheduledAction] = []
		self._counter = itertools.count()
		self._wake: typing.Optional[asyncio.Event] = None
		self.task: typing.Optional[asyncio.Task] = None
		self.running = False


	@property
	def pending (self) -> int:
		return len(self.queue)


	def schedule (self, delay: float, action: ActionType, continuous: bool = False, label: str = "") -> ScheduledAction:

		"""
		Queue ``action`` to run ``delay`` seconds from now.

		Raises ``ValueError`` for negative delays.
		"""

		if delay < 0:
			raise ValueError("Schedule delay cannot be negative")

		scheduled = ScheduledAction(
			fire_time = self.clock() + delay,
			sequence = next(self._counter),
			action = action,
			continuous = continuous,
			label = label
		)

		heapq.heappush(self.queue, scheduled)

		if self._wake is not None:
			self._wake.set()

		return scheduled


	def discard_continuous (self) -> int:

		"""
		Drop every pending continuous action and return how many were removed.
		"""

		kept = [scheduled for scheduled in self.queue if not scheduled.continuous]
		removed = len(self.queue) - len(kept)

		if removed:
			heapq.heapify(kept)
			self.queue = kept
			logger.debug(f"Discarded {removed} continuous actions, {len(kept)} still pending")

		return removed


	def clear (self) -> None:

		"""Drop every pending action."""

		self.queue = []
		self._counter = itertools.count()


	def process_due (self, now: typing.Optional[float] = None) -> int:

		"""
		Run every action whose fire time is at or before ``now``.

		Late actions run immediately.  A failing action is logged and does not
		prevent the rest from running.  Returns the number of actions run.
		"""

		if now is None:
			now = self.clock()

		fired = 0

		while self.queue and self.queue[0].fire_time <= now:

			scheduled = heapq.heappop(self.queue)
			fired += 1

			try:
				scheduled.action()
			except Exception:
				logger.exception(f"Scheduled action {scheduled.label or scheduled.action!r} failed")

		return fired


	async def start (self) -> None:

		"""Start the drive loop on the running event loop."""

		if self.running:
			return

		self._wake = asyncio.Event()
		self.running = True
		self.task = asyncio.create_task(self._run_loop())

		logger.debug("Scheduler started")


	async def stop (self) -> None:

		"""
		Stop the drive loop.  Pending actions stay queued until :meth:`clear`.
		"""

		if not self.running:
			return

		self.running = False

		if self._wake is not None:
			self._wake.set()

		if self.task:
			await self.task
			self.task = None

		self._wake = None

		logger.debug("Scheduler stopped")


	async def _run_loop (self) -> None:

		"""Sleep until the next action is due or a new one arrives, then fire."""

		assert self._wake is not None, "Wake event must exist while the loop runs"

		while self.running:

			self.process_due()

			self._wake.clear()

			timeout: typing.Optional[float] = None

			if self.queue:
				timeout = max(0.0, self.queue[0].fire_time - self.clock())

			try:
				await asyncio.wait_for(self._wake.wait(), timeout=timeout)
			except asyncio.TimeoutError:
				pass
