from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime

from discord.ext import tasks

from .models import Giveaway, utc_now
from .storage import GiveawayStorage

log = logging.getLogger(__name__)

Finalizer = Callable[[Giveaway], Awaitable[bool]]


class SweepScheduler:
    """Finds expired giveaways every ``interval`` seconds and finalizes them.

    Due giveaways go onto a queue drained by ``workers`` tasks, so several
    giveaways end concurrently while each one is processed start to finish by a
    single worker. A giveaway stays claimed from the moment it is queued until
    its finalizer returns, so overlapping ticks never queue it twice.
    """

    def __init__(
        self,
        storage: GiveawayStorage,
        finalize: Finalizer,
        *,
        interval: float = 1.0,
        workers: int = 4,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if workers < 1:
            raise ValueError("At least one worker is required")
        self._storage = storage
        self._finalize = finalize
        self._worker_count = workers
        self._clock = clock
        self._queue: asyncio.Queue[Giveaway] = asyncio.Queue()
        self._workers: list[asyncio.Task] = []
        self._claimed: set[int] = set()
        self._sweep = tasks.loop(seconds=interval)(self._run_sweep)

    @property
    def running(self) -> bool:
        return bool(self._workers)

    @property
    def claimed(self) -> frozenset[int]:
        return frozenset(self._claimed)

    def start(self) -> None:
        if self.running:
            return
        self._workers = [
            asyncio.create_task(self._work(index), name=f"giveaway-worker-{index}")
            for index in range(self._worker_count)
        ]
        self._sweep.start()
        log.info("Giveaway sweep started with %s workers", self._worker_count)

    async def tick(self) -> int:
        """Queue every expired, unclaimed giveaway; returns how many were queued."""
        queued = 0
        for giveaway in self._storage.list_expired(self._clock()):
            if giveaway.message_id is None or giveaway.message_id in self._claimed:
                continue
            self._claimed.add(giveaway.message_id)
            self._queue.put_nowait(giveaway)
            queued += 1
        if queued:
            log.debug("Queued %s expired giveaways", queued)
        return queued

    async def _run_sweep(self) -> None:
        try:
            await self.tick()
        except Exception as exc:  # pylint: disable=broad-except
            log.exception("Exception in ending giveaways: %s", exc)

    async def _work(self, index: int) -> None:
        while True:
            giveaway = await self._queue.get()
            try:
                ok = await self._finalize(giveaway)
                if not ok:
                    log.warning(
                        "Worker %s could not fully finalize giveaway %s",
                        index,
                        giveaway.message_id,
                    )
            except Exception as exc:  # pylint: disable=broad-except
                log.exception(
                    "Worker %s failed on giveaway %s: %s",
                    index,
                    giveaway.message_id,
                    exc,
                )
            finally:
                self._claimed.discard(giveaway.message_id)
                self._queue.task_done()

    async def shutdown(self, timeout: float = 10.0) -> None:
        """Stop sweeping, let queued work finish for up to ``timeout`` seconds,
        then cancel the workers.

        Giveaways still queued when the workers are cancelled have not been
        removed from storage and are picked up again on the next start.
        """
        self._sweep.cancel()
        if not self._workers:
            return
        try:
            await asyncio.wait_for(self._queue.join(), timeout=timeout)
        except TimeoutError:
            log.warning(
                "Giveaway sweep shutdown timed out with %s giveaways pending",
                self._queue.qsize(),
            )
        for worker in self._workers:
            worker.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        while not self._queue.empty():
            giveaway = self._queue.get_nowait()
            self._claimed.discard(giveaway.message_id)
            self._queue.task_done()
        log.info("Giveaway sweep stopped")


__all__ = ["Finalizer", "SweepScheduler"]
