"""Cancellable periodic metrics poller.

``MonitoringPoller`` owns at most one ``asyncio.Task``.  While active, the
task waits one interval, fetches a sample and hands it to ``on_sample``,
then repeats.  ``stop()`` cancels the task at once; a fetch that is in
flight when the task is cancelled never delivers its sample.

Start and stop are idempotent.  Because ``stop()`` drops the task reference
synchronously, a stop immediately followed by a start always leaves exactly
one live task.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from devops_demo.domain.enums import MonitoringStatus
from devops_demo.domain.exceptions import MonitoringFetchError
from devops_demo.domain.values import MonitoringSample

logger = logging.getLogger(__name__)

FetchFn = Callable[[], Awaitable[MonitoringSample]]
SampleCallback = Callable[[MonitoringSample], None]
ErrorCallback = Callable[[MonitoringFetchError], None]


class MonitoringPoller:
    """Periodic task that refreshes the monitoring sample.

    Parameters
    ----------
    fetch:
        Coroutine function returning a ``MonitoringSample``.
    on_sample:
        Called with every fetched sample.
    interval:
        Seconds between the start of one wait and the next fetch.
    on_error:
        Called with a ``MonitoringFetchError`` when a fetch fails.  The
        poller keeps running and the caller's last sample stays in place.
    sleep:
        Coroutine function used for the interval wait.
    """

    def __init__(
        self,
        fetch: FetchFn,
        on_sample: SampleCallback,
        interval: float = 5.0,
        on_error: ErrorCallback | None = None,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be > 0, got {interval}")
        self._fetch = fetch
        self._on_sample = on_sample
        self._on_error = on_error
        self._interval = interval
        self._sleep = sleep or asyncio.sleep
        self._task: asyncio.Task[None] | None = None
        self._cancelled: list[asyncio.Task[None]] = []
        self.fetch_count = 0
        self.sample_count = 0
        self.error_count = 0

    # -- properties -----------------------------------------------------------

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def status(self) -> MonitoringStatus:
        return MonitoringStatus.ACTIVE if self.is_active else MonitoringStatus.STOPPED

    @property
    def is_active(self) -> bool:
        return self._task is not None and not self._task.done()

    # -- lifecycle ------------------------------------------------------------

    def start(self) -> bool:
        """Start polling.  Returns ``False`` if already active.

        Must be called from inside a running event loop.
        """
        if self.is_active:
            return False
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name="monitoring-poller"
        )
        logger.info("Monitoring started (interval=%.3fs)", self._interval)
        return True

    def stop(self) -> bool:
        """Cancel the polling task.  Returns ``False`` if not active."""
        task = self._task
        self._task = None
        if task is None or task.done():
            return False
        task.cancel()
        self._cancelled = [t for t in self._cancelled if not t.done()]
        self._cancelled.append(task)
        logger.info("Monitoring stopped after %d sample(s)", self.sample_count)
        return True

    def toggle(self) -> MonitoringStatus:
        """Flip between active and stopped; return the new status."""
        if self.is_active:
            self.stop()
        else:
            self.start()
        return self.status

    async def aclose(self) -> None:
        """Stop polling and wait until every cancelled task has finished."""
        self.stop()
        pending = [t for t in self._cancelled if not t.done()]
        self._cancelled = []
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    # -- loop -----------------------------------------------------------------

    async def _run(self) -> None:
        while True:
            await self._sleep(self._interval)
            self.fetch_count += 1
            try:
                sample = await self._fetch()
            except Exception as exc:
                self.error_count += 1
                error = (
                    exc if isinstance(exc, MonitoringFetchError)
                    else MonitoringFetchError(f"Error fetching monitoring data: {exc}")
                )
                logger.warning("%s", error)
                if self._on_error is not None:
                    self._on_error(error)
                continue
            self.sample_count += 1
            self._on_sample(sample)
