# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Background task that periodically deletes expired cache rows."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import timedelta
from typing import Any

logger = logging.getLogger(__name__)


class ExpirySweeper:
    """Runs a sweep coroutine on a fixed interval until stopped.

    The first tick happens one interval after start(). A failing tick is
    logged and the loop carries on with the next one; there is no caller to
    report it to.

    Usage::

        sweeper = ExpirySweeper(delete_expired, timedelta(seconds=60))
        sweeper.start()
        # ... adapter serves requests ...
        await sweeper.stop()
    """

    def __init__(
        self,
        sweep: Callable[[], Awaitable[int]],
        interval: timedelta,
        name: str = "rethinkbox-sweeper",
    ) -> None:
        if interval <= timedelta(0):
            raise ValueError(f"Sweep interval must be positive, got {interval}")
        self._sweep = sweep
        self._interval = interval
        self._name = name
        self._task: asyncio.Task[Any] | None = None

    @property
    def interval(self) -> timedelta:
        return self._interval

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the sweep loop on the running event loop. No-op if already running."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run_loop(), name=self._name)
        self._task.add_done_callback(self._loop_done_callback)

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)

    async def tick(self) -> int:
        """Run one sweep, returning the number of rows deleted (0 on failure)."""
        try:
            deleted = await self._sweep()
        except Exception:
            logger.exception("Expiry sweep failed; retrying in %s", self._interval)
            return 0
        if deleted:
            logger.debug("Expiry sweep removed %d expired rows", deleted)
        return deleted

    async def _run_loop(self) -> None:
        seconds = self._interval.total_seconds()
        while True:
            await asyncio.sleep(seconds)
            await self.tick()

    @staticmethod
    def _loop_done_callback(task: asyncio.Task[Any]) -> None:
        if not task.cancelled():
            exc = task.exception()
            if exc is not None:
                logger.error("Expiry sweep loop stopped: %s", exc, exc_info=exc)
