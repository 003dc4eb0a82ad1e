# Copyright 2026 gRPC authors.
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
"""A barrier collapsing several asynchronous confirmations into one signal."""

import asyncio
import logging
from typing import Awaitable, List

_LOGGER = logging.getLogger(__name__)


class CompletionBarrier:
    """Fires once a known number of independent confirmations have arrived.

    Some test cases issue several RPCs at once and can only pass after each
    of them has been observed to behave correctly, in whatever order the
    observations happen to complete. The barrier is created with the number
    of expected confirmations and fires exactly once: successfully when the
    last confirmation arrives, or with the first failure reported before
    that. Anything reported after the barrier has fired is ignored.

    Decrements are not guarded by a lock; all of them must happen on the
    event loop thread that created the barrier.
    """

    _remaining: int
    _fired: asyncio.Future
    _tasks: List[asyncio.Task]

    def __init__(self, count: int):
        if count < 1:
            raise ValueError(f"expected a positive count, got {count}")
        self._remaining = count
        self._fired = asyncio.get_running_loop().create_future()
        self._tasks = []

    @property
    def remaining(self) -> int:
        return self._remaining

    def done(self) -> bool:
        return self._fired.done()

    def signal(self) -> None:
        """Records one successful confirmation."""
        if self._fired.done():
            return
        self._remaining -= 1
        if self._remaining == 0:
            self._fired.set_result(None)

    def fail(self, error: BaseException) -> None:
        """Fires the barrier with error unless it has already fired."""
        if self._fired.done():
            _LOGGER.debug("Ignoring failure after barrier fired: %r", error)
            return
        self._fired.set_exception(error)

    def confirm(self, confirmation: Awaitable) -> asyncio.Task:
        """Schedules a confirmation; its outcome is reported to the barrier."""
        task = asyncio.ensure_future(self._report(confirmation))
        self._tasks.append(task)
        return task

    async def _report(self, confirmation: Awaitable) -> None:
        try:
            await confirmation
        except asyncio.CancelledError:
            raise
        except Exception as error:  # pylint: disable=broad-except
            self.fail(error)
        else:
            self.signal()

    async def wait(self) -> None:
        """Waits for the barrier to fire, then cancels leftover confirmations.

        Raises:
          The first exception reported through fail, if any.
        """
        try:
            await self._fired
        finally:
            for task in self._tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*self._tasks, return_exceptions=True)
