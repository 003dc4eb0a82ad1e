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
"""Tests of the completion barrier."""

import asyncio
import logging
import unittest

from interop_client import completion
from tests._test_base import AioTestBase


class CompletionBarrierTest(AioTestBase):
    async def test_fires_after_last_signal(self):
        barrier = completion.CompletionBarrier(3)
        barrier.signal()
        barrier.signal()
        self.assertFalse(barrier.done())
        self.assertEqual(1, barrier.remaining)
        barrier.signal()
        self.assertTrue(barrier.done())
        await barrier.wait()

    async def test_signals_after_firing_are_ignored(self):
        barrier = completion.CompletionBarrier(1)
        barrier.signal()
        barrier.signal()
        barrier.fail(ValueError("late failure"))
        self.assertEqual(0, barrier.remaining)
        await barrier.wait()

    async def test_first_failure_wins(self):
        barrier = completion.CompletionBarrier(2)
        barrier.fail(ValueError("first"))
        barrier.fail(ValueError("second"))
        with self.assertRaisesRegex(ValueError, "first"):
            await barrier.wait()

    async def test_confirmations_complete_in_any_order(self):
        barrier = completion.CompletionBarrier(3)
        order = []

        async def confirmation(delay, name):
            await asyncio.sleep(delay)
            order.append(name)

        barrier.confirm(confirmation(0.03, "slow"))
        barrier.confirm(confirmation(0.0, "fast"))
        barrier.confirm(confirmation(0.01, "medium"))
        await barrier.wait()
        self.assertEqual(["fast", "medium", "slow"], order)

    async def test_failed_confirmation_cancels_the_rest(self):
        barrier = completion.CompletionBarrier(2)
        never = asyncio.Event()

        async def failing():
            raise ValueError("expected code OK, got UNKNOWN")

        pending = barrier.confirm(never.wait())
        barrier.confirm(failing())
        with self.assertRaisesRegex(ValueError, "expected code OK"):
            await barrier.wait()
        self.assertTrue(pending.cancelled())
        self.assertEqual(2, barrier.remaining)

    async def test_rejects_non_positive_count(self):
        with self.assertRaises(ValueError):
            completion.CompletionBarrier(0)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    unittest.main(verbosity=2)
