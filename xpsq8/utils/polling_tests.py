import asyncio
import time
import unittest

from xpsq8.errors import (
  NotAllowedError,
  NotConnectedError,
  PollingTimeoutError,
  ReadTimeoutError,
)
from xpsq8.utils.polling import wait_for


class WaitForTests(unittest.IsolatedAsyncioTestCase):
  async def test_returns_when_condition_holds(self):
    calls = 0

    async def poll():
      nonlocal calls
      calls += 1
      return calls == 3

    await wait_for(poll, interval=0.01, timeout=1)
    self.assertEqual(calls, 3)

  async def test_timeout(self):
    calls = 0

    async def poll():
      nonlocal calls
      calls += 1
      return False

    start = time.monotonic()
    with self.assertRaises(PollingTimeoutError):
      await wait_for(poll, interval=0.05, timeout=0.2)
    elapsed = time.monotonic() - start
    self.assertGreaterEqual(calls, 3)
    self.assertLess(elapsed, 0.3)

  async def test_timeout_is_a_timeout_error(self):
    async def poll():
      return False

    with self.assertRaises(TimeoutError):
      await wait_for(poll, interval=0.01, timeout=0.03)

  async def test_errors_are_retried(self):
    calls = 0

    async def poll():
      nonlocal calls
      calls += 1
      if calls == 1:
        raise ReadTimeoutError("dropped read")
      if calls == 2:
        raise NotAllowedError(-22)
      return True

    await wait_for(poll, interval=0.01, timeout=1)
    self.assertEqual(calls, 3)

  async def test_last_error_is_cause(self):
    async def poll():
      raise NotAllowedError(-22)

    with self.assertRaises(PollingTimeoutError) as ctx:
      await wait_for(poll, interval=0.01, timeout=0.05)
    self.assertIsInstance(ctx.exception.__cause__, NotAllowedError)

  async def test_not_connected_propagates(self):
    calls = 0

    async def poll():
      nonlocal calls
      calls += 1
      raise NotConnectedError("not connected")

    with self.assertRaises(NotConnectedError):
      await wait_for(poll, interval=0.01, timeout=1)
    self.assertEqual(calls, 1)

  async def test_other_errors_propagate(self):
    async def poll():
      raise KeyError("bug")

    with self.assertRaises(KeyError):
      await wait_for(poll, interval=0.01, timeout=1)

  async def test_custom_retry_on(self):
    async def poll():
      raise NotAllowedError(-22)

    with self.assertRaises(NotAllowedError):
      await wait_for(poll, interval=0.01, timeout=1, retry_on=(ReadTimeoutError,))

  async def test_in_flight_poll_is_not_cancelled(self):
    finished = asyncio.Event()

    async def poll():
      await asyncio.sleep(0.2)
      finished.set()
      return True

    start = time.monotonic()
    with self.assertRaises(PollingTimeoutError):
      await wait_for(poll, interval=0.01, timeout=0.05)
    self.assertLess(time.monotonic() - start, 0.15)
    self.assertFalse(finished.is_set())

    await asyncio.wait_for(finished.wait(), timeout=1)
    self.assertTrue(finished.is_set())

  async def test_description_in_message(self):
    async def poll():
      return False

    with self.assertRaises(PollingTimeoutError) as ctx:
      await wait_for(poll, interval=0.01, timeout=0.02, description="group M ready")
    self.assertIn("group M ready", str(ctx.exception))
