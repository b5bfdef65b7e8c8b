import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional, Tuple, Type

from xpsq8.errors import NotConnectedError, PollingTimeoutError, XPSQ8Error

logger = logging.getLogger(__name__)


def _log_late_poll(task: "asyncio.Future[bool]"):
  if task.cancelled():
    return
  error = task.exception()
  if error is not None:
    logger.debug("Poll finished after the deadline with %r", error)


async def wait_for(
  poll: Callable[[], Awaitable[bool]],
  interval: float = 0.25,
  timeout: float = 10.0,
  retry_on: Tuple[Type[BaseException], ...] = (XPSQ8Error,),
  description: Optional[str] = None,
) -> None:
  """Poll until `poll` returns True.

  Errors in `retry_on` raised by a poll are logged and the poll is retried at the next interval.
  `NotConnectedError` is never retried: a session that has to be reconnected will not recover by
  itself. Any other error propagates immediately.

  The timeout is measured in wall clock time from the call, and also applies while a poll is in
  flight. A poll that is still running at the deadline is not cancelled, because cancelling a read
  would leave the session out of sync with the controller. It finishes in the background and its
  result is discarded.

  Args:
    poll: reads the instrument and returns whether the condition holds.
    interval: seconds between the end of one poll and the start of the next.
    timeout: seconds after which to give up.
    retry_on: error types that do not end the wait.
    description: what is being waited for, used in the error message.

  Raises:
    PollingTimeoutError: if the condition did not hold within `timeout`. If polls failed, the last
      error is the cause.
  """

  what = description or "condition"
  deadline = time.monotonic() + timeout
  last_error: Optional[BaseException] = None
  polls = 0

  while True:
    remaining = deadline - time.monotonic()
    if remaining <= 0:
      break

    task = asyncio.ensure_future(poll())
    done, _ = await asyncio.wait({task}, timeout=remaining)
    if not done:
      task.add_done_callback(_log_late_poll)
      break
    polls += 1

    try:
      if task.result():
        return
    except NotConnectedError:
      raise
    except retry_on as e:
      last_error = e
      logger.debug("Poll %d for %s failed, retrying: %r", polls, what, e)

    remaining = deadline - time.monotonic()
    if remaining <= 0:
      break
    await asyncio.sleep(min(interval, remaining))

  raise PollingTimeoutError(
    f"Timed out after {timeout} s waiting for {what} ({polls} polls)"
  ) from last_error
