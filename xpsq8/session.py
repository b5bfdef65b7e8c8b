"""The command session: the one object that talks to the controller.

The XPS protocol has no request ids. Replies are matched to commands by position only, so a
session never has more than one command in flight. If a command fails half way (timeout, lost
connection, cancellation) the position of the byte stream relative to the controller's replies is
unknown, and the session refuses further commands until `reconnect` is called.
"""

import asyncio
import enum
import logging
from typing import Any, List, Optional, Sequence

from xpsq8.errors import (
  MalformedReplyError,
  NotAllowedError,
  NotConnectedError,
  SessionBusyError,
)
from xpsq8.io.io import IOBase
from xpsq8.io.socket import Socket
from xpsq8.protocol.codec import (
  REPLY_TERMINATOR,
  STRING,
  Command,
  ValueKind,
  decode_fields,
  decode_reply,
)

logger = logging.getLogger(__name__)


class SessionState(enum.Enum):
  DISCONNECTED = "disconnected"
  IDLE = "idle"
  AWAITING_REPLY = "awaiting_reply"
  DESYNCHRONIZED = "desynchronized"


class CommandSession:
  """Sends commands to an XPS-Q8 controller and reads the replies.

  Commands are serialized with a lock. By default a caller that finds the session busy waits for
  its turn. With `wait_if_busy=False` it gets a `SessionBusyError` instead.
  """

  def __init__(
    self,
    host: str,
    port: int = 5001,
    connect_timeout: float = 5.0,
    read_timeout: float = 5.0,
    write_timeout: float = 5.0,
    wait_if_busy: bool = True,
  ):
    self.io: IOBase = Socket(
      host=host,
      port=port,
      connect_timeout=connect_timeout,
      read_timeout=read_timeout,
      write_timeout=write_timeout,
    )
    self.wait_if_busy = wait_if_busy
    self._lock = asyncio.Lock()
    self._state = SessionState.DISCONNECTED
    self._terminator = REPLY_TERMINATOR.encode("ascii")

  @property
  def state(self) -> SessionState:
    return self._state

  @property
  def connected(self) -> bool:
    return self._state in (SessionState.IDLE, SessionState.AWAITING_REPLY)

  async def setup(self):
    """Open the connection to the controller."""
    await self.io.setup()
    self._state = SessionState.IDLE

  async def stop(self):
    """Close the connection. Later commands raise `NotConnectedError`."""
    await self.io.stop()
    self._state = SessionState.DISCONNECTED

  async def disconnect(self):
    await self.stop()

  async def reconnect(self):
    """Close and reopen the connection. This is the only way out of a desynchronized state."""
    async with self._lock:
      logger.info("Reconnecting (state was %s)", self._state.value)
      await self.io.stop()
      self._state = SessionState.DISCONNECTED
      await self.io.setup()
      self._state = SessionState.IDLE

  def serialize(self) -> dict:
    return {
      "type": self.__class__.__name__,
      "io": self.io.serialize(),
      "wait_if_busy": self.wait_if_busy,
    }

  async def execute(self, command: Command) -> None:
    """Send a command that returns no values.

    Raises:
      NotAllowedError: if the controller replied with a non-zero code.
      ArityMismatchError: if the controller returned values anyway.
    """
    await self._transact(command, [])

  async def execute_reading(
    self,
    command: Command,
    kinds: Optional[Sequence[ValueKind]] = None,
  ) -> List[Any]:
    """Send a command and decode the values in its reply.

    Args:
      command: the command to send.
      kinds: the kinds of the values to read. Defaults to the output placeholders in `command`.

    Returns:
      The decoded values, one per kind.

    Raises:
      NotAllowedError: if the controller replied with a non-zero code. Fields are not decoded.
      DecodeError: if the reply does not have exactly one valid field per kind.
    """
    kinds = command.output_kinds if kinds is None else list(kinds)
    return await self._transact(command, kinds)

  async def _transact(self, command: Command, kinds: Sequence[ValueKind]) -> List[Any]:
    # validate and encode before touching the connection
    text = command.encode()
    data = text.encode("ascii")

    if not self.wait_if_busy and self._lock.locked():
      raise SessionBusyError(f"Cannot send {text}: another command is awaiting its reply")

    async with self._lock:
      self._ensure_connected()
      reply = await self._send_and_receive(text, data)

    try:
      raw = reply.decode("ascii")
    except UnicodeDecodeError as e:
      raise MalformedReplyError(repr(reply)) from e

    # a free-form string in last position may contain the separator
    max_fields = len(kinds) if len(kinds) > 0 and kinds[-1] is STRING else None
    code, fields = decode_reply(raw, max_fields=max_fields)
    if code != 0:
      logger.warning("%s returned error code %d", text, code)
      raise NotAllowedError(code, text)

    return decode_fields(fields, kinds)

  def _ensure_connected(self):
    if self._state == SessionState.DESYNCHRONIZED:
      raise NotConnectedError("Session lost sync with the controller, call `reconnect`.")
    if self._state != SessionState.IDLE:
      raise NotConnectedError("Session is not connected, call `setup`.")

  async def _send_and_receive(self, text: str, data: bytes) -> bytes:
    logger.debug("send %s", text)
    self._state = SessionState.AWAITING_REPLY
    try:
      await self.io.write(data)
      reply = await self.io.readuntil(self._terminator)
    except BaseException as e:
      self._state = SessionState.DESYNCHRONIZED
      logger.error("%s failed with %r, closing connection", text, e)
      await self.io.stop()
      raise
    self._state = SessionState.IDLE
    logger.debug("reply %s", reply)
    return reply
