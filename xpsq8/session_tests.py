import asyncio
import unittest

from xpsq8.errors import (
  ArityMismatchError,
  ConnectionClosedError,
  InvalidArgumentError,
  MalformedReplyError,
  NotAllowedError,
  NotConnectedError,
  ReadTimeoutError,
  SessionBusyError,
  TypeMismatchError,
  WriteTimeoutError,
)
from xpsq8.io.mock_tests import MockIO
from xpsq8.protocol.codec import DOUBLE, INT, STRING, Command
from xpsq8.session import CommandSession, SessionState


class CommandSessionTests(unittest.IsolatedAsyncioTestCase):
  """Tests for CommandSession against a mock IO."""

  async def asyncSetUp(self):
    self.session = CommandSession(host="mock")
    self.io = MockIO()
    self.session.io = self.io
    await self.session.setup()

  async def asyncTearDown(self):
    await self.session.stop()

  async def test_execute(self):
    self.io.queue_reply(b"0,EndOfAPI")
    await self.session.execute(Command("GroupMoveRelative", ["M.X", 5.0]))
    self.assertEqual(self.io.written, [b"GroupMoveRelative(M.X,5.0)"])
    self.assertEqual(self.session.state, SessionState.IDLE)

  async def test_execute_reading(self):
    self.io.queue_reply(b"0,12.345,EndOfAPI")
    values = await self.session.execute_reading(
      Command("GroupPositionCurrentGet", ["M.X", DOUBLE])
    )
    self.assertEqual(values, [12.345])
    self.assertEqual(self.io.written, [b"GroupPositionCurrentGet(M.X,double *)"])

  async def test_execute_reading_explicit_kinds(self):
    self.io.queue_reply(b"0,3,1.5,EndOfAPI")
    values = await self.session.execute_reading(Command("F", []), kinds=[INT, DOUBLE])
    self.assertEqual(values, [3, 1.5])

  async def test_not_allowed(self):
    self.io.queue_reply(b"-22,EndOfAPI")
    with self.assertRaises(NotAllowedError) as ctx:
      await self.session.execute(Command("GroupKill", ["M"]))
    self.assertEqual(ctx.exception.code, -22)
    self.assertEqual(ctx.exception.command, "GroupKill(M)")
    # a refused command leaves the session usable
    self.assertEqual(self.session.state, SessionState.IDLE)

  async def test_error_code_checked_before_decoding(self):
    self.io.queue_reply(b"-22,EndOfAPI")
    with self.assertRaises(NotAllowedError):
      await self.session.execute_reading(Command("GroupPositionCurrentGet", ["M.X", DOUBLE]))

    # fields that would not decode are ignored when the code is non-zero
    self.io.queue_reply(b"-17,garbage,more,EndOfAPI")
    with self.assertRaises(NotAllowedError) as ctx:
      await self.session.execute_reading(Command("GroupPositionCurrentGet", ["M.X", DOUBLE]))
    self.assertEqual(ctx.exception.code, -17)

  async def test_execute_with_unexpected_fields(self):
    self.io.queue_reply(b"0,1.0,EndOfAPI")
    with self.assertRaises(ArityMismatchError):
      await self.session.execute(Command("GroupKill", ["M"]))

  async def test_type_mismatch(self):
    self.io.queue_reply(b"0,3.14x,EndOfAPI")
    with self.assertRaises(TypeMismatchError) as ctx:
      await self.session.execute_reading(Command("GroupPositionCurrentGet", ["M.X", DOUBLE]))
    self.assertEqual(ctx.exception.index, 0)

  async def test_malformed_reply(self):
    self.io.queue_reply(b"abc,EndOfAPI")
    with self.assertRaises(MalformedReplyError):
      await self.session.execute(Command("GroupKill", ["M"]))

  async def test_non_ascii_reply(self):
    self.io.queue_reply(b"0,\xff,EndOfAPI")
    with self.assertRaises(MalformedReplyError):
      await self.session.execute_reading(Command("F", [STRING]))

  async def test_trailing_string_keeps_separators(self):
    self.io.queue_reply(b"0,Positioner error, see manual,EndOfAPI")
    values = await self.session.execute_reading(Command("ErrorStringGet", [-17, STRING]))
    self.assertEqual(values, ["Positioner error, see manual"])

  async def test_invalid_argument_before_io(self):
    with self.assertRaises(InvalidArgumentError):
      await self.session.execute(Command("GroupKill", ["G" * 251]))
    self.assertEqual(self.io.io_calls, 0)
    self.assertEqual(self.session.state, SessionState.IDLE)

  async def test_name_of_250_characters(self):
    self.io.queue_reply(b"0,EndOfAPI")
    await self.session.execute(Command("GroupKill", ["G" * 250]))
    self.assertEqual(self.io.io_calls, 2)

  async def test_read_timeout_desynchronizes(self):
    with self.assertRaises(ReadTimeoutError):
      await self.session.execute(Command("GroupKill", ["M"]))
    self.assertEqual(self.session.state, SessionState.DESYNCHRONIZED)
    self.assertFalse(self.io.connected)

    # a late reply must not be matched to the next command
    self.io.queue_reply(b"0,EndOfAPI")
    with self.assertRaises(NotConnectedError):
      await self.session.execute(Command("GroupKill", ["M"]))
    self.assertEqual(len(self.io.written), 1)

  async def test_write_timeout_desynchronizes(self):
    self.io.write_error = WriteTimeoutError("timed out")
    with self.assertRaises(WriteTimeoutError):
      await self.session.execute(Command("GroupKill", ["M"]))
    self.assertEqual(self.session.state, SessionState.DESYNCHRONIZED)
    self.assertFalse(self.io.connected)
    self.assertEqual(self.io.written, [])

    self.io.write_error = None
    self.io.queue_reply(b"0,EndOfAPI")
    with self.assertRaises(NotConnectedError):
      await self.session.execute(Command("GroupKill", ["M"]))
    self.assertEqual(self.io.io_calls, 0)

    await self.session.reconnect()
    self.assertEqual(self.session.state, SessionState.IDLE)
    await self.session.execute(Command("GroupKill", ["M"]))
    self.assertEqual(self.io.written, [b"GroupKill(M)"])

  async def test_connection_lost_while_writing(self):
    self.io.write_error = ConnectionClosedError("reset by peer")
    with self.assertRaises(ConnectionClosedError):
      await self.session.execute_reading(Command("GroupPositionCurrentGet", ["M.X", DOUBLE]))
    self.assertEqual(self.session.state, SessionState.DESYNCHRONIZED)
    with self.assertRaises(NotConnectedError):
      await self.session.execute(Command("GroupKill", ["M"]))

  async def test_reconnect(self):
    self.io.read_error = ReadTimeoutError("timed out")
    with self.assertRaises(ReadTimeoutError):
      await self.session.execute(Command("GroupKill", ["M"]))
    self.io.read_error = None

    await self.session.reconnect()
    self.assertEqual(self.session.state, SessionState.IDLE)
    self.assertEqual(self.io.setup_count, 2)

    self.io.queue_reply(b"0,EndOfAPI")
    await self.session.execute(Command("GroupKill", ["M"]))

  async def test_cancellation_desynchronizes(self):
    self.io.read_delay = 1
    task = asyncio.create_task(self.session.execute(Command("GroupKill", ["M"])))
    await asyncio.sleep(0.05)
    task.cancel()
    with self.assertRaises(asyncio.CancelledError):
      await task
    self.assertEqual(self.session.state, SessionState.DESYNCHRONIZED)
    with self.assertRaises(NotConnectedError):
      await self.session.execute(Command("GroupKill", ["M"]))

  async def test_not_connected_after_stop(self):
    await self.session.stop()
    self.assertEqual(self.session.state, SessionState.DISCONNECTED)
    with self.assertRaises(NotConnectedError):
      await self.session.execute(Command("GroupKill", ["M"]))
    self.assertEqual(self.io.io_calls, 0)

  async def test_disconnect(self):
    await self.session.disconnect()
    with self.assertRaises(NotConnectedError):
      await self.session.execute_reading(Command("GroupPositionCurrentGet", ["M.X", DOUBLE]))

  async def test_concurrent_commands_are_serialized(self):
    self.io.read_delay = 0.01
    self.io.handler = lambda data: b"0,EndOfAPI"

    await asyncio.gather(*[
      self.session.execute(Command("GroupKill", [f"G{i}"])) for i in range(5)
    ])

    kinds = [kind for kind, _ in self.io.events]
    self.assertEqual(kinds, ["write", "read"] * 5)

  async def test_busy_session_rejects(self):
    session = CommandSession(host="mock", wait_if_busy=False)
    io = MockIO(handler=lambda data: b"0,EndOfAPI", read_delay=0.1)
    session.io = io
    await session.setup()

    first = asyncio.create_task(session.execute(Command("GroupKill", ["A"])))
    await asyncio.sleep(0.02)
    with self.assertRaises(SessionBusyError):
      await session.execute(Command("GroupKill", ["B"]))
    await first
    self.assertEqual(io.written, [b"GroupKill(A)"])
    await session.stop()

  async def test_serialize(self):
    self.assertEqual(
      self.session.serialize(),
      {"type": "CommandSession", "io": {"type": "MockIO"}, "wait_if_busy": True},
    )
