import asyncio
import logging
import socket
from typing import Optional

from xpsq8.errors import (
  ConnectionClosedError,
  CouldNotConfigureError,
  CouldNotConnectError,
  CouldNotCreateSocketError,
  ReadTimeoutError,
  WriteTimeoutError,
)
from xpsq8.io.io import LOG_LEVEL_IO, IOBase

logger = logging.getLogger(__name__)


class Socket(IOBase):
  """IO for reading/writing to a TCP socket.

  Reads are framed by a separator, not by TCP segments: bytes received after the separator are
  kept in a buffer and returned by the next read.
  """

  # the XPS sends its replies in packets of at most 1024 bytes
  CHUNK_SIZE = 1024

  def __init__(
    self,
    host: str,
    port: int,
    connect_timeout: float = 5.0,
    read_timeout: float = 5.0,
    write_timeout: float = 5.0,
  ):
    self._host = host
    self._port = int(port)
    self._connect_timeout = connect_timeout
    self._read_timeout = read_timeout
    self._write_timeout = write_timeout
    self._reader: Optional[asyncio.StreamReader] = None
    self._writer: Optional[asyncio.StreamWriter] = None
    self._read_buffer = bytearray()
    self._read_lock = asyncio.Lock()
    self._write_lock = asyncio.Lock()

  @property
  def host(self) -> str:
    return self._host

  @property
  def port(self) -> int:
    return self._port

  @property
  def connected(self) -> bool:
    return self._writer is not None

  async def setup(self):
    await self._connect()

  async def _connect(self):
    try:
      sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    except OSError as e:
      raise CouldNotCreateSocketError(f"Could not create socket: {e}") from e

    try:
      sock.setblocking(False)
      sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
    except OSError as e:
      sock.close()
      raise CouldNotConfigureError(f"Could not configure socket: {e}") from e

    loop = asyncio.get_running_loop()
    try:
      await asyncio.wait_for(
        loop.sock_connect(sock, (self._host, self._port)), timeout=self._connect_timeout
      )
    except asyncio.TimeoutError as e:
      sock.close()
      raise CouldNotConnectError(
        f"Could not connect to {self._host}:{self._port} within {self._connect_timeout}s"
      ) from e
    except OSError as e:
      sock.close()
      raise CouldNotConnectError(f"Could not connect to {self._host}:{self._port}: {e}") from e

    try:
      self._reader, self._writer = await asyncio.open_connection(sock=sock)
    except OSError as e:
      sock.close()
      raise CouldNotConfigureError(f"Could not open stream on socket: {e}") from e

    self._read_buffer = bytearray()
    logger.info("Connected to socket %s:%s", self._host, self._port)

  async def stop(self):
    """Close the connection. Safe to call more than once, and after errors."""
    self._reader = None
    self._read_buffer.clear()
    writer, self._writer = self._writer, None
    if writer is None:
      return

    logger.info("Closing connection to socket %s:%s", self._host, self._port)
    try:
      # unsent data left by a timed out write would keep close() waiting for the peer
      if writer.transport.get_write_buffer_size() > 0:
        writer.transport.abort()
      else:
        writer.close()
      await writer.wait_closed()
    except OSError as e:
      logger.warning("Error while closing socket connection: %s", e)

  def serialize(self):
    return {
      "type": "Socket",
      "host": self._host,
      "port": self._port,
      "connect_timeout": self._connect_timeout,
      "read_timeout": self._read_timeout,
      "write_timeout": self._write_timeout,
    }

  async def write(self, data: bytes, timeout: Optional[float] = None) -> None:
    """Write all of `data`. Does not retry on timeouts or resets."""
    if self._writer is None:
      raise ConnectionClosedError(f"Socket {self._host}:{self._port} is not connected")

    timeout = self._write_timeout if timeout is None else timeout
    async with self._write_lock:
      logger.log(LOG_LEVEL_IO, "[%s:%d] write %s", self._host, self._port, data)
      try:
        self._writer.write(data)
        await asyncio.wait_for(self._writer.drain(), timeout=timeout)
      except asyncio.TimeoutError as e:
        logger.error("write to %s:%d timed out after %ss", self._host, self._port, timeout)
        raise WriteTimeoutError(f"Write timed out after {timeout}s") from e
      except OSError as e:
        logger.error("write error: %r", e)
        raise ConnectionClosedError(f"Connection lost while writing: {e}") from e

  async def readuntil(self, separator: bytes, timeout: Optional[float] = None) -> bytes:
    """Read until `separator` has been received, and return the data including the separator.

    Raises:
      ReadTimeoutError: if the separator was not seen within the timeout. Data received so far
        stays buffered.
      ConnectionClosedError: if the peer closed the connection.
    """
    if self._reader is None:
      raise ConnectionClosedError(f"Socket {self._host}:{self._port} is not connected")

    timeout = self._read_timeout if timeout is None else timeout
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout

    async with self._read_lock:
      while True:
        idx = self._read_buffer.find(separator)
        if idx != -1:
          end = idx + len(separator)
          data = bytes(self._read_buffer[:end])
          del self._read_buffer[:end]
          logger.log(LOG_LEVEL_IO, "[%s:%d] read %s", self._host, self._port, data)
          return data

        remaining = deadline - loop.time()
        if remaining <= 0:
          raise ReadTimeoutError(f"No reply terminated by {separator!r} within {timeout}s")

        if self._reader is None:
          raise ConnectionClosedError(f"Socket {self._host}:{self._port} was closed while reading")
        try:
          chunk = await asyncio.wait_for(self._reader.read(self.CHUNK_SIZE), timeout=remaining)
        except asyncio.TimeoutError as e:
          raise ReadTimeoutError(f"No reply terminated by {separator!r} within {timeout}s") from e
        except OSError as e:
          logger.error("read error: %r", e)
          raise ConnectionClosedError(f"Connection lost while reading: {e}") from e

        if len(chunk) == 0:
          raise ConnectionClosedError(f"Connection closed by {self._host}:{self._port}")
        self._read_buffer.extend(chunk)
