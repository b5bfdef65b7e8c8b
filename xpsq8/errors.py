""" Errors raised while talking to an XPS-Q8 controller.

The errors are grouped by kind so that callers can decide what to do:

- setup errors (`XPSQ8ConnectionError`): the connect attempt failed, retry the whole connect.
- transport errors (`TransportError`): the session is unusable, reconnect.
- decode errors (`DecodeError`): the reply did not match what the command expects. This is a bug
  or a firmware/library version mismatch.
- protocol errors (`ProtocolError`): the firmware refused the command, or the session cannot send
  right now.
"""

from typing import Optional


class XPSQ8Error(Exception):
  """ Base class for all errors raised by xpsq8. """

  def __init__(self, message: str):
    super().__init__(message)
    self.message = message


# region setup errors


class XPSQ8ConnectionError(XPSQ8Error, ConnectionError):
  """ A connection to the controller could not be established. """


class CouldNotCreateSocketError(XPSQ8ConnectionError):
  """ The socket to communicate with the controller could not be created. """


class CouldNotConnectError(XPSQ8ConnectionError):
  """ The controller could not be reached at the given address and port. """


class CouldNotConfigureError(XPSQ8ConnectionError):
  """ The socket options (timeouts, blocking mode) could not be set. """


# endregion

# region transport errors


class TransportError(XPSQ8Error):
  """ Reading from or writing to an open connection failed. """


class WriteTimeoutError(TransportError, TimeoutError):
  """ The command could not be written within the write timeout. """


class ReadTimeoutError(TransportError, TimeoutError):
  """ No complete reply frame was received within the read timeout. """


class ConnectionClosedError(TransportError):
  """ The controller closed the connection. """


# endregion

# region decode errors


class DecodeError(XPSQ8Error):
  """ A reply could not be decoded. """


class MalformedReplyError(DecodeError):
  """ The reply does not start with an integer result code. """

  def __init__(self, raw: str):
    super().__init__(f"Malformed reply: {raw!r}")
    self.raw = raw


class ArityMismatchError(DecodeError):
  """ The reply has a different number of fields than the command expects. """

  def __init__(self, expected: int, actual: int):
    super().__init__(f"Expected {expected} field(s) in reply, got {actual}")
    self.expected = expected
    self.actual = actual


class TypeMismatchError(DecodeError):
  """ A reply field could not be converted to the requested kind. """

  def __init__(self, index: int, field: str, kind: str):
    super().__init__(f"Field {index} ({field!r}) is not a valid {kind}")
    self.index = index
    self.field = field
    self.kind = kind


# endregion


class InvalidArgumentError(XPSQ8Error, ValueError):
  """ A command argument cannot be represented on the wire. Raised before anything is sent. """


# region protocol errors


class ProtocolError(XPSQ8Error):
  """ Base class for errors at the command/reply level. """


class NotAllowedError(ProtocolError):
  """ The firmware replied with a non-zero result code.

  The code is kept verbatim. Use `XPSQ8Controller.get_error_string` to get the firmware's
  description.
  """

  def __init__(self, code: int, command: Optional[str] = None):
    message = f"Controller returned error code {code}"
    if command is not None:
      message += f" for {command}"
    super().__init__(message)
    self.code = code
    self.command = command


class SessionBusyError(ProtocolError):
  """ Another command is still awaiting its reply on this session. """


class NotConnectedError(ProtocolError):
  """ The session is not connected, or lost sync with the controller and must be reconnected. """


# endregion


class PollingTimeoutError(XPSQ8Error, TimeoutError):
  """ A polled condition did not become true within the allotted time. """


class UnknownStatusError(XPSQ8Error):
  """ The controller reported a status code that this library does not know. """

  def __init__(self, code: int):
    super().__init__(f"Unknown status code {code}")
    self.code = code
