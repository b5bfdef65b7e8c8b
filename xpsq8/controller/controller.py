import logging
import sys
from typing import Any, Dict, Iterable, NamedTuple, Optional, Union

from xpsq8.config import Config
from xpsq8.controller.group import StageGroup
from xpsq8.controller.status import ControllerStatus
from xpsq8.protocol.codec import DOUBLE, INT, STRING, UNSIGNED_SHORT, Command
from xpsq8.session import CommandSession
from xpsq8.utils.polling import wait_for

if sys.version_info < (3, 11):
  from typing_extensions import Self
else:
  from typing import Self

logger = logging.getLogger(__name__)


class MotionKernelTimeLoad(NamedTuple):
  """CPU load of the motion kernel, as fractions of the servo cycle."""

  cpu_total_load: float
  cpu_corrector_load: float
  cpu_profiler_load: float
  cpu_services_load: float


class XPSQ8Controller:
  """A Newport XPS-Q8 motion controller.

  Owns the `CommandSession` to the controller. Stage groups and stages made from this controller
  share that session.

  Example:
    >>> async with XPSQ8Controller(host="192.168.0.254") as xps:
    ...   group = xps.make_stage_group("M")
    ...   x = group.make_stage("X")
    ...   await group.initialize()
    ...   await group.search_for_home()
    ...   await x.move_relative(5.0)
    ...   print(await x.get_current_position())
  """

  def __init__(
    self,
    host: str,
    port: int = 5001,
    connect_timeout: float = 5.0,
    read_timeout: float = 5.0,
    write_timeout: float = 5.0,
    username: Optional[str] = None,
    password: Optional[str] = None,
    wait_if_busy: bool = True,
  ):
    """
    Args:
      host: IPv4 address or host name of the controller.
      port: TCP port of the command interface.
      connect_timeout: seconds to wait for the connection to be established.
      read_timeout: seconds to wait for a complete reply.
      write_timeout: seconds to wait for a command to be sent.
      username: if given, `Login` is sent during `setup`.
      password: the password for `username`.
      wait_if_busy: whether concurrent commands wait for their turn, or raise `SessionBusyError`.
    """

    self.session = CommandSession(
      host=host,
      port=port,
      connect_timeout=connect_timeout,
      read_timeout=read_timeout,
      write_timeout=write_timeout,
      wait_if_busy=wait_if_busy,
    )
    self.host = host
    self.port = port
    self.username = username
    self.password = password
    self._setup_finished = False

  @classmethod
  def from_config(cls, cfg: Config, **kwargs) -> "XPSQ8Controller":
    """Create a controller from the `connection` section of a config. `kwargs` take precedence."""

    conn = cfg.connection
    params: Dict[str, Any] = {
      "host": conn.host,
      "port": conn.port,
      "connect_timeout": conn.connect_timeout,
      "read_timeout": conn.read_timeout,
      "write_timeout": conn.write_timeout,
    }
    params.update(kwargs)
    if params["host"] is None:
      raise ValueError("No host given, and the config has no `connection.host`.")
    return cls(**params)

  @property
  def setup_finished(self) -> bool:
    return self._setup_finished

  async def setup(self):
    """Connect to the controller, and log in if credentials were given.

    The connection is closed again if the login fails.
    """
    await self.session.setup()
    await self._login_or_close()
    self._setup_finished = True
    logger.info("Connected to XPS-Q8 at %s:%d", self.host, self.port)

  async def stop(self):
    await self.session.stop()
    self._setup_finished = False

  async def reconnect(self):
    """Reopen the connection after a transport error. Logs in again if credentials were given."""
    await self.session.reconnect()
    await self._login_or_close()

  async def _login_or_close(self):
    if self.username is None:
      return
    try:
      await self.login(self.username, self.password or "")
    except BaseException:
      await self.session.stop()
      raise

  async def __aenter__(self) -> Self:
    await self.setup()
    return self

  async def __aexit__(self, exc_type, exc_value, traceback):
    await self.stop()

  def serialize(self) -> dict:
    return {
      "type": self.__class__.__name__,
      "session": self.session.serialize(),
      "username": self.username,
    }

  def make_stage_group(self, name: str) -> StageGroup:
    """Create a handle to a stage group defined on the controller, e.g. `"M"`."""
    return StageGroup(controller=self, name=name)

  # region GENERAL COMMANDS

  async def login(self, username: str, password: str) -> None:
    await self.session.execute(Command("Login", [username, password]))

  async def close_all_other_sockets(self) -> None:
    """Close all sockets to the controller except the one used by this session."""
    await self.session.execute(Command("CloseAllOtherSockets"))

  async def get_firmware_version(self) -> str:
    (version,) = await self.session.execute_reading(Command("FirmwareVersionGet", [STRING]))
    return version

  async def get_motion_kernel_time_load(self) -> MotionKernelTimeLoad:
    values = await self.session.execute_reading(
      Command("ControllerMotionKernelTimeLoadGet", [DOUBLE, DOUBLE, DOUBLE, DOUBLE])
    )
    return MotionKernelTimeLoad(*values)

  async def get_status(self) -> ControllerStatus:
    (code,) = await self.session.execute_reading(Command("ControllerStatusGet", [INT]))
    return ControllerStatus(code)

  async def read_status(self) -> ControllerStatus:
    """Like `get_status`, but reads the status latched by the firmware since the last read."""
    (code,) = await self.session.execute_reading(Command("ControllerStatusRead", [INT]))
    return ControllerStatus(code)

  async def get_status_string(self, status: Union[ControllerStatus, int]) -> str:
    code = status.code if isinstance(status, ControllerStatus) else status
    (text,) = await self.session.execute_reading(
      Command("ControllerStatusStringGet", [code, STRING])
    )
    return text

  async def get_elapsed_time(self) -> float:
    """Seconds since the controller was powered on."""
    (elapsed,) = await self.session.execute_reading(Command("ElapsedTimeGet", [DOUBLE]))
    return elapsed

  async def get_error_string(self, code: int) -> str:
    """The firmware's description of an error code, such as `NotAllowedError.code`."""
    (text,) = await self.session.execute_reading(Command("ErrorStringGet", [code, STRING]))
    return text

  async def get_hardware_date_and_time(self) -> str:
    (text,) = await self.session.execute_reading(Command("HardwareDateAndTimeGet", [STRING]))
    return text

  async def get_digital_gpio(self, name: str) -> int:
    """Read a digital GPIO, e.g. `"GPIO1.DI"`, as a bit mask."""
    (value,) = await self.session.execute_reading(
      Command("GPIODigitalGet", [name, UNSIGNED_SHORT])
    )
    return value

  async def kill_all(self) -> None:
    """Kill all groups. All positioners are left not initialized."""
    await self.session.execute(Command("KillAll"))

  async def reboot(self) -> None:
    await self.session.execute(Command("Reboot"))

  async def restart_application(self) -> None:
    await self.session.execute(Command("RestartApplication"))

  # endregion

  async def wait_for_status(
    self,
    statuses: Iterable[Union[ControllerStatus, int]],
    interval: float = 0.25,
    timeout: float = 10.0,
  ) -> None:
    """Poll `ControllerStatusGet` until it returns one of `statuses`.

    Failed reads are retried until the timeout, see `xpsq8.utils.wait_for`.

    Raises:
      PollingTimeoutError: if none of the statuses was seen within `timeout` seconds.
    """

    codes = {s.code if isinstance(s, ControllerStatus) else s for s in statuses}

    async def poll() -> bool:
      status = await self.get_status()
      return status.code in codes

    await wait_for(
      poll,
      interval=interval,
      timeout=timeout,
      description=f"controller status in {sorted(codes)}",
    )
