from typing import TYPE_CHECKING, Iterable, List, Union

from xpsq8.controller.stage import Stage
from xpsq8.controller.status import GroupStatus
from xpsq8.errors import InvalidArgumentError, UnknownStatusError
from xpsq8.protocol.codec import INT, MAX_STRING_LENGTH, STRING, Command
from xpsq8.utils.polling import wait_for

if TYPE_CHECKING:
  from xpsq8.controller.controller import XPSQ8Controller


class StageGroup:
  """A group of positioners defined on the controller, addressed by name (e.g. `"M"`).

  Holds no state other than its name, the controller, and the stages made from it. All commands go
  through the controller's session.
  """

  def __init__(self, controller: "XPSQ8Controller", name: str):
    if len(name) > MAX_STRING_LENGTH:
      raise InvalidArgumentError(
        f"Group name is {len(name)} characters long, the maximum is {MAX_STRING_LENGTH}"
      )
    self.controller = controller
    self.name = name
    self.stages: List[Stage] = []

  def __repr__(self) -> str:
    return f"StageGroup(name={self.name!r})"

  def make_stage(self, name: str) -> Stage:
    """Create a handle to a positioner in this group, e.g. `"X"` for `"M.X"`."""
    stage = Stage(group=self, name=name)
    self.stages.append(stage)
    return stage

  async def _execute(self, function: str) -> None:
    await self.controller.session.execute(Command(function, [self.name]))

  # region STATUS

  async def get_status_code(self) -> int:
    (code,) = await self.controller.session.execute_reading(
      Command("GroupStatusGet", [self.name, INT])
    )
    return code

  async def get_status(self) -> GroupStatus:
    """
    Raises:
      UnknownStatusError: if the firmware returned a code that is not a `GroupStatus`.
    """
    code = await self.get_status_code()
    try:
      return GroupStatus(code)
    except ValueError as e:
      raise UnknownStatusError(code) from e

  async def get_status_string(self, status: Union[GroupStatus, int]) -> str:
    """The firmware's description of a group status code."""
    (text,) = await self.controller.session.execute_reading(
      Command("GroupStatusStringGet", [int(status), STRING])
    )
    return text

  async def wait_for_status(
    self,
    statuses: Union[GroupStatus, int, Iterable[Union[GroupStatus, int]]],
    interval: float = 0.25,
    timeout: float = 10.0,
  ) -> None:
    """Poll the group status until it is one of `statuses`.

    Status codes that are not a `GroupStatus` can be waited for too. Failed reads are retried until
    the timeout, see `xpsq8.utils.wait_for`.

    Raises:
      PollingTimeoutError: if none of the statuses was seen within `timeout` seconds.
    """

    if isinstance(statuses, int):
      statuses = [statuses]
    codes = {int(s) for s in statuses}

    async def poll() -> bool:
      return await self.get_status_code() in codes

    await wait_for(
      poll,
      interval=interval,
      timeout=timeout,
      description=f"group {self.name} status in {sorted(codes)}",
    )

  # endregion

  # region MOTION

  async def initialize(self) -> None:
    """Start the initialization of the group. Next, call `search_for_home`."""
    await self._execute("GroupInitialize")

  async def search_for_home(self) -> None:
    """Move the group to its home position. Returns when the home search is done."""
    await self._execute("GroupHomeSearch")

  async def kill(self) -> None:
    """Kill the group. This is executed in any state, and leaves the group not initialized."""
    await self._execute("GroupKill")

  async def enable_motion(self) -> None:
    await self._execute("GroupMotionEnable")

  async def disable_motion(self) -> None:
    await self._execute("GroupMotionDisable")

  async def abort_move(self) -> None:
    """Abort the moves of all positioners in the group."""
    await self._execute("GroupMoveAbort")

  # endregion

  # region JOGGING

  async def enable_jogging(self) -> None:
    await self._execute("GroupJogModeEnable")

  async def disable_jogging(self) -> None:
    await self._execute("GroupJogModeDisable")

  # endregion
