from typing import TYPE_CHECKING, NamedTuple

from xpsq8.controller.status import MotionStatus
from xpsq8.errors import InvalidArgumentError, UnknownStatusError
from xpsq8.protocol.codec import DOUBLE, INT, MAX_STRING_LENGTH, SHORT, Command

if TYPE_CHECKING:
  from xpsq8.controller.group import StageGroup


class Jog(NamedTuple):
  velocity: float
  acceleration: float


class UserTravelLimits(NamedTuple):
  minimum_target: float
  maximum_target: float


class SGammaParameters(NamedTuple):
  """Profile parameters of the SGamma motion profiler."""

  velocity: float
  acceleration: float
  minimum_jerk_time: float
  maximum_jerk_time: float


class MotionTimes(NamedTuple):
  """Durations of the previous move, in seconds."""

  setting: float
  settling: float


class VelocityAndAcceleration(NamedTuple):
  velocity: float
  acceleration: float


class MotionDoneParameters(NamedTuple):
  position_window: float
  velocity_window: float
  checking_time: float
  mean_period: float
  timeout: float


class DACOffsets(NamedTuple):
  """Offsets of the two DAC outputs of a positioner, in DAC counts."""

  offset1: int
  offset2: int


class Stage:
  """A single positioner, addressed by its full name `Group.Stage` (e.g. `"M.X"`).

  Positions are in the units configured on the controller, usually mm or degrees.
  """

  def __init__(self, group: "StageGroup", name: str):
    self.group = group
    self.name = name
    if len(self.full_name) > MAX_STRING_LENGTH:
      raise InvalidArgumentError(
        f"Stage name {self.full_name!r} is {len(self.full_name)} characters long, the maximum "
        f"is {MAX_STRING_LENGTH}"
      )

  @property
  def full_name(self) -> str:
    return f"{self.group.name}.{self.name}"

  def __repr__(self) -> str:
    return f"Stage(full_name={self.full_name!r})"

  @property
  def _session(self):
    return self.group.controller.session

  async def _read_doubles(self, function: str, count: int) -> list:
    command = Command(function, [self.full_name, *([DOUBLE] * count)])
    return await self._session.execute_reading(command)

  # region MOTION

  async def move_relative(self, displacement: float) -> None:
    """Move by `displacement`. Returns when the move is done."""
    await self._session.execute(Command("GroupMoveRelative", [self.full_name, float(displacement)]))

  async def move_absolute(self, position: float) -> None:
    """Move to `position`. Returns when the move is done."""
    await self._session.execute(Command("GroupMoveAbsolute", [self.full_name, float(position)]))

  async def abort_move(self) -> None:
    await self._session.execute(Command("GroupMoveAbort", [self.full_name]))

  async def get_motion_status(self) -> MotionStatus:
    (code,) = await self._session.execute_reading(
      Command("GroupMotionStatusGet", [self.full_name, INT])
    )
    try:
      return MotionStatus(code)
    except ValueError as e:
      raise UnknownStatusError(code) from e

  async def get_current_velocity(self) -> float:
    (velocity,) = await self._read_doubles("GroupVelocityCurrentGet", 1)
    return velocity

  # endregion

  # region POSITION

  async def get_current_position(self) -> float:
    """The position measured by the encoder."""
    (position,) = await self._read_doubles("GroupPositionCurrentGet", 1)
    return position

  async def get_setpoint(self) -> float:
    """The position the profiler is currently commanding."""
    (position,) = await self._read_doubles("GroupPositionSetpointGet", 1)
    return position

  async def get_target(self) -> float:
    """The end position of the current or last move."""
    (position,) = await self._read_doubles("GroupPositionTargetGet", 1)
    return position

  # endregion

  # region JOGGING

  async def get_current_jog(self) -> Jog:
    return Jog(*await self._read_doubles("GroupJogCurrentGet", 2))

  async def get_jog_parameters(self) -> Jog:
    return Jog(*await self._read_doubles("GroupJogParametersGet", 2))

  async def set_jog_parameters(self, velocity: float, acceleration: float) -> None:
    """Set the jog velocity and acceleration. The group must be in jogging mode."""
    await self._session.execute(
      Command("GroupJogParametersSet", [self.full_name, float(velocity), float(acceleration)])
    )

  # endregion

  # region POSITIONER

  async def get_hardware_status(self) -> int:
    """The raw hardware status bit field of the positioner."""
    (status,) = await self._session.execute_reading(
      Command("PositionerHardwareStatusGet", [self.full_name, INT])
    )
    return status

  async def get_user_travel_limits(self) -> UserTravelLimits:
    return UserTravelLimits(*await self._read_doubles("PositionerUserTravelLimitsGet", 2))

  async def get_maximum_velocity_and_acceleration(self) -> VelocityAndAcceleration:
    return VelocityAndAcceleration(
      *await self._read_doubles("PositionerMaximumVelocityAndAccelerationGet", 2)
    )

  async def get_motion_done_parameters(self) -> MotionDoneParameters:
    return MotionDoneParameters(*await self._read_doubles("PositionerMotionDoneGet", 5))

  async def get_dac_offsets(self) -> DACOffsets:
    values = await self._session.execute_reading(
      Command("PositionerDACOffsetGet", [self.full_name, SHORT, SHORT])
    )
    return DACOffsets(*values)

  async def set_dac_offsets(self, offsets: DACOffsets) -> None:
    await self._session.execute(
      Command("PositionerDACOffsetSet", [self.full_name, *(int(o) for o in offsets)])
    )

  async def enable_backlash(self) -> None:
    await self._session.execute(Command("PositionerBacklashEnable", [self.full_name]))

  async def disable_backlash(self) -> None:
    await self._session.execute(Command("PositionerBacklashDisable", [self.full_name]))

  # endregion

  # region SGAMMA

  async def get_sgamma_parameters(self) -> SGammaParameters:
    return SGammaParameters(*await self._read_doubles("PositionerSGammaParametersGet", 4))

  async def set_sgamma_parameters(self, parameters: SGammaParameters) -> None:
    await self._session.execute(
      Command("PositionerSGammaParametersSet", [self.full_name, *(float(p) for p in parameters)])
    )

  async def get_previous_motion_times(self) -> MotionTimes:
    return MotionTimes(*await self._read_doubles("PositionerSGammaPreviousMotionTimesGet", 2))

  # endregion
