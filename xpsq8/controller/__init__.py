from .controller import MotionKernelTimeLoad, XPSQ8Controller
from .group import StageGroup
from .stage import (
  DACOffsets,
  Jog,
  MotionDoneParameters,
  MotionTimes,
  SGammaParameters,
  Stage,
  UserTravelLimits,
  VelocityAndAcceleration,
)
from .status import ControllerStatus, GroupStatus, MotionStatus
