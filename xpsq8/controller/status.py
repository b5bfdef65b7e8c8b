import enum
from dataclasses import dataclass


class GroupStatus(enum.IntEnum):
  """State of a stage group, as returned by `GroupStatusGet`.

  Codes 53, 54, 57 and 62 are not used by the firmware.
  """

  NOT_INITIALIZED = 0
  NOT_INITIALIZED_DUE_TO_EMERGENCY_BRAKE = 1
  NOT_INITIALIZED_DUE_TO_EMERGENCY_STOP = 2
  NOT_INITIALIZED_DUE_TO_FOLLOWING_ERROR_DURING_HOMING = 3
  NOT_INITIALIZED_DUE_TO_FOLLOWING_ERROR = 4
  NOT_INITIALIZED_DUE_TO_HOMING_TIMEOUT = 5
  NOT_INITIALIZED_DUE_TO_MOTION_DONE_TIMEOUT_DURING_HOMING = 6
  NOT_INITIALIZED_DUE_TO_KILL_ALL = 7
  NOT_INITIALIZED_DUE_TO_END_OF_RUN_AFTER_HOMING = 8
  NOT_INITIALIZED_DUE_TO_ENCODER_CALIBRATION_ERROR = 9
  READY_DUE_TO_ABORT_MOVE = 10
  READY_FROM_HOMING = 11
  READY_FROM_MOTION = 12
  READY_DUE_TO_ENABLE_MOTION = 13
  READY_FROM_SLAVE = 14
  READY_FROM_JOGGING = 15
  READY_FROM_ANALOG_TRACKING = 16
  READY_FROM_TRAJECTORY = 17
  READY_FROM_SPINNING = 18
  READY_DUE_TO_GROUP_INTERLOCK_ERROR_DURING_MOTION = 19
  DISABLED = 20
  DISABLED_DUE_TO_FOLLOWING_ERROR_ON_READY = 21
  DISABLED_DUE_TO_FOLLOWING_ERROR_DURING_MOTION = 22
  DISABLED_DUE_TO_MOTION_DONE_TIMEOUT_DURING_MOVING = 23
  DISABLED_DUE_TO_FOLLOWING_ERROR_ON_SLAVE = 24
  DISABLED_DUE_TO_FOLLOWING_ERROR_ON_JOGGING = 25
  DISABLED_DUE_TO_FOLLOWING_ERROR_DURING_TRAJECTORY = 26
  DISABLED_DUE_TO_MOTION_DONE_TIMEOUT_DURING_TRAJECTORY = 27
  DISABLED_DUE_TO_FOLLOWING_ERROR_DURING_ANALOG_TRACKING = 28
  DISABLED_DUE_TO_SLAVE_ERROR_DURING_MOTION = 29
  DISABLED_DUE_TO_SLAVE_ERROR_ON_SLAVE = 30
  DISABLED_DUE_TO_SLAVE_ERROR_ON_JOGGING = 31
  DISABLED_DUE_TO_SLAVE_ERROR_DURING_TRAJECTORY = 32
  DISABLED_DUE_TO_SLAVE_ERROR_DURING_ANALOG_TRACKING = 33
  DISABLED_DUE_TO_SLAVE_ERROR_ON_READY = 34
  DISABLED_DUE_TO_FOLLOWING_ERROR_ON_SPINNING = 35
  DISABLED_DUE_TO_SLAVE_ERROR_ON_SPINNING = 36
  DISABLED_DUE_TO_FOLLOWING_ERROR_ON_AUTO_TUNING = 37
  DISABLED_DUE_TO_SLAVE_ERROR_ON_AUTO_TUNING = 38
  DISABLED_DUE_TO_EMERGENCY_STOP_ON_AUTO_TUNING = 39
  EMERGENCY_BRAKING = 40
  MOTOR_INITIALIZATION = 41
  NOT_REFERENCED = 42
  HOMING = 43
  MOVING = 44
  TRAJECTORY = 45
  SLAVE_DUE_TO_ENABLE_SLAVE = 46
  JOGGING_DUE_TO_ENABLE_JOGGING = 47
  ANALOG_TRACKING_DUE_TO_ENABLE_TRACKING = 48
  ANALOG_INTERPOLATED_CALIBRATING = 49
  NOT_INITIALIZED_DUE_TO_MECHANICAL_ZERO_INCONSISTENCY_DURING_HOMING = 50
  SPINNING_DUE_TO_SET_SPIN_PARAMETERS = 51
  NOT_INITIALIZED_DUE_TO_CLAMPING_TIMEOUT = 52
  CLAMPED = 55
  READY_FROM_CLAMPED = 56
  DISABLED_DUE_TO_FOLLOWING_ERROR_DURING_CLAMPED = 58
  DISABLED_DUE_TO_MOTION_DONE_TIMEOUT_DURING_CLAMPED = 59
  NOT_INITIALIZED_DUE_TO_GROUP_INTERLOCK_ERROR_ON_NOT_REFERENCED = 60
  NOT_INITIALIZED_DUE_TO_GROUP_INTERLOCK_ERROR_DURING_HOMING = 61
  NOT_INITIALIZED_DUE_TO_MOTOR_INITIALIZATION_ERROR = 63
  REFERENCING = 64
  CLAMPING_INITIALIZATION = 65
  NOT_INITIALIZED_DUE_TO_PERPENDICULARITY_ERROR_HOMING = 66
  NOT_INITIALIZED_DUE_TO_MASTER_SLAVE_ERROR_DURING_HOMING = 67
  AUTO_TUNING = 68
  SCALING_CALIBRATION = 69
  READY_FROM_AUTO_TUNING = 70
  NOT_INITIALIZED_FROM_SCALING_CALIBRATION = 71
  NOT_INITIALIZED_DUE_TO_SCALING_CALIBRATION_ERROR = 72
  EXCITATION_SIGNAL_GENERATION = 73
  DISABLED_DUE_TO_FOLLOWING_ERROR_ON_EXCITATION_SIGNAL_GENERATION = 74
  DISABLED_DUE_TO_MASTER_SLAVE_ERROR_ON_EXCITATION_SIGNAL_GENERATION = 75
  DISABLED_DUE_TO_EMERGENCY_STOP_ON_EXCITATION_SIGNAL_GENERATION = 76
  READY_FROM_EXCITATION_SIGNAL_GENERATION = 77
  FOCUS = 78
  READY_FROM_FOCUS = 79
  DISABLED_DUE_TO_FOLLOWING_ERROR_ON_FOCUS = 80
  DISABLED_DUE_TO_MASTER_SLAVE_ERROR_ON_FOCUS = 81
  DISABLED_DUE_TO_EMERGENCY_STOP_ON_FOCUS = 82
  DISABLED_DUE_TO_NOT_INTERLOCKED_ERROR = 83
  DISABLED_DUE_TO_GROUP_INTERLOCK_ERROR_DURING_MOVING = 84
  DISABLED_DUE_TO_GROUP_INTERLOCK_ERROR_DURING_JOGGING = 85
  DISABLED_DUE_TO_GROUP_INTERLOCK_ERROR_ON_SLAVE = 86
  DISABLED_DUE_TO_GROUP_INTERLOCK_ERROR_DURING_TRAJECTORY = 87
  DISABLED_DUE_TO_GROUP_INTERLOCK_ERROR_DURING_ANALOG_TRACKING = 88
  DISABLED_DUE_TO_GROUP_INTERLOCK_ERROR_DURING_SPINNING = 89
  DISABLED_DUE_TO_GROUP_INTERLOCK_ERROR_ON_READY = 90
  DISABLED_DUE_TO_GROUP_INTERLOCK_ERROR_ON_AUTO_TUNING = 91
  DISABLED_DUE_TO_GROUP_INTERLOCK_ERROR_ON_EXCITATION_SIGNAL_GENERATION = 92
  DISABLED_DUE_TO_GROUP_INTERLOCK_ERROR_ON_FOCUS = 93
  DISABLED_DUE_TO_MOTION_DONE_TIMEOUT_DURING_JOGGING = 94
  DISABLED_DUE_TO_MOTION_DONE_TIMEOUT_DURING_SPINNING = 95
  DISABLED_DUE_TO_MOTION_DONE_TIMEOUT_DURING_SLAVE = 96

  @property
  def is_ready(self) -> bool:
    return self.name.startswith("READY")

  @property
  def is_initialized(self) -> bool:
    return not self.name.startswith("NOT_INITIALIZED")

  @property
  def is_disabled(self) -> bool:
    return self.name.startswith("DISABLED")


class MotionStatus(enum.IntEnum):
  """Whether a positioner or group is moving, as returned by `GroupMotionStatusGet`."""

  NOT_MOVING = 0
  BUSY = 1


@dataclass(frozen=True)
class ControllerStatus:
  """A controller status code, as returned by `ControllerStatusGet` and `ControllerStatusRead`.

  The meaning of the code depends on the firmware version. Use
  `XPSQ8Controller.get_status_string` for a description.
  """

  code: int
