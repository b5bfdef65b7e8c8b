import datetime
import logging
from pathlib import Path
from typing import Optional, Union

from xpsq8.__version__ import __version__
from xpsq8.config import Config, load_config
from xpsq8.controller import (
  ControllerStatus,
  GroupStatus,
  MotionStatus,
  Stage,
  StageGroup,
  XPSQ8Controller,
)
from xpsq8.io import LOG_LEVEL_IO
from xpsq8.protocol import BOOL, DOUBLE, INT, STRING, Command, ValueKind
from xpsq8.session import CommandSession, SessionState
from xpsq8.utils import wait_for

CONFIG_FILE_NAME = "xpsq8"

CONFIG = load_config(CONFIG_FILE_NAME, create_default=False)


def setup_logger(log_dir: Optional[Union[Path, str]], level: int):
  """
  Set up the `xpsq8` logger. If the log_dir does not exist, it will be created.

  Args:
    log_dir: The directory to store the log files in. If None, no log file is written.
    level: The logging level. Use `LOG_LEVEL_IO` to log every byte sent and received.
  """
  if log_dir is not None:
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
  logger = logging.getLogger("xpsq8")
  logger.setLevel(level)

  # replace handlers added by an earlier call
  for handler in list(logger.handlers):
    logger.removeHandler(handler)
    handler.close()

  if log_dir is not None:
    now = datetime.datetime.now().strftime("%Y%m%d")
    fh = logging.FileHandler(log_dir / f"xpsq8-{now}.log")
    fh.setLevel(logging.NOTSET)  # the logger level does the filtering
    fh.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    logger.addHandler(fh)


def configure(cfg: Config):
  """Configure xpsq8."""
  setup_logger(cfg.logging.log_dir, cfg.logging.level)


configure(CONFIG)
