"""Where configs are read from and written to. The file format is left to a loader or saver."""

from abc import ABC, abstractmethod

from xpsq8.config.config import Config
from xpsq8.config.formats import ConfigLoader, ConfigSaver


class ConfigReader(ABC):
  """Opens a config source, such as `xpsq8.ini`, and hands the stream to `format_loader`."""

  open_mode: str = "r"
  encoding: str

  def __init__(self, format_loader: ConfigLoader):
    self.format_loader = format_loader

  @abstractmethod
  def read(self, r) -> Config:
    """Load the logging and connection settings stored at `r`."""


class ConfigWriter(ABC):
  """Opens a config destination and lets `format_saver` write the settings to it."""

  open_mode: str = "w"
  encoding: str

  def __init__(self, format_saver: ConfigSaver):
    self.format_saver = format_saver

  @abstractmethod
  def write(self, w, cfg: Config):
    """Store the settings in `cfg` at `w`, replacing what was there."""
