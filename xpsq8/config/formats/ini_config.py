import configparser
from typing import IO

from xpsq8.config.config import Config
from xpsq8.config.formats import ConfigLoader, ConfigSaver


class IniLoader(ConfigLoader):
  """A ConfigLoader that loads from an IO stream that INI formatted."""

  extension = "ini"

  def load(self, r: IO) -> Config:
    """Load a Config object from an opened IO stream that is INI formatted.

    Sections other than `logging` and `connection` are ignored.
    """
    config = configparser.ConfigParser()
    config.read_file(r)
    sections = {
      name: dict(config[name]) for name in ("logging", "connection") if config.has_section(name)
    }
    return Config.from_dict(sections)


class IniSaver(ConfigSaver):
  """A ConfigSaver that saves to an IO stream in INI format. `None` values are left out."""

  extension = "ini"

  def save(self, w: IO, cfg: Config):
    config = configparser.ConfigParser()
    for section, values in cfg.as_dict.items():
      config[section] = {k: str(v) for k, v in values.items() if v is not None}
    config.write(w)
