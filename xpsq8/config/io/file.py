from pathlib import Path
from typing import Union

from xpsq8.config.config import Config
from xpsq8.config.io import ConfigReader, ConfigWriter


class FileReader(ConfigReader):
  """ Reads a Config object from a file on disk. """

  encoding = "utf-8"

  def read(self, r: Union[str, Path]) -> Config:
    with open(r, self.open_mode, encoding=self.encoding) as f:
      return self.format_loader.load(f)


class FileWriter(ConfigWriter):
  """ Writes a Config object to a file on disk, creating parent directories as needed. """

  encoding = "utf-8"

  def write(self, w: Union[str, Path], cfg: Config):
    Path(w).parent.mkdir(parents=True, exist_ok=True)
    with open(w, self.open_mode, encoding=self.encoding) as f:
      self.format_saver.save(f, cfg)
