import json
from typing import IO

from xpsq8.config.config import Config
from xpsq8.config.formats import ConfigLoader, ConfigSaver


class JsonLoader(ConfigLoader):
  """ A ConfigLoader that loads from an IO stream that is JSON formatted. """

  extension = "json"

  def load(self, r: IO) -> Config:
    config_dict = json.loads(r.read())
    if not isinstance(config_dict, dict):
      raise ValueError("JSON config must be an object")
    return Config.from_dict(config_dict)


class JsonSaver(ConfigSaver):
  """ A ConfigSaver that saves to an IO stream in JSON format. """

  extension = "json"

  def save(self, w: IO, cfg: Config):
    json.dump(cfg.as_dict, w, indent=2)
