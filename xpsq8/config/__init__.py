"""
Config module. Loads the `xpsq8` config file, if there is one.

The current directory and then each of its parents are searched for `xpsq8.ini` or `xpsq8.json`;
the first file found wins. Without a config file the defaults in `Config` apply. `load_config` can
also write a default file, at the root of the git checkout or in the current directory.
"""
from pathlib import Path
from typing import Iterator, Optional, Union

from xpsq8.config.config import Config
from xpsq8.config.formats import MultiLoader
from xpsq8.config.formats.ini_config import IniLoader, IniSaver
from xpsq8.config.formats.json_config import JsonLoader
from xpsq8.config.io.file import FileReader, FileWriter

DEFAULT_LOADERS = [IniLoader(), JsonLoader()]

DEFAULT_CONFIG_READER = FileReader(format_loader=MultiLoader(DEFAULT_LOADERS))

DEFAULT_CONFIG_WRITER = FileWriter(format_saver=IniSaver())


def _candidates(base_name: str, start: Path) -> Iterator[Path]:
  for directory in (start, *start.parents):
    for loader in DEFAULT_LOADERS:
      yield directory / f"{base_name}.{loader.extension}"


def find_config_file(
  base_name: str,
  start_dir: Optional[Union[str, Path]] = None,
) -> Optional[Path]:
  """Return the closest config file named `base_name` with a known extension, or None.

  Args:
    base_name: the file name without extension.
    start_dir: where to start looking. Defaults to the current working directory.
  """
  start = Path(start_dir) if start_dir is not None else Path.cwd()
  return next((path for path in _candidates(base_name, start.resolve()) if path.is_file()), None)


def default_config_dir() -> Path:
  """The root of the enclosing git checkout, or the current directory outside of one."""
  cwd = Path.cwd()
  return next((d for d in (cwd, *cwd.parents) if (d / ".git").exists()), cwd)


def load_config(base_file_name: str, create_default: bool = False,
                create_module_level: bool = True) -> Config:
  """Load a Config object from a file.

  Args:
    base_file_name: The base file name to load.
    create_default: Whether to write a default config file when none is found. It is written in
      the format of the first entry of `DEFAULT_LOADERS`.
    create_module_level: Whether to write that file at the project root instead of the current
      directory.
  """
  config_path = find_config_file(base_file_name)
  if config_path is not None:
    return DEFAULT_CONFIG_READER.read(config_path)

  cfg = Config()
  if create_default:
    target_dir = default_config_dir() if create_module_level else Path.cwd()
    file_name = f"{base_file_name}.{DEFAULT_LOADERS[0].extension}"
    DEFAULT_CONFIG_WRITER.write(target_dir / file_name, cfg)
  return cfg
