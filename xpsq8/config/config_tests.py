import io
import logging
import os
import tempfile
import unittest
from pathlib import Path

from xpsq8.config import find_config_file, load_config
from xpsq8.config.config import Config
from xpsq8.config.formats import ConfigLoader, ConfigSaver, MultiLoader
from xpsq8.config.formats.ini_config import IniLoader, IniSaver
from xpsq8.config.formats.json_config import JsonLoader, JsonSaver
from xpsq8.config.io.file import FileReader, FileWriter


class ConfigTests(unittest.TestCase):
  """ Tests for xpsq8.config """

  def setUp(self):
    self.tmp_path = Path(tempfile.mkdtemp())
    self.fake_config = Config(
      logging=Config.Logging(level=logging.DEBUG, log_dir=self.tmp_path / "logs"),
      connection=Config.Connection(host="192.168.0.254", port=5001, read_timeout=2.5),
    )

  def run_file_reader_writer_test(
    self,
    format_loader: ConfigLoader,
    format_saver: ConfigSaver,
    write_to: Path,
    should_be: Config,
  ):
    FileWriter(format_saver=format_saver).write(write_to, should_be)
    cfg = FileReader(format_loader=format_loader).read(write_to)
    self.assertEqual(cfg, should_be)

  def test_file_reader_writer(self):
    cases = (
      (IniLoader(), IniSaver(), "fake_config.ini"),
      (JsonLoader(), JsonSaver(), "fake_config.json"),
      (MultiLoader([IniLoader(), JsonLoader()]), JsonSaver(), "multi.json"),
    )
    for loader, saver, fp in cases:
      self.run_file_reader_writer_test(loader, saver, self.tmp_path / fp, self.fake_config)

  def test_default_round_trip(self):
    self.run_file_reader_writer_test(IniLoader(), IniSaver(), self.tmp_path / "d.ini", Config())

  def test_partial_ini(self):
    cfg = IniLoader().load(io.StringIO("[connection]\nhost = xps.local\nread_timeout = 1\n"))
    self.assertEqual(cfg.connection.host, "xps.local")
    self.assertEqual(cfg.connection.read_timeout, 1.0)
    self.assertEqual(cfg.connection.port, 5001)
    self.assertEqual(cfg.logging, Config.Logging())

  def test_io_log_level(self):
    cfg = Config.from_dict({"logging": {"level": "io"}})
    self.assertEqual(cfg.logging.level, 5)
    self.assertEqual(cfg.as_dict["logging"]["level"], "IO")

  def test_multi_loader_rejects_garbage(self):
    with self.assertRaises(ValueError):
      MultiLoader([IniLoader(), JsonLoader()]).load(io.StringIO("not a config"))

  def test_get_config_file_searches_parents(self):
    (self.tmp_path / "xpsq8.json").write_text("{}", encoding="utf-8")
    nested = self.tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    self.assertEqual(find_config_file("xpsq8", nested), self.tmp_path.resolve() / "xpsq8.json")
    self.assertIsNone(find_config_file("does_not_exist_xpsq8", nested))

  def test_load_config_creates_default(self):
    cwd = Path.cwd()
    os.chdir(self.tmp_path)
    try:
      cfg = load_config("test_config", create_default=True, create_module_level=False)
      self.assertTrue((self.tmp_path / "test_config.ini").exists())
      self.assertEqual(cfg, Config())
    finally:
      os.chdir(cwd)

  def test_load_config_without_file(self):
    cwd = Path.cwd()
    os.chdir(self.tmp_path)
    try:
      self.assertEqual(load_config("missing_config_xpsq8"), Config())
      self.assertFalse((self.tmp_path / "missing_config_xpsq8.ini").exists())
    finally:
      os.chdir(cwd)
