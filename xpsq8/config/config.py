import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from xpsq8.io.io import LOG_LEVEL_IO

LOG_FROM_STRING = {
  "IO": LOG_LEVEL_IO,
  "DEBUG": logging.DEBUG,
  "INFO": logging.INFO,
  "WARNING": logging.WARNING,
  "ERROR": logging.ERROR,
  "CRITICAL": logging.CRITICAL,
}

LOG_TO_STRING = {v: k for k, v in LOG_FROM_STRING.items()}


@dataclass
class Config:
  """The configuration object for xpsq8.

  Only the `logging` section is applied when the package is imported. The `connection` section
  holds defaults for `XPSQ8Controller.from_config`.
  """

  @dataclass
  class Logging:
    """The logging configuration."""

    level: int = logging.INFO
    log_dir: Optional[Path] = None

  @dataclass
  class Connection:
    """Where to find the controller, and how long to wait for it."""

    host: Optional[str] = None
    port: int = 5001
    connect_timeout: float = 5.0
    read_timeout: float = 5.0
    write_timeout: float = 5.0

  logging: Logging = field(default_factory=Logging)
  connection: Connection = field(default_factory=Connection)

  @classmethod
  def from_dict(cls, d: dict) -> "Config":
    """Build a Config from a dict of sections. Missing sections and keys keep their defaults.

    Values may be strings, as they are when read from an INI file.
    """

    log = d.get("logging", {})
    conn = d.get("connection", {})
    default_conn = cls.Connection()
    return cls(
      logging=cls.Logging(
        level=LOG_FROM_STRING[log.get("level", "INFO").upper()],
        log_dir=Path(log["log_dir"]) if log.get("log_dir") else None,
      ),
      connection=cls.Connection(
        host=conn.get("host") or None,
        port=int(conn.get("port", default_conn.port)),
        connect_timeout=float(conn.get("connect_timeout", default_conn.connect_timeout)),
        read_timeout=float(conn.get("read_timeout", default_conn.read_timeout)),
        write_timeout=float(conn.get("write_timeout", default_conn.write_timeout)),
      ),
    )

  @property
  def as_dict(self) -> dict:
    return {
      "logging": {
        "level": LOG_TO_STRING[self.logging.level],
        "log_dir": str(self.logging.log_dir) if self.logging.log_dir is not None else None,
      },
      "connection": {
        "host": self.connection.host,
        "port": self.connection.port,
        "connect_timeout": self.connection.connect_timeout,
        "read_timeout": self.connection.read_timeout,
        "write_timeout": self.connection.write_timeout,
      },
    }
