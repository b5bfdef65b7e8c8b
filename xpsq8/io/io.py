import logging
from abc import ABC, abstractmethod
from typing import Optional

LOG_LEVEL_IO = 5
logging.addLevelName(LOG_LEVEL_IO, "IO")


class IOBase(ABC):
  """Byte stream to a single instrument. Knows nothing about the command protocol."""

  @abstractmethod
  async def setup(self):
    pass

  @abstractmethod
  async def stop(self):
    pass

  @abstractmethod
  async def write(self, data: bytes, timeout: Optional[float] = None) -> None:
    pass

  @abstractmethod
  async def readuntil(self, separator: bytes, timeout: Optional[float] = None) -> bytes:
    pass

  def serialize(self):
    return {}
