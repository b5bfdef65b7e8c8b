from .io import LOG_LEVEL_IO, IOBase
from .socket import Socket
