from .polling import (
  wait_for
)
