"""The xpsq8 package version, kept in `version.txt` so that setup.py can read it too."""

import os

_version_file = os.path.join(os.path.dirname(__file__), "version.txt")
with open(_version_file, "r", encoding="utf-8") as f:
  __version__ = f.read().strip()
