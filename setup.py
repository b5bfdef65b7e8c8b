from setuptools import setup, find_packages

from xpsq8.__version__ import __version__

with open("README.md", "r", encoding="utf-8") as f:
  long_description = f.read()


extras_dev = [
  "pytest",
  "pytest-timeout",
  "pylint",
  "mypy",
]

extras_all = extras_dev

setup(
  name="xpsq8",
  version=__version__,
  packages=find_packages(include=["xpsq8", "xpsq8.*"]),
  description="Asyncio client for the Newport XPS-Q8 motion controller",
  long_description=long_description,
  long_description_content_type="text/markdown",
  install_requires=["typing_extensions"],
  package_data={"xpsq8": ["version.txt"]},
  extras_require={
    "dev": extras_dev,
    "all": extras_all,
  },
)
