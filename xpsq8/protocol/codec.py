"""Encoding of XPS commands and decoding of XPS replies.

Everything in this module is pure: no IO, no logging, no state.

A command is written as `FunctionName(arg0,arg1,...)`. Output parameters are written as C-style
placeholders, for example `GroupPositionCurrentGet(M.X,double *)`. The controller answers with
`code,field0,field1,...,EndOfAPI`, where `code` is 0 on success.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, List, Optional, Sequence, Tuple, Union

from xpsq8.errors import (
  ArityMismatchError,
  InvalidArgumentError,
  MalformedReplyError,
  TypeMismatchError,
)

REPLY_TERMINATOR = ",EndOfAPI"
FIELD_SEPARATOR = ","

# enforced by the firmware for group, positioner and other names
MAX_STRING_LENGTH = 250

_FUNCTION_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_FORBIDDEN_STRING_CHARS = frozenset(",()\r\n")
_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_FLOAT_SPECIAL_RE = re.compile(r"[+-]?(?:nan|inf|infinity)", re.IGNORECASE)


def _parse_string(text: str) -> str:
  return text


def _parse_int(text: str) -> int:
  if _INT_RE.fullmatch(text) is None:
    raise ValueError(f"not an integer: {text!r}")
  return int(text)


def _parse_float(text: str) -> float:
  if _FLOAT_RE.fullmatch(text) is None and _FLOAT_SPECIAL_RE.fullmatch(text) is None:
    raise ValueError(f"not a number: {text!r}")
  return float(text)


def _parse_bool(text: str) -> bool:
  value = _parse_int(text)
  if value not in (0, 1):
    raise ValueError(f"not a boolean: {text!r}")
  return value == 1


def _parse_short(text: str) -> int:
  value = _parse_int(text)
  if not -32768 <= value <= 32767:
    raise ValueError(f"out of range for a short: {text!r}")
  return value


def _parse_unsigned_short(text: str) -> int:
  value = _parse_int(text)
  if not 0 <= value <= 65535:
    raise ValueError(f"out of range for an unsigned short: {text!r}")
  return value


@dataclass(frozen=True)
class ValueKind:
  """A type of value that can be read from a reply field.

  Attributes:
    name: human readable name, used in error messages.
    placeholder: how an output parameter of this kind is written in a command, e.g. `double *`.
    parser: converts one reply field. Must raise `ValueError` unless the whole field is valid.
  """

  name: str
  placeholder: str
  parser: Callable[[str], Any]

  def parse(self, text: str) -> Any:
    return self.parser(text)

  def __str__(self) -> str:
    return self.placeholder


STRING = ValueKind("string", "char *", _parse_string)
INT = ValueKind("int", "int *", _parse_int)
DOUBLE = ValueKind("double", "double *", _parse_float)
BOOL = ValueKind("bool", "bool *", _parse_bool)
SHORT = ValueKind("short", "short *", _parse_short)
UNSIGNED_SHORT = ValueKind("unsigned short", "unsigned short *", _parse_unsigned_short)


Argument = Union[str, int, float, bool, ValueKind]


@dataclass(frozen=True)
class Command:
  """A single request to the controller."""

  name: str
  args: Tuple[Argument, ...] = ()

  def __init__(self, name: str, args: Sequence[Argument] = ()):
    object.__setattr__(self, "name", name)
    object.__setattr__(self, "args", tuple(args))

  @property
  def output_kinds(self) -> List[ValueKind]:
    """The kinds of the output placeholders in this command, in order."""
    return [arg for arg in self.args if isinstance(arg, ValueKind)]

  def encode(self) -> str:
    return encode_command(self.name, self.args)

  def __str__(self) -> str:
    return self.encode()


def format_float(value: float) -> str:
  """Format a float as a positional decimal with at least one digit after the point.

  Uses the shortest representation that round trips, without an exponent, e.g. `5.0`, `-0.25`,
  `0.00001`.
  """

  if math.isnan(value) or math.isinf(value):
    raise InvalidArgumentError(f"Cannot send non-finite number {value!r}")
  text = format(Decimal(repr(float(value))), "f")
  if "." not in text:
    text += ".0"
  return text


def validate_string(value: str) -> str:
  """Check that a string can be sent verbatim. The protocol has no quoting or escaping."""

  if len(value) > MAX_STRING_LENGTH:
    raise InvalidArgumentError(
      f"String argument is {len(value)} characters long, the maximum is {MAX_STRING_LENGTH}"
    )
  if not value.isascii():
    raise InvalidArgumentError(f"String argument {value!r} is not ASCII")
  bad = sorted(set(value) & _FORBIDDEN_STRING_CHARS)
  if bad:
    raise InvalidArgumentError(f"String argument {value!r} contains forbidden characters {bad}")
  return value


def format_argument(arg: Argument) -> str:
  """Render a single argument as wire text."""

  # bool first: bool is a subclass of int
  if isinstance(arg, bool):
    return "1" if arg else "0"
  if isinstance(arg, ValueKind):
    return arg.placeholder
  if isinstance(arg, int):
    return str(int(arg))
  if isinstance(arg, float):
    return format_float(arg)
  if isinstance(arg, str):
    return validate_string(arg)
  raise InvalidArgumentError(f"Unsupported argument type {type(arg).__name__}: {arg!r}")


def encode_command(name: str, args: Sequence[Argument] = ()) -> str:
  """Render `name(arg0,arg1,...)`.

  Raises:
    InvalidArgumentError: if the name is not an identifier or an argument cannot be sent.
  """

  if _FUNCTION_NAME_RE.fullmatch(name) is None:
    raise InvalidArgumentError(f"Invalid function name {name!r}")
  return f"{name}({FIELD_SEPARATOR.join(format_argument(arg) for arg in args)})"


def decode_reply(raw: str, max_fields: Optional[int] = None) -> Tuple[int, List[str]]:
  """Split a reply into its result code and its fields.

  A trailing `,EndOfAPI` is removed if present. `"0"`, `"0,"` and `"0,EndOfAPI"` all have no
  fields.

  Args:
    raw: the reply text.
    max_fields: if given, split into at most this many fields, the last one keeping any further
      separators. Useful when the last field is a free-form string.

  Raises:
    MalformedReplyError: if the reply does not start with an integer code.
  """

  text = raw
  if text.endswith(REPLY_TERMINATOR):
    text = text[: -len(REPLY_TERMINATOR)]

  head, sep, rest = text.partition(FIELD_SEPARATOR)
  if _INT_RE.fullmatch(head) is None:
    raise MalformedReplyError(raw)
  code = int(head)

  if not sep or rest == "":
    return code, []
  if max_fields is not None and max_fields > 0:
    return code, rest.split(FIELD_SEPARATOR, max_fields - 1)
  return code, rest.split(FIELD_SEPARATOR)


def decode_fields(fields: Sequence[str], kinds: Sequence[ValueKind]) -> List[Any]:
  """Convert each field to the corresponding kind.

  Raises:
    ArityMismatchError: if the number of fields and kinds differ.
    TypeMismatchError: if a field is not entirely a valid value of its kind.
  """

  if len(fields) != len(kinds):
    raise ArityMismatchError(expected=len(kinds), actual=len(fields))

  values = []
  for index, (field, kind) in enumerate(zip(fields, kinds)):
    try:
      values.append(kind.parse(field))
    except ValueError as e:
      raise TypeMismatchError(index=index, field=field, kind=kind.name) from e
  return values
