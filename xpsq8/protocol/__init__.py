from .codec import (
  BOOL,
  DOUBLE,
  INT,
  SHORT,
  STRING,
  UNSIGNED_SHORT,
  Command,
  ValueKind,
  decode_fields,
  decode_reply,
  encode_command,
)
