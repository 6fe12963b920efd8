from .calendar_feed import encode_calendar
from .structured import (
    DECODERS,
    ENCODERS,
    decode_json,
    decode_toml,
    decode_yaml,
    encode_json,
    encode_toml,
    encode_yaml,
)

__all__ = [
    "DECODERS",
    "ENCODERS",
    "decode_json",
    "decode_toml",
    "decode_yaml",
    "encode_calendar",
    "encode_json",
    "encode_toml",
    "encode_yaml",
]
