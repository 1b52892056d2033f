"""
Codec module - compact share strings for game records.
"""
from .record_codec import (
    RecordCodec,
    CodecError,
    DecompressionFailed,
    V3Format,
    V2JsonFormat,
    encode_game_record,
    decode_game_record,
    encode_winner,
    decode_winner,
)

__all__ = [
    "RecordCodec",
    "CodecError",
    "DecompressionFailed",
    "V3Format",
    "V2JsonFormat",
    "encode_game_record",
    "decode_game_record",
    "encode_winner",
    "decode_winner",
]
