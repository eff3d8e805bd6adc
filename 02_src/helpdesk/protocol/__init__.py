"""Protocol boundary: raw frames in, typed frames out."""

from .codec import decode_frame, decode_message, parse_timestamp

__all__ = ["decode_frame", "decode_message", "parse_timestamp"]
