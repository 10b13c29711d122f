"""Serialization: the order-preserving JSON wire format for serum errors."""

from .codec import DecodeError, decode_details, encode_details, from_json, same_content, to_json

__all__ = ["DecodeError", "decode_details", "encode_details", "from_json", "same_content", "to_json"]
