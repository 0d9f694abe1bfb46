"""Utility helpers for HTTP, identifiers and caching."""

from .http_client import FetchError, HttpClient
from .id_codec import DecodeError, decode_id, encode_id
from .ttl_cache import TimedCache

__all__ = ["FetchError", "HttpClient", "DecodeError", "decode_id", "encode_id", "TimedCache"]
