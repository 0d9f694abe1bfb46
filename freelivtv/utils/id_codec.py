"""URL-safe, reversible identifiers for origin stream URLs."""

from __future__ import annotations

import base64
import binascii


class DecodeError(ValueError):
    """Raised when an identifier cannot be turned back into a URL."""


def encode_id(url: str) -> str:
    """Encodes ``url`` as unpadded URL-safe base64."""

    return base64.urlsafe_b64encode(url.encode("utf-8")).decode("ascii").rstrip("=")


def decode_id(identifier: str) -> str:
    """Reverses :func:`encode_id`, restoring the stripped padding."""

    if not identifier:
        raise DecodeError("empty identifier")
    padded = identifier + "=" * (-len(identifier) % 4)
    try:
        raw = base64.b64decode(padded, altchars=b"-_", validate=True)
        return raw.decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError) as exc:
        raise DecodeError(f"malformed identifier {identifier[:40]!r}: {exc}") from exc


def strip_prefix(identifier: str, prefix: str) -> str:
    """Removes the addon namespace from an external id."""

    if not identifier.startswith(prefix):
        raise DecodeError(f"identifier is not in the {prefix!r} namespace")
    return identifier[len(prefix):]
