"""Pure helpers that inspect and rewrite HLS playlists for constrained players."""

from __future__ import annotations

import re
from typing import List, Optional
from urllib.parse import urljoin, urlparse

from ..models import ManifestVariant

MAX_SEGMENT_SECONDS = 6

EMPTY_MANIFEST = "#EXTM3U\n#EXT-X-VERSION:3\n#EXT-X-TARGETDURATION:{0}\n#EXT-X-ENDLIST\n".format(MAX_SEGMENT_SECONDS)

STREAM_INF_TAG = "#EXT-X-STREAM-INF"
SEGMENT_TAG = "#EXTINF"
TARGET_DURATION_TAG = "#EXT-X-TARGETDURATION"

BANDWIDTH_RE = re.compile(r"(?:^|[:,])BANDWIDTH=(\d+)")
EXTINF_RE = re.compile(r"^#EXTINF:\s*(\d+(?:\.\d+)?|\.\d+)(.*)$")


class ParseError(Exception):
    """Raised when an upstream manifest body cannot be read as text."""


def decode_body(body: bytes) -> str:
    try:
        return body.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ParseError(f"manifest is not UTF-8 text: {exc}") from exc


def is_master_playlist(text: str) -> bool:
    return STREAM_INF_TAG in text


def is_media_playlist(text: str) -> bool:
    return SEGMENT_TAG + ":" in text


def base_url(url: str) -> str:
    """Returns ``url`` up to and including its last path separator.

    >>> base_url("https://cdn.example.com/live/ch1/index.m3u8?token=a/b")
    'https://cdn.example.com/live/ch1/'
    """

    parsed = urlparse(url)
    path = parsed.path[: parsed.path.rfind("/") + 1] or "/"
    return f"{parsed.scheme}://{parsed.netloc}{path}"


def is_absolute(uri: str) -> bool:
    parsed = urlparse(uri)
    return bool(parsed.scheme and parsed.netloc)


def resolve_uri(uri: str, base: str) -> str:
    """Makes ``uri`` absolute against ``base``; raises ParseError if it is malformed."""

    try:
        if is_absolute(uri):
            return uri
        return urljoin(base, uri)
    except ValueError as exc:
        raise ParseError(f"malformed URI {uri[:80]!r}: {exc}") from exc


def parse_variants(text: str) -> List[ManifestVariant]:
    """Collects ``#EXT-X-STREAM-INF`` entries paired with the URI line after them."""

    variants: List[ManifestVariant] = []
    bandwidth: Optional[int] = None
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        if line.startswith(STREAM_INF_TAG):
            match = BANDWIDTH_RE.search(line)
            bandwidth = int(match.group(1)) if match else 0
            continue
        if line.startswith("#"):
            continue
        if bandwidth is not None:
            variants.append(ManifestVariant(bandwidth=bandwidth, uri=line))
            bandwidth = None
    return variants


def select_variant(variants: List[ManifestVariant]) -> Optional[ManifestVariant]:
    """Picks the middle rendition by bandwidth rather than the highest."""

    if not variants:
        return None
    ordered = sorted(variants, key=lambda variant: variant.bandwidth)
    return ordered[len(ordered) // 2]


def cap_segment_duration(line: str, ceiling: int = MAX_SEGMENT_SECONDS) -> str:
    match = EXTINF_RE.match(line)
    if not match:
        return line
    duration = min(float(match.group(1)), float(ceiling))
    return f"#EXTINF:{duration:.3f}{match.group(2)}"


def rewrite_media_playlist(text: str, manifest_url: str, ceiling: int = MAX_SEGMENT_SECONDS) -> str:
    """Caps timing directives and makes segment URIs absolute."""

    base = base_url(manifest_url)
    lines: List[str] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line:
            lines.append(line)
        elif line.startswith(TARGET_DURATION_TAG):
            lines.append(f"{TARGET_DURATION_TAG}:{ceiling}")
        elif line.startswith(SEGMENT_TAG + ":"):
            lines.append(cap_segment_duration(line, ceiling))
        elif line.startswith("#"):
            lines.append(line)
        else:
            lines.append(resolve_uri(line, base))
    return "\n".join(lines) + "\n"
