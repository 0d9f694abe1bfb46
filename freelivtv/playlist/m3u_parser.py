"""Tokenizer for extended M3U playlists."""

from __future__ import annotations

import logging
import re
from typing import Iterable, Iterator, Optional, Union

from ..models import RawEntry

EXTINF_MARKER = "#EXTINF"
URL_LINE_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")


def _attr(line: str, attr: str) -> str:
    match = re.search(rf'{attr}="([^"]*)"', line)
    return match.group(1).strip() if match else ""


def parse_extinf(line: str) -> Optional[dict]:
    """Extracts the attributes of one ``#EXTINF`` line.

    Returns ``None`` when the line lacks a ``tvg-name``.
    """

    name = _attr(line, "tvg-name")
    if not name:
        return None
    return {
        "name": name,
        "group": _attr(line, "group-title"),
        "logo": _attr(line, "tvg-logo"),
        "tvg_id": _attr(line, "tvg-id"),
    }


def iter_entries(source: Union[str, Iterable[str]]) -> Iterator[RawEntry]:
    """Lazily yields a :class:`RawEntry` for each metadata line followed by a URL."""

    lines = source.splitlines() if isinstance(source, str) else source
    pending: Optional[dict] = None
    skipped = 0

    for raw_line in lines:
        line = raw_line.strip()
        if not line:
            continue
        if line.startswith(EXTINF_MARKER):
            if pending is not None:
                skipped += 1
            pending = parse_extinf(line)
            if pending is None:
                skipped += 1
            continue
        if pending is not None and URL_LINE_RE.match(line):
            yield RawEntry(url=line, **pending)
            pending = None

    if pending is not None:
        skipped += 1
    if skipped:
        logging.debug("Skipped %s playlist entries without a name or URL", skipped)
