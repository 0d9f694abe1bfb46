"""Settings and response records exposed by the addon surface."""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

DEFAULT_PLAYLIST_URL = "https://raw.githubusercontent.com/Jash-k/MyTVAddon/refs/heads/main/starshare.m3u"


class AddonSettings(BaseModel):
    """Runtime configuration assembled from the environment and CLI flags."""

    playlist_url: str = DEFAULT_PLAYLIST_URL
    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=1, le=65535)
    base_url: Optional[str] = None
    request_timeout: float = Field(default=15.0, gt=0)
    catalog_ttl: float = Field(default=30 * 60, gt=0)
    manifest_ttl: float = Field(default=4.0, gt=0)
    max_channels: int = Field(default=300, ge=1)
    max_manifest_entries: int = Field(default=200, ge=1)
    enable_manifest_proxy: bool = True
    enable_logos: bool = True
    id_prefix: str = "tamil:"


class MetaPreview(BaseModel):
    """Catalog entry as consumed by the player."""

    id: str
    type: str = "tv"
    name: str
    poster: Optional[str] = None
    logo: Optional[str] = None
    posterShape: str = "square"
    genres: List[str] = Field(default_factory=list)
    description: Optional[str] = None


class StreamOption(BaseModel):
    """A playable URL offered for a channel."""

    url: str
    name: str = "FREE LIV TV"
    title: str
    behaviorHints: Dict[str, bool] = Field(default_factory=lambda: {"notWebReady": False})
