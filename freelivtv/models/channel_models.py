"""Pydantic models that describe playlist entries and classified channels."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

URL_SCHEMES = ("http://", "https://", "rtmp://", "rtsp://")


class Category(str, Enum):
    CRICKET = "Cricket"
    MOVIES = "Movies"
    NEWS = "News"
    MUSIC = "Music"
    KIDS = "Kids"
    DEVOTIONAL = "Devotional"
    ENTERTAINMENT = "Entertainment"


class QualityTier(str, Enum):
    SD = "SD"
    HD = "HD"
    FHD = "FHD"
    UHD_4K = "4K"


class RawEntry(BaseModel):
    """One ``#EXTINF`` line paired with the stream URL that follows it."""

    model_config = ConfigDict(frozen=True)

    name: str
    group: str = ""
    logo: str = ""
    tvg_id: str = ""
    url: str


class Classification(BaseModel):
    """Outcome of running the rule tables against a raw entry."""

    model_config = ConfigDict(frozen=True)

    include: bool
    category: Category = Category.ENTERTAINMENT
    quality: QualityTier = QualityTier.SD
    priority: int = 0


class ChannelDescriptor(BaseModel):
    """A classified channel ready to be listed in the catalog.

    Instances are frozen: reclassification builds a new descriptor.
    """

    model_config = ConfigDict(frozen=True)

    display_name: str
    clean_name: str
    category: Category
    quality: QualityTier
    origin_url: str
    logo_url: Optional[str] = None
    group_label: str = ""
    priority: int

    @field_validator("origin_url")
    @classmethod
    def _require_scheme(cls, value: str) -> str:
        if not value or not value.lower().startswith(URL_SCHEMES):
            raise ValueError(f"unsupported stream URL: {value!r}")
        return value
