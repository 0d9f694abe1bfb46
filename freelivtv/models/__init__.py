"""Data models for channels, manifests, settings and addon responses."""

from .addon_models import AddonSettings, MetaPreview, StreamOption
from .channel_models import Category, ChannelDescriptor, Classification, QualityTier, RawEntry
from .manifest_models import FetchedDocument, ManifestVariant

__all__ = [
    "AddonSettings",
    "MetaPreview",
    "StreamOption",
    "Category",
    "QualityTier",
    "RawEntry",
    "Classification",
    "ChannelDescriptor",
    "FetchedDocument",
    "ManifestVariant",
]
