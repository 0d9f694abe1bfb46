"""Playlist parsing, classification and the channel catalog cache."""

from .catalog import ChannelCatalogCache, PlaylistSource, build_catalog
from .classifier import ChannelClassifier, clean_name
from .m3u_parser import iter_entries

__all__ = ["ChannelCatalogCache", "PlaylistSource", "build_catalog", "ChannelClassifier", "clean_name", "iter_entries"]
