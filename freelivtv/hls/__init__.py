"""HLS manifest fetching, rewriting and caching."""

from .manifest_cache import ManifestCache
from .manifest_resolver import ManifestResolver
from .manifest_rewriter import EMPTY_MANIFEST, ParseError

__all__ = ["ManifestCache", "ManifestResolver", "EMPTY_MANIFEST", "ParseError"]
