"""Addon descriptor advertised at ``/manifest.json``."""

from __future__ import annotations

from typing import Any, Dict, Optional

from ..models import AddonSettings, Category

ADDON_ID = "org.freelivtv.tamil"
ADDON_NAME = "FREE LIV TV"
ADDON_VERSION = "2.0.0"
CONTENT_TYPE = "tv"
ALL_CATALOG_ID = "tamil-all"

CATALOG_CATEGORIES: Dict[str, Optional[Category]] = {ALL_CATALOG_ID: None}
CATALOG_CATEGORIES.update({f"tamil-{category.value.lower()}": category for category in Category})


def catalog_name(catalog_id: str) -> str:
    category = CATALOG_CATEGORIES[catalog_id]
    return category.value if category is not None else "All Channels"


def build_addon_manifest(settings: AddonSettings) -> Dict[str, Any]:
    return {
        "id": ADDON_ID,
        "version": ADDON_VERSION,
        "name": ADDON_NAME,
        "description": "Tamil Live TV - Cricket, Movies, News and more",
        "types": [CONTENT_TYPE],
        "catalogs": [
            {"type": CONTENT_TYPE, "id": catalog_id, "name": catalog_name(catalog_id)}
            for catalog_id in CATALOG_CATEGORIES
        ],
        "resources": ["catalog", "stream"],
        "idPrefixes": [settings.id_prefix],
        "behaviorHints": {"adult": False, "p2p": False},
    }
