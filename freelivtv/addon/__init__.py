"""Addon descriptor, request handling service and HTTP server."""

from .manifest import build_addon_manifest
from .server import create_app
from .service import AddonService

__all__ = ["build_addon_manifest", "create_app", "AddonService"]
