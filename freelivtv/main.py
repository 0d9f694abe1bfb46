from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

from aiohttp import web
from dotenv import load_dotenv

from .addon.server import create_app
from .models import AddonSettings, Category, ChannelDescriptor
from .models.addon_models import DEFAULT_PLAYLIST_URL
from .playlist import PlaylistSource
from .playlist.catalog import filter_by_category
from .utils.http_client import FetchError, HttpClient

load_dotenv()


def _env_str(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return None
    return value


def _env_int(name: str) -> int | None:
    value = _env_str(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _env_float(name: str) -> float | None:
    value = _env_str(name)
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _env_bool(name: str, default: bool = False) -> bool:
    value = _env_str(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _category_arg(value: str) -> Category:
    for category in Category:
        if category.value.lower() == value.strip().lower():
            return category
    raise argparse.ArgumentTypeError(f"unknown category {value!r}")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    defaults = AddonSettings()
    parser = argparse.ArgumentParser(description="Serve a Tamil live TV catalog and stabilized HLS manifests.")
    parser.add_argument("--playlist-url", default=_env_str("PLAYLIST_URL") or DEFAULT_PLAYLIST_URL, help="Extended M3U playlist to ingest")
    parser.add_argument("--host", default=_env_str("HOST") or defaults.host, help="Interface to bind")
    parser.add_argument("--port", type=int, default=_env_int("PORT") or defaults.port, help="Port to listen on")
    parser.add_argument(
        "--base-url",
        default=_env_str("BASE_URL") or _env_str("RENDER_EXTERNAL_URL"),
        help="Public origin used when building manifest proxy URLs",
    )
    parser.add_argument(
        "--request-timeout",
        type=float,
        default=_env_float("REQUEST_TIMEOUT") or defaults.request_timeout,
        help="Seconds to wait for any upstream request",
    )
    parser.add_argument(
        "--catalog-ttl",
        type=float,
        default=_env_float("CHANNEL_CACHE_TTL") or defaults.catalog_ttl,
        help="Seconds a fetched catalog stays fresh",
    )
    parser.add_argument(
        "--manifest-ttl",
        type=float,
        default=_env_float("MANIFEST_CACHE_TTL") or defaults.manifest_ttl,
        help="Seconds a rewritten manifest stays fresh",
    )
    parser.add_argument("--max-channels", type=int, default=_env_int("MAX_CHANNELS") or defaults.max_channels, help="Cap on catalog size")
    parser.add_argument(
        "--max-cache-entries",
        type=int,
        default=_env_int("MAX_CACHE_ENTRIES") or defaults.max_manifest_entries,
        help="Cap on cached manifests",
    )
    parser.add_argument(
        "--no-manifest-proxy",
        action="store_true",
        default=not _env_bool("ENABLE_MANIFEST_PROXY", default=True),
        help="Only offer the direct origin URL for each channel",
    )
    parser.add_argument(
        "--no-logos",
        action="store_true",
        default=not _env_bool("ENABLE_LOGOS", default=True),
        help="Omit channel logos from catalog entries",
    )
    parser.add_argument(
        "--list-channels",
        action="store_true",
        default=_env_bool("LIST_CHANNELS"),
        help="Print the classified catalog and exit",
    )
    parser.add_argument("--category", type=_category_arg, default=None, help="With --list-channels, show one category only")
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> AddonSettings:
    return AddonSettings(
        playlist_url=args.playlist_url,
        host=args.host,
        port=args.port,
        base_url=args.base_url,
        request_timeout=args.request_timeout,
        catalog_ttl=args.catalog_ttl,
        manifest_ttl=args.manifest_ttl,
        max_channels=args.max_channels,
        max_manifest_entries=args.max_cache_entries,
        enable_manifest_proxy=not args.no_manifest_proxy,
        enable_logos=not args.no_logos,
    )


def configure_logging() -> None:
    level_name = "DEBUG" if _env_bool("DEBUG") else (_env_str("LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )


def print_channels(channels: List[ChannelDescriptor]) -> None:
    if not channels:
        logging.info("No channels matched.")
        return
    logging.info("%-4s | %-13s | %-4s | %s", "Prio", "Category", "Tier", "Name")
    logging.info("%s", "-" * 60)
    for channel in channels:
        logging.info("%-4s | %-13s | %-4s | %s", channel.priority, channel.category.value, channel.quality.value, channel.clean_name)


def list_channels(settings: AddonSettings, category: Optional[Category]) -> int:
    with HttpClient(timeout=settings.request_timeout) as http_client:
        source = PlaylistSource(http_client, settings.playlist_url, settings.max_channels)
        try:
            channels = source.load_sync()
        except FetchError as exc:
            logging.error("Failed to fetch playlist: %s", exc)
            return 1
    print_channels(filter_by_category(channels, category))
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    configure_logging()
    settings = build_settings(args)

    if args.list_channels:
        sys.exit(list_channels(settings, args.category))

    logging.info("FREE LIV TV addon listening on http://%s:%s/manifest.json", settings.host, settings.port)
    web.run_app(create_app(settings), host=settings.host, port=settings.port, print=None)


if __name__ == "__main__":
    main()
