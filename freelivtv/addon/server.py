"""aiohttp application exposing the addon routes and the HLS manifest proxy."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

import aiohttp
from aiohttp import web

from ..hls import ManifestCache, ManifestResolver
from ..models import AddonSettings
from ..playlist import ChannelCatalogCache, PlaylistSource
from ..utils.http_client import FetchError, HttpClient
from ..utils.id_codec import DecodeError
from .manifest import build_addon_manifest
from .service import AddonService

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]

HLS_CONTENT_TYPE = "text/vnd.apple.mpegurl"
CHUNK_SIZE = 1 << 16
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
}

HTTP_CLIENT_KEY = web.AppKey("http_client", HttpClient)
SERVICE_KEY = web.AppKey("service", AddonService)


@web.middleware
async def cors_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    if request.method == "OPTIONS":
        return web.Response(status=200, headers=CORS_HEADERS)
    try:
        response = await handler(request)
    except web.HTTPException as exc:
        exc.headers.update(CORS_HEADERS)
        raise
    if not response.prepared:
        response.headers.update(CORS_HEADERS)
    return response


@web.middleware
async def error_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    try:
        return await handler(request)
    except web.HTTPNotFound:
        return web.json_response({"error": "Not found"}, status=404)
    except web.HTTPException:
        raise
    except asyncio.CancelledError:
        raise
    except Exception:
        logging.exception("[ERROR] %s %s", request.method, request.path)
        return web.json_response({"error": "Internal server error"}, status=500)


@web.middleware
async def logging_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    logging.info("%s %s", request.method, request.path)
    return await handler(request)


def request_base_url(request: web.Request) -> str:
    scheme = request.headers.get("X-Forwarded-Proto", request.scheme).split(",")[0].strip()
    return f"{scheme}://{request.host}"


class AddonRoutes:
    """Request handlers; each one delegates to :class:`AddonService`."""

    def __init__(self, settings: AddonSettings, service: AddonService, http_client: HttpClient) -> None:
        self.settings = settings
        self.service = service
        self._client = http_client

    async def manifest(self, request: web.Request) -> web.Response:
        return web.json_response(build_addon_manifest(self.settings))

    async def catalog(self, request: web.Request) -> web.Response:
        payload = await self.service.catalog(request.match_info["type"], request.match_info["id"])
        return web.json_response(payload)

    async def stream(self, request: web.Request) -> web.Response:
        payload = await self.service.streams(
            request.match_info["type"],
            request.match_info["id"],
            request_base_url(request),
        )
        return web.json_response(payload)

    async def hls_playlist(self, request: web.Request) -> web.Response:
        body = await self.service.manifest_playlist(request.match_info["encoded_id"])
        return web.Response(
            text=body,
            content_type=HLS_CONTENT_TYPE,
            headers={"Cache-Control": "no-cache"},
        )

    async def proxy(self, request: web.Request) -> web.StreamResponse:
        """Pipes the origin stream bytes through for players that cannot reach it."""

        try:
            stream_url = self.service.decode_origin(request.match_info["encoded_id"])
        except DecodeError as exc:
            logging.error("[PROXY] Error: %s", exc)
            return web.Response(status=503, text="Stream unavailable")

        logging.info("[PROXY] Fetching: %s", stream_url)
        try:
            async with self._client.open_stream(stream_url) as upstream:
                response = web.StreamResponse(
                    headers={"Cache-Control": "no-cache", **CORS_HEADERS},
                )
                content_type = upstream.headers.get("content-type")
                if content_type:
                    response.headers["Content-Type"] = content_type
                await response.prepare(request)
                try:
                    async for chunk in upstream.content.iter_chunked(CHUNK_SIZE):
                        await response.write(chunk)
                except ConnectionResetError:
                    logging.debug("[PROXY] Client disconnected from %s", stream_url)
                    return response
                except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
                    logging.warning("[PROXY] Upstream broke off %s: %s", stream_url, exc)
                    return response
                await response.write_eof()
                return response
        except FetchError as exc:
            logging.error("[PROXY] Error: %s", exc)
            return web.Response(status=503, text="Stream unavailable")

    async def health(self, request: web.Request) -> web.Response:
        return web.json_response({"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()})


def build_service(settings: AddonSettings, http_client: HttpClient) -> AddonService:
    source = PlaylistSource(http_client, settings.playlist_url, settings.max_channels)
    catalog = ChannelCatalogCache(source, ttl=settings.catalog_ttl)
    manifests = ManifestCache(
        ManifestResolver(http_client),
        ttl=settings.manifest_ttl,
        max_entries=settings.max_manifest_entries,
    )
    return AddonService(settings, catalog, manifests)


async def _close_http_client(app: web.Application) -> None:
    await app[HTTP_CLIENT_KEY].aclose()


def create_app(
    settings: AddonSettings,
    http_client: Optional[HttpClient] = None,
    service: Optional[AddonService] = None,
) -> web.Application:
    http_client = http_client or HttpClient(timeout=settings.request_timeout)
    service = service or build_service(settings, http_client)
    routes = AddonRoutes(settings, service, http_client)

    app = web.Application(middlewares=[cors_middleware, error_middleware, logging_middleware])
    app[HTTP_CLIENT_KEY] = http_client
    app[SERVICE_KEY] = service
    app.router.add_get("/manifest.json", routes.manifest)
    app.router.add_get("/catalog/{type}/{id}.json", routes.catalog)
    app.router.add_get("/catalog/{type}/{id}/{extra}.json", routes.catalog)
    app.router.add_get("/stream/{type}/{id}.json", routes.stream)
    app.router.add_get("/hls/{encoded_id}/playlist.m3u8", routes.hls_playlist)
    app.router.add_get("/proxy/{encoded_id}", routes.proxy)
    app.router.add_get("/health", routes.health)
    app.on_cleanup.append(_close_http_client)
    return app
