"""Shared HTTP helpers for the playlist source and origin stream servers."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

import aiohttp
import requests

from ..models import FetchedDocument

PLAYER_USER_AGENT = "Mozilla/5.0 (SMART-TV; Linux; Tizen 5.0) AppleWebKit/537.36"

ORIGIN_HEADERS: Dict[str, str] = {
    "user-agent": PLAYER_USER_AGENT,
    "accept": "*/*",
    "referer": "https://freelivtvstrshare.vvishwas042.workers.dev/",
}


class FetchError(Exception):
    """Raised when an upstream request times out, fails or returns non-2xx."""

    def __init__(self, message: str, url: str = "", status: Optional[int] = None) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


class HttpClient:
    """Performs upstream requests with player headers and a bounded timeout."""

    def __init__(self, timeout: float = 15.0, headers: Optional[Dict[str, str]] = None) -> None:
        self.timeout = timeout
        self._headers = (headers or ORIGIN_HEADERS).copy()

        self._session = requests.Session()
        self._session.headers.update(self._headers)

        self._async_session: Optional[aiohttp.ClientSession] = None
        self._async_lock: Optional[asyncio.Lock] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._closing: Optional["asyncio.Task[None]"] = None

    def fetch_text(self, url: str) -> str:
        """Blocking fetch used by the command line preview."""

        try:
            response = self._session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            raise FetchError(f"{url} returned {status}", url=url, status=status) from exc
        except requests.RequestException as exc:
            logging.error("Fetching %s failed: %s", url, exc)
            raise FetchError(str(exc), url=url) from exc
        return response.text

    async def fetch_async(self, url: str) -> FetchedDocument:
        """Fetch ``url`` and return its body along with the post-redirect URL."""

        session = await self._get_async_session()
        try:
            async with session.get(url) as resp:
                if resp.status >= 400:
                    raise FetchError(f"{url} returned {resp.status}", url=url, status=resp.status)
                body = await resp.read()
                return FetchedDocument(
                    url=str(resp.url),
                    body=body,
                    content_type=resp.headers.get("content-type", ""),
                )
        except asyncio.TimeoutError as exc:
            raise FetchError(f"{url} timed out after {self.timeout}s", url=url) from exc
        except aiohttp.ClientError as exc:
            raise FetchError(str(exc) or exc.__class__.__name__, url=url) from exc

    @asynccontextmanager
    async def open_stream(self, url: str) -> AsyncIterator[aiohttp.ClientResponse]:
        """Open ``url`` for chunked pass-through; only connect and reads are bounded."""

        session = await self._get_async_session()
        timeout = aiohttp.ClientTimeout(total=None, sock_connect=self.timeout, sock_read=self.timeout)
        try:
            resp = await session.get(url, timeout=timeout)
        except asyncio.TimeoutError as exc:
            raise FetchError(f"{url} timed out after {self.timeout}s", url=url) from exc
        except aiohttp.ClientError as exc:
            raise FetchError(str(exc) or exc.__class__.__name__, url=url) from exc

        try:
            if resp.status >= 400:
                raise FetchError(f"Stream returned {resp.status}", url=url, status=resp.status)
            yield resp
        finally:
            resp.release()

    async def _get_async_session(self) -> aiohttp.ClientSession:
        current_loop = asyncio.get_running_loop()
        if self._async_session:
            if (
                self._async_session.closed
                or not self._loop
                or self._loop.is_closed()
                or self._loop is not current_loop
            ):
                await self._shutdown_async_session()

        if self._async_lock is None or self._loop is not current_loop:
            self._async_lock = asyncio.Lock()

        async with self._async_lock:
            if self._async_session and not self._async_session.closed:
                return self._async_session
            self._async_session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers=self._headers.copy(),
            )
            self._loop = current_loop
        return self._async_session

    async def _shutdown_async_session(self) -> None:
        if self._async_session:
            try:
                await self._async_session.close()
            except RuntimeError as exc:
                logging.debug("Ignoring error while closing stale session: %s", exc)
        self._async_session = None
        self._loop = None

    async def aclose(self) -> None:
        await self._shutdown_async_session()
        self._session.close()

    def close(self) -> None:
        """Closes both sessions; inside a running loop the async close is scheduled."""

        self._session.close()

        session = self._async_session
        self._async_session = None
        self._loop = None
        if session is None or session.closed:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is not None:
            self._closing = loop.create_task(session.close())
            return
        try:
            asyncio.run(session.close())
        except RuntimeError as exc:
            logging.debug("Ignoring error while closing stale session: %s", exc)

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
