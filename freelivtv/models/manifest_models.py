"""Models used while fetching and rewriting HLS manifests."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ManifestVariant(BaseModel):
    """A single ``#EXT-X-STREAM-INF`` rendition from a master playlist."""

    bandwidth: int
    uri: str


class FetchedDocument(BaseModel):
    """Body of an upstream response together with its final URL."""

    model_config = ConfigDict(frozen=True)

    url: str
    body: bytes
    content_type: str = ""

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")
