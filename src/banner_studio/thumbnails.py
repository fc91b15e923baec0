from __future__ import annotations

import logging
import re

import httpx

from banner_studio.config import settings
from banner_studio.errors import InvalidLinkError, ThumbnailFetchError
from banner_studio.images import EmbeddableImage

logger = logging.getLogger(__name__)

# Short links, /v/ and /u/x/ paths, embeds and watch?v= / &v= query forms.
_VIDEO_ID_RE = re.compile(r"^.*(youtu.be/|v/|u/\w/|embed/|watch\?v=|&v=)([^#&?]*).*")

THUMBNAIL_BASE = "https://img.youtube.com/vi"


def extract_video_id(url: str) -> str | None:
    m = _VIDEO_ID_RE.match(url or "")
    if not m:
        return None
    video_id = m.group(2)
    return video_id if len(video_id) == 11 else None


def thumbnail_urls(video_id: str) -> tuple[str, str]:
    """Primary (max resolution) and fallback (hq) preview URLs."""
    return (
        f"{THUMBNAIL_BASE}/{video_id}/maxresdefault.jpg",
        f"{THUMBNAIL_BASE}/{video_id}/hqdefault.jpg",
    )


async def _get_image(client: httpx.AsyncClient, url: str) -> EmbeddableImage:
    resp = await client.get(url)
    resp.raise_for_status()
    mime = (resp.headers.get("content-type") or "").split(";", 1)[0].strip() or "image/jpeg"
    return EmbeddableImage.from_bytes(resp.content, mime)


async def fetch_thumbnail(url: str, client: httpx.AsyncClient | None = None) -> EmbeddableImage:
    """
    Fetch the preview image for a YouTube link.

    The max-resolution variant is tried first; on any HTTP or transport
    failure exactly one request is made for the hq variant.
    """
    video_id = extract_video_id(url)
    if not video_id:
        raise InvalidLinkError()

    primary, fallback = thumbnail_urls(video_id)
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=settings.thumbnail_timeout, follow_redirects=True)
    try:
        try:
            return await _get_image(client, primary)
        except httpx.HTTPError as exc:
            logger.info("Primary thumbnail for %s unavailable (%s); trying fallback", video_id, exc)

        try:
            return await _get_image(client, fallback)
        except httpx.HTTPError as exc:
            logger.warning("Fallback thumbnail for %s failed: %s", video_id, exc)
            raise ThumbnailFetchError() from exc
    finally:
        if owns_client:
            await client.aclose()
