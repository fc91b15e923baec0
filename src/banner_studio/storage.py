from __future__ import annotations

import logging
import threading
import time
import uuid

from banner_studio.config import settings
from banner_studio.providers.gemini_provider import get_provider
from banner_studio.session import BannerSession, ProviderFactory, ThumbnailFetcher
from banner_studio.thumbnails import fetch_thumbnail

logger = logging.getLogger(__name__)


class SessionStore:
    """In-memory sessions keyed by cookie id. Nothing survives a restart."""

    def __init__(
        self,
        ttl_seconds: int | None = None,
        provider_factory: ProviderFactory = get_provider,
        thumbnail_fetcher: ThumbnailFetcher = fetch_thumbnail,
    ) -> None:
        self.ttl_seconds = settings.session_ttl_seconds if ttl_seconds is None else ttl_seconds
        self.provider_factory = provider_factory
        self.thumbnail_fetcher = thumbnail_fetcher
        self._sessions: dict[str, BannerSession] = {}
        self._last_seen: dict[str, float] = {}
        # sync routes run in the threadpool
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self) -> BannerSession:
        session_id = uuid.uuid4().hex[:12]
        session = BannerSession(
            session_id,
            provider_factory=self.provider_factory,
            thumbnail_fetcher=self.thumbnail_fetcher,
        )
        with self._lock:
            self._sessions[session_id] = session
            self._last_seen[session_id] = time.time()
        logger.info("Created session %s", session_id)
        return session

    def get(self, session_id: str | None) -> BannerSession | None:
        if not session_id:
            return None
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                self._last_seen[session_id] = time.time()
        return session

    def get_or_create(self, session_id: str | None) -> BannerSession:
        return self.get(session_id) or self.create()

    def prune(self, now: float | None = None) -> int:
        """Drop idle sessions older than the TTL. Sessions mid-flow are kept."""
        now = time.time() if now is None else now
        with self._lock:
            expired = [
                sid
                for sid, seen in list(self._last_seen.items())
                if now - seen > self.ttl_seconds and not self._sessions[sid].busy
            ]
            for sid in expired:
                self._sessions.pop(sid, None)
                self._last_seen.pop(sid, None)
        if expired:
            logger.info("Pruned %d idle sessions", len(expired))
        return len(expired)
