from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from enum import Enum
from typing import Any

from banner_studio.errors import BannerStudioError, ErrorKind, InvalidLinkError, UnsupportedAspectRatioError
from banner_studio.images import EmbeddableImage, load_upload
from banner_studio.presets import DEFAULT_ASPECT_RATIO, filter_instruction, is_aspect_ratio
from banner_studio.providers.base import BannerProvider, GenerationRequest
from banner_studio.providers.gemini_provider import get_provider
from banner_studio.thumbnails import extract_video_id, fetch_thumbnail

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[], BannerProvider]
ThumbnailFetcher = Callable[[str], Awaitable[EmbeddableImage]]


class Phase(str, Enum):
    IDLE = "idle"
    FETCHING_THUMBNAIL = "fetching_thumbnail"
    GENERATING = "generating"
    EDITING = "editing"


class BannerSession:
    """
    Transient state of one user's banner workspace plus the flows acting on it.

    Only one flow runs at a time: `phase` leaves IDLE when a flow starts and
    always returns to IDLE when it ends. The check and the transition happen
    before the first await, so a second request arriving mid-flight is
    ignored. Every failure is caught here and stored as `error`.
    """

    def __init__(
        self,
        session_id: str,
        provider_factory: ProviderFactory = get_provider,
        thumbnail_fetcher: ThumbnailFetcher = fetch_thumbnail,
    ) -> None:
        self.session_id = session_id
        self._provider_factory = provider_factory
        self._thumbnail_fetcher = thumbnail_fetcher

        self.prompt = ""
        self.aspect_ratio = DEFAULT_ASPECT_RATIO
        self.use_deep_research = False
        self.youtube_url = ""
        self.edit_prompt = ""

        self.reference_image: EmbeddableImage | None = None
        self.person_image: EmbeddableImage | None = None
        self.result: EmbeddableImage | None = None

        self.error: str | None = None
        self.error_kind: ErrorKind | None = None
        self.phase = Phase.IDLE

    @property
    def busy(self) -> bool:
        return self.phase is not Phase.IDLE

    @contextmanager
    def _running(self, phase: Phase) -> Iterator[None]:
        self.phase = phase
        self._clear_error()
        try:
            yield
        except BannerStudioError as exc:
            logger.warning("Session %s: %s failed (%s): %s", self.session_id, phase.value, exc.kind.value, exc)
            self._fail(exc)
        except Exception as exc:
            logger.exception("Session %s: %s failed unexpectedly", self.session_id, phase.value)
            self.error = f"An unexpected error occurred. Details: {exc}"
            self.error_kind = ErrorKind.GENERIC
        finally:
            self.phase = Phase.IDLE

    def _fail(self, exc: BannerStudioError) -> None:
        self.error = exc.user_message
        self.error_kind = exc.kind

    def _clear_error(self) -> None:
        self.error = None
        self.error_kind = None

    async def fetch_thumbnail(self, url: str) -> None:
        if self.busy:
            logger.info("Session %s: thumbnail fetch ignored while %s", self.session_id, self.phase.value)
            return
        self.youtube_url = url
        if not extract_video_id(url):
            self._fail(InvalidLinkError())
            return

        self.reference_image = None
        with self._running(Phase.FETCHING_THUMBNAIL):
            self.reference_image = await self._thumbnail_fetcher(url)

    def load_person_image(self, content_type: str | None, content: bytes) -> None:
        try:
            image = load_upload(content_type, content)
        except BannerStudioError as exc:
            self._fail(exc)
            return
        self.person_image = image
        self._clear_error()

    def clear_reference_image(self) -> None:
        self.reference_image = None

    def clear_person_image(self) -> None:
        self.person_image = None

    async def generate(self, prompt: str, aspect_ratio: str | None = None, use_deep_research: bool = False) -> None:
        if not (prompt or "").strip() or self.busy:
            return
        aspect_ratio = aspect_ratio or DEFAULT_ASPECT_RATIO
        if not is_aspect_ratio(aspect_ratio):
            self._fail(UnsupportedAspectRatioError())
            return

        self.prompt = prompt
        self.aspect_ratio = aspect_ratio
        self.use_deep_research = use_deep_research
        self.result = None
        self.edit_prompt = ""

        request = GenerationRequest(
            prompt=prompt,
            aspect_ratio=aspect_ratio,
            use_deep_research=use_deep_research,
            reference_image=self.reference_image,
            person_image=self.person_image,
        )
        with self._running(Phase.GENERATING):
            provider = self._provider_factory()
            composed = await provider.compose_prompt(request)
            logger.debug("Session %s: composed prompt %r", self.session_id, composed)
            self.result = await provider.synthesize(composed, aspect_ratio)

    async def edit(self, instruction: str) -> None:
        """Free-text edit; a successful edit clears the edit field."""
        self.edit_prompt = instruction or ""
        if await self._edit(instruction):
            self.edit_prompt = ""

    async def apply_filter(self, name: str) -> None:
        """Preset edit; leaves the free-text edit field alone."""
        await self._edit(filter_instruction(name))

    async def _edit(self, instruction: str) -> bool:
        if not (instruction or "").strip() or self.result is None or self.busy:
            return False
        base = self.result
        edited: EmbeddableImage | None = None
        with self._running(Phase.EDITING):
            provider = self._provider_factory()
            edited = await provider.edit(base, instruction)
        if edited is None:
            return False
        self.result = edited
        return True

    def download_filename(self) -> str:
        stem = re.sub(r"\s", "_", self.prompt[:20])
        return f"ai-banner-{stem}.jpeg"

    def snapshot(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "phase": self.phase.value,
            "prompt": self.prompt,
            "aspect_ratio": self.aspect_ratio,
            "use_deep_research": self.use_deep_research,
            "youtube_url": self.youtube_url,
            "edit_prompt": self.edit_prompt,
            "reference_image": self.reference_image.data_url if self.reference_image else None,
            "person_image": self.person_image.data_url if self.person_image else None,
            "result": self.result.data_url if self.result else None,
            "error": self.error,
            "error_kind": self.error_kind.value if self.error_kind else None,
        }
