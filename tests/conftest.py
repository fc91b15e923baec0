from __future__ import annotations

from io import BytesIO

import pytest
from PIL import Image

from banner_studio.errors import BannerStudioError
from banner_studio.images import EmbeddableImage
from banner_studio.providers.base import GenerationRequest


def _encode(fmt: str, color: tuple[int, int, int]) -> bytes:
    buf = BytesIO()
    Image.new("RGB", (8, 4), color).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return _encode("PNG", (200, 30, 30))


@pytest.fixture
def jpeg_bytes() -> bytes:
    return _encode("JPEG", (30, 30, 200))


class FakeProvider:
    """Records collaborator calls; returns canned values or raises canned errors."""

    name = "fake"

    def __init__(
        self,
        composed: str = "A cinematic 16:9 banner of a red kite",
        image: EmbeddableImage | None = None,
        edited: EmbeddableImage | None = None,
        error: BannerStudioError | None = None,
    ) -> None:
        self.composed = composed
        self.image = image or EmbeddableImage.from_bytes(b"generated", "image/jpeg")
        self.edited = edited or EmbeddableImage.from_bytes(b"edited", "image/png")
        self.error = error
        self.compose_calls: list[GenerationRequest] = []
        self.synthesize_calls: list[tuple[str, str]] = []
        self.edit_calls: list[tuple[EmbeddableImage, str]] = []

    async def compose_prompt(self, request: GenerationRequest) -> str:
        self.compose_calls.append(request)
        if self.error:
            raise self.error
        return self.composed

    async def synthesize(self, prompt: str, aspect_ratio: str) -> EmbeddableImage:
        self.synthesize_calls.append((prompt, aspect_ratio))
        return self.image

    async def edit(self, image: EmbeddableImage, instruction: str) -> EmbeddableImage:
        self.edit_calls.append((image, instruction))
        if self.error:
            raise self.error
        return self.edited


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()
