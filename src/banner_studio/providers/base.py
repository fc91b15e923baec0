from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from banner_studio.images import EmbeddableImage


@dataclass(frozen=True)
class GenerationRequest:
    prompt: str
    aspect_ratio: str
    use_deep_research: bool = False
    reference_image: EmbeddableImage | None = None
    person_image: EmbeddableImage | None = None


class PromptComposer(Protocol):
    async def compose_prompt(self, request: GenerationRequest) -> str: ...


class BannerSynthesizer(Protocol):
    async def synthesize(self, prompt: str, aspect_ratio: str) -> EmbeddableImage: ...


class BannerEditor(Protocol):
    async def edit(self, image: EmbeddableImage, instruction: str) -> EmbeddableImage: ...


class BannerProvider(PromptComposer, BannerSynthesizer, BannerEditor, Protocol):
    name: str
