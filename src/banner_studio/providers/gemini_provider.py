from __future__ import annotations

import logging
from typing import Any

from google import genai
from google.genai import types

from banner_studio.config import Settings, settings as default_settings
from banner_studio.errors import ErrorKind, MissingCredentialError, NoImageProducedError, ServiceError
from banner_studio.images import EmbeddableImage
from banner_studio.prompts import build_composer_instruction, build_edit_instruction
from banner_studio.providers.base import GenerationRequest

logger = logging.getLogger(__name__)


class GeminiProvider:
    name = "gemini"

    def __init__(self, api_key: str, client: Any | None = None, config: Settings | None = None) -> None:
        self.client = client if client is not None else genai.Client(api_key=api_key)
        self.settings = config or default_settings

    async def compose_prompt(self, request: GenerationRequest) -> str:
        """
        Ask the text model for one dense image-generation prompt.

        Search grounding is always on. Deep research switches to the larger
        model and grants it a thinking budget.
        """
        model = self.settings.deep_research_model if request.use_deep_research else self.settings.prompt_model
        config = types.GenerateContentConfig(
            tools=[types.Tool(google_search=types.GoogleSearch())],
            thinking_config=(
                types.ThinkingConfig(thinking_budget=self.settings.deep_research_thinking_budget)
                if request.use_deep_research
                else None
            ),
        )

        instruction = build_composer_instruction(
            prompt=request.prompt,
            aspect_ratio=request.aspect_ratio,
            has_reference=request.reference_image is not None,
            has_person=request.person_image is not None,
        )
        parts: list[types.Part] = [types.Part.from_text(text=instruction)]
        for image in (request.person_image, request.reference_image):
            if image is not None:
                parts.append(_image_part(image))

        logger.info(
            "Composing prompt with %s (deep_research=%s, parts=%d)", model, request.use_deep_research, len(parts)
        )
        try:
            resp = await self.client.aio.models.generate_content(
                model=model,
                contents=[types.Content(role="user", parts=parts)],
                config=config,
            )
        except Exception as exc:
            raise ServiceError.from_exception(exc, "generate") from exc

        text: str | None = getattr(resp, "text", None)
        if not text:
            raise ServiceError(ErrorKind.GENERIC, "generate", "The prompt model returned no text.")
        return text

    async def synthesize(self, prompt: str, aspect_ratio: str) -> EmbeddableImage:
        model = self.settings.image_model
        logger.info("Generating banner with %s (aspect_ratio=%s)", model, aspect_ratio)
        try:
            resp = await self.client.aio.models.generate_images(
                model=model,
                prompt=prompt,
                config=types.GenerateImagesConfig(
                    number_of_images=1,
                    aspect_ratio=aspect_ratio,
                    output_mime_type="image/jpeg",
                    output_compression_quality=self.settings.image_quality,
                ),
            )
        except Exception as exc:
            raise ServiceError.from_exception(exc, "generate") from exc

        generated = getattr(resp, "generated_images", None) or []
        first = generated[0] if generated else None
        img_bytes = getattr(getattr(first, "image", None), "image_bytes", None)
        if not img_bytes:
            reason = getattr(first, "rai_filtered_reason", None)
            if reason:
                raise ServiceError(ErrorKind.SAFETY, "generate", f"Image filtered by safety policy: {reason}")
            raise ServiceError(ErrorKind.GENERIC, "generate", "The image model returned no image.")
        mime = getattr(first.image, "mime_type", None) or "image/jpeg"
        return EmbeddableImage.from_bytes(img_bytes, mime)

    async def edit(self, image: EmbeddableImage, instruction: str) -> EmbeddableImage:
        model = self.settings.edit_model
        logger.info("Editing banner with %s", model)
        try:
            resp = await self.client.aio.models.generate_content(
                model=model,
                contents=[
                    types.Content(
                        role="user",
                        parts=[_image_part(image), types.Part.from_text(text=build_edit_instruction(instruction))],
                    )
                ],
                config=types.GenerateContentConfig(response_modalities=["IMAGE"]),
            )
        except Exception as exc:
            raise ServiceError.from_exception(exc, "edit") from exc

        edited = first_inline_image(resp)
        if edited is None:
            raise NoImageProducedError()
        return edited


_providers: dict[tuple[int, str], GeminiProvider] = {}


def get_provider(config: Settings | None = None) -> GeminiProvider:
    """Return the provider for these settings, building its client once."""
    config = config or default_settings
    if not config.gemini_api_key:
        raise MissingCredentialError()
    # the cached provider holds `config`, so its id stays unique while cached
    key = (id(config), config.gemini_api_key)
    provider = _providers.get(key)
    if provider is None:
        provider = _providers[key] = GeminiProvider(api_key=config.gemini_api_key, config=config)
    return provider


def _image_part(image: EmbeddableImage) -> types.Part:
    return types.Part.from_bytes(data=image.to_bytes(), mime_type=image.mime_type)


def first_inline_image(resp: Any) -> EmbeddableImage | None:
    """
    Return the first part carrying inline image data.

    Candidates are scanned in order, then their parts in order. The edit
    model is expected to return exactly one image; if it returns several,
    the first one wins.
    """
    for cand in getattr(resp, "candidates", None) or []:
        content = getattr(cand, "content", None)
        parts = getattr(content, "parts", None) or []
        for part in parts:
            inline = getattr(part, "inline_data", None)
            if not inline:
                continue
            data = getattr(inline, "data", None)
            if not data:
                continue
            mime = getattr(inline, "mime_type", None) or "image/png"
            if not mime.startswith("image/"):
                continue
            return EmbeddableImage.from_bytes(data, mime)
    return None
