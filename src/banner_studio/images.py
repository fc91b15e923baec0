from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from io import BytesIO

from PIL import Image, UnidentifiedImageError

from banner_studio.errors import ImageReadError, UnsupportedImageTypeError

logger = logging.getLogger(__name__)

ACCEPTED_UPLOAD_TYPES = ("image/jpeg", "image/png")


@dataclass(frozen=True)
class EmbeddableImage:
    """An image carried inline: MIME type plus base64 text."""

    mime_type: str
    data: str

    @classmethod
    def from_bytes(cls, raw: bytes, mime_type: str) -> "EmbeddableImage":
        return cls(mime_type=mime_type, data=base64.b64encode(raw).decode("ascii"))

    def to_bytes(self) -> bytes:
        return base64.b64decode(self.data)

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


def load_upload(content_type: str | None, content: bytes) -> EmbeddableImage:
    """
    Validate an uploaded file and wrap it as an EmbeddableImage.

    Only the declared type is checked against the accepted list; Pillow is
    used to make sure the bytes are actually a readable image. The stored
    payload is the original bytes, unchanged.
    """
    mime = (content_type or "").split(";", 1)[0].strip().lower()
    if mime not in ACCEPTED_UPLOAD_TYPES:
        raise UnsupportedImageTypeError()
    if not content:
        raise ImageReadError()
    try:
        with Image.open(BytesIO(content)) as img:
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as exc:
        logger.warning("Rejected unreadable upload (%s, %d bytes): %s", mime, len(content), exc)
        raise ImageReadError() from exc
    return EmbeddableImage.from_bytes(content, mime)

