from __future__ import annotations

from enum import Enum

from google.genai import errors as genai_errors


class ErrorKind(str, Enum):
    SAFETY = "safety"
    INVALID_CREDENTIAL = "invalid_credential"
    OVERLOADED = "overloaded"
    SERVER_FAULT = "server_fault"
    GENERIC = "generic"
    VALIDATION = "validation"


class BannerStudioError(Exception):
    """Base error. `user_message` is what the page shows."""

    kind: ErrorKind = ErrorKind.VALIDATION
    default_message = "An unexpected error occurred."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def user_message(self) -> str:
        return str(self)


class InvalidLinkError(BannerStudioError):
    default_message = "Invalid YouTube URL. Please check the link and try again."


class ThumbnailFetchError(BannerStudioError):
    default_message = "Could not fetch thumbnail image, even with fallback."


class UnsupportedImageTypeError(BannerStudioError):
    default_message = "Please upload a valid image file (JPEG or PNG)."


class ImageReadError(BannerStudioError):
    default_message = "Failed to read the person image file."


class UnsupportedAspectRatioError(BannerStudioError):
    default_message = "Please choose one of the offered aspect ratios."


class UnknownFilterError(BannerStudioError):
    default_message = "Unknown editing filter."


class NoImageProducedError(BannerStudioError):
    default_message = "No image was generated from the edit. Please try a different prompt."


class MissingCredentialError(BannerStudioError):
    kind = ErrorKind.INVALID_CREDENTIAL
    default_message = "GEMINI_API_KEY environment variable not set."


_USER_MESSAGES = {
    ErrorKind.INVALID_CREDENTIAL: "The server is incorrectly configured. API key is invalid.",
    ErrorKind.OVERLOADED: "The service is currently overloaded. Please wait a moment and try again.",
    ErrorKind.SERVER_FAULT: "An unexpected server error occurred. Please try again later.",
}

_SAFETY_MESSAGES = {
    "generate": "The prompt was blocked for safety reasons. Please modify your prompt and try again.",
    "edit": "The edit was blocked for safety reasons. Please modify your prompt and try again.",
}

_GENERIC_PREFIXES = {
    "generate": "Failed to generate banner.",
    "edit": "Failed to edit banner.",
}


class ServiceError(BannerStudioError):
    """A failed collaborator call, classified once where it was caught."""

    def __init__(self, kind: ErrorKind, operation: str, detail: str) -> None:
        super().__init__(detail)
        self.kind = kind
        self.operation = operation
        self.detail = detail

    @property
    def user_message(self) -> str:
        if self.kind == ErrorKind.SAFETY:
            return _SAFETY_MESSAGES.get(self.operation, _SAFETY_MESSAGES["generate"])
        if self.kind in _USER_MESSAGES:
            return _USER_MESSAGES[self.kind]
        prefix = _GENERIC_PREFIXES.get(self.operation, "Request failed.")
        return f"{prefix} Details: {self.detail}"

    @classmethod
    def from_exception(cls, exc: Exception, operation: str) -> "ServiceError":
        return cls(kind=classify_exception(exc), operation=operation, detail=str(exc))


def classify_message(message: str) -> ErrorKind:
    text = (message or "").lower()
    if "safety" in text:
        return ErrorKind.SAFETY
    if "api key not valid" in text:
        return ErrorKind.INVALID_CREDENTIAL
    if "429" in text or "resource has been exhausted" in text:
        return ErrorKind.OVERLOADED
    if "500" in text or "internal error" in text:
        return ErrorKind.SERVER_FAULT
    return ErrorKind.GENERIC


def classify_exception(exc: BaseException) -> ErrorKind:
    if isinstance(exc, genai_errors.APIError):
        code = getattr(exc, "code", None)
        if code == 429:
            return ErrorKind.OVERLOADED
        if isinstance(code, int) and code >= 500:
            return ErrorKind.SERVER_FAULT
    return classify_message(str(exc))
