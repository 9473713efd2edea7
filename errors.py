"""Shared error kinds, per-kind policy and user-facing messages."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from models import ErrorDetail


class ErrorKind(str, Enum):
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    INVALID_IMAGE_FORMAT = "invalid_image_format"
    UNSUPPORTED_IMAGE_TYPE = "unsupported_image_type"
    IMAGE_TOO_LARGE = "image_too_large"
    GEMINI_API_ERROR = "gemini_api_error"
    GEMINI_QUOTA_EXCEEDED = "gemini_quota_exceeded"
    CONTENT_FILTERED = "content_filtered"
    NO_FACES_DETECTED = "no_faces_detected"
    TRANSFORMATION_FAILED = "transformation_failed"
    AI_TIMEOUT = "ai_timeout"
    UNCLASSIFIED = "unclassified"


@dataclass(frozen=True)
class ErrorPolicy:
    retryable: bool
    locks_quota: bool = False


ERROR_POLICIES = {
    ErrorKind.RATE_LIMIT_EXCEEDED: ErrorPolicy(retryable=False, locks_quota=True),
    ErrorKind.INVALID_IMAGE_FORMAT: ErrorPolicy(retryable=True),
    ErrorKind.UNSUPPORTED_IMAGE_TYPE: ErrorPolicy(retryable=True),
    ErrorKind.IMAGE_TOO_LARGE: ErrorPolicy(retryable=True),
    ErrorKind.GEMINI_API_ERROR: ErrorPolicy(retryable=True),
    ErrorKind.GEMINI_QUOTA_EXCEEDED: ErrorPolicy(retryable=True),
    ErrorKind.CONTENT_FILTERED: ErrorPolicy(retryable=False),
    ErrorKind.NO_FACES_DETECTED: ErrorPolicy(retryable=True),
    ErrorKind.TRANSFORMATION_FAILED: ErrorPolicy(retryable=True),
    ErrorKind.AI_TIMEOUT: ErrorPolicy(retryable=True),
    ErrorKind.UNCLASSIFIED: ErrorPolicy(retryable=True),
}

# Codes the deployed service sends for kinds that go by another name here.
CODE_ALIASES = {
    "gemini_content_filtered": ErrorKind.CONTENT_FILTERED,
    "gemini_timeout": ErrorKind.AI_TIMEOUT,
}

GENERIC_FAILURE_MESSAGE = "Failed to transform image"

ERROR_MESSAGES = {
    ErrorKind.RATE_LIMIT_EXCEEDED: "Daily transformation limit reached.",
    ErrorKind.INVALID_IMAGE_FORMAT: "The image could not be decoded.",
    ErrorKind.UNSUPPORTED_IMAGE_TYPE: "This image type is not supported.",
    ErrorKind.IMAGE_TOO_LARGE: "The image is too large.",
    ErrorKind.GEMINI_API_ERROR: "AI service temporarily unavailable. Please try again.",
    ErrorKind.GEMINI_QUOTA_EXCEEDED: "AI service quota exceeded. Please try again later.",
    ErrorKind.CONTENT_FILTERED: "The AI service flagged this content as inappropriate.",
    ErrorKind.NO_FACES_DETECTED: "No faces detected in the image.",
    ErrorKind.TRANSFORMATION_FAILED: "Failed to transform the facial expression.",
    ErrorKind.AI_TIMEOUT: "AI service took too long to respond.",
    ErrorKind.UNCLASSIFIED: GENERIC_FAILURE_MESSAGE,
}

ERROR_SUGGESTIONS = {
    ErrorKind.RATE_LIMIT_EXCEEDED: "Please wait until tomorrow to make more requests.",
    ErrorKind.INVALID_IMAGE_FORMAT: "Please upload a valid image file (JPEG, PNG, or WebP).",
    ErrorKind.UNSUPPORTED_IMAGE_TYPE: "Please upload a JPEG, PNG, or WebP image.",
    ErrorKind.IMAGE_TOO_LARGE: "Please upload a smaller image (max 10MB).",
    ErrorKind.GEMINI_API_ERROR: "The AI service is experiencing issues. Please try again in a few minutes.",
    ErrorKind.GEMINI_QUOTA_EXCEEDED: "The AI service is at capacity. Please try again in a few hours.",
    ErrorKind.CONTENT_FILTERED: "Try using a different image or emoji that follows our content guidelines.",
    ErrorKind.NO_FACES_DETECTED: "Please upload an image with a clear face.",
    ErrorKind.TRANSFORMATION_FAILED: "Please try with a different emoji or image.",
    ErrorKind.AI_TIMEOUT: "Please try again with a simpler image.",
}


def kind_for_code(code: Optional[str]) -> Optional[ErrorKind]:
    """Map a service ``code`` string onto the closed enumeration, if known."""
    if not code:
        return None
    key = code.strip().lower()
    if key in CODE_ALIASES:
        return CODE_ALIASES[key]
    try:
        kind = ErrorKind(key)
    except ValueError:
        return None
    # the fallback row is never selected by a code
    return None if kind is ErrorKind.UNCLASSIFIED else kind


# ----------------------------------------------------------------------
# Local image validation (never enters the workflow as a failure)
# ----------------------------------------------------------------------


class ImageErrorKind(str, Enum):
    NOT_AN_IMAGE = "not_an_image"
    TOO_LARGE = "too_large"
    READ_FAILURE = "read_failure"


IMAGE_ERROR_MESSAGES = {
    ImageErrorKind.NOT_AN_IMAGE: "Please upload an image file",
    ImageErrorKind.TOO_LARGE: "Image must be less than 10MB",
    ImageErrorKind.READ_FAILURE: "Failed to read file",
}


class ImageValidationError(Exception):
    def __init__(self, kind: ImageErrorKind, detail: str = "") -> None:
        self.kind = kind
        self.message = IMAGE_ERROR_MESSAGES[kind]
        self.detail = detail
        super().__init__(f"{self.message}: {detail}" if detail else self.message)


# ----------------------------------------------------------------------
# Transport / service failures, raised by the transform client
# ----------------------------------------------------------------------


class TransformFailure(Exception):
    """A failed transform attempt, before classification."""

    def __init__(
        self,
        status: Optional[int] = None,
        detail: Optional["ErrorDetail"] = None,
        message: str = "",
        timed_out: bool = False,
    ) -> None:
        self.status = status
        self.detail = detail
        self.message = message
        self.timed_out = timed_out
        super().__init__(self.fallback_message())

    def fallback_message(self) -> str:
        """Body message, else transport message, else the HTTP status."""
        detail_message = (self.detail.message or "").strip() if self.detail is not None else ""
        if detail_message:
            return detail_message
        if self.message.strip():
            return self.message.strip()
        if self.status is not None:
            return f"HTTP error! status: {self.status}"
        return GENERIC_FAILURE_MESSAGE
