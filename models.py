"""Core data models for the app."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from errors import ERROR_POLICIES, ErrorKind

MAX_IMAGE_BYTES = 10 * 1024 * 1024


class WorkflowStep(str, Enum):
    SELECTING_IMAGE = "SELECTING_IMAGE"
    SELECTING_EMOJI = "SELECTING_EMOJI"
    PROCESSING = "PROCESSING"
    RESULT = "RESULT"
    FAILED = "FAILED"


@dataclass(frozen=True)
class ImagePayload:
    data_uri: str
    size: int
    media_type: str
    name: str = ""


@dataclass(frozen=True)
class EmojiSymbol:
    char: str
    name: str


@dataclass(frozen=True)
class TransformRequest:
    image: ImagePayload
    emoji: str

    def to_json(self) -> dict:
        return {"image": self.image.data_uri, "emoji": self.emoji}


@dataclass(frozen=True)
class TransformSuccess:
    transformed_image: bytes
    processing_time_ms: int
    model_version: str = ""
    request_id: str = ""


@dataclass(frozen=True)
class ErrorDetail:
    """The ``error`` object of a non-2xx service response."""

    message: str = ""
    type: str = ""
    param: Optional[str] = None
    code: Optional[str] = None
    suggestion: Optional[str] = None

    @classmethod
    def from_body(cls, body: object) -> Optional["ErrorDetail"]:
        if not isinstance(body, dict):
            return None
        error = body.get("error")
        if not isinstance(error, dict):
            return None

        def _opt(key: str) -> Optional[str]:
            value = error.get(key)
            return str(value) if value is not None else None

        return cls(
            message=str(error.get("message") or ""),
            type=str(error.get("type") or ""),
            param=_opt("param"),
            code=_opt("code"),
            suggestion=_opt("suggestion"),
        )


@dataclass(frozen=True)
class ErrorDescriptor:
    kind: ErrorKind
    message: str
    suggestion: Optional[str] = None
    quota_exhausted: bool = False

    @property
    def retryable(self) -> bool:
        return ERROR_POLICIES[self.kind].retryable


# ----------------------------------------------------------------------
# Workflow state variants
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class SelectingImage:
    step = WorkflowStep.SELECTING_IMAGE


@dataclass(frozen=True)
class SelectingEmoji:
    image: ImagePayload
    step = WorkflowStep.SELECTING_EMOJI


@dataclass(frozen=True)
class Processing:
    image: ImagePayload
    emoji: str
    step = WorkflowStep.PROCESSING


@dataclass(frozen=True)
class Result:
    image: ImagePayload
    emoji: str
    transformed_image: bytes
    processing_time_ms: int
    step = WorkflowStep.RESULT


@dataclass(frozen=True)
class Failed:
    image: ImagePayload
    emoji: str
    error: ErrorDescriptor
    step = WorkflowStep.FAILED


WorkflowState = Union[SelectingImage, SelectingEmoji, Processing, Result, Failed]
