"""Turns a failed transform attempt into a single ErrorDescriptor.

Classification order:

1. A structured error body whose ``code`` names a known kind wins. Message
   and suggestion come from the body, falling back to the per-kind defaults.
2. A client-side timeout is reported as ``ai_timeout``.
3. Anything else is unclassified, except that a message mentioning
   "rate limit" is treated as ``rate_limit_exceeded``. Older deployments
   report the daily limit only in free text.

Retry and lockout policy are looked up from the kind; nothing downstream
inspects the message again.
"""

from __future__ import annotations

from typing import Optional

from errors import (
    ERROR_MESSAGES,
    ERROR_POLICIES,
    ERROR_SUGGESTIONS,
    ErrorKind,
    TransformFailure,
    kind_for_code,
)
from models import ErrorDescriptor

RATE_LIMIT_MARKER = "rate limit"


def _text(value: Optional[str]) -> str:
    return (value or "").strip()


def _descriptor(kind: ErrorKind, message: str, suggestion: Optional[str]) -> ErrorDescriptor:
    return ErrorDescriptor(
        kind=kind,
        message=message,
        suggestion=suggestion,
        quota_exhausted=ERROR_POLICIES[kind].locks_quota,
    )


def classify(failure: TransformFailure) -> ErrorDescriptor:
    detail = failure.detail

    kind = kind_for_code(detail.code) if detail is not None else None
    if kind is not None:
        message = _text(detail.message) or ERROR_MESSAGES[kind]
        suggestion = _text(detail.suggestion) or ERROR_SUGGESTIONS.get(kind)
        return _descriptor(kind, message, suggestion)

    suggestion = _text(detail.suggestion) if detail is not None else ""

    if failure.timed_out:
        kind = ErrorKind.AI_TIMEOUT
        return _descriptor(kind, ERROR_MESSAGES[kind], suggestion or ERROR_SUGGESTIONS[kind])

    message = failure.fallback_message()
    if RATE_LIMIT_MARKER in message.lower():
        kind = ErrorKind.RATE_LIMIT_EXCEEDED
        return _descriptor(kind, message, suggestion or ERROR_SUGGESTIONS[kind])

    return _descriptor(ErrorKind.UNCLASSIFIED, message, suggestion or None)


def classify_exception(exc: BaseException) -> ErrorDescriptor:
    """Classify anything the transform client raised."""
    if isinstance(exc, TransformFailure):
        return classify(exc)
    return classify(TransformFailure(message=str(exc)))
