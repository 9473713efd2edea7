from __future__ import annotations

import pytest

from error_classifier import classify, classify_exception
from errors import ERROR_POLICIES, ERROR_SUGGESTIONS, ErrorKind, TransformFailure
from models import ErrorDetail


def _service_error(status: int, **error: object) -> TransformFailure:
    return TransformFailure(status=status, detail=ErrorDetail.from_body({"error": error}))


@pytest.mark.parametrize("kind", [k for k in ErrorKind if k is not ErrorKind.UNCLASSIFIED])
def test_known_code_uses_policy_row(kind: ErrorKind) -> None:
    descriptor = classify(_service_error(400, code=kind.value, message="boom", type="x"))

    assert descriptor.kind is kind
    assert descriptor.message == "boom"
    assert descriptor.retryable is ERROR_POLICIES[kind].retryable
    assert descriptor.quota_exhausted is ERROR_POLICIES[kind].locks_quota


def test_rate_limit_code_locks_quota_and_blocks_retry() -> None:
    descriptor = classify(_service_error(429, code="rate_limit_exceeded", message="Daily limit reached"))

    assert descriptor.kind is ErrorKind.RATE_LIMIT_EXCEEDED
    assert descriptor.message == "Daily limit reached"
    assert descriptor.quota_exhausted is True
    assert descriptor.retryable is False


def test_content_filtered_is_not_retryable_and_no_lockout() -> None:
    descriptor = classify(_service_error(451, code="content_filtered", message="flagged"))

    assert descriptor.retryable is False
    assert descriptor.quota_exhausted is False


def test_service_suggestion_wins_over_default() -> None:
    descriptor = classify(
        _service_error(422, code="no_faces_detected", message="none", suggestion="Use a selfie")
    )
    assert descriptor.suggestion == "Use a selfie"


def test_missing_message_and_suggestion_fall_back_to_defaults() -> None:
    descriptor = classify(_service_error(422, code="no_faces_detected"))

    assert descriptor.message == "No faces detected in the image."
    assert descriptor.suggestion == ERROR_SUGGESTIONS[ErrorKind.NO_FACES_DETECTED]


@pytest.mark.parametrize(
    "code, kind",
    [
        ("gemini_content_filtered", ErrorKind.CONTENT_FILTERED),
        ("gemini_timeout", ErrorKind.AI_TIMEOUT),
        ("RATE_LIMIT_EXCEEDED", ErrorKind.RATE_LIMIT_EXCEEDED),
    ],
)
def test_service_code_aliases(code: str, kind: ErrorKind) -> None:
    assert classify(_service_error(400, code=code, message="m")).kind is kind


def test_unknown_code_is_unclassified_with_body_message() -> None:
    descriptor = classify(_service_error(400, code="bad_request", message="Missing emoji"))

    assert descriptor.kind is ErrorKind.UNCLASSIFIED
    assert descriptor.message == "Missing emoji"
    assert descriptor.retryable is True
    assert descriptor.quota_exhausted is False


def test_code_unclassified_is_not_selectable_by_code() -> None:
    descriptor = classify(_service_error(400, code="unclassified", message="odd"))
    assert descriptor.kind is ErrorKind.UNCLASSIFIED


def test_unparseable_body_uses_status_message() -> None:
    descriptor = classify(TransformFailure(status=500))

    assert descriptor.kind is ErrorKind.UNCLASSIFIED
    assert "500" in descriptor.message
    assert descriptor.retryable is True
    assert descriptor.suggestion is None


def test_transport_failure_without_status_uses_generic_message() -> None:
    descriptor = classify(TransformFailure())
    assert descriptor.kind is ErrorKind.UNCLASSIFIED
    assert descriptor.message == "Failed to transform image"


def test_transport_message_is_kept() -> None:
    descriptor = classify(TransformFailure(message="Cannot connect to host"))
    assert descriptor.message == "Cannot connect to host"


def test_rate_limit_text_without_code_is_rate_limited() -> None:
    descriptor = classify(_service_error(429, message="Rate limit exceeded: 5 per day"))

    assert descriptor.kind is ErrorKind.RATE_LIMIT_EXCEEDED
    assert descriptor.quota_exhausted is True
    assert descriptor.retryable is False


def test_rate_limit_text_in_transport_message() -> None:
    descriptor = classify(TransformFailure(message="upstream said: RATE LIMIT"))
    assert descriptor.kind is ErrorKind.RATE_LIMIT_EXCEEDED


def test_known_code_is_not_overridden_by_rate_limit_text() -> None:
    descriptor = classify(_service_error(502, code="gemini_api_error", message="rate limit upstream"))
    assert descriptor.kind is ErrorKind.GEMINI_API_ERROR
    assert descriptor.quota_exhausted is False


def test_client_timeout_maps_to_ai_timeout() -> None:
    descriptor = classify(TransformFailure(message="Request timed out", timed_out=True))

    assert descriptor.kind is ErrorKind.AI_TIMEOUT
    assert descriptor.retryable is True


def test_classify_exception_handles_unexpected_errors() -> None:
    descriptor = classify_exception(RuntimeError("kaboom"))

    assert descriptor.kind is ErrorKind.UNCLASSIFIED
    assert descriptor.message == "kaboom"


@pytest.mark.parametrize(
    "failure, expected",
    [
        (_service_error(500, code="mystery", message="  Upstream blew up  "), "Upstream blew up"),
        (_service_error(500, code="mystery", message="   "), "HTTP error! status: 500"),
        (TransformFailure(message="  connection reset "), "connection reset"),
        (TransformFailure(status=503, message="   "), "HTTP error! status: 503"),
        (TransformFailure(), "Failed to transform image"),
    ],
)
def test_unclassified_message_matches_failure_text(failure: TransformFailure, expected: str) -> None:
    assert str(failure) == expected
    assert classify(failure).message == expected
