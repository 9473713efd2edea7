"""Tests for HttpTransformClient against an in-process aiohttp app."""

from __future__ import annotations

import asyncio
import base64

import pytest
from aiohttp import web
from aiohttp import test_utils

from errors import TransformFailure
from models import ImagePayload, TransformRequest, TransformSuccess
from transform_client import HttpTransformClient

REQUEST = TransformRequest(
    image=ImagePayload(data_uri="data:image/png;base64,AAAA", size=3, media_type="image/png"),
    emoji="😀",
)
TRANSFORMED = base64.b64encode(b"transformed-bytes").decode()


# ---------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------

def _run(handler, request: TransformRequest = REQUEST, timeout_s: float = 5.0):  # noqa: ANN001
    """Serve ``handler`` at /api/transform and send one request to it."""

    async def scenario():
        app = web.Application()
        app.router.add_post("/api/transform", handler)
        async with test_utils.TestServer(app) as server:
            base_url = str(server.make_url("/")).rstrip("/")
            client = HttpTransformClient(base_url, request_timeout_s=timeout_s)
            return await client.transform(request)

    return asyncio.run(scenario())


# ---------------------------------------------------------------
# Success
# ---------------------------------------------------------------

def test_success_response_is_decoded() -> None:
    received: list[dict] = []

    async def handler(request: web.Request) -> web.Response:
        received.append(await request.json())
        return web.json_response(
            {
                "transformed_image": TRANSFORMED,
                "metadata": {
                    "processing_time_ms": 1200,
                    "model_version": "gemini-2.5-flash",
                    "request_id": "req-123",
                },
            }
        )

    result = _run(handler)

    assert isinstance(result, TransformSuccess)
    assert result.transformed_image == b"transformed-bytes"
    assert result.processing_time_ms == 1200
    assert result.model_version == "gemini-2.5-flash"
    assert result.request_id == "req-123"
    assert received == [{"image": "data:image/png;base64,AAAA", "emoji": "😀"}]


def test_success_with_data_uri_image() -> None:
    async def handler(request: web.Request) -> web.Response:
        return web.json_response(
            {"transformed_image": f"data:image/png;base64,{TRANSFORMED}", "metadata": {}}
        )

    result = _run(handler)
    assert result.transformed_image == b"transformed-bytes"
    assert result.processing_time_ms == 0


def test_malformed_success_body_is_failure() -> None:
    async def handler(request: web.Request) -> web.Response:
        return web.json_response({"unexpected": True})

    with pytest.raises(TransformFailure) as info:
        _run(handler)
    assert info.value.status == 200
    assert "Malformed" in info.value.message


def test_null_transformed_image_is_failure() -> None:
    async def handler(request: web.Request) -> web.Response:
        return web.json_response(
            {
                "transformed_image": None,
                "metadata": {"processing_time_ms": 10, "model_version": "m", "request_id": "r"},
            }
        )

    with pytest.raises(TransformFailure) as info:
        _run(handler)
    assert info.value.status == 200
    assert "Malformed" in info.value.message


def test_metadata_with_wrong_types_is_failure() -> None:
    async def handler(request: web.Request) -> web.Response:
        return web.json_response(
            {
                "transformed_image": TRANSFORMED,
                "metadata": {"processing_time_ms": "fast", "request_id": None},
            }
        )

    with pytest.raises(TransformFailure) as info:
        _run(handler)
    assert "Malformed" in info.value.message


# ---------------------------------------------------------------
# Service errors
# ---------------------------------------------------------------

def test_structured_error_body_is_parsed() -> None:
    async def handler(request: web.Request) -> web.Response:
        return web.json_response(
            {
                "error": {
                    "message": "Daily limit reached",
                    "type": "rate_limit_error",
                    "code": "rate_limit_exceeded",
                    "suggestion": "Please wait until tomorrow to make more requests.",
                }
            },
            status=429,
        )

    with pytest.raises(TransformFailure) as info:
        _run(handler)

    failure = info.value
    assert failure.status == 429
    assert failure.detail is not None
    assert failure.detail.code == "rate_limit_exceeded"
    assert failure.detail.message == "Daily limit reached"
    assert failure.detail.type == "rate_limit_error"
    assert failure.detail.param is None


def test_unparseable_error_body_has_no_detail() -> None:
    async def handler(request: web.Request) -> web.Response:
        return web.Response(status=500, text="<html>Internal Server Error</html>")

    with pytest.raises(TransformFailure) as info:
        _run(handler)
    assert info.value.status == 500
    assert info.value.detail is None
    assert "500" in str(info.value)


def test_undecodable_error_body_keeps_status() -> None:
    async def handler(request: web.Request) -> web.Response:
        return web.Response(status=500, body=b"\xff\xfe\x00garbage", content_type="text/html")

    with pytest.raises(TransformFailure) as info:
        _run(handler)
    assert info.value.status == 500
    assert info.value.detail is None
    assert str(info.value) == "HTTP error! status: 500"


def test_latin1_error_page_keeps_status() -> None:
    async def handler(request: web.Request) -> web.Response:
        return web.Response(status=502, body="Passerelle défaillante".encode("latin-1"))

    with pytest.raises(TransformFailure) as info:
        _run(handler)
    assert info.value.status == 502
    assert str(info.value) == "HTTP error! status: 502"


# ---------------------------------------------------------------
# Transport failures
# ---------------------------------------------------------------

def test_unreachable_service_is_transport_failure() -> None:
    async def scenario():
        client = HttpTransformClient("http://127.0.0.1:1", request_timeout_s=5.0)
        return await client.transform(REQUEST)

    with pytest.raises(TransformFailure) as info:
        asyncio.run(scenario())
    assert info.value.status is None
    assert info.value.timed_out is False
    assert info.value.message


def test_slow_service_times_out() -> None:
    async def handler(request: web.Request) -> web.Response:
        await asyncio.sleep(1)
        return web.json_response({})

    with pytest.raises(TransformFailure) as info:
        _run(handler, timeout_s=0.2)
    assert info.value.timed_out is True


def test_endpoint_strips_trailing_slash() -> None:
    client = HttpTransformClient("http://example.test/")
    assert client.endpoint == "http://example.test/api/transform"
