"""HTTP client for the expression transform endpoint."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Optional

import aiohttp

from errors import TransformFailure
from image_source import decode_image_data
from models import ErrorDetail, TransformRequest, TransformSuccess

logger = logging.getLogger(__name__)

TRANSFORM_PATH = "/api/transform"


class HttpTransformClient:
    """Issues exactly one POST per ``transform`` call; never retries."""

    def __init__(
        self,
        base_url: str,
        request_timeout_s: float = 300.0,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._request_timeout_s = request_timeout_s
        self._session = session

    @property
    def endpoint(self) -> str:
        return f"{self._base_url}{TRANSFORM_PATH}"

    async def transform(self, request: TransformRequest) -> TransformSuccess:
        logger.info("Sending transformation request to %s (emoji %s)", self.endpoint, request.emoji)
        try:
            if self._session is not None:
                status, body = await self._post(self._session, request)
            else:
                async with aiohttp.ClientSession() as session:
                    status, body = await self._post(session, request)
        except asyncio.TimeoutError as exc:
            logger.warning("Transform request timed out after %.0fs", self._request_timeout_s)
            raise TransformFailure(message="Request timed out", timed_out=True) from exc
        except aiohttp.ClientError as exc:
            logger.warning("Transform request failed: %s", exc)
            raise TransformFailure(message=str(exc) or type(exc).__name__) from exc

        if 200 <= status < 300:
            return self._parse_success(status, body)

        detail = ErrorDetail.from_body(body)
        logger.error(
            "API error %s: %s",
            status,
            detail.message if detail is not None else "unparseable error body",
        )
        raise TransformFailure(status=status, detail=detail)

    async def _post(
        self, session: aiohttp.ClientSession, request: TransformRequest
    ) -> tuple[int, Any]:
        timeout = aiohttp.ClientTimeout(total=self._request_timeout_s)
        async with session.post(self.endpoint, json=request.to_json(), timeout=timeout) as response:
            raw = await response.read()
            try:
                body = json.loads(raw) if raw else None
            except (json.JSONDecodeError, UnicodeDecodeError):
                body = None
            return response.status, body

    def _parse_success(self, status: int, body: Any) -> TransformSuccess:
        try:
            metadata = body.get("metadata") or {}
            image = body["transformed_image"]
            if not isinstance(image, str):
                raise TypeError(f"transformed_image is {type(image).__name__}, not str")
            result = TransformSuccess(
                transformed_image=decode_image_data(image),
                processing_time_ms=_metadata_number(metadata, "processing_time_ms"),
                model_version=_metadata_text(metadata, "model_version"),
                request_id=_metadata_text(metadata, "request_id"),
            )
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            logger.error("Malformed transform response: %s", exc)
            raise TransformFailure(
                status=status, message="Malformed response from transform service"
            ) from exc
        logger.info(
            "Transformation successful, request ID: %s (%d ms, model %s)",
            result.request_id,
            result.processing_time_ms,
            result.model_version,
        )
        return result


def _metadata_number(metadata: dict, key: str) -> int:
    value = metadata.get(key, 0)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{key} is {type(value).__name__}, not a number")
    return int(value)


def _metadata_text(metadata: dict, key: str) -> str:
    value = metadata.get(key, "")
    if not isinstance(value, str):
        raise TypeError(f"{key} is {type(value).__name__}, not str")
    return value
