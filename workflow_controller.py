"""State-machine based orchestration of one image transformation session."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from error_classifier import classify_exception
from errors import ImageValidationError
from image_source import RawImageFile, select_image
from interfaces import TransformClient
from models import (
    ErrorDescriptor,
    Failed,
    ImagePayload,
    Processing,
    Result,
    SelectingEmoji,
    SelectingImage,
    TransformRequest,
    WorkflowState,
    WorkflowStep,
)

logger = logging.getLogger(__name__)

StateCallback = Callable[[WorkflowStep, WorkflowStep], None]
ErrorCallback = Callable[[ErrorDescriptor], None]
ValidationCallback = Callable[[ImageValidationError], None]


class WorkflowController:
    """Owns the current WorkflowState.

    Runs on a single asyncio loop. The transform call is the only await; a
    request token guards against a response landing after ``reset``.
    """

    def __init__(
        self,
        client: TransformClient,
        on_state_change: Optional[StateCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        on_validation_error: Optional[ValidationCallback] = None,
    ) -> None:
        self._client = client
        self._on_state_change = on_state_change
        self._on_error = on_error
        self._on_validation_error = on_validation_error

        self._state: WorkflowState = SelectingImage()
        self._quota_exhausted = False
        self._request_token = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def step(self) -> WorkflowStep:
        return self._state.step

    @property
    def quota_exhausted(self) -> bool:
        return self._quota_exhausted

    @property
    def can_retry(self) -> bool:
        return isinstance(self._state, Failed) and self._state.error.retryable

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    def select_image(self, raw: RawImageFile) -> bool:
        if not isinstance(self._state, SelectingImage):
            return False
        try:
            image = select_image(raw)
        except ImageValidationError as exc:
            logger.info("Rejected image %s: %s", raw.name, exc)
            if self._on_validation_error:
                self._on_validation_error(exc)
            return False
        self.accept_image(image)
        return True

    def accept_image(self, image: ImagePayload) -> None:
        """Enter emoji selection with an already validated payload."""
        if not isinstance(self._state, SelectingImage):
            return
        self._transition(SelectingEmoji(image=image))

    def choose_emoji(self, emoji: str) -> Optional[asyncio.Task]:
        state = self._state
        if not isinstance(state, SelectingEmoji) or not emoji:
            return None
        return self._start(state.image, emoji)

    def retry(self) -> Optional[asyncio.Task]:
        state = self._state
        if not isinstance(state, Failed) or not state.error.retryable:
            return None
        return self._start(state.image, state.emoji)

    def reset(self) -> None:
        self._request_token += 1
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
        self._quota_exhausted = False
        self._transition(SelectingImage())

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _start(self, image: ImagePayload, emoji: str) -> asyncio.Task:
        self._request_token += 1
        token = self._request_token
        self._transition(Processing(image=image, emoji=emoji))
        self._task = asyncio.ensure_future(self._run_transform(token, image, emoji))
        return self._task

    async def _run_transform(self, token: int, image: ImagePayload, emoji: str) -> None:
        request = TransformRequest(image=image, emoji=emoji)
        try:
            success = await self._client.transform(request)
        except Exception as exc:
            if token != self._request_token:
                return
            self._fail(image, emoji, classify_exception(exc))
            return
        if token != self._request_token:
            logger.debug("Discarding stale transform response for token %d", token)
            return
        self._transition(
            Result(
                image=image,
                emoji=emoji,
                transformed_image=success.transformed_image,
                processing_time_ms=success.processing_time_ms,
            )
        )

    def _fail(self, image: ImagePayload, emoji: str, error: ErrorDescriptor) -> None:
        logger.info("Transform failed (%s): %s", error.kind.value, error.message)
        if error.quota_exhausted:
            self._quota_exhausted = True
        self._transition(Failed(image=image, emoji=emoji, error=error))
        if self._on_error:
            self._on_error(error)

    def _transition(self, to_state: WorkflowState) -> None:
        from_state = self._state
        self._state = to_state
        if from_state == to_state:
            return
        logger.debug("Workflow %s -> %s", from_state.step.value, to_state.step.value)
        if self._on_state_change:
            self._on_state_change(from_state.step, to_state.step)
