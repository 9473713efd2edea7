"""Protocol interfaces used by WorkflowController and the entrypoints."""

from __future__ import annotations

from typing import Protocol

from models import TransformRequest, TransformSuccess


class TransformClient(Protocol):
    async def transform(self, request: TransformRequest) -> TransformSuccess: ...


class RecentEmojiStore(Protocol):
    def get_recent_emojis(self) -> list[str]: ...

    def set_recent_emojis(self, emojis: list[str]) -> None: ...


class ConfigStore(RecentEmojiStore, Protocol):
    def get_api_url(self) -> str: ...

    def set_api_url(self, url: str) -> None: ...
