"""Simple JSON-based config store."""

from __future__ import annotations

import json
import os
from pathlib import Path

DEFAULT_API_URL = "https://emobanana.guitaripod.workers.dev"
API_URL_ENV = "EMOBANANA_API_URL"


class JsonConfigStore:
    def __init__(self, path: Path | None = None) -> None:
        self._path = path or Path.home() / ".config" / "emobanana" / "config.json"
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def get_api_url(self) -> str:
        env_url = os.getenv(API_URL_ENV, "").strip()
        if env_url:
            return env_url.rstrip("/")
        data = self._read_all()
        return str(data.get("api_url") or DEFAULT_API_URL).rstrip("/")

    def set_api_url(self, url: str) -> None:
        data = self._read_all()
        data["api_url"] = url.strip()
        self._write_all(data)

    def get_recent_emojis(self) -> list[str]:
        data = self._read_all()
        value = data.get("recent_emojis", [])
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, str)]

    def set_recent_emojis(self, emojis: list[str]) -> None:
        data = self._read_all()
        data["recent_emojis"] = list(emojis)
        self._write_all(data)

    def _read_all(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict) -> None:
        self._path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
