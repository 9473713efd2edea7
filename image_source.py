"""Image selection: validation and data-URI encoding of user files."""

from __future__ import annotations

import base64
import binascii
import mimetypes
from dataclasses import dataclass
from pathlib import Path

from errors import ImageErrorKind, ImageValidationError
from models import MAX_IMAGE_BYTES, ImagePayload

mimetypes.add_type("image/webp", ".webp")


@dataclass(frozen=True)
class RawImageFile:
    path: Path
    name: str
    media_type: str
    size: int


def describe_file(path: Path | str) -> RawImageFile:
    """Stat a file and guess its declared media type from the name."""
    path = Path(path)
    try:
        size = path.stat().st_size
    except OSError as exc:
        raise ImageValidationError(ImageErrorKind.READ_FAILURE, str(exc)) from exc
    media_type, _ = mimetypes.guess_type(path.name)
    return RawImageFile(path=path, name=path.name, media_type=media_type or "", size=size)


def select_image(raw: RawImageFile, max_bytes: int = MAX_IMAGE_BYTES) -> ImagePayload:
    if not raw.media_type.startswith("image/"):
        raise ImageValidationError(ImageErrorKind.NOT_AN_IMAGE, raw.media_type or raw.name)
    if raw.size > max_bytes:
        raise ImageValidationError(ImageErrorKind.TOO_LARGE, f"{raw.size} bytes")
    try:
        data = raw.path.read_bytes()
    except OSError as exc:
        raise ImageValidationError(ImageErrorKind.READ_FAILURE, str(exc)) from exc
    # the file may have grown since it was described
    if len(data) > max_bytes:
        raise ImageValidationError(ImageErrorKind.TOO_LARGE, f"{len(data)} bytes")
    encoded = base64.b64encode(data).decode("ascii")
    return ImagePayload(
        data_uri=f"data:{raw.media_type};base64,{encoded}",
        size=len(data),
        media_type=raw.media_type,
        name=raw.name,
    )


def decode_image_data(data: str) -> bytes:
    """Decode plain base64 or a ``data:`` URI into raw bytes.

    Raises ``ValueError`` on invalid base64.
    """
    text = data.strip()
    if text.startswith("data:") and "," in text:
        text = text.split(",", 1)[1]
    try:
        return base64.b64decode(text, validate=True)
    except binascii.Error as exc:
        raise ValueError(f"invalid base64 image data: {exc}") from exc


def save_image(data: bytes, path: Path | str) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path
