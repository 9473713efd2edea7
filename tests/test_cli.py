from __future__ import annotations

import asyncio
from pathlib import Path

from cli import EXIT_INVALID_IMAGE, EXIT_OK, EXIT_TRANSFORM_FAILED, build_parser, run_transform
from errors import TransformFailure
from models import ErrorDetail, TransformRequest, TransformSuccess


class FakeClient:
    def __init__(self, outcome: object) -> None:
        self.outcome = outcome
        self.requests: list[TransformRequest] = []

    async def transform(self, request: TransformRequest) -> TransformSuccess:
        self.requests.append(request)
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome  # type: ignore[return-value]


def _image(tmp_path: Path, name: str = "cat.jpg", data: bytes = b"\xff\xd8\xff") -> Path:
    path = tmp_path / name
    path.write_bytes(data)
    return path


def test_parser_defaults() -> None:
    args = build_parser().parse_args(["-i", "cat.jpg", "-e", "😊"])
    assert args.image == "cat.jpg"
    assert args.emoji == "😊"
    assert args.url is None
    assert args.output == "transformed.png"
    assert args.verbose is False


def test_successful_run_writes_output(tmp_path: Path, capsys) -> None:  # noqa: ANN001
    client = FakeClient(TransformSuccess(transformed_image=b"result", processing_time_ms=900))
    output = tmp_path / "out.png"

    code = asyncio.run(run_transform(_image(tmp_path), "😊", output, client))

    assert code == EXIT_OK
    assert output.read_bytes() == b"result"
    assert client.requests[0].emoji == "😊"
    assert client.requests[0].image.data_uri.startswith("data:image/jpeg;base64,")
    assert str(output) in capsys.readouterr().out


def test_service_failure_prints_message_and_hint(tmp_path: Path, capsys) -> None:  # noqa: ANN001
    failure = TransformFailure(
        status=422,
        detail=ErrorDetail(message="No faces detected in the image.", code="no_faces_detected"),
    )
    output = tmp_path / "out.png"

    code = asyncio.run(run_transform(_image(tmp_path), "😊", output, FakeClient(failure)))

    err = capsys.readouterr().err
    assert code == EXIT_TRANSFORM_FAILED
    assert "no_faces_detected" in err
    assert "hint:" in err
    assert not output.exists()


def test_invalid_image_is_rejected_before_request(tmp_path: Path, capsys) -> None:  # noqa: ANN001
    client = FakeClient(TransformSuccess(transformed_image=b"x", processing_time_ms=1))
    path = tmp_path / "notes.txt"
    path.write_text("not an image", encoding="utf-8")

    code = asyncio.run(run_transform(path, "😊", tmp_path / "out.png", client))

    assert code == EXIT_INVALID_IMAGE
    assert client.requests == []
    assert "Please upload an image file" in capsys.readouterr().err


def test_missing_image_file(tmp_path: Path) -> None:
    client = FakeClient(TransformSuccess(transformed_image=b"x", processing_time_ms=1))
    code = asyncio.run(run_transform(tmp_path / "nope.png", "😊", tmp_path / "out.png", client))
    assert code == EXIT_INVALID_IMAGE
