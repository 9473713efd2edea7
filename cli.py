"""Command-line entrypoint: transform one image without the desktop UI."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from config import JsonConfigStore
from errors import ImageValidationError
from image_source import describe_file, save_image
from interfaces import TransformClient
from models import Failed, Result
from transform_client import HttpTransformClient
from workflow_controller import WorkflowController

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_TRANSFORM_FAILED = 1
EXIT_INVALID_IMAGE = 2

EPILOG = """examples:
  emobanana-cli -i cat.jpg -e 😊
  emobanana-cli --image dog.png --emoji 😢 --output sad_dog.png
  emobanana-cli -i bird.jpg -e 😠 -u http://localhost:8787
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="emobanana-cli",
        description="Transform facial expressions in an image using an emoji prompt.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-i", "--image", required=True, help="path to the image file")
    parser.add_argument("-e", "--emoji", required=True, help="emoji for the desired expression")
    parser.add_argument("-u", "--url", default=None, help="base URL of the transform service")
    parser.add_argument(
        "-o", "--output", default="transformed.png", help="where to write the transformed image"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser


async def run_transform(
    image_path: Path,
    emoji: str,
    output: Path,
    client: TransformClient,
) -> int:
    errors: list[ImageValidationError] = []
    controller = WorkflowController(client=client, on_validation_error=errors.append)
    try:
        raw = describe_file(image_path)
    except ImageValidationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_INVALID_IMAGE
    if not controller.select_image(raw):
        print(f"error: {errors[0] if errors else 'image rejected'}", file=sys.stderr)
        return EXIT_INVALID_IMAGE

    task = controller.choose_emoji(emoji)
    if task is None:
        print("error: an emoji is required", file=sys.stderr)
        return EXIT_INVALID_IMAGE
    await task

    state = controller.state
    if isinstance(state, Result):
        save_image(state.transformed_image, output)
        logger.info("Processing time: %dms", state.processing_time_ms)
        print(f"Transformed image saved to: {output}")
        return EXIT_OK
    if isinstance(state, Failed):
        print(f"error [{state.error.kind.value}]: {state.error.message}", file=sys.stderr)
        if state.error.suggestion:
            print(f"hint: {state.error.suggestion}", file=sys.stderr)
        return EXIT_TRANSFORM_FAILED
    return EXIT_TRANSFORM_FAILED  # pragma: no cover - unreachable after await


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    base_url = args.url or JsonConfigStore().get_api_url()
    logger.info("Image: %s, emoji: %s, backend: %s", args.image, args.emoji, base_url)
    client = HttpTransformClient(base_url)
    return asyncio.run(run_transform(Path(args.image), args.emoji, Path(args.output), client))


if __name__ == "__main__":
    raise SystemExit(main())
