# -*- coding: utf-8 -*-
"""
src/fontlens/app.py

Command-line front end for FontLens.

Drives one interactive session: loads the region (from an image file or the
screen), shows the recognized text so the user can correct it, reports
progress while candidates are scored, and prints the ranked matches.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Callable, Optional

from PIL import Image

from .catalog import FontRegistry, create_catalogs
from .config import CATALOG_PROVIDERS, config
from .core.image_processor import EasyOcrExtractor
from .core.pipeline import FontIdentificationPipeline
from .core.renderer import PillowRenderer
from .errors import FontLensError, InputError
from .models import MatchResult, PipelineEvent, SourceRegion, Stage
from .utils.region_capture import grab_screen_region, load_region_from_file, parse_box
from .utils.text_utils import confidence_level

logger = logging.getLogger(__name__)

APP_NAME = "FontLens"

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_BAD_INPUT = 2


def _box_arg(value: str):
    try:
        return parse_box(value)
    except InputError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="fontlens",
        description="Identify the font of the text in an image region.",
    )
    p.add_argument("image", nargs="?", type=Path, help="Image file containing the text.")
    p.add_argument(
        "--box",
        type=_box_arg,
        default=None,
        help="Crop the image to LEFT,TOP,WIDTH,HEIGHT before analysis.",
    )
    p.add_argument(
        "--screen",
        type=_box_arg,
        default=None,
        metavar="LEFT,TOP,WIDTH,HEIGHT",
        help="Capture this screen rectangle instead of reading an image file.",
    )
    p.add_argument("--text", default=None, help="Use this text instead of asking to confirm the OCR result.")
    p.add_argument("-y", "--yes", action="store_true", help="Accept the OCR text without prompting.")
    p.add_argument(
        "--catalog",
        choices=CATALOG_PROVIDERS,
        default=None,
        help="Font catalog to match against (default: from config.ini).",
    )
    p.add_argument("--save-previews", type=Path, default=None, metavar="DIR",
                   help="Write a PNG preview of every match into DIR.")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return p


def build_pipeline(cfg=config, catalog_name: Optional[str] = None) -> FontIdentificationPipeline:
    """Wires the pipeline from the configuration."""
    registry = FontRegistry()
    primary, fallback = create_catalogs(cfg, registry, catalog_name)
    renderer = PillowRenderer(
        registry,
        width=cfg.canvas_width,
        height=cfg.canvas_height,
        font_size=cfg.font_size,
    )
    extractor = EasyOcrExtractor(
        languages=cfg.ocr_languages,
        gpu=cfg.ocr_gpu,
        upscale_factor=cfg.upscale_factor,
    )
    return FontIdentificationPipeline(
        extractor,
        renderer,
        primary,
        fallback_catalog=fallback,
        top_n=cfg.results_count,
        compare_size=cfg.compare_size,
        ocr_timeout=cfg.ocr_timeout,
        low_confidence_threshold=cfg.low_confidence_threshold,
    )


class ConsoleReporter:
    """Prints pipeline events to a stream."""

    def __init__(self, stream=None):
        self.stream = stream or sys.stdout
        self._in_progress = False

    def _end_progress_line(self):
        if self._in_progress:
            self.stream.write("\n")
            self._in_progress = False

    def __call__(self, event: PipelineEvent) -> None:
        if event.stage is Stage.MATCHING and not event.notices:
            self.stream.write(f"\r[{event.percent_complete:5.1f}%] {event.label:<40}")
            self.stream.flush()
            self._in_progress = True
            return

        self._end_progress_line()
        if event.notices and event.stage is Stage.MATCHING:
            self.stream.write(f"Notice: {event.label}\n")
        elif event.stage is Stage.REGION_READY:
            self.stream.write("Recognizing text...\n")
        elif event.stage is Stage.FAILED:
            self.stream.write(f"Failed: {event.error}\n")
        if event.warning is not None:
            self.stream.write(f"Warning: {event.warning}\n")


def format_results(result: MatchResult) -> str:
    if result.is_empty:
        return "No font could be matched."
    lines = ["Top matches:"]
    for position, match in enumerate(result, start=1):
        lines.append(f"  {position}. {match.candidate.display_name:<30} {match.score:6.2f}%")
    if result.degraded:
        lines.append("(matched against the built-in font list only)")
    return "\n".join(lines)


def save_previews(result: MatchResult, directory: Path) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    for position, match in enumerate(result, start=1):
        if match.sample is None:
            continue
        name = match.candidate.display_name.replace(" ", "_")
        path = directory / f"{position}_{name}.png"
        Image.fromarray(match.sample.pixels).save(path)
        logger.info(f"Saved preview {path}")


async def run_session(
    pipeline: FontIdentificationPipeline,
    region: SourceRegion,
    text: Optional[str] = None,
    assume_yes: bool = False,
    prompt: Callable[[str], str] = input,
    out=None,
) -> Optional[MatchResult]:
    """
    Runs one session to completion.

    Returns:
        The MatchResult, or None if the session ended in FAILED.
    """
    out = out or sys.stdout
    loop = asyncio.get_running_loop()
    interactive = text is None and not assume_yes

    async def ask(message: str) -> str:
        return await loop.run_in_executor(None, prompt, message)

    extracted = await pipeline.submit_region(region)
    while extracted is None and pipeline.state is Stage.FAILED and interactive:
        answer = await ask("Text extraction failed. Retry? [y/N] ")
        if answer.strip().lower() not in ("y", "yes"):
            break
        extracted = await pipeline.retry_extraction()
    if extracted is None:
        return None

    level = confidence_level(extracted.confidence)
    out.write(f'Extracted text: "{extracted.text}" ({extracted.confidence:.0f}%, {level.message})\n')

    confirmed = text if text is not None else extracted.text
    while True:
        if interactive:
            answer = await ask("Press Enter to accept, or type the corrected text: ")
            confirmed = answer if answer.strip() else extracted.text
        try:
            return await pipeline.confirm_text(confirmed)
        except InputError as e:
            out.write(f"{e}\n")
            if not interactive:
                raise


def main(argv=None) -> int:
    """The entry point for the fontlens command."""
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    try:
        if args.screen is not None:
            region = grab_screen_region(args.screen)
        elif args.image is not None:
            region = load_region_from_file(args.image, args.box)
        else:
            print("Error: provide an IMAGE or --screen.", file=sys.stderr)
            return EXIT_BAD_INPUT
    except InputError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_BAD_INPUT

    pipeline = build_pipeline(config, args.catalog)
    pipeline.add_listener(ConsoleReporter())

    try:
        result = asyncio.run(run_session(pipeline, region, text=args.text, assume_yes=args.yes))
    except InputError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_BAD_INPUT
    except FontLensError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILED

    if result is None:
        return EXIT_FAILED

    print(format_results(result))
    if args.save_previews is not None:
        save_previews(result, args.save_previews)
    return EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
