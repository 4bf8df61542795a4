"""Tests for the command-line session driver."""

import io
import tempfile
import unittest
from pathlib import Path

import numpy as np
from PIL import Image

from fontlens.app import (
    EXIT_BAD_INPUT,
    ConsoleReporter,
    build_arg_parser,
    format_results,
    main,
    run_session,
    save_previews,
)
from fontlens.catalog.base import FontRegistry
from fontlens.core.pipeline import FontIdentificationPipeline
from fontlens.errors import ExtractionError, InputError
from fontlens.models import (
    ExtractedText,
    FontCandidate,
    MatchResult,
    PipelineEvent,
    RenderedSample,
    SimilarityScore,
    SourceRegion,
    Stage,
)
from helpers import FakeCatalog, FakeExtractor, FakeRenderer, entries, solid


def scripted(*answers):
    """A prompt function that replays answers and records the questions."""
    replies = list(answers)
    asked = []

    def prompt(message):
        asked.append(message)
        return replies.pop(0)

    prompt.asked = asked
    return prompt


class TestRunSession(unittest.IsolatedAsyncioTestCase):

    def make_pipeline(self, extractor=None):
        registry = FontRegistry()
        self.renderer = FakeRenderer(levels={"A": 250, "B": 200})
        return FontIdentificationPipeline(
            extractor or FakeExtractor(),
            self.renderer,
            FakeCatalog(entries("A", "B"), registry),
        )

    async def test_accepting_ocr_text(self):
        out = io.StringIO()
        prompt = scripted("")
        result = await run_session(self.make_pipeline(), SourceRegion(solid(255)), prompt=prompt, out=out)

        self.assertEqual([m.candidate.family for m in result], ["A", "B"])
        self.assertEqual(set(self.renderer.texts), {"Hello World"})
        self.assertEqual(len(prompt.asked), 1)
        self.assertIn('"Hello World"', out.getvalue())

    async def test_user_correction(self):
        prompt = scripted("Hallo Welt")
        await run_session(self.make_pipeline(), SourceRegion(solid(255)), prompt=prompt, out=io.StringIO())
        self.assertEqual(set(self.renderer.texts), {"Hallo Welt"})

    async def test_text_override_skips_prompt(self):
        prompt = scripted()
        result = await run_session(self.make_pipeline(), SourceRegion(solid(255)), text="Override",
                                   prompt=prompt, out=io.StringIO())
        self.assertIsNotNone(result)
        self.assertEqual(prompt.asked, [])
        self.assertEqual(set(self.renderer.texts), {"Override"})

    async def test_blank_override_is_an_input_error(self):
        with self.assertRaises(InputError):
            await run_session(self.make_pipeline(), SourceRegion(solid(255)), text="   ",
                              prompt=scripted(), out=io.StringIO())

    async def test_retry_after_extraction_failure(self):
        extractor = FakeExtractor(ExtractionError("engine-error"), ExtractedText("Second try", 90.0))
        prompt = scripted("y", "")
        result = await run_session(self.make_pipeline(extractor), SourceRegion(solid(255)),
                                   prompt=prompt, out=io.StringIO())
        self.assertIsNotNone(result)
        self.assertEqual(extractor.calls, 2)
        self.assertEqual(set(self.renderer.texts), {"Second try"})

    async def test_declined_retry_returns_none(self):
        extractor = FakeExtractor(ExtractionError("no-text-detected"))
        pipeline = self.make_pipeline(extractor)
        result = await run_session(pipeline, SourceRegion(solid(255)), prompt=scripted("n"), out=io.StringIO())
        self.assertIsNone(result)
        self.assertIs(pipeline.state, Stage.FAILED)


class TestConsoleOutput(unittest.TestCase):

    def make_result(self, degraded=False):
        sample = RenderedSample(FontCandidate("Lato", 700), solid(255, 8, 4))
        return MatchResult(
            matches=(
                SimilarityScore(FontCandidate("Lato", 700), 91.5, sample),
                SimilarityScore(FontCandidate("Roboto"), 88.25),
            ),
            tested=5,
            degraded=degraded,
        )

    def test_format_results(self):
        text = format_results(self.make_result())
        lines = text.splitlines()
        self.assertEqual(lines[0], "Top matches:")
        self.assertIn("1. Lato 700", lines[1])
        self.assertIn("91.50%", lines[1])
        self.assertIn("2. Roboto 400", lines[2])

    def test_format_degraded_and_empty(self):
        self.assertIn("built-in", format_results(self.make_result(degraded=True)))
        self.assertEqual(format_results(MatchResult()), "No font could be matched.")

    def test_save_previews_skips_missing_samples(self):
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "previews"
            save_previews(self.make_result(), target)
            self.assertEqual([p.name for p in target.iterdir()], ["1_Lato_700.png"])

    def test_reporter_progress_and_failure(self):
        stream = io.StringIO()
        reporter = ConsoleReporter(stream)
        reporter(PipelineEvent(Stage.MATCHING, 50.0, "Lato 700"))
        reporter(PipelineEvent(Stage.FAILED, error=ExtractionError("timeout", "too slow")))
        output = stream.getvalue()
        self.assertIn("[ 50.0%] Lato 700", output)
        self.assertIn("\nFailed: too slow\n", output)


class TestCommandLine(unittest.TestCase):

    def test_box_argument(self):
        args = build_arg_parser().parse_args(["shot.png", "--box", "1,2,30,40", "--catalog", "builtin"])
        self.assertEqual(args.box, (1, 2, 30, 40))
        self.assertEqual(args.catalog, "builtin")

    def test_malformed_box_is_rejected(self):
        with self.assertRaises(SystemExit):
            build_arg_parser().parse_args(["shot.png", "--box", "1,2,three"])

    def test_missing_image(self):
        self.assertEqual(main(["/nonexistent/shot.png"]), EXIT_BAD_INPUT)

    def test_no_source(self):
        self.assertEqual(main([]), EXIT_BAD_INPUT)

    def test_loads_and_crops_image(self):
        from fontlens.utils.region_capture import load_region_from_file

        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "shot.png"
            Image.fromarray(np.zeros((50, 60, 3), dtype=np.uint8)).save(path)
            region = load_region_from_file(path, (10, 5, 20, 15))
        self.assertEqual((region.width, region.height), (20, 15))


if __name__ == '__main__':
    unittest.main()
