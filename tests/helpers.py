"""Test doubles for the pipeline collaborators."""

import threading
import time
import weakref

import numpy as np

from fontlens.catalog.base import FontCatalogProvider, FontRegistry
from fontlens.core.image_processor import TextExtractor
from fontlens.core.renderer import Renderer
from fontlens.errors import CatalogError, ExtractionError, RenderError
from fontlens.models import CatalogEntry, ExtractedText, RenderedSample


def solid(value, width=80, height=20):
    """A uniform RGB buffer."""
    return np.full((height, width, 3), value, dtype=np.uint8)


def text_like_region(width=120, height=40):
    """White region with a dark bar standing in for a line of text."""
    region = solid(255, width, height)
    region[height // 3: 2 * height // 3, width // 6: 5 * width // 6] = 0
    return region


class FakeExtractor(TextExtractor):
    """Returns queued results in order; exceptions in the queue are raised."""

    def __init__(self, *results):
        self.results = list(results) or [ExtractedText("Hello World", 95.0)]
        self.calls = 0

    def extract(self, pixels):
        self.calls += 1
        result = self.results[min(self.calls, len(self.results)) - 1]
        if isinstance(result, BaseException):
            raise result
        return result


class BlockingExtractor(TextExtractor):
    """Blocks inside extract() until released, so a run can be reset mid-flight."""

    def __init__(self, result=None):
        self.result = result or ExtractedText("Hello World", 95.0)
        self.started = threading.Event()
        self.release = threading.Event()

    def extract(self, pixels):
        self.started.set()
        self.release.wait(timeout=5)
        return self.result


class SlowExtractor(TextExtractor):
    def __init__(self, delay):
        self.delay = delay

    def extract(self, pixels):
        time.sleep(self.delay)
        return ExtractedText("Too late", 90.0)


class FakeCatalog(FontCatalogProvider):
    """Serves fixed entries and registers a dummy path for each candidate."""

    def __init__(self, entries, registry=None, fail=False, name="fake", error=None):
        super().__init__(registry or FontRegistry())
        self.entries = list(entries)
        self.fail = fail
        self.error = error
        self.name = name
        self.list_calls = 0

    def list_candidates(self):
        self.list_calls += 1
        if self.error is not None:
            raise self.error
        if self.fail:
            raise CatalogError(f"{self.name} catalog is down")
        return list(self.entries)

    def ensure_available(self, candidates):
        for candidate in candidates:
            self.registry.register(candidate, f"/fonts/{candidate.family}-{candidate.weight}.ttf")
        return list(candidates)


def entries(*families):
    return [CatalogEntry(family, (400,)) for family in families]


class FakeRenderer(Renderer):
    """
    Renders each family as a uniform gray canvas.

    `levels` maps family name to gray level; families listed in `broken`
    raise RenderError. `on_render` is called before each render. Weak references
    to every sample handed out are kept in `samples`.
    """

    def __init__(self, levels=None, broken=(), default=128, on_render=None):
        self.levels = levels or {}
        self.broken = set(broken)
        self.default = default
        self.on_render = on_render
        self.texts = []
        self.rendered = []
        self.samples = []

    def render(self, text, candidate):
        if self.on_render is not None:
            self.on_render(candidate)
        self.texts.append(text)
        if candidate.family in self.broken:
            raise RenderError(candidate, "font vanished")
        self.rendered.append(candidate)
        level = self.levels.get(candidate.family, self.default)
        sample = RenderedSample(candidate, solid(level, 800, 200))
        self.samples.append(weakref.ref(sample))
        return sample
