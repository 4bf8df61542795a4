# -*- coding: utf-8 -*-
"""
src/fontlens/catalog/google_fonts.py

Candidate fonts from the Google Fonts Developer API.

The most popular latin families are listed through the webfonts endpoint,
and each (family, weight) file is downloaded into a local cache before the
renderer is allowed to use it. Downloads run in batches; files already in
the cache are reused without a request.
"""

import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import requests

from ..errors import CatalogError
from ..models import CatalogEntry, FontCandidate
from .base import FontCatalogProvider, FontRegistry

logger = logging.getLogger(__name__)

WEBFONTS_API_URL = "https://www.googleapis.com/webfonts/v1/webfonts"


def parse_variant(variant: str) -> Optional[int]:
    """
    Converts a Google Fonts variant name to a weight.

    'regular' is 400, numeric variants are their value, italics are skipped.

    >>> parse_variant("700"), parse_variant("regular"), parse_variant("700italic")
    (700, 400, None)
    """
    if variant == "regular":
        return 400
    if variant.isdigit():
        return int(variant)
    return None


def _slug(family: str) -> str:
    return re.sub(r"[^A-Za-z0-9]+", "_", family).strip("_")


class GoogleFontsCatalog(FontCatalogProvider):
    """
    Lists and downloads fonts from Google Fonts.

    Attributes:
        api_key (str): Developer API key. Without it the catalog is unavailable.
        cache_dir (Path): Directory for downloaded font files.
        limit (int): Number of families to take from the popularity ranking.
        batch_size (int): Number of files fetched per download batch.
    """

    name = "google"

    def __init__(
        self,
        registry: FontRegistry,
        api_key: str,
        cache_dir: Path,
        limit: int = 20,
        batch_size: int = 10,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        super().__init__(registry)
        self.api_key = api_key
        self.cache_dir = Path(cache_dir)
        self.limit = limit
        self.batch_size = max(1, batch_size)
        self.timeout = timeout
        self.session = session or requests.Session()
        self._files: Dict[Tuple[str, int], str] = {}

    def list_candidates(self) -> List[CatalogEntry]:
        if not self.api_key:
            raise CatalogError("Google Fonts API key is not set.")

        try:
            response = self.session.get(
                WEBFONTS_API_URL,
                params={"key": self.api_key, "sort": "popularity", "subset": "latin"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            items = response.json().get("items", [])
        except (requests.RequestException, ValueError) as e:
            raise CatalogError(f"Could not fetch the Google Fonts catalog: {e}") from e

        entries = []
        for item in items[:self.limit]:
            family = item.get("family")
            files = item.get("files", {})
            weights = []
            for variant in item.get("variants", []):
                weight = parse_variant(variant)
                if weight is None or weight in weights or variant not in files:
                    continue
                weights.append(weight)
                self._files[(family, weight)] = files[variant]
            if family and weights:
                entries.append(CatalogEntry(family, tuple(weights)))

        if not entries:
            raise CatalogError("The Google Fonts catalog returned no usable families.")
        logger.info(f"Fetched {len(entries)} families from Google Fonts.")
        return entries

    def _cache_path(self, candidate: FontCandidate, url: str) -> Path:
        suffix = Path(url.split("?")[0]).suffix or ".ttf"
        return self.cache_dir / f"{_slug(candidate.family)}-{candidate.weight}{suffix}"

    def _download(self, candidate: FontCandidate) -> Optional[Path]:
        url = self._files.get(candidate.key)
        if url is None:
            logger.warning(f"No download URL known for {candidate}.")
            return None

        path = self._cache_path(candidate, url)
        if path.exists() and path.stat().st_size > 0:
            return path

        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning(f"Failed to download {candidate}: {e}")
            return None

        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(response.content)
        except OSError as e:
            logger.warning(f"Could not cache {candidate} at {path}: {e}")
            return None
        return path

    def ensure_available(self, candidates: Sequence[FontCandidate]) -> List[FontCandidate]:
        confirmed = []
        total_batches = (len(candidates) + self.batch_size - 1) // self.batch_size
        for start in range(0, len(candidates), self.batch_size):
            batch = candidates[start:start + self.batch_size]
            for candidate in batch:
                path = self._download(candidate)
                if path is not None:
                    self.registry.register(candidate, path)
                    confirmed.append(candidate)
            logger.debug(f"Font batch {start // self.batch_size + 1}/{total_batches} loaded.")

        if not confirmed:
            raise CatalogError("No Google Fonts file could be downloaded.")
        if len(confirmed) < len(candidates):
            logger.warning(f"{len(candidates) - len(confirmed)} fonts could not be loaded and will be skipped.")
        return confirmed
