# -*- coding: utf-8 -*-
"""
src/fontlens/catalog/barrier.py

The load barrier: one asyncio task that lists the catalog and makes every
candidate available, falling back to the built-in list when the primary
provider fails. The pipeline awaits it once before the first render.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from ..errors import CatalogError
from ..models import FontCandidate
from .base import FontCatalogProvider, expand_entries

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogReadiness:
    candidates: Tuple[FontCandidate, ...]
    degraded: bool = False
    notice: str = ""


async def load_catalog(provider: FontCatalogProvider) -> Tuple[FontCandidate, ...]:
    """
    Lists and loads one provider, running its blocking calls in the executor.

    Any error raised by the provider is reported as a CatalogError.
    """
    loop = asyncio.get_running_loop()
    try:
        entries = await loop.run_in_executor(None, provider.list_candidates)
        candidates = expand_entries(entries)
        if not candidates:
            raise CatalogError(f"The {provider.name} catalog is empty.")
        confirmed = await loop.run_in_executor(None, provider.ensure_available, candidates)
    except CatalogError:
        raise
    except Exception as e:
        logger.error(f"Font catalog '{provider.name}' failed: {e}", exc_info=True)
        raise CatalogError(f"The {provider.name} catalog failed: {e}") from e
    if not confirmed:
        raise CatalogError(f"No font from the {provider.name} catalog could be loaded.")
    return tuple(confirmed)


def _retrieve_exception(task: "asyncio.Future") -> None:
    # Marks a failure as observed even when no session ever awaits the task.
    if not task.cancelled():
        task.exception()


class CatalogBarrier:
    """
    All-or-nothing readiness signal for the candidate fonts of a session.

    `start()` schedules the load; `wait()` returns the confirmed candidates or
    raises CatalogError when neither the primary nor the fallback provider
    produced any.
    """

    def __init__(self, primary: FontCatalogProvider,
                 fallback: Optional[FontCatalogProvider] = None):
        self.primary = primary
        self.fallback = fallback
        self._task: Optional[asyncio.Task] = None

    def start(self) -> "asyncio.Task":
        if self._task is None:
            self._task = asyncio.ensure_future(self._prepare())
            self._task.add_done_callback(_retrieve_exception)
        return self._task

    async def wait(self) -> CatalogReadiness:
        return await self.start()

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()

    @property
    def failed(self) -> bool:
        return (
            self._task is not None
            and self._task.done()
            and (self._task.cancelled() or self._task.exception() is not None)
        )

    async def _prepare(self) -> CatalogReadiness:
        try:
            candidates = await load_catalog(self.primary)
            logger.info(f"Font catalog '{self.primary.name}' ready with {len(candidates)} candidates.")
            return CatalogReadiness(candidates)
        except CatalogError as e:
            if self.fallback is None or self.fallback is self.primary:
                raise
            logger.warning(f"Font catalog '{self.primary.name}' unavailable ({e}); using built-in fonts.")
            notice = f"Font catalog unavailable ({e}). Using a reduced built-in font list."

        candidates = await load_catalog(self.fallback)
        return CatalogReadiness(candidates, degraded=True, notice=notice)
