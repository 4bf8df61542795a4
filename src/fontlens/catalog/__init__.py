# -*- coding: utf-8 -*-
"""
Font catalog providers for FontLens.

A provider lists candidate families in ranking order and makes their font
resources available to the renderer through a shared `FontRegistry`.

- `google_fonts`: popular families from the Google Fonts API (downloaded).
- `system_fonts`: the fonts installed on this machine.
- `builtin`: the small fallback list used when the primary catalog fails.
- `barrier`: the asyncio load barrier the pipeline awaits before rendering.
"""

from .barrier import CatalogBarrier, CatalogReadiness
from .base import FontCatalogProvider, FontRegistry
from .builtin import BuiltinCatalog
from .google_fonts import GoogleFontsCatalog
from .system_fonts import SystemFontCatalog, SystemFontIndex

__all__ = [
    "BuiltinCatalog",
    "CatalogBarrier",
    "CatalogReadiness",
    "FontCatalogProvider",
    "FontRegistry",
    "GoogleFontsCatalog",
    "SystemFontCatalog",
    "SystemFontIndex",
    "create_catalogs",
]


def create_catalogs(cfg, registry: FontRegistry, provider_name: str = None):
    """
    Builds the primary provider named in the configuration plus the built-in
    fallback. Both share one installed-font index.

    Returns:
        tuple: (primary, fallback)
    """
    provider_name = provider_name or cfg.catalog_provider
    index = SystemFontIndex()
    fallback = BuiltinCatalog(registry, index)

    if provider_name == "builtin":
        return fallback, None
    if provider_name == "system":
        return SystemFontCatalog(registry, index, limit=cfg.catalog_limit), fallback
    primary = GoogleFontsCatalog(
        registry,
        api_key=cfg.google_fonts_api_key,
        cache_dir=cfg.font_cache_dir,
        limit=cfg.catalog_limit,
        batch_size=cfg.load_batch_size,
        timeout=cfg.http_timeout,
    )
    return primary, fallback
