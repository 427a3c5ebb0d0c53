"""Art lookup: themed fallback search, art files and SAUCE metadata."""
from __future__ import annotations

from bbs_theme_engine.art.asset import AssetSpec, get_art_asset, parse_asset_spec
from bbs_theme_engine.art.loader import ArtAsset, ArtLoader
from bbs_theme_engine.art.resolver import ArtContext, ArtResolver
from bbs_theme_engine.art.sauce import SauceRecord, read_sauce, strip_sauce

__all__ = [
    "ArtAsset",
    "ArtContext",
    "ArtLoader",
    "ArtResolver",
    "AssetSpec",
    "SauceRecord",
    "get_art_asset",
    "parse_asset_spec",
    "read_sauce",
    "strip_sauce",
]
