"""Theme definitions, helpers and merging."""
from __future__ import annotations

from bbs_theme_engine.theme.loader import ThemeDefinitionLoader, build_definition
from bbs_theme_engine.theme.merge import IMMUTABLE_MCI_PROPERTIES, ThemeMerger
from bbs_theme_engine.theme.models import ResolvedTheme, ThemeDefinition, ThemeHelpers, ThemeInfo

__all__ = [
    "IMMUTABLE_MCI_PROPERTIES",
    "ResolvedTheme",
    "ThemeDefinition",
    "ThemeDefinitionLoader",
    "ThemeHelpers",
    "ThemeInfo",
    "ThemeMerger",
    "build_definition",
]
