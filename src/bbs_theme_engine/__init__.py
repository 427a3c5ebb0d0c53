"""
BBS Theme Engine - theme/menu resolution for bulletin board systems.

Merges base menu and prompt definitions with each installed theme's
customizations, keeps the results in a reloadable registry, and resolves
themed art through an ordered fallback search.

Example:
    from bbs_theme_engine import ArtContext, ArtResolver, EngineConfig, ThemeRegistry

    config = EngineConfig.from_yaml(Path("bbs.yaml"))

    registry = ThemeRegistry(config)
    registry.discover_and_load_all()

    theme = registry.get_or_default(registry.get_random_id())
    login_form = theme.menus["login"]["form"][0]["mci"]

    art = ArtResolver(config).resolve("LOGIN", ArtContext(theme_id=theme.theme_id))
"""

from bbs_theme_engine.art import (
    ArtAsset,
    ArtContext,
    ArtLoader,
    ArtResolver,
    AssetSpec,
    SauceRecord,
    get_art_asset,
    parse_asset_spec,
    read_sauce,
)
from bbs_theme_engine.config import ArtConfig, DefaultsConfig, EngineConfig, PathsConfig
from bbs_theme_engine.errors import (
    ArtNotFoundError,
    DefinitionNotFoundError,
    InvalidDefinitionError,
    ThemeEngineError,
    UnsupportedAssetError,
)
from bbs_theme_engine.loaders import ConfigSource, FileConfigSource
from bbs_theme_engine.registry import ThemeRegistry
from bbs_theme_engine.theme import (
    IMMUTABLE_MCI_PROPERTIES,
    ResolvedTheme,
    ThemeDefinition,
    ThemeDefinitionLoader,
    ThemeHelpers,
    ThemeInfo,
    ThemeMerger,
)

__version__ = "0.1.0"

__all__ = [
    "IMMUTABLE_MCI_PROPERTIES",
    "ArtAsset",
    "ArtConfig",
    "ArtContext",
    "ArtLoader",
    "ArtNotFoundError",
    "ArtResolver",
    "AssetSpec",
    "ConfigSource",
    "DefaultsConfig",
    "DefinitionNotFoundError",
    "EngineConfig",
    "FileConfigSource",
    "InvalidDefinitionError",
    "PathsConfig",
    "ResolvedTheme",
    "SauceRecord",
    "ThemeDefinition",
    "ThemeDefinitionLoader",
    "ThemeEngineError",
    "ThemeHelpers",
    "ThemeInfo",
    "ThemeMerger",
    "ThemeRegistry",
    "UnsupportedAssetError",
    "get_art_asset",
    "parse_asset_spec",
    "read_sauce",
]
