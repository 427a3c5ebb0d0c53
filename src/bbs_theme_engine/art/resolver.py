"""
Themed art resolution.

Art is searched in order, first hit wins:

1. an explicit path, when the name contains a path separator
2. the effective theme (explicit theme, else the user's, else the default)
3. the default theme, when it differs from the effective theme
4. the general art directory
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from bbs_theme_engine.art.asset import get_art_asset
from bbs_theme_engine.art.loader import ArtAsset, ArtLoader
from bbs_theme_engine.config import EngineConfig
from bbs_theme_engine.errors import ArtNotFoundError, UnsupportedAssetError
from bbs_theme_engine.logging import get_logger

logger = get_logger("art")


@dataclass(frozen=True)
class ArtContext:
    """Who is asking for art, and how it should be loaded."""

    theme_id: str | None = None  # Explicitly requested theme
    user_theme_id: str | None = None  # Acting user's preferred theme
    default_theme_id: str | None = None  # None = configured default
    random: bool | None = None  # None = configured default
    read_sauce: bool | None = None  # None = configured default


class ArtResolver:
    """
    Resolves art names to ArtAssets through the themed fallback search.

    Lookups only read the filesystem and are safe to run concurrently.

    Example:
        resolver = ArtResolver(config)
        art = resolver.resolve("MATRIX", ArtContext(user_theme_id="dark"))
        terminal.write(art.text)
    """

    def __init__(self, config: EngineConfig | None = None, loader: ArtLoader | None = None) -> None:
        self.config = config or EngineConfig()
        self.loader = loader or ArtLoader(types=self.config.art.types)

    def effective_theme_id(self, context: ArtContext) -> str:
        return context.theme_id or context.user_theme_id or self._default_theme_id(context)

    def search_locations(self, name: str, context: ArtContext) -> list[Path]:
        """Directories searched for ``name``, in order."""
        locations: list[Path] = []

        explicit = self._explicit_dir(name)
        if explicit is not None:
            locations.append(explicit)
            if not self.config.art.path_fallthrough:
                return locations

        theme_id = self.effective_theme_id(context)
        default_theme_id = self._default_theme_id(context)
        locations.append(self.config.theme_dir(theme_id))
        if theme_id != default_theme_id:
            locations.append(self.config.theme_dir(default_theme_id))
        locations.append(self.config.paths.art)
        return locations

    def resolve(self, name: str, context: ArtContext | None = None) -> ArtAsset:
        """
        Find art by name.

        Raises:
            ArtNotFoundError: If no location holds matching art
        """
        context = context or ArtContext()
        use_random = self.config.art.random if context.random is None else context.random
        read_sauce = self.config.art.read_sauce if context.read_sauce is None else context.read_sauce

        locations = self.search_locations(name, context)
        for location in locations:
            art = self.loader.get_art(name, location, random=use_random, read_sauce=read_sauce)
            if art is not None:
                logger.debug("Resolved art %s to %s", name, art.path)
                return art

        logger.debug("Cannot find theme art: %s", name)
        raise ArtNotFoundError(name, locations)

    def resolve_asset(self, spec: str, context: ArtContext | None = None) -> ArtAsset:
        """
        Resolve a menu/prompt ``art`` value (``NAME`` or ``@art:NAME``).

        Raises:
            UnsupportedAssetError: If the spec is not an art asset
            ArtNotFoundError: If the art cannot be found
        """
        asset = get_art_asset(spec)
        if asset is None:
            raise UnsupportedAssetError(spec, "unknown")
        if asset.type != "art":
            raise UnsupportedAssetError(spec, asset.type)
        return self.resolve(asset.asset, context)

    def _default_theme_id(self, context: ArtContext) -> str:
        return context.default_theme_id or self.config.defaults.theme

    def _explicit_dir(self, name: str) -> Path | None:
        if name.startswith("/"):
            return Path(name).parent
        if "/" in name:
            return self.config.paths.root / Path(name).parent
        return None
