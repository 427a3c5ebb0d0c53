"""Exception types raised by the theme engine."""

from __future__ import annotations

from pathlib import Path


class ThemeEngineError(Exception):
    """Base class for all theme engine errors."""


class InvalidDefinitionError(ThemeEngineError):
    """A theme definition is missing required metadata."""

    def __init__(self, theme_id: str, reason: str) -> None:
        super().__init__(f"Invalid theme definition '{theme_id}': {reason}")
        self.theme_id = theme_id
        self.reason = reason


class DefinitionNotFoundError(ThemeEngineError):
    """A definition file is missing, unreadable or cannot be parsed."""

    def __init__(self, path: Path, reason: str = "not found") -> None:
        super().__init__(f"Cannot load definition {path}: {reason}")
        self.path = path
        self.reason = reason


class ArtNotFoundError(ThemeEngineError):
    """No stage of the art fallback search produced a file."""

    def __init__(self, name: str, locations: list[Path] | None = None) -> None:
        self.name = name
        self.locations = list(locations or [])
        searched = ", ".join(str(p) for p in self.locations) or "nowhere"
        super().__init__(f"No matching art for '{name}' (searched: {searched})")


class UnsupportedAssetError(ThemeEngineError):
    """An asset spec names a type the resolver cannot load."""

    def __init__(self, spec: str, asset_type: str) -> None:
        super().__init__(f"Unsupported art asset type '{asset_type}': {spec}")
        self.spec = spec
        self.asset_type = asset_type
