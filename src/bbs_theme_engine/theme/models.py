"""
Theme data models.

A ThemeDefinition is what a theme directory declares; a ResolvedTheme is
the base menu/prompt trees with that definition folded in.
"""

from __future__ import annotations

import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from bbs_theme_engine.config import (
    FALLBACK_DATE_FORMAT,
    FALLBACK_DATE_TIME_FORMAT,
    FALLBACK_TIME_FORMAT,
    DefaultsConfig,
)

# ---------------------------------------------------------------------------
# ThemeInfo
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ThemeInfo:
    """
    Theme metadata from the definition's ``info`` section.

    Attributes
    ----------
    name:
        Human-readable theme name.
    author:
        Theme author name or handle.
    extra:
        Any other ``info`` keys (group, description, enabled, ...).
    """

    name: str
    author: str
    extra: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "author": self.author, **self.extra}


# ---------------------------------------------------------------------------
# ThemeHelpers
# ---------------------------------------------------------------------------


class ThemeHelpers:
    """Formatting helpers bound to one theme, falling back to system defaults."""

    def __init__(self, customization: Mapping[str, Any], defaults: DefaultsConfig) -> None:
        theme_defaults = customization.get("defaults")
        self._theme_defaults: Mapping[str, Any] = (
            theme_defaults if isinstance(theme_defaults, Mapping) else {}
        )
        self._defaults = defaults

    def password_char(self) -> str:
        """Character used to mask password input."""
        pw_char = self._defaults.password_char
        general = self._theme_defaults.get("general")
        if isinstance(general, Mapping):
            theme_char = general.get("passwordChar")
            # bool is an int subclass, but never a code point
            if isinstance(theme_char, str) and theme_char:
                pw_char = theme_char[0]
            elif (
                isinstance(theme_char, int)
                and not isinstance(theme_char, bool)
                and 0 <= theme_char <= sys.maxunicode
            ):
                pw_char = chr(theme_char)
        return pw_char

    def date_format(self, style: str = "short") -> str:
        return self._format("dateFormat", self._defaults.date_format, style, FALLBACK_DATE_FORMAT)

    def time_format(self, style: str = "short") -> str:
        return self._format("timeFormat", self._defaults.time_format, style, FALLBACK_TIME_FORMAT)

    def date_time_format(self, style: str = "short") -> str:
        return self._format(
            "dateTimeFormat", self._defaults.date_time_format, style, FALLBACK_DATE_TIME_FORMAT
        )

    def _format(
        self,
        category: str,
        system_formats: Mapping[str, str],
        style: str,
        fallback: str,
    ) -> str:
        style = style or "short"
        fmt = system_formats.get(style) or fallback
        theme_formats = self._theme_defaults.get(category)
        if isinstance(theme_formats, Mapping):
            return theme_formats.get(style) or fmt
        return fmt


# ---------------------------------------------------------------------------
# ThemeDefinition
# ---------------------------------------------------------------------------


@dataclass
class ThemeDefinition:
    """A validated theme definition as loaded from its source."""

    theme_id: str
    info: ThemeInfo
    customization: dict[str, Any]
    helpers: ThemeHelpers
    source_path: Path | None = None

    def section(self, name: str) -> Mapping[str, Any]:
        """Customizations for ``menus`` or ``prompts`` (empty if absent or malformed)."""
        value = self.customization.get(name)
        return value if isinstance(value, Mapping) else {}


# ---------------------------------------------------------------------------
# ResolvedTheme
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ResolvedTheme:
    """
    Base menus and prompts merged with one theme's customizations.

    Instances are built once by the merger and then only read; a reload
    produces a new instance rather than touching an existing one.
    """

    theme_id: str
    info: ThemeInfo
    helpers: ThemeHelpers
    menus: Mapping[str, Any]
    prompts: Mapping[str, Any]
    source_path: Path | None = None

    def menu(self, name: str) -> Mapping[str, Any] | None:
        return self.menus.get(name)

    def prompt(self, name: str) -> Mapping[str, Any] | None:
        return self.prompts.get(name)

    def to_dict(self) -> dict[str, Any]:
        """Plain-data view (helpers omitted)."""
        return {
            "id": self.theme_id,
            "info": self.info.to_dict(),
            "menus": dict(self.menus),
            "prompts": dict(self.prompts),
        }
