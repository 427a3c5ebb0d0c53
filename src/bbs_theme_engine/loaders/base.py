"""
Base configuration source interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any


class ConfigSource(ABC):
    """
    Abstract base class for configuration sources.

    Implement this interface to supply already-parsed menu, prompt and
    theme definition trees from somewhere other than the filesystem.
    """

    @abstractmethod
    def load_menus(self) -> dict[str, Any]:
        """Load the base menu tree (menu name -> definition)."""
        pass

    @abstractmethod
    def load_prompts(self) -> dict[str, Any]:
        """Load the base prompt tree (prompt name -> definition)."""
        pass

    @abstractmethod
    def load_theme_definition(self, theme_id: str) -> tuple[dict[str, Any], Path]:
        """
        Load the raw definition tree of a theme.

        Returns:
            The parsed tree and the path it was read from

        Raises:
            DefinitionNotFoundError: If the definition is missing or unreadable
        """
        pass

    @abstractmethod
    def list_theme_ids(self) -> list[str]:
        """List theme identifiers in discovery order."""
        pass

    @abstractmethod
    def definition_path(self, theme_id: str) -> Path:
        """Path of a theme's definition source, used for change matching."""
        pass

    def base_paths(self) -> list[Path]:
        """Paths of the base menu/prompt sources (empty if not file-backed)."""
        return []
