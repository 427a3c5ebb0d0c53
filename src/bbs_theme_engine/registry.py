"""
Theme registry.

Holds one ResolvedTheme per theme id, built at startup and rebuilt when a
definition file changes.
"""

from __future__ import annotations

import asyncio
import random
import threading
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

from watchfiles import awatch

from bbs_theme_engine.config import EngineConfig
from bbs_theme_engine.errors import ThemeEngineError
from bbs_theme_engine.loaders import ConfigSource, FileConfigSource
from bbs_theme_engine.logging import get_logger
from bbs_theme_engine.theme import ResolvedTheme, ThemeDefinitionLoader, ThemeMerger

logger = get_logger("registry")


class ThemeRegistry:
    """
    Registry of resolved themes keyed by theme id.

    Readers never lock: a reload builds a complete ResolvedTheme first and
    then replaces the slot with a single assignment, so a reader sees either
    the old tree or the new one. Reloads of the same theme id are serialized.

    Example:
        registry = ThemeRegistry(EngineConfig.from_yaml(Path("bbs.yaml")))
        registry.discover_and_load_all()

        theme = registry.get_or_default(user_theme_id)
        main_menu = theme.menus["main"]

        await registry.start_watching()
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        source: ConfigSource | None = None,
        loader: ThemeDefinitionLoader | None = None,
        merger: ThemeMerger | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.source = source or FileConfigSource(self.config)
        self.loader = loader or ThemeDefinitionLoader(self.source, self.config.defaults)
        self.merger = merger or ThemeMerger()

        self._themes: dict[str, ResolvedTheme] = {}
        self._base: tuple[dict[str, Any], dict[str, Any]] = ({}, {})

        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

        # File watching state
        self._watch_task: asyncio.Task[None] | None = None
        self._watch_stop_event: asyncio.Event | None = None
        self._watch_callbacks: list[Callable[[list[str]], None]] = []

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def discover_and_load_all(self) -> int:
        """
        Load base trees, then load and merge every discovered theme.

        A theme that fails to load is logged and skipped. The new set of
        themes replaces the previous one as a whole, so themes that are no
        longer discovered are dropped.

        Returns:
            Number of registered themes

        Raises:
            DefinitionNotFoundError: If the base menu or prompt file cannot be read
        """
        self._base = (self.source.load_menus(), self.source.load_prompts())

        theme_ids = self.source.list_theme_ids()
        logger.debug("Discovered %d theme directories", len(theme_ids))

        themes: dict[str, ResolvedTheme] = {}
        for theme_id in theme_ids:
            with self._lock_for(theme_id):
                resolved = self._resolve(theme_id)
            if resolved is not None:
                themes[theme_id] = resolved
        self._themes = themes

        logger.info("Loaded %d of %d themes", len(themes), len(theme_ids))
        return len(themes)

    def invalidate(self, theme_id: str) -> bool:
        """
        Reload and re-merge one theme, replacing its registry entry.

        On failure the previous entry (if any) stays in place.

        Returns:
            True if the entry was replaced
        """
        replaced = self._load_theme(theme_id)
        if replaced:
            logger.info("Theme reloaded: %s", theme_id)
        return replaced

    def invalidate_path(self, path: Path) -> list[str]:
        """
        React to a change of a definition file.

        A base menu/prompt file reloads the base trees and re-merges every
        registered theme; a theme definition reloads that theme only.

        Returns:
            Ids of the themes that were replaced
        """
        changed = _normalize(path)

        if changed in {_normalize(p) for p in self.source.base_paths()}:
            try:
                self._base = (self.source.load_menus(), self.source.load_prompts())
            except ThemeEngineError as e:
                logger.warning("Failed to reload base definitions: %s", e)
                return []
            logger.info("Base definitions reloaded from %s", path)
            return [theme_id for theme_id in self.ids() if self.invalidate(theme_id)]

        candidates = list(dict.fromkeys([*self.ids(), *self.source.list_theme_ids()]))
        return [
            theme_id
            for theme_id in candidates
            if _normalize(self.source.definition_path(theme_id)) == changed
            and self.invalidate(theme_id)
        ]

    def _load_theme(self, theme_id: str) -> bool:
        with self._lock_for(theme_id):
            resolved = self._resolve(theme_id)
            if resolved is None:
                return False
            self._themes[theme_id] = resolved
        return True

    def _resolve(self, theme_id: str) -> ResolvedTheme | None:
        try:
            definition = self.loader.load(theme_id)
        except ThemeEngineError as e:
            logger.warning("Failed to load theme %s: %s", theme_id, e)
            return None

        menus, prompts = self._base
        resolved = self.merger.merge(menus, prompts, definition)
        logger.debug("Theme loaded: %s (%s by %s)", theme_id, resolved.info.name, resolved.info.author)
        return resolved

    def _lock_for(self, theme_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(theme_id)
            if lock is None:
                lock = self._locks[theme_id] = threading.Lock()
            return lock

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, theme_id: str) -> ResolvedTheme | None:
        return self._themes.get(theme_id)

    def get_or_default(self, theme_id: str | None) -> ResolvedTheme | None:
        """The requested theme, falling back to the configured default theme."""
        if theme_id:
            theme = self._themes.get(theme_id)
            if theme is not None:
                return theme
            logger.debug("Theme %s not available; using default", theme_id)
        return self._themes.get(self.config.defaults.theme)

    def get_random_id(self) -> str | None:
        """A registered theme id chosen uniformly at random, or None if empty."""
        theme_ids = list(self._themes)
        if not theme_ids:
            return None
        return random.choice(theme_ids)

    def ids(self) -> list[str]:
        """Registered theme ids in discovery order."""
        return list(self._themes)

    def themes(self) -> list[ResolvedTheme]:
        return list(self._themes.values())

    def __len__(self) -> int:
        return len(self._themes)

    def __contains__(self, theme_id: object) -> bool:
        return theme_id in self._themes

    def __iter__(self) -> Iterator[str]:
        return iter(self.ids())

    # ------------------------------------------------------------------
    # File watching
    # ------------------------------------------------------------------

    async def start_watching(
        self,
        callback: Callable[[list[str]], None] | None = None,
    ) -> None:
        """
        Start watching theme and base definition files for changes.

        Args:
            callback: Optional callback invoked with the ids of reloaded themes
        """
        if self._watch_task is not None:
            return

        if callback:
            self._watch_callbacks.append(callback)

        self._watch_stop_event = asyncio.Event()
        self._watch_task = asyncio.create_task(self._watch_loop())
        logger.debug("Started watching theme definitions")

    async def stop_watching(self) -> None:
        """Stop watching for changes."""
        if self._watch_task is None:
            return

        if self._watch_stop_event:
            self._watch_stop_event.set()

        self._watch_task.cancel()
        try:
            await self._watch_task
        except asyncio.CancelledError:
            pass

        self._watch_task = None
        self._watch_stop_event = None

    def add_watch_callback(self, callback: Callable[[list[str]], None]) -> None:
        """Add a callback invoked with the ids of reloaded themes."""
        self._watch_callbacks.append(callback)

    def remove_watch_callback(self, callback: Callable[[list[str]], None]) -> None:
        """Remove a watch callback."""
        if callback in self._watch_callbacks:
            self._watch_callbacks.remove(callback)

    @property
    def is_watching(self) -> bool:
        """Check if file watching is active."""
        return self._watch_task is not None and not self._watch_task.done()

    async def handle_changes(self, paths: set[Path]) -> list[str]:
        """Reload everything affected by the changed paths and notify callbacks."""
        reloaded: list[str] = []
        for path in sorted(paths):
            for theme_id in await asyncio.to_thread(self.invalidate_path, path):
                if theme_id not in reloaded:
                    reloaded.append(theme_id)

        if reloaded:
            for callback in list(self._watch_callbacks):
                try:
                    callback(reloaded)
                except Exception:
                    logger.exception("Theme watch callback failed")
        return reloaded

    def _watch_paths(self) -> list[str]:
        paths = [self.config.paths.themes]
        paths.extend(p.parent for p in self.source.base_paths())
        existing = [str(p) for p in dict.fromkeys(paths) if p.exists()]
        return existing

    async def _watch_loop(self) -> None:
        """Internal watch loop that monitors definition files."""
        watch_paths = self._watch_paths()
        if not watch_paths:
            return

        try:
            async for changes in awatch(
                *watch_paths,
                debounce=self.config.watch_debounce_ms,
                stop_event=self._watch_stop_event,
            ):
                await self.handle_changes({Path(path_str) for _, path_str in changes})
        except asyncio.CancelledError:
            pass


def _normalize(path: Path) -> Path:
    return Path(path).expanduser().resolve()
