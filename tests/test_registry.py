"""Tests for ThemeRegistry: loading, lookup, reloads and watching."""

from __future__ import annotations

import logging
import shutil
import threading
from pathlib import Path
from typing import Any

import pytest
import yaml

from bbs_theme_engine import (
    ConfigSource,
    DefinitionNotFoundError,
    EngineConfig,
    ThemeRegistry,
)

THEME_TEMPLATE = """
info:
  name: Dark
  author: tester
customization:
  menus:
    main:
      mci:
        VM1:
          bgColor: {color}
          fgColor: {color}
"""


def _vm1(theme) -> dict:
    return theme.menus["main"]["form"][0]["mci"]["VM1"]


def _write_dark(engine_config: EngineConfig, color: str) -> Path:
    path = engine_config.paths.themes / "dark" / "theme.yaml"
    path.write_text(THEME_TEMPLATE.format(color=color))
    return path


class MemorySource(ConfigSource):
    """In-memory source for tests that do not need files."""

    def __init__(self, menus: dict, themes: dict[str, dict]) -> None:
        self.menus = menus
        self.themes = themes

    def load_menus(self) -> dict[str, Any]:
        return self.menus

    def load_prompts(self) -> dict[str, Any]:
        return {}

    def load_theme_definition(self, theme_id: str) -> tuple[dict[str, Any], Path]:
        if theme_id not in self.themes:
            raise DefinitionNotFoundError(self.definition_path(theme_id))
        return self.themes[theme_id], self.definition_path(theme_id)

    def list_theme_ids(self) -> list[str]:
        return list(self.themes)

    def definition_path(self, theme_id: str) -> Path:
        return Path("/memory") / theme_id


# ---------------------------------------------------------------------------
# TestDiscovery
# ---------------------------------------------------------------------------


class TestDiscovery:
    """Tests for discover_and_load_all."""

    def test_loads_valid_themes(self, engine_config: EngineConfig, caplog) -> None:
        registry = ThemeRegistry(engine_config)

        with caplog.at_level(logging.WARNING, logger="bbs_theme_engine"):
            count = registry.discover_and_load_all()

        assert count == 2
        assert sorted(registry.ids()) == ["dark", "luciano_blocktronics"]
        assert "broken" not in registry
        assert any("broken" in record.getMessage() for record in caplog.records)

    def test_missing_base_menus(self, engine_config: EngineConfig) -> None:
        engine_config.menu_path.unlink()
        registry = ThemeRegistry(engine_config)

        with pytest.raises(DefinitionNotFoundError):
            registry.discover_and_load_all()

    def test_no_themes_directory(self, tmp_path: Path, engine_config: EngineConfig) -> None:
        config = EngineConfig.from_dict(
            {"paths": {"config": str(engine_config.paths.config), "themes": str(tmp_path / "none")}}
        )
        registry = ThemeRegistry(config)

        assert registry.discover_and_load_all() == 0
        assert len(registry) == 0

    def test_rediscover_drops_removed_theme(self, registry: ThemeRegistry, engine_config: EngineConfig) -> None:
        shutil.rmtree(engine_config.paths.themes / "dark")

        assert registry.discover_and_load_all() == 1
        assert registry.ids() == ["luciano_blocktronics"]
        assert registry.get("dark") is None

    def test_custom_source(self) -> None:
        source = MemorySource(
            menus={"main": {"form": {0: {"mci": {"TL1": {"text": "hi"}}}}}},
            themes={
                "mem": {
                    "info": {"name": "Mem", "author": "a"},
                    "customization": {"menus": {"main": {"mci": {"TL1": {"text": "yo"}}}}},
                }
            },
        )
        registry = ThemeRegistry(EngineConfig(), source=source)

        registry.discover_and_load_all()

        assert registry.get("mem").menus["main"]["form"][0]["mci"]["TL1"]["text"] == "yo"
        assert registry.get("mem").source_path == Path("/memory/mem")

    def test_themes_do_not_share_trees(self, registry: ThemeRegistry) -> None:
        dark = registry.get("dark")
        default = registry.get("luciano_blocktronics")

        assert _vm1(dark)["bgColor"] == "blue"
        assert _vm1(default)["bgColor"] == "black"
        assert _vm1(dark) is not _vm1(default)


# ---------------------------------------------------------------------------
# TestLookup
# ---------------------------------------------------------------------------


class TestLookup:
    """Tests for registry lookups."""

    def test_get(self, registry: ThemeRegistry) -> None:
        assert registry.get("dark").info.name == "Dark"
        assert registry.get("nope") is None

    def test_get_or_default(self, registry: ThemeRegistry) -> None:
        assert registry.get_or_default("dark").theme_id == "dark"
        assert registry.get_or_default("nope").theme_id == "luciano_blocktronics"
        assert registry.get_or_default(None).theme_id == "luciano_blocktronics"

    def test_get_or_default_without_default(self, engine_config: EngineConfig) -> None:
        config = EngineConfig.from_dict(
            {
                "paths": {
                    "config": str(engine_config.paths.config),
                    "themes": str(engine_config.paths.themes),
                },
                "defaults": {"theme": "missing"},
            }
        )
        registry = ThemeRegistry(config)
        registry.discover_and_load_all()

        assert registry.get_or_default("nope") is None

    def test_random_id(self, registry: ThemeRegistry) -> None:
        seen = {registry.get_random_id() for _ in range(100)}

        assert seen == {"dark", "luciano_blocktronics"}

    def test_random_id_empty(self) -> None:
        assert ThemeRegistry().get_random_id() is None

    def test_iteration(self, registry: ThemeRegistry) -> None:
        assert sorted(registry) == ["dark", "luciano_blocktronics"]
        assert {t.theme_id for t in registry.themes()} == {"dark", "luciano_blocktronics"}

    def test_helpers(self, registry: ThemeRegistry) -> None:
        assert registry.get("dark").helpers.password_char() == "#"
        assert registry.get("dark").helpers.date_format() == "YYYY-MM-DD"
        assert registry.get("luciano_blocktronics").helpers.password_char() == "*"


# ---------------------------------------------------------------------------
# TestInvalidate
# ---------------------------------------------------------------------------


class TestInvalidate:
    """Tests for reloading themes."""

    def test_invalidate_replaces_entry(self, registry: ThemeRegistry, engine_config: EngineConfig) -> None:
        before = registry.get("dark")
        _write_dark(engine_config, "red")

        assert registry.invalidate("dark") is True

        after = registry.get("dark")
        assert after is not before
        assert _vm1(after)["bgColor"] == "red"
        assert _vm1(before)["bgColor"] == "blue"

    def test_invalidate_failure_keeps_entry(self, registry: ThemeRegistry, engine_config: EngineConfig) -> None:
        before = registry.get("dark")
        (engine_config.paths.themes / "dark" / "theme.yaml").write_text("info: {name: Dark}\n")

        assert registry.invalidate("dark") is False
        assert registry.get("dark") is before

    def test_invalidate_new_theme(self, registry: ThemeRegistry, engine_config: EngineConfig) -> None:
        (engine_config.paths.themes / "broken" / "theme.yaml").write_text(
            yaml.safe_dump({"info": {"name": "Fixed", "author": "me"}})
        )

        assert registry.invalidate("broken") is True
        assert registry.get("broken").info.name == "Fixed"

    def test_invalidate_theme_path(self, registry: ThemeRegistry, engine_config: EngineConfig) -> None:
        path = _write_dark(engine_config, "green")

        assert registry.invalidate_path(path) == ["dark"]
        assert _vm1(registry.get("dark"))["fgColor"] == "green"

    def test_invalidate_base_path(self, registry: ThemeRegistry, engine_config: EngineConfig) -> None:
        menus = yaml.safe_load(engine_config.menu_path.read_text())
        menus["menus"]["main"]["form"][0]["mci"]["VM1"]["width"] = 33
        engine_config.menu_path.write_text(yaml.safe_dump(menus))

        reloaded = registry.invalidate_path(engine_config.menu_path)

        assert sorted(reloaded) == ["dark", "luciano_blocktronics"]
        assert _vm1(registry.get("dark"))["width"] == 33
        assert _vm1(registry.get("luciano_blocktronics"))["width"] == 33

    def test_invalidate_broken_base_keeps_trees(
        self, registry: ThemeRegistry, engine_config: EngineConfig
    ) -> None:
        before = registry.get("dark")
        engine_config.prompt_path.write_text("prompts: [unclosed\n")

        assert registry.invalidate_path(engine_config.prompt_path) == []
        assert registry.get("dark") is before

    def test_invalidate_unrelated_path(self, registry: ThemeRegistry, bbs_root: Path) -> None:
        before = registry.get("dark")

        assert registry.invalidate_path(bbs_root / "art" / "MAIN.ANS") == []
        assert registry.get("dark") is before

    def test_readers_never_see_partial_theme(
        self, registry: ThemeRegistry, engine_config: EngineConfig
    ) -> None:
        stop = threading.Event()
        mismatches: list[tuple[str, str]] = []

        def read() -> None:
            while not stop.is_set():
                vm1 = _vm1(registry.get("dark"))
                if vm1["bgColor"] != vm1["fgColor"]:
                    mismatches.append((vm1["bgColor"], vm1["fgColor"]))

        readers = [threading.Thread(target=read) for _ in range(4)]
        for reader in readers:
            reader.start()
        try:
            for i in range(30):
                _write_dark(engine_config, "red" if i % 2 else "cyan")
                registry.invalidate("dark")
        finally:
            stop.set()
            for reader in readers:
                reader.join()

        assert mismatches == []

    def test_concurrent_invalidate_same_theme(
        self, registry: ThemeRegistry, engine_config: EngineConfig
    ) -> None:
        _write_dark(engine_config, "magenta")
        results: list[bool] = []

        def reload() -> None:
            results.append(registry.invalidate("dark"))

        threads = [threading.Thread(target=reload) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results == [True] * 8
        assert _vm1(registry.get("dark"))["bgColor"] == "magenta"


# ---------------------------------------------------------------------------
# TestWatching
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
class TestWatching:
    """Async tests for change handling and file watching."""

    async def test_handle_changes_notifies(self, registry: ThemeRegistry, engine_config: EngineConfig) -> None:
        calls: list[list[str]] = []
        registry.add_watch_callback(calls.append)
        path = _write_dark(engine_config, "yellow")

        reloaded = await registry.handle_changes({path})

        assert reloaded == ["dark"]
        assert calls == [["dark"]]
        assert _vm1(registry.get("dark"))["bgColor"] == "yellow"

    async def test_handle_changes_dedupes(self, registry: ThemeRegistry, engine_config: EngineConfig) -> None:
        path = _write_dark(engine_config, "yellow")

        reloaded = await registry.handle_changes({path, engine_config.menu_path})

        assert sorted(reloaded) == ["dark", "luciano_blocktronics"]

    async def test_handle_changes_nothing_reloaded(self, registry: ThemeRegistry, bbs_root: Path) -> None:
        calls: list[list[str]] = []
        registry.add_watch_callback(calls.append)

        assert await registry.handle_changes({bbs_root / "unrelated.txt"}) == []
        assert calls == []

    async def test_callback_errors_are_logged(
        self, registry: ThemeRegistry, engine_config: EngineConfig, caplog
    ) -> None:
        def boom(theme_ids: list[str]) -> None:
            raise RuntimeError("boom")

        calls: list[list[str]] = []
        registry.add_watch_callback(boom)
        registry.add_watch_callback(calls.append)
        path = _write_dark(engine_config, "white")

        with caplog.at_level(logging.ERROR, logger="bbs_theme_engine"):
            await registry.handle_changes({path})

        assert calls == [["dark"]]
        assert any("callback failed" in record.getMessage() for record in caplog.records)

    async def test_remove_callback(self, registry: ThemeRegistry, engine_config: EngineConfig) -> None:
        calls: list[list[str]] = []
        registry.add_watch_callback(calls.append)
        registry.remove_watch_callback(calls.append)
        path = _write_dark(engine_config, "white")

        await registry.handle_changes({path})

        assert calls == []

    async def test_start_stop_watching(self, registry: ThemeRegistry) -> None:
        assert not registry.is_watching

        await registry.start_watching()
        assert registry.is_watching

        await registry.stop_watching()
        assert not registry.is_watching

    async def test_stop_without_start(self, registry: ThemeRegistry) -> None:
        await registry.stop_watching()

        assert not registry.is_watching
