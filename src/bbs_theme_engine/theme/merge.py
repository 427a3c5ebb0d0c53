"""
Theme merging.

Folds a theme's ``customization`` tree into copies of the base menu and
prompt trees. The trees have four levels, each handled by its own step:

* section: menu/prompt name -> entry
* form map: ``form`` -> numeric form index -> form
* MCI block: ``mci`` -> MCI code -> view definition
* view definition: property name -> value (scalars, lists, nested mappings)

Base menus declare their views in one of two ways::

    form:
      0:
        mci:            # plain form
          VM1: {...}
      1:
        ETVM:           # MCI-code group form
          mci:
            ET1: {...}

Theme customizations target them with a generic ``mci`` block, a block
keyed by form index (``0: {mci: ...}`` or ``form: {0: {mci: ...}}``), or a
block keyed by the same MCI-code group (``ETVM: {mci: ...}``).
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

from bbs_theme_engine.logging import get_logger
from bbs_theme_engine.theme.models import ResolvedTheme, ThemeDefinition

logger = get_logger("theme.merge")

IMMUTABLE_MCI_PROPERTIES: frozenset[str] = frozenset({"maxLength", "argName", "submit", "validate"})

ViewDefinition = dict[str, Any]
MciBlock = dict[str, ViewDefinition]

SECTIONS = ("menus", "prompts")


def is_form_key(key: Any) -> bool:
    """Form indices are non-negative integers, or digit strings when read from JSON."""
    if isinstance(key, bool):
        return False
    if isinstance(key, int):
        return key >= 0
    return isinstance(key, str) and key.isdigit()


def is_mci_group_key(key: Any) -> bool:
    return isinstance(key, str) and key.isupper()


def form_keys(form_map: Mapping[Any, Any]) -> list[Any]:
    return [k for k in form_map if is_form_key(k)]


class ThemeMerger:
    """
    Merges base menu/prompt trees with a theme definition.

    The merge is a pure function of its inputs: base trees are deep-copied
    and never modified, so the same trees can be merged with every theme.

    Example:
        merger = ThemeMerger()
        resolved = merger.merge(menus, prompts, definition)
        resolved.menus["main"]["form"][0]["mci"]["VM1"]
    """

    def __init__(self, immutable_properties: Iterable[str] = IMMUTABLE_MCI_PROPERTIES) -> None:
        self.immutable_properties = frozenset(immutable_properties)

    def merge(
        self,
        base_menus: Mapping[str, Any],
        base_prompts: Mapping[str, Any] | None,
        definition: ThemeDefinition,
    ) -> ResolvedTheme:
        """Build the ResolvedTheme for one theme."""
        merged: dict[str, dict[str, Any]] = {
            "menus": copy.deepcopy(dict(base_menus)),
            "prompts": copy.deepcopy(dict(base_prompts or {})),
        }

        for section_name in SECTIONS:
            customizations = definition.section(section_name)
            for name, entry in merged[section_name].items():
                if not isinstance(entry, dict):
                    continue
                entry_theme = customizations.get(name)
                if section_name == "menus":
                    self._merge_menu(entry, entry_theme)
                else:
                    self._merge_prompt(entry, entry_theme)

        logger.debug(
            "Merged theme %s (%d menus, %d prompts)",
            definition.theme_id,
            len(merged["menus"]),
            len(merged["prompts"]),
        )

        return ResolvedTheme(
            theme_id=definition.theme_id,
            info=definition.info,
            helpers=definition.helpers,
            menus=MappingProxyType(merged["menus"]),
            prompts=MappingProxyType(merged["prompts"]),
            source_path=definition.source_path,
        )

    # ------------------------------------------------------------------
    # Section level
    # ------------------------------------------------------------------

    def _merge_menu(self, entry: dict[str, Any], menu_theme: Any) -> None:
        created_form = False

        if isinstance(menu_theme, Mapping):
            self._apply_config(entry, menu_theme)

            form_map = entry.get("form")
            if isinstance(form_map, dict):
                for form_key in form_keys(form_map):
                    form = form_map[form_key]
                    if isinstance(form, dict):
                        self._apply_to_form(form, menu_theme, form_key)
            elif isinstance(menu_theme.get("mci"), Mapping):
                # No layout in the base: everything the theme declares goes to form 0
                mci: MciBlock = {}
                self.merge_view(mci, menu_theme["mci"])
                entry["form"] = {0: {"mci": mci}}
                created_form = True

        if not isinstance(entry.get("prompt"), str) and (
            created_form or not isinstance(entry.get("form"), Mapping)
        ):
            runtime = entry.get("runtime")
            if not isinstance(runtime, dict):
                runtime = {}
            runtime["autoNext"] = True
            entry["runtime"] = runtime

    def _merge_prompt(self, entry: dict[str, Any], prompt_theme: Any) -> None:
        if not isinstance(prompt_theme, Mapping):
            return
        self._apply_config(entry, prompt_theme)
        # prompts have no form layer
        self._apply_to_form(entry, prompt_theme, None)

    @staticmethod
    def _apply_config(entry: dict[str, Any], entry_theme: Mapping[str, Any]) -> None:
        theme_config = entry_theme.get("config")
        if not theme_config or not isinstance(theme_config, Mapping):
            return
        config = entry.get("config")
        if not isinstance(config, dict):
            config = {}
        config.update(copy.deepcopy(dict(theme_config)))
        entry["config"] = config

    # ------------------------------------------------------------------
    # Form level
    # ------------------------------------------------------------------

    def _apply_to_form(self, form: dict[str, Any], entry_theme: Mapping[str, Any], form_key: Any) -> None:
        mci = form.get("mci")
        if isinstance(mci, dict):
            self._apply_theme_mci_block(mci, entry_theme, form_key)
            return

        for group_key in [k for k in form if is_mci_group_key(k)]:
            group = form[group_key]
            if not isinstance(group, dict) or not isinstance(group.get("mci"), dict):
                continue
            group_theme = entry_theme.get(group_key)
            if isinstance(group_theme, Mapping) and isinstance(group_theme.get("mci"), Mapping):
                apply_from = group_theme
            else:
                apply_from = entry_theme
            self._apply_theme_mci_block(group["mci"], apply_from, form_key)

    def _apply_theme_mci_block(self, dest: MciBlock, entry_theme: Mapping[str, Any], form_key: Any) -> None:
        src = self.find_mci_block(entry_theme, form_key)
        if src is not None:
            self.apply_mci_block(dest, src)

    @staticmethod
    def find_mci_block(entry_theme: Mapping[str, Any], form_key: Any) -> Mapping[str, Any] | None:
        """
        Locate the theme's MCI block for a form.

        A generic ``mci`` block wins; otherwise a block keyed by the same
        form index, either directly or under ``form``.
        """
        generic = entry_theme.get("mci")
        if isinstance(generic, Mapping):
            return generic
        if form_key is None:
            return None

        for container in (entry_theme, entry_theme.get("form")):
            if not isinstance(container, Mapping):
                continue
            for key, value in container.items():
                if is_form_key(key) and str(key) == str(form_key) and isinstance(value, Mapping):
                    mci = value.get("mci")
                    if isinstance(mci, Mapping):
                        return mci
        return None

    # ------------------------------------------------------------------
    # MCI / view level
    # ------------------------------------------------------------------

    def apply_mci_block(self, dest: MciBlock, src: Mapping[str, Any]) -> None:
        """Merge each MCI code of ``src`` onto the matching view in ``dest``.

        Codes the destination does not declare are ignored.
        """
        for code, props in src.items():
            view = dest.get(code)
            if isinstance(view, dict) and isinstance(props, Mapping):
                self.merge_view(view, props)

    def merge_view(self, dest: dict[str, Any], src: Mapping[str, Any]) -> dict[str, Any]:
        """
        Deep-merge ``src`` onto ``dest`` in place.

        Immutable property names already present in ``dest`` keep their
        value at any depth. Lists and scalars replace; mappings recurse.
        """
        for key, value in src.items():
            if key in self.immutable_properties and key in dest:
                continue
            if isinstance(value, Mapping):
                current = dest.get(key)
                if not isinstance(current, dict):
                    current = {}
                    dest[key] = current
                self.merge_view(current, value)
            else:
                dest[key] = copy.deepcopy(value)
        return dest
