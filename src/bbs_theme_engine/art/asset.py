"""
Asset specs.

Menus and prompts name their art either directly (``MAINMENU``) or with a
typed spec such as ``@art:MAINMENU`` or ``@method:my_module/draw_banner``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

ASSET_TYPES = (
    "art",
    "menu",
    "method",
    "userModule",
    "systemMethod",
    "systemModule",
    "prompt",
    "config",
    "sysStat",
)

ART_ASSET_TYPES = ("art", "method")

ASSET_PATTERN = re.compile(
    r"^@(" + "|".join(ASSET_TYPES) + r"):([\w.\-/]*?)(?:/([\w\-]+))?$"
)


@dataclass(frozen=True)
class AssetSpec:
    """A parsed asset reference."""

    type: str
    asset: str
    location: str | None = None


def parse_asset_spec(spec: str) -> AssetSpec | None:
    """
    Parse ``@type:asset`` or ``@type:location/asset``.

    Returns None if ``spec`` is not a valid typed spec.
    """
    match = ASSET_PATTERN.match(spec)
    if not match:
        return None
    asset_type, first, second = match.groups()
    if second:
        return AssetSpec(type=asset_type, asset=second, location=first)
    if not first:
        return None
    return AssetSpec(type=asset_type, asset=first)


def get_art_asset(spec: str) -> AssetSpec | None:
    """
    Interpret a menu/prompt ``art`` value.

    Bare names are art; typed specs must be one of :data:`ART_ASSET_TYPES`.
    """
    if not isinstance(spec, str) or not spec:
        return None
    if not spec.startswith("@"):
        return AssetSpec(type="art", asset=spec)
    return parse_asset_spec(spec)
