"""
Art file lookup within a single directory.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from random import Random

from bbs_theme_engine.art.sauce import SauceRecord, strip_sauce
from bbs_theme_engine.config import DEFAULT_ART_TYPES
from bbs_theme_engine.logging import get_logger

logger = get_logger("art.loader")

# Extensions not listed here are decoded as CP437
ART_ENCODINGS: dict[str, str] = {
    ".amg": "latin-1",
}


@dataclass(frozen=True)
class ArtAsset:
    """Raw art bytes plus where they came from."""

    data: bytes
    path: Path
    sauce: SauceRecord | None = None
    encoding: str = "cp437"

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def text(self) -> str:
        return self.data.decode(self.encoding, errors="replace")


def encoding_for(path: Path) -> str:
    return ART_ENCODINGS.get(path.suffix.lower(), "cp437")


class ArtLoader:
    """
    Finds and reads art files.

    A name with an extension is read as-is. A name without one matches any
    file with a supported art extension; with ``random`` enabled, numbered
    variants (``NAME1.ANS``, ``NAME2.ANS``, ...) are candidates too and one
    is chosen at random.
    """

    def __init__(
        self,
        types: Sequence[str] = DEFAULT_ART_TYPES,
        rng: Random | None = None,
    ) -> None:
        self.types = [t.lower() for t in types]
        self.rng = rng or Random()

    def get_art(
        self,
        name: str,
        base_path: Path,
        random: bool = True,
        read_sauce: bool = True,
    ) -> ArtAsset | None:
        """Load ``name`` from ``base_path``; None if nothing matches."""
        path = self.find(name, base_path, random=random)
        if path is None:
            return None
        return self.read(path, read_sauce=read_sauce)

    def find(self, name: str, base_path: Path, random: bool = True) -> Path | None:
        file_name = Path(name).name
        if Path(file_name).suffix:
            direct = base_path / file_name
            return direct if direct.is_file() else None

        candidates = self.candidates(file_name, base_path, random=random)
        if not candidates:
            return None
        if random:
            return self.rng.choice(candidates)
        return candidates[0]

    def candidates(self, name: str, base_path: Path, random: bool = True) -> list[Path]:
        """Matching files in ``base_path``, sorted by file name."""
        if not base_path.is_dir():
            return []

        wanted = name.lower()
        matches: list[Path] = []
        for entry in base_path.iterdir():
            ext = entry.suffix.lower()
            if ext not in self.types or not entry.is_file():
                continue
            stem = entry.name[: -len(ext)].lower()
            if stem == wanted:
                matches.append(entry)
            elif random and stem.startswith(wanted) and stem[len(wanted) :].isdigit():
                matches.append(entry)
        return sorted(matches, key=lambda p: p.name)

    def read(self, path: Path, read_sauce: bool = True) -> ArtAsset | None:
        try:
            data = path.read_bytes()
        except OSError as e:
            logger.debug("Cannot read art %s: %s", path, e)
            return None

        sauce = None
        if read_sauce:
            data, sauce = strip_sauce(data)
        return ArtAsset(data=data, path=path, sauce=sauce, encoding=encoding_for(path))
