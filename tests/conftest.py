"""Shared pytest fixtures for bbs-theme-engine tests."""

import struct
from pathlib import Path
from textwrap import dedent

import pytest
import yaml

from bbs_theme_engine import EngineConfig, ThemeRegistry
from bbs_theme_engine.config import DefaultsConfig
from bbs_theme_engine.theme import ThemeDefinition, build_definition

MENU_YAML = """
menus:
  main:
    art: MAIN
    prompt: menuCommand
    config:
      cls: true
      pause: false
    form:
      0:
        mci:
          VM1:
            maxLength: 20
            bgColor: black
            fgColor: white
            submit: true
          TL2:
            text: Welcome
  matrix:
    art: MATRIX
    form:
      0:
        mci:
          VM1:
            items: [login, apply, logoff]
            argName: choice
            focus: true
  logoff:
    art: LOGOFF
    next: "@systemMethod:logoff"
  newUser:
    art: NEWUSER
    runtime:
      origin: apply
  multiForm:
    form:
      0:
        mci:
          ET1: {maxLength: 10, width: 10}
      1:
        mci:
          ET1: {maxLength: 30, width: 30}
  groupForm:
    form:
      0:
        ETVM:
          mci:
            ET1: {argName: username, width: 10}
            VM2: {focusTextStyle: normal}
        BT:
          mci:
            BT1: {text: OK}
"""

PROMPT_YAML = """
prompts:
  userCredentials:
    art: USERCRED
    mci:
      ET1: {maxLength: 16, argName: username, width: 16}
      ET2: {maxLength: 32, argName: password, password: true}
  pause:
    art: pause
    options:
      trailingLF: "no"
"""

DARK_THEME_YAML = """
info:
  name: Dark
  author: tester
  group: testers
customization:
  defaults:
    general:
      passwordChar: "#!"
    dateFormat:
      short: YYYY-MM-DD
  menus:
    main:
      config:
        pause: true
        font: topaz
      mci:
        VM1:
          maxLength: 99
          bgColor: blue
          fgColor: blue
        XX9:
          text: ignored
    newUser:
      mci:
        ET1:
          width: 40
    multiForm:
      1:
        mci:
          ET1: {width: 50, maxLength: 5}
    groupForm:
      ETVM:
        mci:
          ET1: {width: 25, argName: nope}
      mci:
        BT1: {text: Go}
  prompts:
    userCredentials:
      mci:
        ET1: {width: 20, maxLength: 99}
        ET2: {fillChar: "."}
"""

DEFAULT_THEME_YAML = """
info:
  name: Luciano Blocktronics
  author: Luciano Ayres
customization:
  menus:
    matrix:
      mci:
        VM1:
          focusTextStyle: upper
"""

BROKEN_THEME_YAML = """
info:
  name: Broken
"""

CONFIG_YAML = """
paths:
  root: .
  themes: themes
  art: art
  config: config
defaults:
  theme: luciano_blocktronics
"""


def make_sauce(
    title: str = "Main Menu",
    author: str = "Luciano",
    group: str = "Blocktronics",
    date: str = "20240101",
    file_size: int = 0,
    data_type: int = 1,
    file_type: int = 1,
    tinfo1: int = 80,
    tinfo2: int = 25,
    flags: int = 1,
    tinfos: str = "IBM VGA",
    comments: tuple[str, ...] = (),
) -> bytes:
    """Build an EOF marker, optional comment block and SAUCE record."""
    block = b"\x1a"
    if comments:
        block += b"COMNT" + b"".join(c.encode("cp437").ljust(64) for c in comments)
    block += struct.pack(
        "<5s2s35s20s20s8sIBBHHHHBB22s",
        b"SAUCE",
        b"00",
        title.encode("cp437").ljust(35),
        author.encode("cp437").ljust(20),
        group.encode("cp437").ljust(20),
        date.encode("ascii"),
        file_size,
        data_type,
        file_type,
        tinfo1,
        tinfo2,
        0,
        0,
        len(comments),
        flags,
        tinfos.encode("cp437"),
    )
    return block


@pytest.fixture
def bbs_root(tmp_path: Path) -> Path:
    """Create a temporary BBS tree with config, base definitions, themes and art."""
    root = tmp_path / "bbs"
    root.mkdir()
    (root / "bbs.yaml").write_text(dedent(CONFIG_YAML).strip())

    config_dir = root / "config"
    config_dir.mkdir()
    (config_dir / "menu.yaml").write_text(dedent(MENU_YAML).strip())
    (config_dir / "prompt.yaml").write_text(dedent(PROMPT_YAML).strip())

    themes = root / "themes"
    for theme_id, content in [
        ("luciano_blocktronics", DEFAULT_THEME_YAML),
        ("dark", DARK_THEME_YAML),
        ("broken", BROKEN_THEME_YAML),
    ]:
        theme_dir = themes / theme_id
        theme_dir.mkdir(parents=True)
        (theme_dir / "theme.yaml").write_text(dedent(content).strip())

    art = root / "art"
    art.mkdir()
    (art / "MAIN.ANS").write_bytes(b"general main")
    (art / "SHARED.ANS").write_bytes(b"general shared")
    (themes / "dark" / "MAIN.ANS").write_bytes(b"dark main" + make_sauce(title="Dark Main"))
    (themes / "luciano_blocktronics" / "MAIN.ANS").write_bytes(b"default main")
    (themes / "luciano_blocktronics" / "ONLYDEFAULT.ANS").write_bytes(b"default only")

    extra = root / "extra"
    extra.mkdir()
    (extra / "CUSTOM.ANS").write_bytes(b"custom")

    return root


@pytest.fixture
def engine_config(bbs_root: Path) -> EngineConfig:
    """EngineConfig loaded from the temporary tree."""
    return EngineConfig.from_yaml(bbs_root / "bbs.yaml")


@pytest.fixture
def registry(engine_config: EngineConfig) -> ThemeRegistry:
    """A registry with every valid theme loaded."""
    registry = ThemeRegistry(engine_config)
    registry.discover_and_load_all()
    return registry


@pytest.fixture
def base_menus() -> dict:
    return yaml.safe_load(MENU_YAML)["menus"]


@pytest.fixture
def base_prompts() -> dict:
    return yaml.safe_load(PROMPT_YAML)["prompts"]


@pytest.fixture
def dark_definition() -> ThemeDefinition:
    return build_definition("dark", yaml.safe_load(DARK_THEME_YAML), DefaultsConfig())


@pytest.fixture
def sauce_factory():
    """The make_sauce helper, for tests that build art bytes."""
    return make_sauce
