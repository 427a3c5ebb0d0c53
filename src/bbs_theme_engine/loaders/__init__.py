"""
Configuration sources for base menu/prompt trees and theme definitions.
"""

from bbs_theme_engine.loaders.base import ConfigSource
from bbs_theme_engine.loaders.file import FileConfigSource, read_tree

__all__ = ["ConfigSource", "FileConfigSource", "read_tree"]
