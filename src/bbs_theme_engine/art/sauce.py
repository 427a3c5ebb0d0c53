"""
SAUCE metadata records.

A SAUCE record is 128 bytes appended to an art file, optionally preceded
by a comment block (``COMNT`` + 64 bytes per line) and an EOF (0x1A)
marker. See http://www.acid.org/info/sauce/sauce.htm for the layout.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

SAUCE_SIZE = 128
SAUCE_ID = b"SAUCE"
SAUCE_VERSION = b"00"
COMMENT_ID = b"COMNT"
COMMENT_LINE_SIZE = 64
EOF_CHAR = b"\x1a"

_SAUCE_STRUCT = struct.Struct("<5s2s35s20s20s8sIBBHHHHBB22s")

DATA_TYPES: dict[int, str] = {
    0: "None",
    1: "Character",
    2: "Bitmap",
    3: "Vector",
    4: "Audio",
    5: "BinaryText",
    6: "XBin",
    7: "Archive",
    8: "Executable",
}

CHARACTER_FILE_TYPES: dict[int, str] = {
    0: "ASCII",
    1: "ANSi",
    2: "ANSiMation",
    3: "RIP script",
    4: "PCBoard",
    5: "Avatar",
    6: "HTML",
    7: "Source",
    8: "TundraDraw",
}

# Character file types whose TInfo1/TInfo2 hold columns/rows
_DIMENSIONED_TYPES = {0, 1, 2, 4, 5, 8}


@dataclass(frozen=True)
class SauceRecord:
    """Parsed SAUCE metadata."""

    version: str
    title: str
    author: str
    group: str
    date: str
    file_size: int
    data_type: int
    file_type: int
    tinfo1: int
    tinfo2: int
    tinfo3: int
    tinfo4: int
    flags: int
    tinfos: str
    comments: list[str] = field(default_factory=list)

    @property
    def data_type_name(self) -> str:
        return DATA_TYPES.get(self.data_type, "Unknown")

    @property
    def file_type_name(self) -> str | None:
        if self.data_type == 1:
            return CHARACTER_FILE_TYPES.get(self.file_type)
        return None

    @property
    def is_character(self) -> bool:
        return self.data_type == 1

    @property
    def columns(self) -> int | None:
        if self.is_character and self.file_type in _DIMENSIONED_TYPES and self.tinfo1:
            return self.tinfo1
        return None

    @property
    def rows(self) -> int | None:
        if self.is_character and self.file_type in _DIMENSIONED_TYPES and self.tinfo2:
            return self.tinfo2
        return None

    @property
    def ice_colors(self) -> bool:
        """Non-blink (iCE color) mode, bit 0 of the flags."""
        return bool(self.flags & 0x01)

    @property
    def font_name(self) -> str | None:
        return self.tinfos or None


def _text(raw: bytes) -> str:
    return raw.decode("cp437").rstrip("\x00 ")


def _find_sauce(data: bytes) -> tuple[SauceRecord, int] | None:
    """Parse the trailing record; return it with the offset where art data ends."""
    if len(data) < SAUCE_SIZE:
        return None

    start = len(data) - SAUCE_SIZE
    fields = _SAUCE_STRUCT.unpack_from(data, start)
    if fields[0] != SAUCE_ID or fields[1] != SAUCE_VERSION:
        return None

    (
        _,
        version,
        title,
        author,
        group,
        date,
        file_size,
        data_type,
        file_type,
        tinfo1,
        tinfo2,
        tinfo3,
        tinfo4,
        num_comments,
        flags,
        tinfos,
    ) = fields

    comments: list[str] = []
    end = start
    if num_comments:
        comment_start = start - len(COMMENT_ID) - num_comments * COMMENT_LINE_SIZE
        if comment_start >= 0 and data[comment_start : comment_start + len(COMMENT_ID)] == COMMENT_ID:
            offset = comment_start + len(COMMENT_ID)
            for i in range(num_comments):
                line = data[offset + i * COMMENT_LINE_SIZE : offset + (i + 1) * COMMENT_LINE_SIZE]
                comments.append(_text(line))
            end = comment_start

    if end > 0 and data[end - 1 : end] == EOF_CHAR:
        end -= 1

    record = SauceRecord(
        version=version.decode("ascii"),
        title=_text(title),
        author=_text(author),
        group=_text(group),
        date=_text(date),
        file_size=file_size,
        data_type=data_type,
        file_type=file_type,
        tinfo1=tinfo1,
        tinfo2=tinfo2,
        tinfo3=tinfo3,
        tinfo4=tinfo4,
        flags=flags,
        # zero-terminated
        tinfos=tinfos.split(b"\x00", 1)[0].decode("cp437").rstrip(),
        comments=comments,
    )
    return record, end


def read_sauce(data: bytes) -> SauceRecord | None:
    """Return the SAUCE record at the end of ``data``, or None if there is none."""
    found = _find_sauce(data)
    return found[0] if found else None


def strip_sauce(data: bytes) -> tuple[bytes, SauceRecord | None]:
    """Split art bytes into content and SAUCE record (content unchanged if absent)."""
    found = _find_sauce(data)
    if found is None:
        return data, None
    record, end = found
    return data[:end], record
