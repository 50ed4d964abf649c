"""Line tokenizer for the title sequence script format."""

from __future__ import annotations

import io
from typing import BinaryIO, Iterator, NamedTuple

FIELD_CAPACITY = 127

_LOAD_KEYWORDS = (b"LOAD", b"LOADSC")
_FOLLOW_KEYWORD = b"FOLLOW"


class ScriptLine(NamedTuple):
    """The three fields read from one script line."""

    token: str
    arg1: str = ""
    arg2: str = ""


def read_line(stream: BinaryIO) -> ScriptLine:
    """Consume one line from ``stream`` and split it into up to three fields.

    Spaces separate fields, and runs of spaces never produce empty fields.
    Once the first field reads ``LOAD`` or ``LOADSC`` the rest of the line is
    a single argument, so file names may contain spaces. After ``FOLLOW`` the
    third field (the sprite name) keeps its spaces. ``#`` starts a comment
    that runs to the end of the line. Text after the third field is dropped,
    and every field is cut to :data:`FIELD_CAPACITY` characters.
    """

    parts = [bytearray(), bytearray(), bytearray()]
    part = 0
    discard = False
    load = False
    sprite = False

    while True:
        c = stream.read(1)
        if not c or c in (b"\n", b"\r"):
            break
        if discard:
            continue
        if c == b"#":
            discard = True
            continue
        if c == b" ":
            if not parts[part]:
                continue
            if not load and not (sprite and part == 2):
                if part == 0:
                    head = bytes(parts[0]).upper()
                    if head in _LOAD_KEYWORDS:
                        load = True
                    elif head == _FOLLOW_KEYWORD:
                        sprite = True
                if part == 2:
                    discard = True
                else:
                    part += 1
                continue
        parts[part] += c

    return ScriptLine(*(_decode_field(field) for field in parts))


def iter_lines(data: bytes) -> Iterator[ScriptLine]:
    """Yield every line of ``data``; an empty script still yields one blank line."""

    stream = io.BytesIO(data)
    while True:
        yield read_line(stream)
        if stream.tell() >= len(data):
            break


def _decode_field(field: bytearray) -> str:
    return bytes(field).decode("utf-8", errors="replace")[:FIELD_CAPACITY]


__all__ = ["FIELD_CAPACITY", "ScriptLine", "iter_lines", "read_line"]
