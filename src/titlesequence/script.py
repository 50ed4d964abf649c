"""Reading and writing the legacy ``script.txt`` title sequence format."""

from __future__ import annotations

import re
from typing import Iterable, Sequence

from .commands import SAVE_INDEX_INVALID, TitleCommand, TitleScript
from .tokenizer import ScriptLine, iter_lines

NO_SAVE_PLACEHOLDER = "<No save file>"
NO_SCENARIO_PLACEHOLDER = "<No scenario name>"

_LEADING_INTEGER = re.compile(r"\s*([+-]?\d+)")


def parse_int(text: str) -> int:
    """Parse the leading integer of ``text`` and return ``0`` when there is none."""

    match = _LEADING_INTEGER.match(text)
    if match is None:
        return 0
    return int(match.group(1))


def find_save_index(saves: Sequence[str], filename: str) -> int:
    """Return the first index whose name matches ``filename`` ignoring case."""

    wanted = filename.lower()
    for index, save in enumerate(saves):
        if save.lower() == wanted:
            return index
    return SAVE_INDEX_INVALID


def decode_command(line: ScriptLine, saves: Sequence[str]) -> TitleCommand:
    """Turn one tokenized line into a command.

    Unknown or blank tokens produce an ``UNDEFINED`` command; malformed numbers
    read as zero. Decoding never fails.
    """

    token = line.token.upper()
    if token == "LOAD":
        return TitleCommand.load(find_save_index(saves, line.arg1))
    if token == "LOCATION":
        return TitleCommand.location(parse_int(line.arg1), parse_int(line.arg2))
    if token == "ROTATE":
        return TitleCommand.rotate(parse_int(line.arg1))
    if token == "ZOOM":
        return TitleCommand.zoom_to(parse_int(line.arg1))
    if token == "SPEED":
        return TitleCommand.set_speed(parse_int(line.arg1))
    if token == "FOLLOW":
        return TitleCommand.follow(parse_int(line.arg1), line.arg2)
    if token == "WAIT":
        return TitleCommand.wait(parse_int(line.arg1))
    if token == "RESTART":
        return TitleCommand.restart()
    if token == "END":
        return TitleCommand.end()
    if token == "LOADSC":
        return TitleCommand.load_scenario(line.arg1)
    return TitleCommand(TitleScript.UNDEFINED)


def read_script(data: bytes, saves: Sequence[str]) -> list[TitleCommand]:
    """Decode every command in ``data``, dropping blank and unrecognised lines."""

    commands: list[TitleCommand] = []
    for line in iter_lines(data):
        command = decode_command(line, saves)
        if command.type is not TitleScript.UNDEFINED:
            commands.append(command)
    return commands


def encode_command(command: TitleCommand, saves: Sequence[str]) -> str:
    """Render a single command as script text without the line terminator."""

    kind = command.type
    if kind is TitleScript.LOAD:
        index = command.save_index
        if index != SAVE_INDEX_INVALID and 0 <= index < len(saves):
            return f"LOAD {saves[index]}"
        return f"LOAD {NO_SAVE_PLACEHOLDER}"
    if kind is TitleScript.LOAD_SC:
        if not command.scenario:
            return f"LOADSC {NO_SCENARIO_PLACEHOLDER}"
        return f"LOADSC {command.scenario}"
    if kind in (TitleScript.UNDEFINED, TitleScript.LOOP, TitleScript.END_LOOP):
        return ""
    if kind is TitleScript.LOCATION:
        return f"LOCATION {command.x} {command.y}"
    if kind is TitleScript.ROTATE:
        return f"ROTATE {command.rotations}"
    if kind is TitleScript.ZOOM:
        return f"ZOOM {command.zoom}"
    if kind is TitleScript.FOLLOW:
        return f"FOLLOW {command.sprite_index} {command.sprite_name}"
    if kind is TitleScript.SPEED:
        return f"SPEED {command.speed}"
    if kind is TitleScript.WAIT:
        return f"WAIT {command.milliseconds}"
    if kind is TitleScript.RESTART:
        return "RESTART"
    if kind is TitleScript.END:
        return "END"
    raise ValueError(f"Unsupported command type: {kind!r}")


def write_script(
    name: str, commands: Iterable[TitleCommand], saves: Sequence[str]
) -> str:
    """Render ``commands`` as a complete script, headed by a comment naming it."""

    lines = [f"# SCRIPT FOR {name}"]
    lines.extend(encode_command(command, saves) for command in commands)
    return "".join(f"{line}\n" for line in lines)


__all__ = [
    "NO_SAVE_PLACEHOLDER",
    "NO_SCENARIO_PLACEHOLDER",
    "decode_command",
    "encode_command",
    "find_save_index",
    "parse_int",
    "read_script",
    "write_script",
]
