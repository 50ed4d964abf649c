"""Command-line entry point for inspecting and editing title sequences."""

from __future__ import annotations

import argparse
import shutil
import sys
from pathlib import Path
from typing import Sequence

from .backends import TitleSequenceError
from .sequence import list_title_sequences, load_title_sequence
from .settings import TitleSequenceSettings


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point; returns the process exit status."""

    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        settings = TitleSequenceSettings.from_env()
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    settings.configure_logging()

    try:
        return args.handler(args, settings)
    except (TitleSequenceError, IndexError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


def _list(args: argparse.Namespace, settings: TitleSequenceSettings) -> int:
    root = Path(args.root) if args.root else settings.root or Path.cwd()
    for path in list_title_sequences(root):
        kind = "dir" if path.is_dir() else "zip"
        print(f"{kind}\t{path.name}")
    return 0


def _show(args: argparse.Namespace, settings: TitleSequenceSettings) -> int:
    sequence = load_title_sequence(args.path)
    print(f"Title sequence: {sequence.name}")
    print(f"Saves ({len(sequence.saves)}):")
    for index, save in enumerate(sequence.saves):
        if sequence.is_zip:
            print(f"  [{index}] {save}")
        else:
            print(f"  [{index}] {save}\t{sequence.save_path_for(index)}")
    print()
    sys.stdout.write(sequence.script_text())
    return 0


def _add_park(args: argparse.Namespace, settings: TitleSequenceSettings) -> int:
    sequence = load_title_sequence(args.path)
    source = Path(args.source)
    name = args.name or source.name
    sequence.add_park(source, name)
    sequence.save()
    print(f"Added {name} to {sequence.name}")
    return 0


def _rename_park(args: argparse.Namespace, settings: TitleSequenceSettings) -> int:
    sequence = load_title_sequence(args.path)
    sequence.rename_park(args.index, args.name)
    sequence.save()
    print(f"Renamed save #{args.index} to {args.name}")
    return 0


def _remove_park(args: argparse.Namespace, settings: TitleSequenceSettings) -> int:
    sequence = load_title_sequence(args.path)
    sequence.remove_park(args.index)
    sequence.save()
    print(f"Removed save #{args.index}")
    return 0


def _format(args: argparse.Namespace, settings: TitleSequenceSettings) -> int:
    sequence = load_title_sequence(args.path)
    sequence.save()
    print(f"Rewrote script for {sequence.name} ({len(sequence.commands)} commands)")
    return 0


def _extract(args: argparse.Namespace, settings: TitleSequenceSettings) -> int:
    sequence = load_title_sequence(args.path)
    handle = sequence.get_park_handle(args.index)
    if handle is None:
        print(f"error: unable to open save #{args.index}", file=sys.stderr)
        return 1

    with handle, Path(args.output).open("wb") as destination:
        shutil.copyfileobj(handle.stream, destination)
    print(f"Extracted {handle.hint_path} to {args.output}")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="titlesequence",
        description="Inspect and edit title sequences stored as folders or .parkseq archives.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List the available title sequences.")
    list_parser.add_argument(
        "--root",
        help="Directory to search. Defaults to TITLESEQUENCE_ROOT or the current directory.",
    )
    list_parser.set_defaults(handler=_list)

    show_parser = subparsers.add_parser("show", help="Print saves and the script.")
    show_parser.add_argument("path", help="Sequence directory or .parkseq archive.")
    show_parser.set_defaults(handler=_show)

    add_parser = subparsers.add_parser("add-park", help="Import a park save.")
    add_parser.add_argument("path", help="Sequence directory or .parkseq archive.")
    add_parser.add_argument("source", help="Save file to import.")
    add_parser.add_argument(
        "--name", help="Name to store the save under. Defaults to the source file name."
    )
    add_parser.set_defaults(handler=_add_park)

    rename_parser = subparsers.add_parser("rename-park", help="Rename a park save.")
    rename_parser.add_argument("path", help="Sequence directory or .parkseq archive.")
    rename_parser.add_argument("index", type=int, help="Index of the save to rename.")
    rename_parser.add_argument("name", help="New name for the save.")
    rename_parser.set_defaults(handler=_rename_park)

    remove_parser = subparsers.add_parser(
        "remove-park",
        help="Delete a park save; LOAD commands that used it lose their reference.",
    )
    remove_parser.add_argument("path", help="Sequence directory or .parkseq archive.")
    remove_parser.add_argument("index", type=int, help="Index of the save to remove.")
    remove_parser.set_defaults(handler=_remove_park)

    format_parser = subparsers.add_parser(
        "format", help="Rewrite script.txt in canonical form."
    )
    format_parser.add_argument("path", help="Sequence directory or .parkseq archive.")
    format_parser.set_defaults(handler=_format)

    extract_parser = subparsers.add_parser("extract", help="Copy a park save out.")
    extract_parser.add_argument("path", help="Sequence directory or .parkseq archive.")
    extract_parser.add_argument("index", type=int, help="Index of the save to copy.")
    extract_parser.add_argument("output", help="Destination file.")
    extract_parser.set_defaults(handler=_extract)

    return parser


if __name__ == "__main__":  # pragma: no cover - module executable
    raise SystemExit(main())
