"""Command-line utilities for highlightwords.

``highlightwords-render`` loads a markup file, replays saved and/or ad-hoc
selections, and writes the rendered markup to stdout (or a file).
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError
from rich.console import Console
from rich.table import Table
from rich.text import Text

from highlightwords.persistence import dump_state, load_state

if TYPE_CHECKING:
    from collections.abc import Sequence

    from highlightwords.session import HighlightSession

console = Console(stderr=True)


def _parse_range(value: str) -> tuple[int, int]:
    """Parse ``START:END`` visible offsets."""
    start_text, sep, end_text = value.partition(":")
    if not sep:
        msg = f"expected START:END, got {value!r}"
        raise argparse.ArgumentTypeError(msg)
    try:
        return int(start_text), int(end_text)
    except ValueError:
        msg = f"offsets must be integers, got {value!r}"
        raise argparse.ArgumentTypeError(msg) from None


def _build_render_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="highlightwords-render",
        description="Render highlighted markup from a document and selections.",
    )
    parser.add_argument("input", type=Path, help="HTML fragment to highlight")
    parser.add_argument(
        "--selections",
        type=Path,
        help="saved session state (JSON) to replay before --select ranges",
    )
    parser.add_argument(
        "--select",
        type=_parse_range,
        action="append",
        default=[],
        metavar="START:END",
        help="visible-character range to color; may be repeated",
    )
    parser.add_argument(
        "--color", help="color for --select ranges (default: configured color)"
    )
    parser.add_argument(
        "-o", "--output", type=Path, help="write markup here instead of stdout"
    )
    parser.add_argument(
        "--save", type=Path, help="write the resulting session state (JSON) here"
    )
    parser.add_argument(
        "--inspect",
        action="store_true",
        help="print the selection partition as a table on stderr",
    )
    return parser


def _print_partition(session: HighlightSession, con: Console) -> None:
    table = Table(title="Selections")
    table.add_column("start", justify="right")
    table.add_column("end", justify="right")
    table.add_column("color")
    table.add_column("text")
    for segment in session.selections.segments():
        text = session.document.visible_text(segment.start, segment.end)
        table.add_row(
            str(segment.start),
            str(segment.end),
            Text(segment.color) if segment.color else Text("-", style="dim"),
            Text(text if len(text) <= 40 else f"{text[:37]}..."),
        )
    con.print(table)


def render_document(argv: Sequence[str] | None = None) -> None:
    """Entry point for ``highlightwords-render``."""
    from highlightwords.session import HighlightSession

    args = _build_render_parser().parse_args(argv)

    try:
        markup = args.input.read_text(encoding="utf-8")
    except OSError as exc:
        console.print(f"[red]Cannot read {args.input}:[/] {exc}")
        sys.exit(1)

    session = HighlightSession(markup)

    if args.selections is not None:
        try:
            state = load_state(args.selections.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as exc:
            console.print(f"[red]Cannot load selections {args.selections}:[/] {exc}")
            sys.exit(1)
        session.restore(state)

    if args.color is not None:
        session.handle_color_changed(args.color)

    for start, end in args.select:
        if not session.select_visible_range(start, end):
            console.print(f"[yellow]Range {start}:{end} ignored[/]")

    if args.inspect:
        _print_partition(session, console)

    if args.save is not None:
        args.save.write_text(dump_state(session.snapshot()), encoding="utf-8")

    if args.output is not None:
        args.output.write_text(session.output_markup, encoding="utf-8")
    else:
        sys.stdout.write(session.output_markup + "\n")
