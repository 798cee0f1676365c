"""Entry point for the mathedit CLI.

Types SOURCE into a fresh raw LaTeX region, presses the given keys and prints
the resulting state::

    mathedit '\\alph' --key enter
"""

from __future__ import annotations

import argparse
import logging
import sys

from mathedit.mathfield import Mathfield
from mathedit.popover import SuggestionPopover
from mathedit.settings import load_settings
from mathedit.span import get_latex_group_body

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="mathedit: LaTeX command autocomplete playground")
    parser.add_argument("source", help="Raw LaTeX typed into the region, e.g. '\\alph'")
    parser.add_argument(
        "--key",
        dest="keys",
        action="append",
        default=[],
        metavar="KEY",
        help="Key to press after typing, e.g. enter, tab, down, ctrl+2 (repeatable)",
    )
    parser.add_argument("--settings", default=None, help="Settings file path")
    parser.add_argument("--project-dir", default=None, help="Project directory")
    parser.add_argument("--width", type=int, default=40, help="Suggestion panel width")
    parser.add_argument("--log-level", default="warning", choices=["debug", "info", "warning", "error"])
    return parser


def format_region(mf: Mathfield) -> str | None:
    """The raw region with ghost text in brackets, or None outside one."""
    if mf.get_latex_region() is None:
        return None
    out = ""
    in_ghost = False
    for node in get_latex_group_body(mf.model):
        if node.is_suggestion != in_ghost:
            out += "[" if node.is_suggestion else "]"
            in_ghost = node.is_suggestion
        out += node.value
    return out + ("]" if in_ghost else "")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        settings = load_settings(args.settings, project_dir=args.project_dir)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    mf = Mathfield(settings)
    mf.switch_mode("latex")
    for char in args.source:
        mf.type_char(char)
    for key in args.keys:
        if not mf.handle_key(key):
            logger.info("Key %s had no effect", key)

    region = format_region(mf)
    if region is not None:
        print(f"region: {region}")
    if isinstance(mf.display, SuggestionPopover):
        for line in mf.display.render(args.width):
            print(line.rstrip())
    print(f"value: {mf.get_value()}")
    print(f"mode: {mf.mode}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
