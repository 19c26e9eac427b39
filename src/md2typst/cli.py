"""Command-line interface for md2typst.

Usage::

    md2typst input.md                     # writes input.typ
    md2typst input.md -o output.pdf       # compile straight to PDF
    md2typst input.md --style academic    # use academic preset
    md2typst input.md --font-size 12      # body text size in points
    md2typst --list-styles                # list available presets
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from md2typst import __version__
from md2typst.converter import Converter
from md2typst.exceptions import Md2TypstError
from md2typst.logging_utils import configure_logging
from md2typst.style_manager import DEFAULT_FONT_SIZE, StyleManager


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="md2typst",
        description="Convert Markdown files to Typst markup or PDF.",
    )
    parser.add_argument(
        "input",
        nargs="?",
        help="Path to the Markdown file to convert.",
    )
    parser.add_argument(
        "-o", "--output",
        help="Output path; a .pdf suffix compiles to PDF. Defaults to <input>.typ.",
    )
    parser.add_argument(
        "-s", "--style",
        default="default",
        choices=StyleManager.PRESETS,
        help="Style preset (default: %(default)s).",
    )
    parser.add_argument(
        "--font-size",
        type=float,
        default=DEFAULT_FONT_SIZE,
        help="Body font size in points (default: %(default)g).",
    )
    parser.add_argument(
        "-e", "--encoding",
        default="utf-8",
        help="Input file encoding (default: %(default)s).",
    )
    parser.add_argument(
        "--list-styles",
        action="store_true",
        help="List available style presets and exit.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print progress information and debug logs.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: %(default)s).",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(logging.DEBUG if args.verbose else args.log_level)

    if args.list_styles:
        print("Available style presets:")
        for preset in StyleManager.PRESETS:
            print(f"  - {preset}")
        return 0

    if not args.input:
        parser.error("the following argument is required: input")

    input_path = Path(args.input)
    if not input_path.is_file():
        print(f"Error: file not found: {input_path}", file=sys.stderr)
        return 1

    # Determine output path
    if args.output:
        output_path = Path(args.output)
    else:
        output_path = input_path.with_suffix(".typ")

    if args.verbose:
        print(f"Input:  {input_path}")
        print(f"Output: {output_path}")
        print(f"Style:  {args.style} ({args.font_size:g}pt)")

    try:
        converter = Converter(style_preset=args.style, font_size=args.font_size)
        converter.convert_file(input_path, output_path, encoding=args.encoding)
    except (Md2TypstError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.verbose:
        print(f"Done. {output_path.stat().st_size} bytes written.")
    else:
        print(f"Converted: {output_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
