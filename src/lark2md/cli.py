#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/lark2md/cli.py
"""Command-line interface for lark2md.

Converts a saved Lark block snapshot (a JSON block list or an open-API
response) to Markdown.

Examples
--------
Basic conversion to stdout:
    $ lark2md blocks.json

Write to a file and keep whiteboards and file attachments:
    $ lark2md blocks.json -o doc.md --whiteboard --file

Show the assets the document references:
    $ lark2md blocks.json --list-assets > doc.md

Use environment variables for defaults:
    $ export LARK2MD_FLAVOR=commonmark
    $ lark2md blocks.json
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from lark2md import __version__
from lark2md.assets import AssetRef
from lark2md.blocks import load_block_document
from lark2md.exceptions import (
    InvalidOptionsError,
    InvariantViolationError,
    Lark2MdError,
    ParsingError,
    RenderingError,
    ValidationError,
)
from lark2md.logging_utils import collect_degradations, configure_logging
from lark2md.options import LarkOptions, MarkdownRendererOptions
from lark2md.parsers import LarkToAstConverter, TransformResult
from lark2md.renderers import MarkdownRenderer

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_INPUT_ERROR = 2

_TRUE_VALUES = ("true", "1", "yes", "on")


def get_env_var_value(key: str) -> Optional[str]:
    """Get environment variable with LARK2MD_ prefix.

    Parameters
    ----------
    key : str
        The parameter name (e.g., 'flavor', 'log_level')

    Returns
    -------
    Optional[str]
        Environment variable value or None if not set

    """
    env_key = f"LARK2MD_{key.upper().replace('-', '_')}"
    return os.environ.get(env_key)


def apply_env_vars_to_parser(parser: argparse.ArgumentParser) -> None:
    """Apply environment variables as defaults to parser arguments.

    Command-line arguments still take precedence over environment variables.
    """
    for action in parser._actions:
        if not action.dest or action.dest in ("help", "version", "input"):
            continue

        env_value = get_env_var_value(action.dest)
        if env_value is None:
            continue

        # Values name the destination, so LARK2MD_FLAT_GRID=false disables flat grids.
        if isinstance(action, (argparse._StoreTrueAction, argparse._StoreFalseAction)):
            action.default = env_value.lower() in _TRUE_VALUES
        elif action.choices:
            if env_value in action.choices:
                action.default = env_value
            else:
                logger.warning(
                    f"Invalid choice for LARK2MD_{action.dest.upper()}: {env_value}. Choices: {list(action.choices)}"
                )
        else:
            action.default = env_value


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="lark2md",
        description="Convert a Lark (Feishu) docx block snapshot to Markdown.",
        epilog="Environment variables LARK2MD_<OPTION> provide defaults, e.g. LARK2MD_FLAVOR=commonmark.",
    )
    parser.add_argument("input", help="Block snapshot JSON file, or '-' for stdin")
    parser.add_argument("-o", "--out", dest="out", help="Output file (default: stdout)")
    parser.add_argument("--version", action="version", version=f"lark2md {__version__}")

    group = parser.add_argument_group("transformation options")
    group.add_argument("--whiteboard", action="store_true", help="Render whiteboards as images")
    group.add_argument("--diagram", action="store_true", help="Render diagram blocks (snapshot image or placeholder)")
    group.add_argument("--file", action="store_true", help="Render file attachments and collect file references")
    group.add_argument("--highlight", action="store_true", help="Preserve text highlight colours")
    group.add_argument(
        "--no-flat-grid",
        dest="flat_grid",
        action="store_false",
        help="Keep grid column containers instead of splicing their content",
    )
    group.add_argument("--max-depth", type=int, help="Maximum block nesting depth to follow (1-256)")

    group = parser.add_argument_group("markdown options")
    group.add_argument("--flavor", choices=["gfm", "commonmark"], default="gfm", help="Markdown flavor to produce")
    group.add_argument(
        "--metadata-frontmatter", action="store_true", help="Prepend document metadata as front matter"
    )
    group.add_argument(
        "--metadata-format", choices=["yaml", "toml", "json"], default="yaml", help="Front matter format"
    )
    group.add_argument(
        "--no-escape-special",
        dest="escape_special",
        action="store_false",
        help="Do not escape Markdown control characters in text",
    )

    group = parser.add_argument_group("diagnostics")
    group.add_argument(
        "--list-assets", action="store_true", help="Print a table of referenced images and files to stderr"
    )
    group.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    group.add_argument("--log-file", help="Also write log output to this file")
    group.add_argument("--trace", action="store_true", help="Timestamped log output with logger names")

    apply_env_vars_to_parser(parser)
    return parser


def _build_options(args: argparse.Namespace) -> tuple[LarkOptions, MarkdownRendererOptions]:
    lark_kwargs = {
        "whiteboard": args.whiteboard,
        "diagram": args.diagram,
        "file": args.file,
        "highlight": args.highlight,
        "flat_grid": args.flat_grid,
    }
    if args.max_depth is not None:
        lark_kwargs["max_depth"] = int(args.max_depth)

    renderer_options = MarkdownRendererOptions(
        flavor=args.flavor,
        escape_special=args.escape_special,
        metadata_frontmatter=args.metadata_frontmatter,
        metadata_format=args.metadata_format,
    )
    return LarkOptions(**lark_kwargs), renderer_options


def _render_asset_table(result: TransformResult, console: Console) -> None:
    """Print the discovered asset references as a rich table."""
    refs: list[AssetRef] = [*result.images, *result.files]
    if not refs:
        console.print("[dim]No assets referenced.[/dim]")
        return

    table = Table(title="Referenced Assets")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Kind", style="yellow")
    table.add_column("Block", style="cyan")
    table.add_column("Token", style="magenta")
    table.add_column("Name", style="white")
    table.add_column("Fetchable", style="white")

    for i, ref in enumerate(refs, start=1):
        fetchable = "[green]yes[/green]" if ref.fetch_blob is not None else "[red]no[/red]"
        table.add_row(str(i), ref.kind, ref.block_id, ref.token, ref.name or "-", fetchable)

    console.print(table)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the lark2md command line.

    Returns
    -------
    int
        0 on success, 1 on a conversion or output error, 2 when the input or
        options are invalid

    """
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_logging(args.log_level, log_file=args.log_file, trace_mode=args.trace)
    err_console = Console(stderr=True)

    try:
        lark_options, renderer_options = _build_options(args)
    except (ValueError, InvalidOptionsError) as e:
        err_console.print(f"[bold red]Invalid options:[/bold red] {escape(str(e))}")
        return EXIT_INPUT_ERROR

    source = sys.stdin.buffer if args.input == "-" else args.input

    with collect_degradations() as degradations:
        try:
            document = load_block_document(source)
            result = LarkToAstConverter(lark_options).transform(document)
        except (ParsingError, InvariantViolationError, ValidationError) as e:
            logger.debug("Input rejected", exc_info=True)
            err_console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
            return EXIT_INPUT_ERROR
        except Lark2MdError as e:
            err_console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
            return EXIT_ERROR

    if degradations:
        err_console.print(f"[yellow]Converted with {escape(degradations.summary())}[/yellow]")

    if args.list_assets:
        _render_asset_table(result, err_console)

    renderer = MarkdownRenderer(renderer_options)
    try:
        if args.out:
            renderer.render(result.root, args.out)
            logger.info(f"Wrote {args.out}")
        else:
            markdown = renderer.render_to_string(result.root)
            sys.stdout.write(markdown + "\n")
    except RenderingError as e:
        err_console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        return EXIT_ERROR

    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
