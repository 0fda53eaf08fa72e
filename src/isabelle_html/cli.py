"""
isabelle-html: convert the output of `isabelle dump` to highlighted HTML.

Usage:
  isabelle-html render [OPTIONS] DUMP_PATH OUT_PATH
  isabelle-html inspect [OPTIONS] DUMP_PATH

Examples:
  isabelle-html render output/markup.yxml html/Main.html
  isabelle-html render markup.yxml Main.html --stylesheet isabelle.css -v
  isabelle-html inspect markup.yxml > lines.jsonl
"""

import logging
from pathlib import Path

import orjson
import typer

from isabelle_html.io.export import annotate, export_html
from isabelle_html.io.loader import load_dump
from isabelle_html.ir.tree import forest_to_json
from isabelle_html.output.emitter import EmitterInvariantError
from isabelle_html.schemas import RenderConfig

app = typer.Typer(help=__doc__, no_args_is_help=True)


def setup_logging(verbose: int):
    """Set up logging based on verbosity level."""
    if verbose == 0:
        level = logging.WARNING
    elif verbose == 1:
        level = logging.INFO
    else:  # verbose >= 2
        level = logging.DEBUG

    logging.basicConfig(level=level, format="%(levelname)s:%(name)s:%(message)s")


def fail(message: str) -> None:
    typer.echo(f"error: {message}", err=True)
    raise typer.Exit(code=1)


@app.command("render", help="Convert a YXML dump to a standalone HTML page.")
def render(
    dump_path: Path = typer.Argument(..., help="Path to the dump (YXML)"),
    out_path: Path = typer.Argument(..., help="Output HTML file"),
    stylesheet: str = typer.Option(
        "../assets/isabelle.css",
        "--stylesheet",
        help="Stylesheet href written into the document head",
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity (-v for INFO, -vv for DEBUG)",
    ),
) -> None:
    """Parse, canonicalize and emit one dump."""
    setup_logging(verbose)
    try:
        config = RenderConfig(stylesheet=stylesheet)
        export_html(dump_path, out_path, config)
    except ValueError as e:
        # parse errors, undecodable input, nesting depth, config validation
        fail(f"{dump_path}: {e}")
    except EmitterInvariantError as e:
        fail(f"internal error while rendering {dump_path}: {e}")
    except OSError as e:
        fail(str(e))


@app.command("inspect", help="Print the per-line annotation tree as JSON lines.")
def inspect(
    dump_path: Path = typer.Argument(..., help="Path to the dump (YXML)"),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity (-v for INFO, -vv for DEBUG)",
    ),
) -> None:
    """Show what the emitter will receive, one JSON array per output line."""
    setup_logging(verbose)
    try:
        lines = annotate(load_dump(dump_path))
        rendered = [forest_to_json(line) for line in lines]
    except ValueError as e:
        fail(f"{dump_path}: {e}")
    except OSError as e:
        fail(str(e))
    except (RecursionError, orjson.JSONEncodeError):
        fail(f"{dump_path}: markup is nested too deeply to print as JSON")

    for line in rendered:
        typer.echo(line, nl=False)


if __name__ == "__main__":
    app()
