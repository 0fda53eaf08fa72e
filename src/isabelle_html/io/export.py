"""
The full conversion: parse, lower, canonicalize, split lines, emit.
"""

import logging
import os
import stat
from io import StringIO
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Optional, TextIO

from isabelle_html.io.loader import load_dump
from isabelle_html.ir.lower import lower_forest
from isabelle_html.ir.transform import to_lines
from isabelle_html.ir.tree import Forest
from isabelle_html.output.emitter import HtmlEmitter, emit_lines
from isabelle_html.schemas import RenderConfig
from isabelle_html.yxml.parser import Node, parse


class NestingTooDeep(ValueError):
    """The markup is nested deeper than the tree passes can recurse."""


def annotate(nodes: list[Node], config: Optional[RenderConfig] = None) -> list[Forest]:
    """Lower parsed markup and return the per-line annotation forests."""
    try:
        return to_lines(lower_forest(nodes, config))
    except RecursionError:
        raise NestingTooDeep("markup is nested too deeply to convert") from None


def render_document(
    nodes: list[Node], sink: TextIO, config: Optional[RenderConfig] = None
) -> int:
    """
    Write a complete HTML document for `nodes` into `sink`.

    Returns the number of physical lines written.
    """
    config = config or RenderConfig()
    lines = annotate(nodes, config)
    with HtmlEmitter(sink, config) as out:
        try:
            emit_lines(out, lines)
        except RecursionError:
            raise NestingTooDeep("markup is nested too deeply to emit") from None
    return out.lines


def render_html(text: str, config: Optional[RenderConfig] = None) -> str:
    """
    Convert YXML source text to an HTML document string.

    >>> "<span class=\\"keyword1\\">lemma</span>" in render_html(
    ...     "\\x05\\x06keyword1\\x05lemma\\x05\\x06\\x05"
    ... )
    True
    """
    buffer = StringIO()
    render_document(parse(text), buffer, config)
    return buffer.getvalue()


def output_mode(out_path: Path) -> int:
    """Mode for a new output file: the target's current mode, else 0o666 & ~umask."""
    try:
        return stat.S_IMODE(out_path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def export_html(
    dump_path: Path, out_path: Path, config: Optional[RenderConfig] = None
) -> int:
    """
    Convert the dump at `dump_path` and write it to `out_path`.

    The document is written to a temporary file next to `out_path` and moved
    into place only once it is complete; on failure `out_path` is untouched.
    """
    out_path = Path(out_path)
    nodes = load_dump(Path(dump_path))

    with NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=out_path.parent,
        prefix=f".{out_path.name}.",
        suffix=".tmp",
        delete=False,
    ) as temp_file:
        temp_path = Path(temp_file.name)
        try:
            line_count = render_document(nodes, temp_file, config)
        except BaseException:
            temp_file.close()
            temp_path.unlink(missing_ok=True)
            raise

    try:
        # NamedTemporaryFile creates the file as 0o600
        os.chmod(temp_path, output_mode(out_path))
        os.replace(temp_path, out_path)
    except OSError:
        temp_path.unlink(missing_ok=True)
        raise

    logging.info(f"Wrote {line_count} lines to {out_path}")
    return line_count
