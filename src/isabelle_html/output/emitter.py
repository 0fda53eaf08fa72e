"""
Incremental HTML output.

Each physical line goes into its own `<code>` element. When a newline occurs,
every open highlighting span is closed and then reopened on the following line,
so that every line is well-nested on its own.

Tooltips are tracked by a small state machine:

    NONE --open--> PENDING --first text--> SHIPPED --last close--> NONE

While PENDING, further opens merge their captions into the pending one. The
first text fragment is wrapped in the hover container together with the
caption; later fragments in the same scope are written as-is. Opening a
tooltip once text has shipped, or breaking a line inside a tooltip, means the
tree was not canonicalized and is reported as an `EmitterInvariantError`.
"""

import enum
import logging
from io import StringIO
from typing import Optional, TextIO

from isabelle_html.ir.tree import Forest, Styled, Text, Tooltip
from isabelle_html.output.symbols import render_symbols
from isabelle_html.schemas import RenderConfig


class EmitterInvariantError(RuntimeError):
    """The op stream broke a rule the transform is supposed to guarantee."""


class StackUnderflow(EmitterInvariantError):
    pass


class NestedTooltipAfterShipout(EmitterInvariantError):
    pass


class NewlineInsideTooltip(EmitterInvariantError):
    pass


class TooltipState(enum.Enum):
    NONE = "none"
    PENDING = "pending"
    SHIPPED = "shipped"


class HtmlEmitter:
    """
    Writes HTML for a stream of primitive ops into `sink`.

    Use as a context manager: entering writes the document preamble, leaving
    writes the epilogue, on error as well as on success. With
    `config.root` unset neither is written and newlines in text are kept
    verbatim, which is what tooltip captions need.
    """

    def __init__(self, sink: TextIO, config: Optional[RenderConfig] = None):
        self.sink = sink
        self.config = config or RenderConfig()
        self.stack: list[str] = []
        self._captions: list[str] = []
        self._tooltip_depth = 0
        self._shipped = False
        self._started = False
        self._finished = False
        self.lines = 1

    def __enter__(self) -> "HtmlEmitter":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc is not None:
            logging.debug(f"Closing output after {exc_type.__name__}: {exc}")
        self.finish()

    @property
    def tooltip_state(self) -> TooltipState:
        if not self._tooltip_depth:
            return TooltipState.NONE
        if self._shipped:
            return TooltipState.SHIPPED
        return TooltipState.PENDING

    def start(self) -> None:
        if self._started:
            return
        self._started = True
        if self.config.root:
            self._write_preamble()
            self.sink.write("<code>")

    def finish(self) -> None:
        """Close whatever is still open and write the epilogue, once."""
        if self._finished:
            return
        self._finished = True
        for _ in self.stack:
            self.sink.write("</span>")
        self.stack.clear()
        if self.config.root:
            self.sink.write("</code></pre></body></html>")

    def open_style(self, css_class: str) -> None:
        self.sink.write(self._open_markup(css_class))
        self.stack.append(css_class)

    def close_style(self) -> None:
        if not self.stack:
            raise StackUnderflow("close-style with no open style region")
        self.stack.pop()
        self.sink.write("</span>")

    def open_tooltip(self, caption: str) -> None:
        state = self.tooltip_state
        if state is TooltipState.SHIPPED:
            raise NestedTooltipAfterShipout(
                f"tooltip {caption!r} opened after text was written under "
                f"{self._caption()!r}"
            )
        self._captions.append(caption)
        self._tooltip_depth += 1

    def close_tooltip(self) -> None:
        if not self._tooltip_depth:
            raise StackUnderflow("close-tooltip with no open tooltip")
        self._tooltip_depth -= 1
        if not self._tooltip_depth:
            if not self._shipped:
                logging.debug(f"Tooltip {self._caption()!r} closed without text")
            self._captions.clear()
            self._shipped = False

    def write_text(self, text: str) -> None:
        if not self.config.root:
            self._write_fragment(text)
            return

        first, *rest = text.split("\n")
        self._write_fragment(first)
        for line in rest:
            self.newline()
            self._write_fragment(line)

    def newline(self) -> None:
        if self._tooltip_depth:
            raise NewlineInsideTooltip(
                f"line break inside tooltip {self._caption()!r}"
            )
        if not self.config.root:
            self.sink.write("\n")
            return

        for _ in reversed(self.stack):
            self.sink.write("</span>")
        self.sink.write("</code>\n<code>")
        for css_class in self.stack:
            self.sink.write(self._open_markup(css_class))
        self.lines += 1

    def _caption(self) -> str:
        return "\n".join(self._captions)

    def _open_markup(self, css_class: str) -> str:
        return f'<span class="{css_class}">'

    def _write_fragment(self, text: str) -> None:
        if not text:
            return
        with_tooltips = self.config.symbol_tooltips and not self._tooltip_depth
        rendered = render_symbols(text, with_tooltips=with_tooltips)
        if self.tooltip_state is TooltipState.PENDING:
            self.sink.write(
                f'<span class="has-tooltip">{rendered}'
                f'<span class="tooltip">{self._caption()}</span></span>'
            )
            self._shipped = True
        else:
            self.sink.write(rendered)

    def _write_preamble(self) -> None:
        self.sink.write("<!DOCTYPE html>")
        self.sink.write("<html>")
        self.sink.write("<head>")
        self.sink.write('<meta charset="utf-8">')
        self.sink.write(
            '<link rel="stylesheet" type="text/css" '
            f'href="{self.config.stylesheet}">'
        )
        self.sink.write("</head>")
        self.sink.write("<body>")
        self.sink.write(f'<pre class="{self.config.code_class}">')


def emit_forest(out: HtmlEmitter, forest: Forest) -> None:
    """Translate an annotation forest into emitter ops."""
    for node in forest:
        if isinstance(node, Text):
            out.write_text(node.text)
        elif isinstance(node, Styled):
            out.open_style(node.css_class)
            emit_forest(out, node.children)
            out.close_style()
        elif isinstance(node, Tooltip):
            out.open_tooltip(node.caption)
            emit_forest(out, node.children)
            out.close_tooltip()
        else:
            raise TypeError(f"not an annotation node: {node!r}")


def emit_lines(out: HtmlEmitter, lines: list[Forest]) -> None:
    for i, line in enumerate(lines):
        if i:
            out.newline()
        emit_forest(out, line)


def render_fragment(forest: Forest, config: Optional[RenderConfig] = None) -> str:
    """
    Render `forest` into a detached buffer with an independent emitter.

    The result has no document boilerplate and no line containers, so it can
    be used as the caption of a tooltip.
    """
    config = (config or RenderConfig()).nested()
    buffer = StringIO()
    with HtmlEmitter(buffer, config) as out:
        emit_forest(out, forest)
    return buffer.getvalue()
