"""
Rendering of Isabelle symbols (`\\<forall>`, `\\<^sub>`, ...) as HTML.
"""

import html
import logging
import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Optional

SYMBOL_RE = re.compile(r"\\<([a-zA-Z_^]+)>")

SYMBOLS_PATH = Path(__file__).parent / "data" / "symbols"


@dataclass
class Symbol:
    name: str
    unicode: Optional[str] = None
    abbrevs: list[str] = field(default_factory=list)

    @property
    def is_control(self) -> bool:
        return self.unicode is None

    def tooltip(self) -> str:
        lines = [f"\\<{self.name}>"]
        lines.extend(f"abbreviation: {abbrev}" for abbrev in self.abbrevs)
        return html.escape("\n".join(lines), quote=False)

    def render(self, with_tooltips: bool) -> str:
        if self.unicode is not None:
            glyph = self.unicode
            css_class = "has-tooltip"
        else:
            # control symbols are written \<^name> and have no glyph
            glyph = html.escape(self.name[1:], quote=False)
            css_class = "control has-tooltip"

        if not with_tooltips:
            if self.unicode is not None:
                return glyph
            return f'<span class="control">{glyph}</span>'
        return (
            f'<span class="{css_class}">{glyph}'
            f'<span class="tooltip">{self.tooltip()}</span></span>'
        )


def parse_symbols(data: str) -> dict[str, Symbol]:
    """
    Parse a table in the format of Isabelle's `etc/symbols`: one symbol per
    line followed by `key: value` pairs.
    """
    symbols: dict[str, Symbol] = {}
    for lineno, line in enumerate(data.split("\n"), start=1):
        if not line.strip() or line.startswith("#"):
            continue

        parts = line.split()
        match = SYMBOL_RE.fullmatch(parts[0])
        if match is None:
            raise ValueError(f"line {lineno}: malformed symbol {parts[0]!r}")
        symbol = Symbol(match.group(1))

        args = parts[1:]
        if len(args) % 2:
            raise ValueError(f"line {lineno}: dangling argument {args[-1]!r}")
        for key, value in zip(args[::2], args[1::2]):
            if key == "code:":
                symbol.unicode = chr(int(value, 16))
            elif key == "abbrev:":
                symbol.abbrevs.append(value)
            elif key in ("group:", "argument:", "font:"):
                pass
            else:
                raise ValueError(f"line {lineno}: unknown argument {key!r}")

        if symbol.unicode is None and not symbol.name.startswith("^"):
            raise ValueError(f"line {lineno}: symbol {symbol.name!r} has no code point")
        if symbol.name in symbols:
            raise ValueError(f"line {lineno}: duplicate symbol {symbol.name!r}")
        symbols[symbol.name] = symbol
    return symbols


@lru_cache(maxsize=None)
def load_symbols(path: Path = SYMBOLS_PATH) -> dict[str, Symbol]:
    symbols = parse_symbols(path.read_text(encoding="utf-8"))
    logging.debug(f"Loaded {len(symbols)} symbols from {path}")
    return symbols


def render_symbols(text: str, with_tooltips: bool = True) -> str:
    """
    HTML-escape `text`, replacing every known symbol with its glyph.

    Unknown symbols are kept as (escaped) literal text.

    >>> render_symbols("a \\\\<and> b < c", with_tooltips=False)
    'a ∧ b &lt; c'
    """
    symbols = load_symbols()
    out: list[str] = []
    last = 0
    for match in SYMBOL_RE.finditer(text):
        symbol = symbols.get(match.group(1))
        if symbol is None:
            logging.debug(f"Unknown symbol {match.group(0)!r}")
            continue
        out.append(html.escape(text[last : match.start()], quote=False))
        out.append(symbol.render(with_tooltips))
        last = match.end()
    out.append(html.escape(text[last:], quote=False))
    return "".join(out)
