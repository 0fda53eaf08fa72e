import logging
from pathlib import Path

from isabelle_html.yxml.parser import Node, Tag, parse


def count_tags(forest: list[Node]) -> int:
    total = 0
    pending = list(forest)
    while pending:
        node = pending.pop()
        if isinstance(node, Tag):
            total += 1
            pending.extend(node.children)
    return total


def read_dump(path: Path) -> str:
    """Read a dump file written by `isabelle dump` (always UTF-8)."""
    return Path(path).read_text(encoding="utf-8")


def load_dump(path: Path) -> list[Node]:
    """Read and parse a dump file."""
    text = read_dump(path)
    forest = parse(text)
    logging.info(f"Parsed {path}: {len(text)} chars, {count_tags(forest)} elements")
    return forest
