"""
Annotation tree: the intermediate representation between parsed YXML and HTML.

Consider the ML fragment `ML ‹f x›`. Isabelle annotates `f` with type
`a -> b`, `x` with `a`, and the whole `f x` with `b`. Only one of those can be
shown on hover, so, like Isabelle/jEdit, only the innermost tooltip is kept.
The passes in `isabelle_html.ir.transform` establish that on this tree.
"""

from dataclasses import dataclass, field
from typing import Union

import orjson


@dataclass
class Text:
    text: str


@dataclass
class Styled:
    css_class: str
    children: list["AnnotationNode"] = field(default_factory=list)


@dataclass
class Tooltip:
    # already HTML: either an escaped static caption or a nested render
    caption: str
    children: list["AnnotationNode"] = field(default_factory=list)


AnnotationNode = Union[Text, Styled, Tooltip]
Forest = list[AnnotationNode]


def is_empty(node: AnnotationNode) -> bool:
    if isinstance(node, Text):
        return not node.text
    return not node.children


def plain_text(forest: Forest) -> str:
    """Concatenate all text leaves, dropping the annotations."""
    return "".join(_iter_text(forest))


def _iter_text(forest: Forest):
    for node in forest:
        if isinstance(node, Text):
            yield node.text
        else:
            yield from _iter_text(node.children)


def to_data(node: AnnotationNode) -> dict:
    if isinstance(node, Text):
        return {"text": node.text}
    if isinstance(node, Styled):
        return {
            "class": node.css_class,
            "children": [to_data(c) for c in node.children],
        }
    return {"tooltip": node.caption, "children": [to_data(c) for c in node.children]}


def forest_to_json(forest: Forest) -> str:
    """
    Serialize a forest to a newline-terminated JSON string.
    """
    return orjson.dumps(
        [to_data(node) for node in forest], option=orjson.OPT_APPEND_NEWLINE
    ).decode("utf-8")
