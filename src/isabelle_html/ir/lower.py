"""
Lowering of parsed YXML markup to the annotation tree.

Markup names map to a CSS class, a fixed tooltip caption, or both; anything
else is transparent and only contributes its children.
"""

import html
from typing import Optional

from isabelle_html.ir.tree import Forest, Styled, Text, Tooltip
from isabelle_html.output.emitter import render_fragment
from isabelle_html.schemas import RenderConfig
from isabelle_html.yxml import parser as yxml

KEYWORD_CLASSES = ("keyword1", "keyword2", "keyword3")

PLAIN_CLASSES = (
    "binding",
    "tfree",
    "tvar",
    "free",
    "skolem",
    "bound",
    "var",
    "literal",
    "inner_numeral",
    "inner_quoted",
    "inner_cartouche",
    "inner_string",
    "antiquoted",
    "comment1",
    "comment2",
    "comment3",
    "dynamic_fact",
    "quasi_keyword",
    "operator",
    "string",
    "alt_string",
    "verbatim",
    "cartouche",
    "comment",
    "improper",
    "antiquote",
    "raw_text",
    "plain_text",
)

CAPTIONS = {
    "citation": "citation",
    "token_range": "inner syntax token",
    "free": "free variable",
    "skolem": "skolem variable",
    "bound": "bound variable",
    "var": "schematic variable",
    "tfree": "free type variable",
    "tvar": "schematic type variable",
}

# Payload of a typed or otherwise annotated element. Only meaningful inside
# xml_elem, where it becomes the caption.
XML_BODY = "xml_body"
XML_ELEM = "xml_elem"

# Prefixes for captions rendered from an xml_elem payload, keyed by xml_name.
PAYLOAD_PREFIXES = {
    "typing": ":: ",
}


def css_class_for(tag: yxml.Tag) -> Optional[str]:
    if tag.name in KEYWORD_CLASSES:
        kind = tag.attrs.get("kind")
        return f"{tag.name} {kind}" if kind else tag.name
    if tag.name in PLAIN_CLASSES:
        return tag.name
    return None


def caption_for(tag: yxml.Tag) -> Optional[str]:
    caption = CAPTIONS.get(tag.name)
    return html.escape(caption, quote=False) if caption is not None else None


class Lowering:
    """
    Converts YXML nodes to annotation nodes.

    With `with_tooltips` unset no `Tooltip` is produced; captions rendered
    from xml_body payloads are lowered that way, since a caption cannot carry
    tooltips of its own.
    """

    def __init__(
        self, config: Optional[RenderConfig] = None, with_tooltips: bool = True
    ):
        self.config = config or RenderConfig()
        self.with_tooltips = with_tooltips

    def lower_forest(self, nodes: list[yxml.Node]) -> Forest:
        forest: Forest = []
        for node in nodes:
            forest.extend(self.lower_node(node))
        return forest

    def lower_node(self, node: yxml.Node) -> Forest:
        if isinstance(node, yxml.Text):
            return [Text(node.text)]
        if node.name == XML_BODY:
            return []
        if node.name == XML_ELEM:
            return self.lower_payload(node)

        children = self.lower_forest(node.children)

        caption = caption_for(node)
        if caption is not None and self.with_tooltips:
            children = [Tooltip(caption, children)]

        css_class = css_class_for(node)
        if css_class is not None:
            children = [Styled(css_class, children)]

        return children

    def lower_payload(self, node: yxml.Tag) -> Forest:
        bodies = [
            child
            for child in node.children
            if isinstance(child, yxml.Tag) and child.name == XML_BODY
        ]
        children = self.lower_forest(node.children)
        if not bodies or not self.with_tooltips:
            return children

        nested = Lowering(self.config, with_tooltips=False)
        payload: Forest = []
        for body in bodies:
            payload.extend(nested.lower_forest(body.children))

        caption = render_fragment(payload, self.config)
        if not caption:
            return children
        prefix = PAYLOAD_PREFIXES.get(node.attrs.get("xml_name", ""), "")
        return [Tooltip(html.escape(prefix, quote=False) + caption, children)]


def lower_forest(
    nodes: list[yxml.Node], config: Optional[RenderConfig] = None
) -> Forest:
    return Lowering(config).lower_forest(nodes)
