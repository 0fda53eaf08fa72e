"""
Passes over the annotation tree, applied in this order before emission:

1. `prune_empty` drops annotations with nothing inside them.
2. `merge_tooltips` leaves at most one tooltip over any stretch of text.
3. `split_lines` cuts the forest into one newline-free forest per line.

`canonicalize` runs the first two.
"""

import copy
import logging
from typing import Optional

from isabelle_html.ir.tree import (
    AnnotationNode,
    Forest,
    Styled,
    Text,
    Tooltip,
    is_empty,
)


def prune_empty(forest: Forest) -> None:
    """Remove, in place, every annotation whose children are all empty."""
    for node in forest:
        if not isinstance(node, Text):
            prune_empty(node.children)
    forest[:] = [node for node in forest if not is_empty(node)]


def merge_tooltips(forest: Forest, captions: Optional[list[str]] = None) -> bool:
    """
    Merge tooltips covering the same characters and drop tooltips whose range
    contains another tooltip. Works in place.

    `captions` accumulates the captions of an enclosing tooltip chain. It only
    matters while `forest` is a single node: a lone `Styled` is passed through,
    a lone `Tooltip` is folded into the chain and replaced by its children.
    Any other shape ends the chain.

    Returns True if a tooltip survives somewhere in `forest`.
    """
    if captions is not None and len(forest) == 1:
        node = forest[0]
        if isinstance(node, Styled):
            return merge_tooltips(node.children, captions)
        if isinstance(node, Tooltip):
            captions.append(node.caption)
            forest[:] = node.children
            return merge_tooltips(forest, captions)
        return False

    merged: Forest = []
    any_tooltips = False
    for node in forest:
        if isinstance(node, Text):
            merged.append(node)
        elif isinstance(node, Styled):
            any_tooltips |= merge_tooltips(node.children)
            merged.append(node)
        else:
            chain = [node.caption]
            has_tooltips = merge_tooltips(node.children, chain)
            if has_tooltips:
                # a tooltip further down wins
                merged.extend(node.children)
            else:
                node.caption = "\n".join(chain)
                merged.append(node)
            any_tooltips = True

    forest[:] = merged
    return any_tooltips


def canonicalize(forest: Forest) -> Forest:
    prune_empty(forest)
    merge_tooltips(forest)
    return forest


def _split_node(node: AnnotationNode) -> list[Forest]:
    if isinstance(node, Text):
        return [[Text(part)] for part in node.text.split("\n")]

    lines = split_lines(node.children)
    replicas: list[Forest] = []
    for line in lines:
        replica = copy.copy(node)
        replica.children = line
        replicas.append([replica])
    return replicas


def split_lines(forest: Forest) -> list[Forest]:
    """
    Split `forest` at every newline. Annotations around a split leaf are
    replicated on each line, holding only that line's children.
    """
    lines: list[Forest] = []
    current: Forest = []
    for node in forest:
        pieces = _split_node(node)
        current.extend(pieces[0])
        for piece in pieces[1:]:
            lines.append(current)
            current = list(piece)
    lines.append(current)
    return lines


def to_lines(forest: Forest) -> list[Forest]:
    """
    Canonicalize `forest` and split it into lines ready for the emitter.

    Splitting leaves empty text at line ends; each line is pruned again so
    that no empty tooltip gets emitted.
    """
    canonicalize(forest)
    lines = split_lines(forest)
    for line in lines:
        prune_empty(line)
    logging.debug(f"Split annotation tree into {len(lines)} lines")
    return lines
