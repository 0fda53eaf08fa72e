"""
Parser for the YXML dialect emitted by `isabelle dump`.

Two control characters structure the input: X (\\x05) brackets a marker and
Y (\\x06) separates the element name from its attributes. A marker whose body
is a single Y closes the innermost open element. There is no escaping; the
encoder guarantees that X and Y never occur in text.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

X = "\x05"
Y = "\x06"


@dataclass
class Text:
    text: str


@dataclass
class Tag:
    name: str
    attrs: dict[str, str] = field(default_factory=dict)
    children: list["Node"] = field(default_factory=list)


Node = Union[Text, Tag]


class YXMLParseError(ValueError):
    """
    Malformed YXML input. `position` is the character offset of the offending
    marker, `name` the element involved where there is one.
    """

    def __init__(self, message: str, position: int, name: Optional[str] = None):
        super().__init__(f"{message} at offset {position}")
        self.position = position
        self.name = name


class UnclosedTag(YXMLParseError):
    pass


class NoClosingDelimiter(YXMLParseError):
    pass


class UnexpectedContentBeforeAttributes(YXMLParseError):
    pass


class MissingName(YXMLParseError):
    pass


class MalformedAttribute(YXMLParseError):
    pass


class UnmatchedClosingTag(YXMLParseError):
    pass


def _parse_marker(body: str, position: int) -> Tag:
    fields = body.split(Y)
    if fields[0] != "":
        raise UnexpectedContentBeforeAttributes(
            f"unexpected content {fields[0]!r} before element name", position
        )
    if len(fields) < 2 or not fields[1]:
        raise MissingName("element without a name", position)

    name = fields[1]
    attrs: dict[str, str] = {}
    for attr in fields[2:]:
        key, sep, value = attr.partition("=")
        if not sep:
            raise MalformedAttribute(
                f"attribute {attr!r} of <{name}> has no '='", position, name
            )
        attrs[key] = value
    return Tag(name, attrs)


def parse(text: str) -> list[Node]:
    """
    Parse a complete YXML document into a forest of `Text` and `Tag` nodes.

    Raises a `YXMLParseError` subclass on the first malformed marker; no
    partial result is returned.

    >>> parse("a\\x05\\x06b\\x06k=v\\x05c\\x05\\x06\\x05")
    [Text(text='a'), Tag(name='b', attrs={'k': 'v'}, children=[Text(text='c')])]
    """
    forest: list[Node] = []
    # (tag, offset of its opening marker)
    stack: list[tuple[Tag, int]] = []
    pos = 0
    end = len(text)

    while pos < end:
        start = text.find(X, pos)
        if start == -1:
            start = end
        if start > pos:
            children = stack[-1][0].children if stack else forest
            children.append(Text(text[pos:start]))
            pos = start
            continue

        close = text.find(X, start + 1)
        if close == -1:
            raise NoClosingDelimiter("marker is missing its closing delimiter", start)
        body = text[start + 1 : close]
        pos = close + 1

        if body == Y:
            if not stack:
                raise UnmatchedClosingTag(
                    "closing marker without an open element", start
                )
            stack.pop()
            continue

        tag = _parse_marker(body, start)
        children = stack[-1][0].children if stack else forest
        children.append(tag)
        stack.append((tag, start))

    if stack:
        tag, start = stack[-1]
        raise UnclosedTag(f"element <{tag.name}> is never closed", start, tag.name)

    return forest


def serialize(forest: list[Node]) -> str:
    """Inverse of `parse` for forests whose text contains no X or Y."""
    parts: list[str] = []

    def walk(nodes: list[Node]) -> None:
        for node in nodes:
            if isinstance(node, Text):
                parts.append(node.text)
                continue
            parts.append(X + Y + node.name)
            for key, value in node.attrs.items():
                parts.append(f"{Y}{key}={value}")
            parts.append(X)
            walk(node.children)
            parts.append(X + Y + X)

    walk(forest)
    return "".join(parts)
