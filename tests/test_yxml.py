import pytest

from isabelle_html.yxml.parser import (
    MalformedAttribute,
    MissingName,
    NoClosingDelimiter,
    Tag,
    Text,
    UnclosedTag,
    UnexpectedContentBeforeAttributes,
    UnmatchedClosingTag,
    YXMLParseError,
    parse,
    serialize,
)


def test_plain_text():
    assert parse("just text\nwith lines") == [Text("just text\nwith lines")]


def test_empty_input():
    assert parse("") == []


def test_nested_elements(yxml):
    text = "a" + yxml("outer", "b", yxml("inner", "c"), "d", kind="x", id="7") + "e"
    assert parse(text) == [
        Text("a"),
        Tag(
            "outer",
            {"kind": "x", "id": "7"},
            [Text("b"), Tag("inner", {}, [Text("c")]), Text("d")],
        ),
        Text("e"),
    ]


def test_empty_element(yxml):
    assert parse(yxml("xml_body")) == [Tag("xml_body", {}, [])]


def test_attribute_value_may_contain_equals(yxml):
    [tag] = parse(yxml("entity", "x", def_file="a=b"))
    assert tag.attrs == {"def_file": "a=b"}


def test_attribute_value_may_be_empty(yxml):
    [tag] = parse(yxml("entity", "x", name=""))
    assert tag.attrs == {"name": ""}


def test_deep_nesting_does_not_recurse(yxml):
    text = "x"
    for _ in range(5000):
        text = yxml("span", text)
    forest = parse(text)
    depth = 0
    node = forest[0]
    while isinstance(node, Tag):
        depth += 1
        node = node.children[0]
    assert depth == 5000
    assert node == Text("x")


@pytest.mark.parametrize(
    "text,error,position,name",
    [
        ("\x05\x06a\x05text", UnclosedTag, 0, "a"),
        ("\x05\x06a\x05\x05\x06b\x05x\x05\x06\x05", UnclosedTag, 0, "a"),
        ("ab\x05\x06a", NoClosingDelimiter, 2, None),
        ("\x05x\x06a\x05\x05\x06\x05", UnexpectedContentBeforeAttributes, 0, None),
        ("\x05\x05", MissingName, 0, None),
        ("\x05\x06\x06k=v\x05\x05\x06\x05", MissingName, 0, None),
        ("\x05\x06a\x06k\x05\x05\x06\x05", MalformedAttribute, 0, "a"),
        ("x\x05\x06\x05", UnmatchedClosingTag, 1, None),
    ],
)
def test_parse_errors(text, error, position, name):
    with pytest.raises(error) as excinfo:
        parse(text)
    assert isinstance(excinfo.value, YXMLParseError)
    assert isinstance(excinfo.value, ValueError)
    assert excinfo.value.position == position
    assert excinfo.value.name == name
    assert f"offset {position}" in str(excinfo.value)


def test_unclosed_reports_innermost(yxml):
    text = "\x05\x06outer\x05" + yxml("done", "x") + "\x05\x06inner\x05text"
    with pytest.raises(UnclosedTag) as excinfo:
        parse(text)
    assert excinfo.value.name == "inner"


def test_round_trip():
    forest = [
        Text("theory "),
        Tag("keyword1", {"kind": "command"}, [Text("lemma")]),
        Text("\n"),
        Tag(
            "cartouche",
            {},
            [
                Tag("free", {"def": "12", "name": "x"}, [Text("x")]),
                Tag("empty", {}, []),
            ],
        ),
    ]
    assert parse(serialize(forest)) == forest


def test_serialize_is_inverse_of_parse(yxml):
    text = yxml("a", "x", yxml("b", k="v"), "y") + "tail"
    assert serialize(parse(text)) == text
