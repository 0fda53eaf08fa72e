from io import StringIO

import pytest

from isabelle_html.output.emitter import HtmlEmitter
from isabelle_html.schemas import RenderConfig

X = "\x05"
Y = "\x06"


def element(tag_name: str, /, *children: str, **attrs: str) -> str:
    """Encode one YXML element around already-encoded children."""
    header = X + Y + tag_name + "".join(f"{Y}{k}={v}" for k, v in attrs.items()) + X
    return header + "".join(children) + X + Y + X


@pytest.fixture
def yxml():
    return element


@pytest.fixture
def config():
    return RenderConfig()


@pytest.fixture
def sink():
    return StringIO()


@pytest.fixture
def fragment_emitter(sink):
    """Emitter without document boilerplate, so output can be compared exactly."""
    return HtmlEmitter(sink, RenderConfig(root=False))


@pytest.fixture
def dump_file(tmp_path, yxml):
    path = tmp_path / "markup.yxml"
    text = (
        yxml("keyword1", "lemma", kind="command")
        + " foo: "
        + yxml(
            "cartouche",
            "‹",
            yxml("free", "x"),
            " \\<and>\n  ",
            yxml("bound", "y"),
            "›",
        )
        + "\n"
    )
    path.write_text(text, encoding="utf-8")
    return path
