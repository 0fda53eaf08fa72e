import orjson
from typer.testing import CliRunner

from isabelle_html.cli import app

runner = CliRunner()


def test_render(dump_file, tmp_path):
    out_path = tmp_path / "Main.html"
    result = runner.invoke(app, ["render", str(dump_file), str(out_path)])
    assert result.exit_code == 0, result.output
    assert out_path.read_text(encoding="utf-8").startswith("<!DOCTYPE html>")


def test_render_stylesheet(dump_file, tmp_path):
    out_path = tmp_path / "Main.html"
    result = runner.invoke(
        app, ["render", str(dump_file), str(out_path), "--stylesheet", "x.css", "-v"]
    )
    assert result.exit_code == 0, result.output
    assert 'href="x.css"' in out_path.read_text(encoding="utf-8")


def test_render_missing_input(tmp_path):
    result = runner.invoke(
        app, ["render", str(tmp_path / "missing.yxml"), str(tmp_path / "out.html")]
    )
    assert result.exit_code == 1
    assert "error:" in result.output
    assert not (tmp_path / "out.html").exists()


def test_render_parse_error(tmp_path):
    dump = tmp_path / "broken.yxml"
    dump.write_text("x\x05\x06\x05", encoding="utf-8")
    result = runner.invoke(app, ["render", str(dump), str(tmp_path / "out.html")])
    assert result.exit_code == 1
    assert "closing marker without an open element at offset 1" in result.output
    assert not (tmp_path / "out.html").exists()


def test_render_requires_both_paths(dump_file):
    result = runner.invoke(app, ["render", str(dump_file)])
    assert result.exit_code != 0


def test_inspect(dump_file):
    result = runner.invoke(app, ["inspect", str(dump_file)])
    assert result.exit_code == 0, result.output
    lines = [orjson.loads(line) for line in result.output.splitlines()]
    assert len(lines) == 3
    assert lines[0][0] == {"class": "keyword1 command", "children": [{"text": "lemma"}]}
    assert lines[-1] == []


def test_render_too_deep(tmp_path):
    dump = tmp_path / "deep.yxml"
    dump.write_text(
        "".join(["\x05\x06span\x05"] * 5000) + "x" + "\x05\x06\x05" * 5000,
        encoding="utf-8",
    )
    result = runner.invoke(app, ["render", str(dump), str(tmp_path / "out.html")])
    assert result.exit_code == 1
    assert "nested too deeply" in result.output
    assert not (tmp_path / "out.html").exists()


def test_inspect_undecodable_input(tmp_path):
    dump = tmp_path / "bad.yxml"
    dump.write_bytes(b"lemma \xff")
    result = runner.invoke(app, ["inspect", str(dump)])
    assert result.exit_code == 1
    assert "error:" in result.output
    assert "utf-8" in result.output


def test_inspect_parse_error(tmp_path):
    dump = tmp_path / "broken.yxml"
    dump.write_text("\x05\x06keyword1\x05lemma", encoding="utf-8")
    result = runner.invoke(app, ["inspect", str(dump)])
    assert result.exit_code == 1
    assert "element <keyword1> is never closed" in result.output
