"""Tests for the GitHub Actions runner helpers."""

import io

from provenance_guard import github


def test_get_input_normalises_names(monkeypatch):
    monkeypatch.setenv("INPUT_FOO", "bar")
    monkeypatch.setenv("INPUT_HELLO_WORLD", "ok")
    assert github.get_input("foo") == "bar"
    assert github.get_input("hello-world") == "ok"
    assert github.get_input("hello world") == "ok"
    assert github.get_input("missing") is None


def test_set_output_appends_heredoc_blocks(monkeypatch, tmp_path):
    out = tmp_path / "output.txt"
    monkeypatch.setenv("GITHUB_OUTPUT", str(out))
    github.set_output("name", "value1")
    github.set_output("name", "value2")
    assert out.read_text(encoding="utf-8") == (
        "name<<__EOF__\nvalue1\n__EOF__\nname<<__EOF__\nvalue2\n__EOF__\n"
    )


def test_outputs_are_skipped_outside_a_runner(monkeypatch, tmp_path):
    monkeypatch.delenv("GITHUB_OUTPUT", raising=False)
    monkeypatch.delenv("GITHUB_STEP_SUMMARY", raising=False)
    github.set_output("name", "value")
    github.append_summary("text")
    assert list(tmp_path.iterdir()) == []


def test_append_summary(tmp_path):
    out = tmp_path / "summary.md"
    env = {"GITHUB_STEP_SUMMARY": str(out)}
    github.append_summary("hello", env)
    github.append_summary("world", env)
    assert out.read_text(encoding="utf-8") == "hello\nworld\n"


def test_annotate_escapes_message():
    stream = io.StringIO()
    github.annotate("error", "file.txt", 3, 7, "50% line1\r\nline2", stream=stream)
    assert stream.getvalue() == "::error file=file.txt,line=3,col=7::50%25 line1%0D%0Aline2\n"
