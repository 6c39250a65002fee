"""Tests for Go source validation and layout."""

import subprocess

import pytest

from hcl2go.backend import gofmt
from hcl2go.backend.gofmt import format_source
from hcl2go.diagnostics import InternalError


def test_reindents_by_bracket_depth() -> None:
    source = "package main\nfunc main() {\n  x := 1\nif x > 0 {\n        x = 2\n}\n}\n"
    assert format_source(source) == (
        "package main\nfunc main() {\n\tx := 1\n\tif x > 0 {\n\t\tx = 2\n\t}\n}\n"
    )


def test_brackets_opened_on_one_line_count_once() -> None:
    source = 'f(g, &T{\nA: 1,\n})\n'
    assert format_source(source) == "f(g, &T{\n\tA: 1,\n})\n"


def test_else_line_dedents_then_indents() -> None:
    source = "if c {\na()\n} else {\nb()\n}\n"
    assert format_source(source) == "if c {\n\ta()\n} else {\n\tb()\n}\n"


def test_brackets_in_literals_ignored() -> None:
    source = 'x := "{(["\ny := \'{\'\n// }\n'
    assert format_source(source) == source


def test_raw_string_kept_verbatim() -> None:
    source = "f(`line one\n   {indented\n`)\n"
    assert format_source(source) == source


def test_blank_lines_collapsed_and_trimmed() -> None:
    assert format_source("a\n\n\n\nb\n\n\n") == "a\n\nb\n"


def test_unclosed_bracket_raises_with_source() -> None:
    source = "func main() {\nx := 1\n"
    with pytest.raises(InternalError) as exc:
        format_source(source)
    assert exc.value.source == source
    assert "unclosed '{'" in exc.value.msg
    assert source in str(exc.value)


def test_mismatched_bracket_raises() -> None:
    with pytest.raises(InternalError) as exc:
        format_source("func f() {\n)\n")
    assert "'{' closed by ')'" in exc.value.msg


def test_unexpected_closer_raises() -> None:
    with pytest.raises(InternalError) as exc:
        format_source("}\n")
    assert "line 1" in exc.value.msg


def test_unterminated_string_raises() -> None:
    with pytest.raises(InternalError):
        format_source('x := "abc\n')


def test_unterminated_raw_string_raises() -> None:
    with pytest.raises(InternalError):
        format_source("x := `abc\n")


def test_external_gofmt_missing(monkeypatch) -> None:
    def fake_run(*args, **kwargs):
        raise FileNotFoundError("gofmt")

    monkeypatch.setattr(gofmt.subprocess, "run", fake_run)
    with pytest.raises(InternalError) as exc:
        format_source("package main\n", external=True)
    assert "gofmt unavailable" in exc.value.msg


def test_external_gofmt_rejects(monkeypatch) -> None:
    def fake_run(cmd, **kwargs):
        return subprocess.CompletedProcess(cmd, 2, stdout="", stderr="<standard input>:1:1: expected 'package'")

    monkeypatch.setattr(gofmt.subprocess, "run", fake_run)
    with pytest.raises(InternalError) as exc:
        format_source("x\n", external=True)
    assert "expected 'package'" in exc.value.msg


def test_external_gofmt_output_returned(monkeypatch) -> None:
    def fake_run(cmd, **kwargs):
        assert cmd == ["gofmt"]
        return subprocess.CompletedProcess(cmd, 0, stdout="package main\n", stderr="")

    monkeypatch.setattr(gofmt.subprocess, "run", fake_run)
    assert format_source("package main\n", external=True) == "package main\n"
