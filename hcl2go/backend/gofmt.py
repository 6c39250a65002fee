"""Go source validation and layout.

format_source checks that the generated text is lexically well formed
(balanced brackets, terminated strings and comments) and lays it out the
way gofmt would for the constructs the generator emits: tab indentation by
bracket nesting, one level per line that opens brackets, trailing space
removed, runs of blank lines collapsed. Any inconsistency means the
generator is broken, so it raises InternalError carrying the whole source.
"""

from __future__ import annotations

import subprocess

from ..diagnostics import InternalError

_OPENERS: dict[str, str] = {"(": ")", "[": "]", "{": "}"}
_CLOSERS: frozenset[str] = frozenset({")", "]", "}"})


class _Scanner:
    """Bracket and literal state carried across lines."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.stack: list[tuple[str, int]] = []  # (opener, line number)
        self.in_raw_string: bool = False
        self.in_block_comment: bool = False

    def fail(self, msg: str, lineno: int) -> None:
        raise InternalError("invalid Go source code: " + msg + " at line " + str(lineno), self.source)

    def leading_closers(self, text: str, lineno: int) -> int:
        """Pop the closers a line starts with; return how many characters they span."""
        i = 0
        while i < len(text) and (text[i] in _CLOSERS or text[i] in " \t"):
            if text[i] in _CLOSERS:
                self._close(text[i], lineno)
            i += 1
        return i

    def scan(self, text: str, lineno: int, start: int) -> None:
        """Scan the rest of a line, updating bracket and literal state."""
        i = start
        n = len(text)
        while i < n:
            c = text[i]
            if self.in_block_comment:
                end = text.find("*/", i)
                if end < 0:
                    return
                self.in_block_comment = False
                i = end + 2
                continue
            if self.in_raw_string:
                end = text.find("`", i)
                if end < 0:
                    return
                self.in_raw_string = False
                i = end + 1
                continue
            if c == "/" and i + 1 < n and text[i + 1] == "/":
                return
            if c == "/" and i + 1 < n and text[i + 1] == "*":
                self.in_block_comment = True
                i += 2
                continue
            if c == "`":
                self.in_raw_string = True
                i += 1
                continue
            if c == '"' or c == "'":
                i = self._skip_quoted(text, i, lineno)
                continue
            if c in _OPENERS:
                self.stack.append((c, lineno))
            elif c in _CLOSERS:
                self._close(c, lineno)
            i += 1

    def indent_level(self) -> int:
        """One level per distinct line that still has open brackets."""
        lines: list[int] = []
        for _, lineno in self.stack:
            if not lines or lines[-1] != lineno:
                lines.append(lineno)
        return len(lines)

    def _close(self, c: str, lineno: int) -> None:
        if not self.stack:
            self.fail("unexpected '" + c + "'", lineno)
        opener, _ = self.stack.pop()
        if _OPENERS[opener] != c:
            self.fail("'" + opener + "' closed by '" + c + "'", lineno)

    def _skip_quoted(self, text: str, i: int, lineno: int) -> int:
        quote = text[i]
        i += 1
        while i < len(text):
            if text[i] == "\\":
                i += 2
                continue
            if text[i] == quote:
                return i + 1
            i += 1
        self.fail("unterminated literal", lineno)
        return i


def format_source(source: str, external: bool = False) -> str:
    """Validate and lay out generated Go source.

    With external=True the result is additionally piped through gofmt.
    """
    scanner = _Scanner(source)
    out: list[str] = []
    blank_run = False
    lineno = 0
    for raw in source.split("\n"):
        lineno += 1
        if scanner.in_raw_string:
            # Raw string contents are kept verbatim
            out.append(raw)
            scanner.scan(raw, lineno, 0)
            blank_run = False
            continue
        text = raw.strip()
        if text == "":
            if not blank_run and out:
                out.append("")
            blank_run = True
            continue
        blank_run = False
        if scanner.in_block_comment:
            out.append("\t" * scanner.indent_level() + text)
            scanner.scan(text, lineno, 0)
            continue
        consumed = scanner.leading_closers(text, lineno)
        out.append("\t" * scanner.indent_level() + text)
        scanner.scan(text, lineno, consumed)
    if scanner.in_raw_string:
        scanner.fail("unterminated raw string", lineno)
    if scanner.in_block_comment:
        scanner.fail("unterminated comment", lineno)
    if scanner.stack:
        opener, opened_at = scanner.stack[-1]
        scanner.fail("unclosed '" + opener + "' opened", opened_at)
    while out and out[-1] == "":
        out.pop()
    formatted = "\n".join(out) + "\n"
    if external:
        return run_gofmt(formatted)
    return formatted


def run_gofmt(source: str) -> str:
    """Format source with the gofmt binary."""
    try:
        result = subprocess.run(
            ["gofmt"], input=source, capture_output=True, text=True, timeout=30
        )
    except (FileNotFoundError, subprocess.TimeoutExpired) as e:
        raise InternalError("gofmt unavailable: " + str(e), source) from e
    if result.returncode != 0:
        raise InternalError("invalid Go source code: " + result.stderr.strip(), source)
    return result.stdout
