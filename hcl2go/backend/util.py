"""Shared utilities for the Go emitter."""

from __future__ import annotations

import re

# Go reserved words that need renaming
GO_RESERVED = frozenset(
    {
        "break",
        "case",
        "chan",
        "const",
        "continue",
        "default",
        "defer",
        "else",
        "fallthrough",
        "for",
        "func",
        "go",
        "goto",
        "if",
        "import",
        "interface",
        "map",
        "package",
        "range",
        "return",
        "select",
        "struct",
        "switch",
        "type",
        "var",
    }
)


def _upper_first(s: str) -> str:
    """Uppercase the first character of a string."""
    return (s[0].upper() + s[1:]) if s else ""


def _split_words(name: str) -> list[str]:
    """Split on anything that cannot appear in a Go identifier."""
    return [p for p in re.split(r"[^0-9A-Za-z]+", name) if p]


def go_to_pascal(name: str) -> str:
    """Convert a property name (camelCase, snake_case or kebab-case) to an exported Go name."""
    parts = _split_words(name)
    result = ""
    for p in parts:
        result += _upper_first(p)
    if result == "":
        return "X"
    if result[0].isdigit():
        return "X" + result
    return result


def go_to_camel(name: str) -> str:
    """Convert a node name to a local Go identifier."""
    parts = _split_words(name)
    if not parts:
        return "_"
    result = parts[0] + "".join(_upper_first(p) for p in parts[1:])
    if result[0].isdigit():
        result = "_" + result
    # Handle Go reserved words
    if result in GO_RESERVED:
        return result + "_"
    return result


def escape_string(value: str) -> str:
    """Escape a string for use in a Go string literal (without quotes)."""
    return (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\t", "\\t")
        .replace("\r", "\\r")
        .replace("\f", "\\f")
        .replace("\v", "\\v")
        .replace("\x00", "\\x00")
        .replace("\x01", "\\u0001")
        .replace("\x7f", "\\u007f")
    )


class Emitter:
    """Base class for code emitters with indentation tracking."""

    def __init__(self, indent_str: str = "\t") -> None:
        self.indent: int = 0
        self.lines: list[str] = []
        self._indent_str = indent_str

    def line(self, text: str = "") -> None:
        """Emit a line with current indentation."""
        if text:
            self.lines.append(self._indent_str * self.indent + text)
        else:
            self.lines.append("")

    def output(self) -> str:
        """Return the accumulated output as a string."""
        return "\n".join(self.lines) + "\n"


def go_module_name(pkg: str, mod: str) -> str:
    """Go package identifier for a provider module; `index` is the package root."""
    if mod == "" or mod == "index":
        return pkg.replace("-", "")
    return mod.replace("-", "")
