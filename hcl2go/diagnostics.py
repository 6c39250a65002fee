"""Diagnostics and the translation error taxonomy."""

from __future__ import annotations


class Diagnostic:
    """A non-fatal problem found while translating."""

    def __init__(self, severity: str, subject: str, summary: str) -> None:
        self.severity: str = severity
        self.subject: str = subject
        self.summary: str = summary

    def is_warning(self) -> bool:
        return self.severity == "warning"

    def __repr__(self) -> str:
        if self.subject != "":
            return self.severity + ": " + self.subject + ": " + self.summary
        return self.severity + ": " + self.summary

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Diagnostic):
            return NotImplemented
        return (self.severity, self.subject, self.summary) == (
            other.severity,
            other.subject,
            other.summary,
        )


class Diagnostics:
    """Append-only diagnostic list attached to a translation."""

    def __init__(self) -> None:
        self._items: list[Diagnostic] = []

    def add_warning(self, subject: str, summary: str) -> None:
        self._items.append(Diagnostic("warning", subject, summary))

    def add_error(self, subject: str, summary: str) -> None:
        self._items.append(Diagnostic("error", subject, summary))

    def extend(self, other: Diagnostics) -> None:
        self._items.extend(other._items)

    def errors(self) -> list[Diagnostic]:
        return [d for d in self._items if not d.is_warning()]

    def warnings(self) -> list[Diagnostic]:
        return [d for d in self._items if d.is_warning()]

    def __iter__(self):
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)


class ConfigurationError(Exception):
    """Fatal: the input graph is inconsistent (e.g. missing package metadata)."""

    def __init__(self, msg: str, node: str, token: str):
        self.msg: str = msg
        self.node: str = node
        self.token: str = token
        super().__init__(msg + " (node '" + node + "', token '" + token + "')")


class InternalError(Exception):
    """The generator produced source that does not render as valid Go.

    source holds the full generated text.
    """

    def __init__(self, msg: str, source: str):
        self.msg: str = msg
        self.source: str = source
        super().__init__(msg + ":\n\n" + source)
