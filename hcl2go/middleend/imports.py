"""Import collection: Go packages the generated program must import."""

from __future__ import annotations

from ..context import Translation
from ..diagnostics import ConfigurationError
from ..functions import INVOKE, TO_JSON, function_packages, is_known_function
from ..model import Call, Expr, Literal, Node, Resource, children, decompose_token


class ImportSet:
    """Utility (standard library) and provider import paths.

    Both sets deduplicate; iteration is sorted, never insertion order.
    """

    def __init__(self) -> None:
        self.utility: set[str] = set()
        self.provider: set[str] = set()

    def add_utility(self, path: str) -> None:
        self.utility.add(path)

    def add_provider(self, path: str) -> None:
        self.provider.add(path)

    def sorted_utility(self) -> list[str]:
        return sorted(self.utility)

    def sorted_provider(self) -> list[str]:
        return sorted(self.provider)

    def to_dict(self) -> dict[str, object]:
        return {"utility": self.sorted_utility(), "provider": self.sorted_provider()}


def provider_import(template: str, pkg: str, version: int, mod: str) -> str:
    """Import path for a provider module. Versions above 1 add a /vN segment."""
    version_path = "/v" + str(version) if version > 1 else ""
    base = template.format(pkg=pkg, version=version_path)
    if mod == "" or mod == "index":
        return base
    return base + "/" + mod


def collect_imports(ctx: Translation) -> ImportSet:
    """Scan every node once and compute the program's imports.

    Raises ConfigurationError when a resource or invoke package has no
    metadata, or when an invoke names its function with anything but a
    string literal.
    """
    imports = ImportSet()
    table = ctx.options.function_packages
    for node in ctx.program.nodes:
        if isinstance(node, Resource):
            imports.add_provider(_module_import(ctx, node, node.token, "resource"))
        for root in node.expressions():
            for expr in _emitted(root):
                if isinstance(expr, Call):
                    if expr.name == INVOKE:
                        token = _invoke_token(expr)
                        if token == "":
                            raise ConfigurationError("invoke requires a literal function token", node.name, "")
                        imports.add_provider(_module_import(ctx, node, token, "function"))
                    if not is_known_function(expr.name, table):
                        ctx.warn_once(
                            "function:" + expr.name,
                            node.name,
                            "unknown function '" + expr.name + "' requires no imports",
                        )
                    # A malformed toJSON is lowered to "" and never marshals
                    if expr.name == TO_JSON and len(expr.args) != 1:
                        continue
                    for path in function_packages(expr.name, table):
                        imports.add_utility(path)
    return imports


def _invoke_token(call: Call) -> str:
    if len(call.args) > 0 and isinstance(call.args[0], Literal):
        if isinstance(call.args[0].value, str):
            return call.args[0].value
    return ""


def _module_import(ctx: Translation, node: Node, token: str, what: str) -> str:
    pkg, mod, _ = decompose_token(token)
    info = ctx.program.package(pkg)
    if info is None:
        raise ConfigurationError("could not find package information for " + what, node.name, token)
    return provider_import(ctx.options.provider_import_template, pkg, info.major_version, mod)


def _emitted(expr: Expr) -> list[Expr]:
    """Pre-order walk of what survives lowering.

    A toJSON with the wrong argument count is replaced by an empty string,
    so nothing beneath it reaches the output.
    """
    result: list[Expr] = [expr]
    if isinstance(expr, Call) and expr.name == TO_JSON and len(expr.args) != 1:
        return result
    for child in children(expr):
        result.extend(_emitted(child))
    return result
