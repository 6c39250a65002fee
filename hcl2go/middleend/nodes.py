"""Node emission: the per-node statement state machine.

Each node kind lowers its expressions, emits the temps they need, then the
statement that binds, constructs or exports the node itself:

| Node           | Context | Statements                                      |
|----------------|---------|-------------------------------------------------|
| Resource       | input   | temps, `r, err := mod.NewT(ctx, "r", args)`, check |
| OutputVariable | output  | temps, `ctx.Export("o", value)`                 |
| LocalVariable  | output  | temps, `l, err := invoke(...)` + check, or `l := v` |
"""

from __future__ import annotations

from ..backend.util import go_module_name
from ..context import Translation
from ..functions import is_fallible_call
from ..ir import Define, ErrorCheck, Export, FallibleCall, NewResource, Stmt
from ..model import (
    DYNAMIC,
    Expr,
    LocalVariable,
    Node,
    OutputVariable,
    Resource,
    Traversal,
    walk,
)
from .lowering import lower_expression
from .temps import gen_temps

DISCARD = "_"


def referenced_names(nodes: list[Node]) -> set[str]:
    """Names of nodes referenced by any expression in the program."""
    result: set[str] = set()
    for node in nodes:
        for root in node.expressions():
            for expr in walk(root):
                if isinstance(expr, Traversal):
                    result.add(expr.root)
    return result


def gen_node(ctx: Translation, node: Node, referenced: set[str] | None = None) -> list[Stmt]:
    """Emit the statements for one node.

    referenced, when given, lists the node names used elsewhere; bindings
    nobody reads are emitted to the blank identifier.
    """
    if isinstance(node, Resource):
        return _gen_resource(ctx, node, _binding(node, referenced))
    if isinstance(node, OutputVariable):
        return _gen_output(ctx, node)
    if isinstance(node, LocalVariable):
        return _gen_local(ctx, node, _binding(node, referenced))
    raise TypeError("unknown node: " + type(node).__name__)


def _binding(node: Node, referenced: set[str] | None) -> str:
    if referenced is not None and node.name not in referenced:
        return DISCARD
    return node.name


def _gen_resource(ctx: Translation, r: Resource, target: str) -> list[Stmt]:
    pkg, mod, typ = r.decompose_token()
    stmts: list[Stmt] = []
    args: list[tuple[str, Expr]] | None = None
    if len(r.inputs) > 0:
        args = []
        for attr in r.inputs:
            dest = r.input_type.property(attr.name)
            if dest is None:
                ctx.diagnostics.add_warning(
                    r.name, "unknown input property '" + attr.name + "' of " + r.token
                )
                dest = DYNAMIC
            expr, temps = lower_expression(ctx, attr.value, dest, True, r.name)
            stmts.extend(gen_temps(temps, r.name))
            args.append((attr.name, expr))
    call = NewResource(go_module_name(pkg, mod), typ, r.name, args, typ=DYNAMIC)
    stmts.append(FallibleCall([target], call, node=r.name))
    stmts.append(ErrorCheck(node=r.name))
    return stmts


def _gen_output(ctx: Translation, v: OutputVariable) -> list[Stmt]:
    expr, temps = lower_expression(ctx, v.value, v.typ, False, v.name)
    stmts = gen_temps(temps, v.name)
    stmts.append(Export(v.name, expr, node=v.name))
    return stmts


def _gen_local(ctx: Translation, v: LocalVariable, target: str) -> list[Stmt]:
    expr, temps = lower_expression(ctx, v.value, v.typ, False, v.name)
    stmts = gen_temps(temps, v.name)
    if is_fallible_call(expr):
        stmts.append(FallibleCall([target], expr, node=v.name))
        stmts.append(ErrorCheck(node=v.name))
    else:
        stmts.append(Define(target, expr, node=v.name))
    return stmts

