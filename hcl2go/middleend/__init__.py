"""Middleend passes: import collection, lowering and statement emission."""

from ..context import Translation
from ..ir import Module

from .imports import ImportSet, collect_imports
from .nodes import gen_node, referenced_names


def build_module(ctx: Translation) -> Module:
    """Translate the program's nodes, in order, into a statement module.

    Import collection runs first so configuration errors abort before any
    statement is produced.
    """
    imports: ImportSet = collect_imports(ctx)
    module = Module(
        ctx.options.runtime_import,
        imports.sorted_utility(),
        imports.sorted_provider(),
    )
    referenced = referenced_names(ctx.program.nodes)
    for node in ctx.program.nodes:
        module.body.extend(gen_node(ctx, node, referenced))
    return module
