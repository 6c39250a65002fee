"""Temp emission: statements that compute spilled temporaries."""

from __future__ import annotations

from ..ir import (
    Assign,
    BytesToString,
    Define,
    ErrorCheck,
    FallibleCall,
    If,
    MarshalJSON,
    Stmt,
    VarDecl,
)
from ..model import DYNAMIC, STRING
from .lowering import ConditionalTemp, SerializationTemp, Temp


def gen_temps(temps: list[Temp], node: str = "") -> list[Stmt]:
    """Render temps to statements, preserving their order."""
    stmts: list[Stmt] = []
    for t in temps:
        if isinstance(t, ConditionalTemp):
            stmts.append(VarDecl(t.name, t.typ, t.is_input, node=node))
            stmts.append(
                If(
                    t.cond,
                    [Assign(t.name, t.then_expr, node=node)],
                    [Assign(t.name, t.else_expr, node=node)],
                    node=node,
                )
            )
        elif isinstance(t, SerializationTemp):
            stmts.append(
                FallibleCall([t.bytes_name], MarshalJSON(t.value, typ=DYNAMIC), node=node)
            )
            stmts.append(ErrorCheck(node=node))
            stmts.append(Define(t.name, BytesToString(t.bytes_name, typ=STRING), node=node))
        else:
            raise TypeError("unknown temp: " + type(t).__name__)
    return stmts
